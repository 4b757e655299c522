"""
Proveedor de identidad: Firebase Authentication.

La API no guarda contrasenas. Los usuarios inician sesion en el frontend
con Firebase y envian su ID token en el header
`Authorization: Bearer <token>`. Este modulo:

1. Inicializa el SDK de Firebase Admin (una sola vez por proceso).
2. Verifica ID tokens y devuelve sus claims.
3. Borra cuentas de Firebase cuando un usuario elimina su perfil.
4. Garantiza que exista una cuenta administradora con el custom claim
   {"role": "Admin"} (usado por el bootstrap y por el alta de admins).
"""

import logging
import os

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from lifehack.config import settings
from lifehack.exceptions import InfraException

logger = logging.getLogger(__name__)

ADMIN_ROLE_CLAIM = {"role": "Admin"}


class InvalidTokenError(Exception):
    """El token no es valido, expiro o fue revocado."""


def initialize_firebase():
    """
    Inicializa Firebase Admin si todavia no lo esta.

    Usa el JSON de cuenta de servicio de FIREBASE_CREDENTIALS_PATH si
    existe; si no, las Application Default Credentials del entorno
    (Cloud Run, GKE, `gcloud auth application-default login`...).
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    creds_path = settings.FIREBASE_CREDENTIALS_PATH
    if creds_path and os.path.exists(creds_path):
        cred = credentials.Certificate(creds_path)
        logger.info(f"Initializing Firebase from credentials file: {creds_path}")
    else:
        cred = credentials.ApplicationDefault()
        logger.info("Initializing Firebase with application default credentials")

    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    return firebase_admin.initialize_app(cred, options)


class FirebaseIdentityProvider:
    """
    Adaptador sobre firebase_admin.auth.

    La app de Firebase se inicializa en el primer uso, no al importar:
    asi la API arranca aunque no haya credenciales (ej: en tests con un
    proveedor falso).
    """

    def __init__(self, app=None):
        self._app = app

    @property
    def app(self):
        if self._app is None:
            self._app = initialize_firebase()
        return self._app

    def verify_token(self, token: str) -> dict:
        """
        Verifica un ID token de Firebase.

        Retorna:
            dict: Claims del token (sub, email, name, role...).

        Raises:
            InvalidTokenError: Si el token es invalido o expiro.
        """
        try:
            return auth.verify_id_token(token, app=self.app)
        except auth.ExpiredIdTokenError as e:
            logger.warning("Token has expired")
            raise InvalidTokenError("Token has expired") from e
        except (auth.InvalidIdTokenError, auth.RevokedIdTokenError, ValueError) as e:
            logger.warning(f"Invalid token: {e}")
            raise InvalidTokenError("Invalid token") from e

    def delete_user(self, external_auth_id: str) -> None:
        try:
            auth.delete_user(external_auth_id, app=self.app)
            logger.info(f"Deleted identity provider account {external_auth_id}")
        except auth.UserNotFoundError:
            logger.warning(f"Identity provider account {external_auth_id} not found, nothing to delete")
        except FirebaseError as e:
            raise InfraException("Failed to delete user from identity provider", e) from e

    def ensure_admin_user(self, email: str, password: str, display_name: str) -> str:
        """
        Crea (o reutiliza) la cuenta de Firebase y le asigna el rol Admin.

        Retorna:
            str: uid de Firebase de la cuenta administradora.
        """
        try:
            try:
                record = auth.get_user_by_email(email, app=self.app)
                logger.info(f"Admin account {email} already exists in identity provider")
            except auth.UserNotFoundError:
                record = auth.create_user(
                    email=email,
                    password=password,
                    display_name=display_name,
                    email_verified=True,
                    app=self.app,
                )
                logger.info(f"Created admin account {email} in identity provider")

            claims = dict(record.custom_claims or {})
            if claims.get("role") != ADMIN_ROLE_CLAIM["role"]:
                claims.update(ADMIN_ROLE_CLAIM)
                auth.set_custom_user_claims(record.uid, claims, app=self.app)
            return record.uid
        except FirebaseError as e:
            raise InfraException("Failed to provision admin user in identity provider", e) from e
