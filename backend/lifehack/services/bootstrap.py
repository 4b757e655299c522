"""
Creacion del administrador inicial al arrancar la API.

Si ADMIN_SEED_ENABLED esta activo y hay email y contrasena configurados,
se garantiza que exista una cuenta Admin (en Firebase y localmente).
Fuera de desarrollo la contrasena debe tener al menos 12 caracteres y no
puede ser igual al email; si no cumple, el arranque falla para no dejar
una cuenta administradora debil en produccion.
"""

import logging

from lifehack.config import Settings

logger = logging.getLogger(__name__)

MIN_PRODUCTION_PASSWORD_LENGTH = 12


class AdminBootstrapError(Exception):
    pass


def check_admin_password(email: str, password: str, is_development: bool) -> None:
    if is_development:
        return
    if len(password) < MIN_PRODUCTION_PASSWORD_LENGTH:
        raise AdminBootstrapError(
            f"Admin password must be at least {MIN_PRODUCTION_PASSWORD_LENGTH} characters outside development"
        )
    if password.strip().lower() == email.strip().lower():
        raise AdminBootstrapError("Admin password must not be the same as the admin email")


def seed_admin_user(user_service, config: Settings) -> bool:
    """
    Retorna:
        bool: True si se ejecuto el seed, False si estaba deshabilitado o
            incompleto.
    """
    if not config.ADMIN_SEED_ENABLED:
        return False
    if not config.ADMIN_EMAIL or not config.ADMIN_PASSWORD:
        logger.warning("Admin seeding enabled but ADMIN_EMAIL or ADMIN_PASSWORD is missing, skipping")
        return False

    check_admin_password(config.ADMIN_EMAIL, config.ADMIN_PASSWORD, config.is_development)

    user, created = user_service.create_admin_user(
        config.ADMIN_EMAIL, config.ADMIN_PASSWORD, config.ADMIN_DISPLAY_NAME
    )
    if created:
        logger.info(f"Seeded admin user {user.id}")
    else:
        logger.info(f"Admin user {user.id} already present")
    return True
