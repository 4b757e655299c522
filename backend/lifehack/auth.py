"""
Dependencias de autenticacion y autorizacion para FastAPI.

Flujo de una peticion autenticada:
    1. El cliente envia `Authorization: Bearer <Firebase ID token>`.
    2. get_principal verifica el token con el proveedor de identidad y
       construye un Principal con los claims que nos importan.
    3. require_admin exige el claim role == "Admin".
    4. get_current_user busca el perfil local (User) vinculado al token.

Codigos de estado:
    - 401: sin token o token invalido (con header WWW-Authenticate).
    - 403: token valido pero sin rol Admin en un endpoint de admin. Ademas
      se registra el evento de auditoria admin.endpoint.access.denied.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import Request

from lifehack.dependencies import Container, get_container
from lifehack.exceptions import NotFoundException
from lifehack.models.entities import User, UserRole
from lifehack.services.identity import InvalidTokenError
from lifehack.services.security_events import SecurityEvents
from lifehack.services.users import CurrentUserContext

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Identidad autenticada extraida del token."""

    external_id: str
    email: str | None = None
    name: str | None = None
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def principal_from_claims(claims: dict) -> Principal:
    external_id = claims.get("sub") or claims.get("user_id") or claims.get("uid")
    if not external_id:
        raise InvalidTokenError("Token does not contain a subject")
    return Principal(
        external_id=external_id,
        email=claims.get("email"),
        name=claims.get("name"),
        role=claims.get("role"),
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    container: Container = Depends(get_container),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Authentication is required")
    try:
        claims = container.identity_provider.verify_token(credentials.credentials)
        return principal_from_claims(claims)
    except InvalidTokenError as e:
        raise _unauthorized(str(e)) from None


def require_admin(
    request: Request,
    principal: Principal = Depends(get_principal),
    container: Container = Depends(get_container),
) -> Principal:
    if not principal.is_admin:
        container.notifier.failure(
            SecurityEvents.ADMIN_ACCESS_DENIED,
            principal.external_id,
            RoutePath=request.url.path,
            Method=request.method,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role is required")
    return principal


def get_current_user(
    principal: Principal = Depends(get_principal),
    container: Container = Depends(get_container),
) -> User:
    user = container.user_service.find_by_external_auth_id(principal.external_id)
    if user is None:
        raise NotFoundException("User profile not found for the authenticated account")
    return user


def user_context(user: User, principal: Principal) -> CurrentUserContext:
    return CurrentUserContext(user_id=user.id, is_admin=principal.is_admin)
