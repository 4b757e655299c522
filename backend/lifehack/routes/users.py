"""
Rutas del perfil del usuario autenticado.

    POST   /api/User            -> crea el perfil local del token (201)
    GET    /api/User/me         -> perfil del usuario actual
    PUT    /api/User/me/name    -> cambia el nombre
    DELETE /api/User/me         -> borra la cuenta (204)

Las escrituras usan el limite estricto (STRICT_LIMIT) porque tocan la
cuenta del proveedor de identidad.

El id externo (external_auth_id) SIEMPRE sale del token y nunca del
cuerpo de la peticion: un usuario no puede registrar un perfil a nombre
de otra cuenta.
"""

from fastapi import APIRouter, Depends, Response, status
from starlette.requests import Request

from lifehack.auth import Principal, get_current_user, get_principal, user_context
from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, STRICT_LIMIT, limiter
from lifehack.models.entities import User
from lifehack.models.schemas import CreateUserRequest, UpdateUserNameRequest, UserResponse
from lifehack.services.security_events import SecurityEvents

router = APIRouter(prefix="/api/User", tags=["User"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(STRICT_LIMIT)
def create_user(
    request: Request,
    body: CreateUserRequest,
    principal: Principal = Depends(get_principal),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.USER_CREATE_FAILED, principal.external_id):
        user = container.user_service.create_user(body.email, body.name, principal.external_id)
    notifier.success(SecurityEvents.USER_CREATED, user.id, ExternalAuthId=principal.external_id)
    return user


@router.get("/me", response_model=UserResponse)
@limiter.limit(FIXED_LIMIT)
def get_me(request: Request, user: User = Depends(get_current_user)):
    return UserResponse.from_entity(user)


@router.put("/me/name", response_model=UserResponse)
@limiter.limit(STRICT_LIMIT)
def update_my_name(
    request: Request,
    body: UpdateUserNameRequest,
    user: User = Depends(get_current_user),
    principal: Principal = Depends(get_principal),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.USER_UPDATE_FAILED, user.id):
        updated = container.user_service.update_name(user.id, body.name, user_context(user, principal))
    notifier.success(SecurityEvents.USER_UPDATED, user.id)
    return updated


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(STRICT_LIMIT)
def delete_me(
    request: Request,
    user: User = Depends(get_current_user),
    principal: Principal = Depends(get_principal),
    container: Container = Depends(get_container),
):
    """
    Borra la cuenta del usuario actual: sus favoritos, el perfil local
    (borrado logico) y la cuenta en Firebase.
    """
    notifier = container.notifier
    with notifier.audited(SecurityEvents.USER_DELETE_FAILED, user.id):
        container.user_service.delete_user(user.id, user_context(user, principal))
    notifier.success(SecurityEvents.USER_DELETED, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
