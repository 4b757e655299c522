"""
Rutas de administracion de usuarios.

    POST   /api/admin/User                 -> crea (o reutiliza) un admin
    GET    /api/admin/User                 -> listado paginado con filtros
    GET    /api/admin/User/{id}            -> usuario por id
    GET    /api/admin/User/email/{email}   -> usuario por email
    PUT    /api/admin/User/{id}/name       -> cambia el nombre
    DELETE /api/admin/User/{id}            -> borra el usuario (204)

Un administrador puede actuar sobre cualquier usuario, asi que los
servicios se llaman sin contexto de usuario actual (sin chequeo de
propiedad).
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from starlette.requests import Request

from lifehack.auth import Principal, require_admin
from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, limiter
from lifehack.models.queries import SortDirection, UserSortField
from lifehack.models.schemas import CreateAdminUserRequest, PagedUsersResponse, UpdateUserNameRequest, UserResponse
from lifehack.services.security_events import SecurityEvents

router = APIRouter(prefix="/api/admin/User", tags=["Admin: User"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(FIXED_LIMIT)
def create_admin_user(
    request: Request,
    response: Response,
    body: CreateAdminUserRequest,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    """
    Crea un administrador en Firebase (con el claim role=Admin) y su
    perfil local.

    Retorna 201 si se creo el perfil local y 200 si ya existia (en ese
    caso el usuario existente queda promovido a Admin).
    """
    notifier = container.notifier
    with notifier.audited(SecurityEvents.USER_CREATE_FAILED, principal.external_id, Role="Admin"):
        user, created = container.user_service.create_admin_user(body.email, body.password, body.display_name)

    if not created:
        response.status_code = status.HTTP_200_OK
        return user

    notifier.success(SecurityEvents.USER_CREATED, user.id, Role="Admin", CreatedBy=principal.external_id)
    return user


@router.get("", response_model=PagedUsersResponse)
@limiter.limit(FIXED_LIMIT)
def get_users(
    request: Request,
    search: str | None = None,
    order_by: UserSortField | None = Query(None, alias="orderBy"),
    sort_direction: SortDirection | None = Query(None, alias="sortDirection"),
    page_number: int = Query(1, alias="pageNumber"),
    page_size: int = Query(20, alias="pageSize"),
    is_deleted: bool | None = Query(None, alias="isDeleted"),
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    return container.user_service.get_users(
        search=search,
        sort_field=order_by,
        sort_direction=sort_direction,
        page_number=page_number,
        page_size=page_size,
        is_deleted=is_deleted,
    )


@router.get("/email/{email}", response_model=UserResponse)
@limiter.limit(FIXED_LIMIT)
def get_user_by_email(
    request: Request,
    email: str,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    return container.user_service.get_by_email(email)


@router.get("/{user_id}", response_model=UserResponse)
@limiter.limit(FIXED_LIMIT)
def get_user(
    request: Request,
    user_id: uuid.UUID,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    return container.user_service.get_by_id(user_id)


@router.put("/{user_id}/name", response_model=UserResponse)
@limiter.limit(FIXED_LIMIT)
def update_user_name(
    request: Request,
    user_id: uuid.UUID,
    body: UpdateUserNameRequest,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.USER_UPDATE_FAILED, user_id, UpdatedBy=principal.external_id):
        user = container.user_service.update_name(user_id, body.name)
    notifier.success(SecurityEvents.USER_UPDATED, user_id, UpdatedBy=principal.external_id)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(FIXED_LIMIT)
def delete_user(
    request: Request,
    user_id: uuid.UUID,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.USER_DELETE_FAILED, user_id, DeletedBy=principal.external_id):
        container.user_service.delete_user(user_id)
    notifier.success(SecurityEvents.USER_DELETED, user_id, DeletedBy=principal.external_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
