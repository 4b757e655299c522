"""
Rutas de favoritos del usuario autenticado.

    GET    /api/me/favorites            -> favoritos paginados (mismos filtros que /api/Tip)
    POST   /api/me/favorites/merge      -> fusiona favoritos guardados sin sesion
    POST   /api/me/favorites/{tipId}    -> agrega un truco (201)
    DELETE /api/me/favorites/{tipId}    -> quita un truco (204)

/merge se declara ANTES de /{tipId}: FastAPI prueba las rutas en orden
de registro, y de lo contrario "merge" se interpretaria como un tipId
(y fallaria como UUID invalido).
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from starlette.requests import Request

from lifehack.auth import get_current_user
from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, STRICT_LIMIT, limiter
from lifehack.models.entities import User
from lifehack.models.queries import SortDirection, TipQueryCriteria, TipSortField
from lifehack.models.schemas import (
    FavoriteResponse,
    MergeFavoritesRequest,
    MergeFavoritesResponse,
    PagedFavoritesResponse,
)
from lifehack.services.security_events import SecurityEvents

router = APIRouter(prefix="/api/me/favorites", tags=["Favorites"])


@router.get("", response_model=PagedFavoritesResponse)
@limiter.limit(FIXED_LIMIT)
def get_my_favorites(
    request: Request,
    q: str | None = None,
    category_id: uuid.UUID | None = Query(None, alias="categoryId"),
    tags: list[str] | None = Query(None),
    order_by: TipSortField = Query(TipSortField.CREATED_AT, alias="orderBy"),
    sort_direction: SortDirection = Query(SortDirection.DESCENDING, alias="sortDirection"),
    page_number: int = Query(1, alias="pageNumber"),
    page_size: int = Query(10, alias="pageSize"),
    user: User = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    criteria = TipQueryCriteria(
        search_term=q,
        category_id=category_id,
        tags=tuple(tags or ()),
        sort_field=order_by,
        sort_direction=sort_direction,
        page_number=page_number,
        page_size=page_size,
    )
    return container.favorite_service.search_favorites(user.id, criteria)


@router.post("/merge", response_model=MergeFavoritesResponse)
@limiter.limit(STRICT_LIMIT)
def merge_favorites(
    request: Request,
    body: MergeFavoritesRequest,
    user: User = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """
    Fusiona una lista de ids (por ejemplo, favoritos guardados en el
    navegador antes de iniciar sesion) con los favoritos del usuario.

    La operacion es idempotente: repetirla no agrega nada y reporta los
    ids como `skipped`. Los ids invalidos o inexistentes van a `failed`
    sin interrumpir el resto.
    """
    notifier = container.notifier
    with notifier.audited(SecurityEvents.FAVORITES_MERGE_FAILED, user.id, TotalReceived=len(body.tip_ids)):
        result = container.favorite_service.merge_favorites(user.id, body.tip_ids)
    notifier.success(
        SecurityEvents.FAVORITES_MERGED,
        user.id,
        TotalReceived=result.total_received,
        Added=result.added,
        Skipped=result.skipped,
        Failed=len(result.failed),
    )
    return result


@router.post("/{tip_id}", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(STRICT_LIMIT)
def add_favorite(
    request: Request,
    tip_id: uuid.UUID,
    user: User = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.FAVORITE_ADD_FAILED, user.id, TipId=str(tip_id)):
        favorite = container.favorite_service.add_favorite(user.id, tip_id)
    notifier.success(SecurityEvents.FAVORITE_ADDED, user.id, TipId=str(tip_id))
    return favorite


@router.delete("/{tip_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(STRICT_LIMIT)
def remove_favorite(
    request: Request,
    tip_id: uuid.UUID,
    user: User = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.FAVORITE_REMOVE_FAILED, user.id, TipId=str(tip_id)):
        container.favorite_service.remove_favorite(user.id, tip_id)
    notifier.success(SecurityEvents.FAVORITE_REMOVED, user.id, TipId=str(tip_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
