"""
Rutas publicas de categorias.

    GET /api/Category                 -> categorias activas con su cantidad de trucos
    GET /api/Category/{id}            -> una categoria activa
    GET /api/Category/{id}/tips       -> trucos de la categoria, paginados

El id llega como string y lo valida el servicio: un id que no es UUID
responde 400 con un mensaje explicito en vez de un 404 generico.
"""

from fastapi import APIRouter, Depends, Query
from starlette.requests import Request

from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, limiter
from lifehack.models.queries import SortDirection, TipSortField
from lifehack.models.schemas import CategoryListResponse, CategoryResponse, PagedTipsResponse

router = APIRouter(prefix="/api/Category", tags=["Category"])


@router.get("", response_model=CategoryListResponse)
@limiter.limit(FIXED_LIMIT)
def get_categories(request: Request, container: Container = Depends(get_container)):
    return container.category_service.get_categories()


@router.get("/{category_id}", response_model=CategoryResponse)
@limiter.limit(FIXED_LIMIT)
def get_category(request: Request, category_id: str, container: Container = Depends(get_container)):
    return container.category_service.get_category(category_id)


@router.get("/{category_id}/tips", response_model=PagedTipsResponse)
@limiter.limit(FIXED_LIMIT)
def get_tips_by_category(
    request: Request,
    category_id: str,
    order_by: TipSortField | None = Query(None, alias="orderBy"),
    sort_direction: SortDirection | None = Query(None, alias="sortDirection"),
    page_number: int | None = Query(None, alias="pageNumber"),
    page_size: int | None = Query(None, alias="pageSize"),
    container: Container = Depends(get_container),
):
    """
    Trucos activos de una categoria.

    Valores por defecto: orderBy=CreatedAt, sortDirection=Descending,
    pageNumber=1, pageSize=10.
    """
    return container.category_service.get_tips_by_category(
        category_id, order_by, sort_direction, page_number, page_size
    )
