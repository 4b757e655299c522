"""
Rutas publicas de trucos.

    GET /api/Tip        -> busqueda paginada (texto, categoria, etiquetas)
    GET /api/Tip/{id}   -> detalle de un truco
"""

import uuid

from fastapi import APIRouter, Depends, Query
from starlette.requests import Request

from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, limiter
from lifehack.models.queries import SortDirection, TipQueryCriteria, TipSortField
from lifehack.models.schemas import PagedTipsResponse, TipDetailResponse

router = APIRouter(prefix="/api/Tip", tags=["Tip"])


@router.get("", response_model=PagedTipsResponse)
@limiter.limit(FIXED_LIMIT)
def search_tips(
    request: Request,
    q: str | None = None,
    category_id: uuid.UUID | None = Query(None, alias="categoryId"),
    tags: list[str] | None = Query(None),
    order_by: TipSortField = Query(TipSortField.CREATED_AT, alias="orderBy"),
    sort_direction: SortDirection = Query(SortDirection.DESCENDING, alias="sortDirection"),
    page_number: int = Query(1, alias="pageNumber"),
    page_size: int = Query(10, alias="pageSize"),
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
    return container.tip_service.search_tips(criteria)


@router.get("/{tip_id}", response_model=TipDetailResponse)
@limiter.limit(FIXED_LIMIT)
def get_tip(request: Request, tip_id: str, container: Container = Depends(get_container)):
    return container.tip_service.get_tip(tip_id)
