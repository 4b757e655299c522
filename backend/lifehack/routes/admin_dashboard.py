"""Ruta del panel de administracion: GET /api/admin/dashboard."""

from fastapi import APIRouter, Depends
from starlette.requests import Request

from lifehack.auth import Principal, require_admin
from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, limiter
from lifehack.models.schemas import DashboardResponse

router = APIRouter(prefix="/api/admin/dashboard", tags=["Admin: Dashboard"])


@router.get("", response_model=DashboardResponse)
@limiter.limit(FIXED_LIMIT)
def get_dashboard(
    request: Request,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    return container.dashboard_service.get_dashboard()
