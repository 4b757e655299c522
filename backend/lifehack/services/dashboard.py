"""
Caso de uso: estadisticas del panel de administracion.

Para usuarios, categorias y trucos ACTIVOS calcula:
    - total:      todos los registros activos
    - this_month: creados desde el dia 1 del mes actual (UTC) hasta ahora
    - last_month: creados durante todo el mes anterior
"""

from datetime import datetime, timedelta, timezone

from lifehack.models.schemas import DashboardResponse, EntityStatistics
from lifehack.repositories.base import CategoryRepository, TipRepository, UserRepository


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    """
    Retorna (inicio del mes actual, inicio del mes anterior).

    Ejemplo: now = 2025-03-15 -> (2025-03-01 00:00, 2025-02-01 00:00)
    """
    this_month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_month_start = (this_month_start - timedelta(days=1)).replace(day=1)
    return this_month_start, last_month_start


def build_statistics(created_dates: list[datetime], now: datetime) -> EntityStatistics:
    this_month_start, last_month_start = month_bounds(now)
    return EntityStatistics(
        total=len(created_dates),
        this_month=sum(1 for d in created_dates if this_month_start <= d <= now),
        last_month=sum(1 for d in created_dates if last_month_start <= d < this_month_start),
    )


class DashboardService:
    def __init__(self, users: UserRepository, categories: CategoryRepository, tips: TipRepository):
        self.users = users
        self.categories = categories
        self.tips = tips

    def get_dashboard(self, now: datetime | None = None) -> DashboardResponse:
        now = now or datetime.now(timezone.utc)
        return DashboardResponse(
            users=build_statistics([u.created_at for u in self.users.list_active()], now),
            categories=build_statistics([c.created_at for c in self.categories.list_active()], now),
            tips=build_statistics([t.created_at for t in self.tips.list_active()], now),
        )
