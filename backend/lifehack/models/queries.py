"""
Criterios de busqueda, ordenamiento y paginacion.

Los repositorios reciben estos objetos en vez de una larga lista de
parametros sueltos. Asi el contrato de busqueda (que se filtra, como se
ordena y que pagina se devuelve) queda definido en un solo lugar y lo
comparten el repositorio en memoria y el de Firestore.

Contrato de paginacion:
    - page_number >= 1
    - 1 <= page_size <= 100
    - total_pages = ceil(total_items / page_size)
"""

import math
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, TypeVar

from lifehack.exceptions import ValidationException
from lifehack.models.entities import Tip, User

T = TypeVar("T")

MAX_PAGE_SIZE = 100


class SortDirection(str, Enum):
    ASCENDING = "Ascending"
    DESCENDING = "Descending"


class TipSortField(str, Enum):
    CREATED_AT = "CreatedAt"
    UPDATED_AT = "UpdatedAt"
    TITLE = "Title"


class UserSortField(str, Enum):
    CREATED_AT = "CreatedAt"
    EMAIL = "Email"
    NAME = "Name"


@dataclass(frozen=True)
class TipQueryCriteria:
    """
    Criterios de busqueda de trucos.

    Atributos:
        search_term: Texto buscado (sin distinguir mayusculas) en titulo,
            descripcion, pasos y etiquetas.
        category_id: Solo trucos de esta categoria.
        tags: El truco debe tener TODAS estas etiquetas.
        sort_field / sort_direction: Orden del resultado. El id del truco
            desempata para que el orden sea estable entre paginas.
        page_number / page_size: Pagina solicitada.
    """

    search_term: str | None = None
    category_id: uuid.UUID | None = None
    tags: tuple[str, ...] = ()
    sort_field: TipSortField = TipSortField.CREATED_AT
    sort_direction: SortDirection = SortDirection.DESCENDING
    page_number: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class UserQueryCriteria:
    search: str | None = None
    sort_field: UserSortField = UserSortField.CREATED_AT
    sort_direction: SortDirection = SortDirection.DESCENDING
    page_number: int = 1
    page_size: int = 20
    is_deleted: bool | None = None


@dataclass(frozen=True)
class Page:
    """Una pagina de resultados junto con el total sin paginar."""

    items: list
    total_items: int
    page_number: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_items, self.page_size)


def total_pages(total_items: int, page_size: int) -> int:
    if total_items <= 0 or page_size <= 0:
        return 0
    return math.ceil(total_items / page_size)


def validate_pagination(page_number: int, page_size: int) -> None:
    """
    Raises:
        ValidationException: Si la pagina o el tamano estan fuera de rango.
    """
    if page_number < 1:
        raise ValidationException("Page number must be greater than or equal to 1")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationException(f"Page size must be between 1 and {MAX_PAGE_SIZE}")


def paginate(items: list[T], page_number: int, page_size: int) -> Page:
    start = (page_number - 1) * page_size
    return Page(
        items=items[start:start + page_size],
        total_items=len(items),
        page_number=page_number,
        page_size=page_size,
    )


# ---------- Filtrado y orden de trucos ----------

def tip_matches(tip: Tip, criteria: TipQueryCriteria) -> bool:
    if criteria.category_id is not None and tip.category_id != criteria.category_id:
        return False

    if criteria.search_term and criteria.search_term.strip():
        term = criteria.search_term.strip().lower()
        haystack = [tip.title, tip.description]
        haystack.extend(step.description for step in tip.steps)
        haystack.extend(tip.tags)
        if not any(term in text.lower() for text in haystack):
            return False

    if criteria.tags:
        tip_tags = {tag.lower() for tag in tip.tags}
        wanted = {tag.strip().lower() for tag in criteria.tags if tag and tag.strip()}
        if not wanted.issubset(tip_tags):
            return False

    return True


def sort_tips(tips: Iterable[Tip], field: TipSortField, direction: SortDirection) -> list[Tip]:
    if field == TipSortField.TITLE:
        def key(tip):
            return (tip.title.lower(), str(tip.id))
    elif field == TipSortField.UPDATED_AT:
        def key(tip):
            return (tip.updated_at or tip.created_at, str(tip.id))
    else:
        def key(tip):
            return (tip.created_at, str(tip.id))
    return sorted(tips, key=key, reverse=direction == SortDirection.DESCENDING)


def search_tips(tips: Iterable[Tip], criteria: TipQueryCriteria) -> Page:
    """Filtra, ordena y pagina una coleccion de trucos ya cargada."""
    matching = [tip for tip in tips if tip_matches(tip, criteria)]
    ordered = sort_tips(matching, criteria.sort_field, criteria.sort_direction)
    return paginate(ordered, criteria.page_number, criteria.page_size)


# ---------- Filtrado y orden de usuarios ----------

def user_matches(user: User, criteria: UserQueryCriteria) -> bool:
    if criteria.is_deleted is not None and user.is_deleted != criteria.is_deleted:
        return False
    if criteria.search and criteria.search.strip():
        term = criteria.search.strip().lower()
        if not (term in str(user.id).lower() or term in user.email.lower() or term in user.name.lower()):
            return False
    return True


def sort_users(users: Iterable[User], field: UserSortField, direction: SortDirection) -> list[User]:
    if field == UserSortField.EMAIL:
        def key(user):
            return (user.email, str(user.id))
    elif field == UserSortField.NAME:
        def key(user):
            return (user.name.lower(), str(user.id))
    else:
        def key(user):
            return (user.created_at, str(user.id))
    return sorted(users, key=key, reverse=direction == SortDirection.DESCENDING)


def search_users(users: Iterable[User], criteria: UserQueryCriteria) -> Page:
    matching = [user for user in users if user_matches(user, criteria)]
    ordered = sort_users(matching, criteria.sort_field, criteria.sort_direction)
    return paginate(ordered, criteria.page_number, criteria.page_size)
