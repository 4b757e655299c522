"""
Contratos de los repositorios.

Los servicios solo conocen estas interfaces; no saben si los datos viven
en memoria o en Firestore. La implementacion concreta se elige en
lifehack/dependencies.py segun settings.DATA_STORE.

Convenciones comunes:
- Los metodos get_* devuelven None cuando el registro no existe o esta
  borrado logicamente (soft delete), salvo que se pida include_deleted.
- add() inserta un registro nuevo; update() reemplaza uno existente.
"""

import uuid
from abc import ABC, abstractmethod

from lifehack.models.entities import Category, Tip, User, UserFavorite
from lifehack.models.queries import Page, TipQueryCriteria, UserQueryCriteria


class CategoryRepository(ABC):
    @abstractmethod
    def get_by_id(self, category_id: uuid.UUID, include_deleted: bool = False) -> Category | None:
        ...

    @abstractmethod
    def get_by_ids(self, category_ids: list[uuid.UUID]) -> dict[uuid.UUID, Category]:
        """Devuelve las categorias activas encontradas, indexadas por id."""

    @abstractmethod
    def get_by_name(self, name: str, include_deleted: bool = False) -> Category | None:
        """Busca por nombre recortado, sin distinguir mayusculas."""

    @abstractmethod
    def list_active(self) -> list[Category]:
        ...

    @abstractmethod
    def add(self, category: Category) -> None:
        ...

    @abstractmethod
    def update(self, category: Category) -> None:
        ...


class TipRepository(ABC):
    @abstractmethod
    def get_by_id(self, tip_id: uuid.UUID, include_deleted: bool = False) -> Tip | None:
        ...

    @abstractmethod
    def get_by_ids(self, tip_ids: list[uuid.UUID]) -> list[Tip]:
        """Devuelve solo los trucos activos encontrados."""

    @abstractmethod
    def get_by_category(self, category_id: uuid.UUID) -> list[Tip]:
        ...

    @abstractmethod
    def count_by_category(self) -> dict[uuid.UUID, int]:
        """Cantidad de trucos activos por categoria."""

    @abstractmethod
    def search(self, criteria: TipQueryCriteria) -> Page:
        ...

    @abstractmethod
    def list_active(self) -> list[Tip]:
        ...

    @abstractmethod
    def add(self, tip: Tip) -> None:
        ...

    @abstractmethod
    def update(self, tip: Tip) -> None:
        ...


class FavoritesRepository(ABC):
    @abstractmethod
    def get(self, user_id: uuid.UUID, tip_id: uuid.UUID) -> UserFavorite | None:
        ...

    @abstractmethod
    def list_by_user(self, user_id: uuid.UUID) -> list[UserFavorite]:
        ...

    @abstractmethod
    def add(self, favorite: UserFavorite) -> None:
        ...

    @abstractmethod
    def add_batch(self, favorites: list[UserFavorite]) -> None:
        ...

    @abstractmethod
    def remove(self, user_id: uuid.UUID, tip_id: uuid.UUID) -> bool:
        """Retorna True si el favorito existia y fue eliminado."""

    @abstractmethod
    def remove_all_for_user(self, user_id: uuid.UUID) -> int:
        ...

    def exists(self, user_id: uuid.UUID, tip_id: uuid.UUID) -> bool:
        return self.get(user_id, tip_id) is not None

    def get_existing_tip_ids(self, user_id: uuid.UUID, tip_ids: list[uuid.UUID]) -> set[uuid.UUID]:
        wanted = set(tip_ids)
        return {fav.tip_id for fav in self.list_by_user(user_id) if fav.tip_id in wanted}


class UserRepository(ABC):
    @abstractmethod
    def get_by_id(self, user_id: uuid.UUID, include_deleted: bool = False) -> User | None:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> User | None:
        ...

    @abstractmethod
    def get_by_external_auth_id(self, external_auth_id: str) -> User | None:
        ...

    @abstractmethod
    def search(self, criteria: UserQueryCriteria) -> Page:
        ...

    @abstractmethod
    def list_active(self) -> list[User]:
        ...

    @abstractmethod
    def add(self, user: User) -> None:
        ...

    @abstractmethod
    def update(self, user: User) -> None:
        ...
