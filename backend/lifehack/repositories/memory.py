"""
Repositorios en memoria.

Guardan las entidades en diccionarios del proceso. Se usan en los tests y
en desarrollo local (DATA_STORE=memory), cuando no hay Firestore
disponible. Los datos se pierden al reiniciar el servidor.

Cada lectura y escritura hace una copia profunda (deepcopy): asi un
servicio que modifica una entidad no cambia lo "persistido" hasta que
llama a update(), igual que ocurre con una base de datos real.
"""

import copy
import uuid
from collections import Counter

from lifehack.models.entities import Category, Tip, User, UserFavorite
from lifehack.models.queries import (
    Page,
    TipQueryCriteria,
    UserQueryCriteria,
    search_tips,
    search_users,
)
from lifehack.repositories.base import (
    CategoryRepository,
    FavoritesRepository,
    TipRepository,
    UserRepository,
)


class InMemoryCategoryRepository(CategoryRepository):
    def __init__(self):
        self._items: dict[uuid.UUID, Category] = {}

    def get_by_id(self, category_id, include_deleted=False):
        category = self._items.get(category_id)
        if category is None or (category.is_deleted and not include_deleted):
            return None
        return copy.deepcopy(category)

    def get_by_ids(self, category_ids):
        found = {}
        for category_id in set(category_ids):
            category = self.get_by_id(category_id)
            if category is not None:
                found[category_id] = category
        return found

    def get_by_name(self, name, include_deleted=False):
        wanted = (name or "").strip().lower()
        for category in self._items.values():
            if category.is_deleted and not include_deleted:
                continue
            if category.name.strip().lower() == wanted:
                return copy.deepcopy(category)
        return None

    def list_active(self):
        return [copy.deepcopy(c) for c in self._items.values() if not c.is_deleted]

    def add(self, category):
        self._items[category.id] = copy.deepcopy(category)

    def update(self, category):
        self._items[category.id] = copy.deepcopy(category)


class InMemoryTipRepository(TipRepository):
    def __init__(self):
        self._items: dict[uuid.UUID, Tip] = {}

    def get_by_id(self, tip_id, include_deleted=False):
        tip = self._items.get(tip_id)
        if tip is None or (tip.is_deleted and not include_deleted):
            return None
        return copy.deepcopy(tip)

    def get_by_ids(self, tip_ids):
        tips = []
        for tip_id in dict.fromkeys(tip_ids):
            tip = self.get_by_id(tip_id)
            if tip is not None:
                tips.append(tip)
        return tips

    def get_by_category(self, category_id):
        return [tip for tip in self.list_active() if tip.category_id == category_id]

    def count_by_category(self):
        return dict(Counter(tip.category_id for tip in self._items.values() if not tip.is_deleted))

    def search(self, criteria: TipQueryCriteria) -> Page:
        return search_tips(self.list_active(), criteria)

    def list_active(self):
        return [copy.deepcopy(t) for t in self._items.values() if not t.is_deleted]

    def add(self, tip):
        self._items[tip.id] = copy.deepcopy(tip)

    def update(self, tip):
        self._items[tip.id] = copy.deepcopy(tip)


class InMemoryFavoritesRepository(FavoritesRepository):
    def __init__(self):
        self._items: dict[str, UserFavorite] = {}

    def get(self, user_id, tip_id):
        return self._items.get(f"{user_id}_{tip_id}")

    def list_by_user(self, user_id):
        return [fav for fav in self._items.values() if fav.user_id == user_id]

    def add(self, favorite):
        self._items[favorite.composite_key] = favorite

    def add_batch(self, favorites):
        for favorite in favorites:
            self.add(favorite)

    def remove(self, user_id, tip_id):
        return self._items.pop(f"{user_id}_{tip_id}", None) is not None

    def remove_all_for_user(self, user_id):
        keys = [key for key, fav in self._items.items() if fav.user_id == user_id]
        for key in keys:
            del self._items[key]
        return len(keys)


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self._items: dict[uuid.UUID, User] = {}

    def get_by_id(self, user_id, include_deleted=False):
        user = self._items.get(user_id)
        if user is None or (user.is_deleted and not include_deleted):
            return None
        return copy.deepcopy(user)

    def get_by_email(self, email):
        wanted = (email or "").strip().lower()
        return self._find(lambda user: user.email == wanted)

    def get_by_external_auth_id(self, external_auth_id):
        wanted = (external_auth_id or "").strip()
        return self._find(lambda user: user.external_auth_id == wanted)

    def _find(self, predicate):
        for user in self._items.values():
            if not user.is_deleted and predicate(user):
                return copy.deepcopy(user)
        return None

    def search(self, criteria: UserQueryCriteria) -> Page:
        return search_users([copy.deepcopy(u) for u in self._items.values()], criteria)

    def list_active(self):
        return [copy.deepcopy(u) for u in self._items.values() if not u.is_deleted]

    def add(self, user):
        self._items[user.id] = copy.deepcopy(user)

    def update(self, user):
        self._items[user.id] = copy.deepcopy(user)
