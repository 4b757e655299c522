"""
Casos de uso de favoritos.

Agregar, quitar, buscar y "fusionar" (merge) favoritos del usuario.

Merge
-----
Cuando un usuario anonimo guarda favoritos en el navegador y luego
inicia sesion, el frontend envia todos esos ids en un solo POST. El
merge es idempotente: repetir la misma peticion no agrega nada nuevo.
Cada id recibido termina en una de tres categorias:
    - added:   se agrego como favorito
    - skipped: ya era favorito
    - failed:  el id no es un UUID valido o el truco no existe

Los ids repetidos en la entrada se cuentan en total_received pero se
procesan una sola vez.
"""

import logging
import uuid

from lifehack.exceptions import ConflictException, NotFoundException
from lifehack.models.entities import UserFavorite
from lifehack.models.queries import TipQueryCriteria, paginate, sort_tips, tip_matches, validate_pagination
from lifehack.models.schemas import (
    FailedTip,
    FavoriteResponse,
    MergeFavoritesResponse,
    PagedFavoritesResponse,
    PaginationMetadata,
)
from lifehack.repositories.base import CategoryRepository, FavoritesRepository, TipRepository, UserRepository

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown Category"


class FavoriteService:
    def __init__(
        self,
        favorites: FavoritesRepository,
        tips: TipRepository,
        categories: CategoryRepository,
        users: UserRepository,
    ):
        self.favorites = favorites
        self.tips = tips
        self.categories = categories
        self.users = users

    def _require_user(self, user_id: uuid.UUID) -> None:
        if self.users.get_by_id(user_id) is None:
            raise NotFoundException(f"User with ID '{user_id}' not found.")

    def _category_names(self, category_ids) -> dict[uuid.UUID, str]:
        categories = self.categories.get_by_ids(list(set(category_ids)))
        return {category_id: category.name for category_id, category in categories.items()}

    def add_favorite(self, user_id: uuid.UUID, tip_id: uuid.UUID) -> FavoriteResponse:
        self._require_user(user_id)

        tip = self.tips.get_by_id(tip_id)
        if tip is None:
            raise NotFoundException.for_resource("Tip", tip_id)

        if self.favorites.exists(user_id, tip_id):
            raise ConflictException(f"Tip '{tip_id}' is already in user's favorites.")

        favorite = UserFavorite.create(user_id, tip_id)
        self.favorites.add(favorite)
        logger.info(f"User {user_id} added tip {tip_id} to favorites")

        names = self._category_names([tip.category_id])
        return FavoriteResponse.from_entity(favorite, tip, names.get(tip.category_id, UNKNOWN_CATEGORY))

    def remove_favorite(self, user_id: uuid.UUID, tip_id: uuid.UUID) -> None:
        self._require_user(user_id)
        if not self.favorites.remove(user_id, tip_id):
            raise NotFoundException(f"Tip '{tip_id}' not found in user's favorites.")
        logger.info(f"User {user_id} removed tip {tip_id} from favorites")

    def merge_favorites(self, user_id: uuid.UUID, raw_tip_ids: list[str]) -> MergeFavoritesResponse:
        self._require_user(user_id)

        total_received = len(raw_tip_ids)
        failed: list[FailedTip] = []

        parsed: list[uuid.UUID] = []
        for raw_id in raw_tip_ids:
            try:
                parsed.append(uuid.UUID(str(raw_id)))
            except ValueError:
                failed.append(FailedTip(tip_id=str(raw_id), error_message="Invalid tip ID format"))

        unique_ids = list(dict.fromkeys(parsed))
        if not unique_ids:
            return MergeFavoritesResponse(total_received=total_received, added=0, skipped=0, failed=failed)

        # Dos consultas por lote en vez de dos por id.
        found = {tip.id for tip in self.tips.get_by_ids(unique_ids)}
        existing = self.favorites.get_existing_tip_ids(user_id, unique_ids)

        to_add: list[UserFavorite] = []
        skipped = 0
        for tip_id in unique_ids:
            if tip_id not in found:
                failed.append(FailedTip(tip_id=str(tip_id), error_message="Tip not found"))
            elif tip_id in existing:
                skipped += 1
            else:
                to_add.append(UserFavorite.create(user_id, tip_id))

        if to_add:
            self.favorites.add_batch(to_add)

        logger.info(
            f"Merged favorites for user {user_id}: received={total_received} "
            f"added={len(to_add)} skipped={skipped} failed={len(failed)}"
        )
        return MergeFavoritesResponse(
            total_received=total_received,
            added=len(to_add),
            skipped=skipped,
            failed=failed,
        )

    def search_favorites(self, user_id: uuid.UUID, criteria: TipQueryCriteria) -> PagedFavoritesResponse:
        validate_pagination(criteria.page_number, criteria.page_size)
        self._require_user(user_id)

        favorites = {fav.tip_id: fav for fav in self.favorites.list_by_user(user_id)}
        tips = [tip for tip in self.tips.get_by_ids(list(favorites)) if tip_matches(tip, criteria)]
        page = paginate(sort_tips(tips, criteria.sort_field, criteria.sort_direction),
                        criteria.page_number, criteria.page_size)

        names = self._category_names(tip.category_id for tip in page.items)
        return PagedFavoritesResponse(
            favorites=[
                FavoriteResponse.from_entity(
                    favorites[tip.id], tip, names.get(tip.category_id, UNKNOWN_CATEGORY)
                )
                for tip in page.items
            ],
            metadata=PaginationMetadata.from_page(page),
        )
