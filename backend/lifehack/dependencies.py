"""
Ensamblado de dependencias (repositorios -> servicios).

El Container crea una sola vez los repositorios y los servicios que los
usan. Los endpoints lo reciben con `Depends(get_container)`, y en los
tests se reemplaza por uno con repositorios en memoria y un proveedor
de identidad falso:

    app.dependency_overrides[get_container] = lambda: test_container

La implementacion de los repositorios depende de settings.DATA_STORE:
    - "memory":    diccionarios en memoria (por defecto)
    - "firestore": Google Cloud Firestore a traves de firebase_admin
"""

import logging

from lifehack.config import Settings, settings
from lifehack.repositories.memory import (
    InMemoryCategoryRepository,
    InMemoryFavoritesRepository,
    InMemoryTipRepository,
    InMemoryUserRepository,
)
from lifehack.services.cache import CategoryCache
from lifehack.services.categories import CategoryService
from lifehack.services.dashboard import DashboardService
from lifehack.services.favorites import FavoriteService
from lifehack.services.identity import FirebaseIdentityProvider, initialize_firebase
from lifehack.services.images import ImageService
from lifehack.services.s3 import S3Service
from lifehack.services.security_events import SecurityEventNotifier
from lifehack.services.tips import TipService
from lifehack.services.users import UserService

logger = logging.getLogger(__name__)


class Container:
    def __init__(
        self,
        categories,
        tips,
        favorites,
        users,
        identity_provider,
        storage: S3Service | None = None,
        notifier: SecurityEventNotifier | None = None,
    ):
        self.categories = categories
        self.tips = tips
        self.favorites = favorites
        self.users = users
        self.identity_provider = identity_provider
        self.notifier = notifier or SecurityEventNotifier()
        self._storage = storage
        self._image_service = None

        self.category_cache = CategoryCache(ttl_seconds=settings.CATEGORY_CACHE_TTL_SECONDS)

        self.category_service = CategoryService(categories, tips, self.category_cache)
        self.tip_service = TipService(tips, categories, self.category_cache)
        self.favorite_service = FavoriteService(favorites, tips, categories, users)
        self.user_service = UserService(users, favorites, identity_provider)
        self.dashboard_service = DashboardService(users, categories, tips)

    @property
    def image_service(self) -> ImageService:
        # El cliente de S3 se crea en el primer uso.
        if self._image_service is None:
            self._image_service = ImageService(self._storage or S3Service())
        return self._image_service


def build_container(config: Settings = settings) -> Container:
    if config.DATA_STORE == "firestore":
        from firebase_admin import firestore

        from lifehack.repositories.firestore import (
            CollectionNames,
            FirestoreCategoryRepository,
            FirestoreFavoritesRepository,
            FirestoreTipRepository,
            FirestoreUserRepository,
        )

        firebase_app = initialize_firebase()
        client = firestore.client(firebase_app)
        names = CollectionNames(config.FIRESTORE_COLLECTION_PREFIX)
        logger.info(f"Using Firestore repositories (prefix='{config.FIRESTORE_COLLECTION_PREFIX}')")
        return Container(
            categories=FirestoreCategoryRepository(client, names),
            tips=FirestoreTipRepository(client, names),
            favorites=FirestoreFavoritesRepository(client, names),
            users=FirestoreUserRepository(client, names),
            identity_provider=FirebaseIdentityProvider(firebase_app),
        )

    logger.info("Using in-memory repositories")
    return Container(
        categories=InMemoryCategoryRepository(),
        tips=InMemoryTipRepository(),
        favorites=InMemoryFavoritesRepository(),
        users=InMemoryUserRepository(),
        identity_provider=FirebaseIdentityProvider(),
    )


_container: Container | None = None


def get_container() -> Container:
    global _container
    if _container is None:
        _container = build_container()
    return _container
