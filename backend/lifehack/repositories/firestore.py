"""
Repositorios respaldados por Google Cloud Firestore.

Firestore es una base de datos de documentos: cada entidad se guarda
como un diccionario (documento) dentro de una coleccion, y el id del
documento es el id de la entidad (o la clave compuesta en favoritos).

Colecciones:
    {prefijo}users, {prefijo}tips, {prefijo}categories, {prefijo}favorites

Firestore no soporta busqueda de texto ni comparaciones sin distinguir
mayusculas, asi que:
- Guardamos `name_lower` en categorias para la unicidad del nombre.
- La busqueda de trucos y usuarios filtra en el servidor lo que puede
  (is_deleted, category_id) y aplica el resto del criterio en Python
  con las mismas funciones que usa el repositorio en memoria.

Cualquier error de la API de Google se envuelve en InfraException, que
el manejador de errores traduce a HTTP 500 sin exponer detalles.
"""

import logging
import uuid
from contextlib import contextmanager

from google.api_core.exceptions import GoogleAPICallError
from google.cloud.firestore_v1.base_query import FieldFilter

from lifehack.exceptions import InfraException
from lifehack.models.entities import (
    Category,
    ImageMetadata,
    Tip,
    TipStep,
    User,
    UserFavorite,
    UserRole,
    VideoUrl,
)
from lifehack.models.queries import TipQueryCriteria, UserQueryCriteria, search_tips, search_users
from lifehack.repositories.base import (
    CategoryRepository,
    FavoritesRepository,
    TipRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

# Firestore permite como maximo 500 escrituras por batch.
MAX_BATCH_WRITES = 500


class CollectionNames:
    """Nombres de coleccion con el prefijo del entorno ("" o "test_")."""

    def __init__(self, prefix: str = ""):
        self.users = f"{prefix}users"
        self.tips = f"{prefix}tips"
        self.categories = f"{prefix}categories"
        self.favorites = f"{prefix}favorites"


@contextmanager
def _firestore_call(operation: str):
    try:
        yield
    except GoogleAPICallError as e:
        logger.error(f"Firestore operation '{operation}' failed: {e}")
        raise InfraException(f"Firestore operation '{operation}' failed", e) from e


# ---------- Conversion entidad <-> documento ----------

def image_to_document(image: ImageMetadata | None) -> dict | None:
    if image is None:
        return None
    return {
        "image_url": image.image_url,
        "image_storage_path": image.image_storage_path,
        "original_file_name": image.original_file_name,
        "content_type": image.content_type,
        "file_size_bytes": image.file_size_bytes,
        "uploaded_at": image.uploaded_at,
    }


def image_from_document(data: dict | None) -> ImageMetadata | None:
    if not data:
        return None
    return ImageMetadata(**data)


def category_to_document(category: Category) -> dict:
    return {
        "name": category.name,
        "name_lower": category.name.strip().lower(),
        "created_at": category.created_at,
        "updated_at": category.updated_at,
        "is_deleted": category.is_deleted,
        "deleted_at": category.deleted_at,
        "image": image_to_document(category.image),
    }


def category_from_document(doc_id: str, data: dict) -> Category:
    return Category(
        id=uuid.UUID(doc_id),
        name=data["name"],
        created_at=data["created_at"],
        updated_at=data.get("updated_at"),
        is_deleted=data.get("is_deleted", False),
        deleted_at=data.get("deleted_at"),
        image=image_from_document(data.get("image")),
    )


def tip_to_document(tip: Tip) -> dict:
    return {
        "title": tip.title,
        "description": tip.description,
        "steps": [{"step_number": s.step_number, "description": s.description} for s in tip.steps],
        "category_id": str(tip.category_id),
        "tags": list(tip.tags),
        "video_url": tip.video_url.url if tip.video_url else None,
        "video_id": tip.video_url.video_id if tip.video_url else None,
        "image": image_to_document(tip.image),
        "created_at": tip.created_at,
        "updated_at": tip.updated_at,
        "is_deleted": tip.is_deleted,
        "deleted_at": tip.deleted_at,
    }


def tip_from_document(doc_id: str, data: dict) -> Tip:
    video_url = None
    if data.get("video_url"):
        video_url = VideoUrl(url=data["video_url"], video_id=data.get("video_id"))
    return Tip(
        id=uuid.UUID(doc_id),
        title=data["title"],
        description=data["description"],
        steps=[TipStep(step_number=s["step_number"], description=s["description"]) for s in data.get("steps", [])],
        category_id=uuid.UUID(data["category_id"]),
        created_at=data["created_at"],
        tags=list(data.get("tags", [])),
        video_url=video_url,
        image=image_from_document(data.get("image")),
        updated_at=data.get("updated_at"),
        is_deleted=data.get("is_deleted", False),
        deleted_at=data.get("deleted_at"),
    )


def user_to_document(user: User) -> dict:
    return {
        "email": user.email,
        "name": user.name,
        "external_auth_id": user.external_auth_id,
        "role": user.role.value,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
        "is_deleted": user.is_deleted,
        "deleted_at": user.deleted_at,
    }


def user_from_document(doc_id: str, data: dict) -> User:
    return User(
        id=uuid.UUID(doc_id),
        email=data["email"],
        name=data["name"],
        external_auth_id=data["external_auth_id"],
        role=UserRole(data.get("role", UserRole.USER.value)),
        created_at=data["created_at"],
        updated_at=data.get("updated_at"),
        is_deleted=data.get("is_deleted", False),
        deleted_at=data.get("deleted_at"),
    )


def favorite_to_document(favorite: UserFavorite) -> dict:
    return {
        "user_id": str(favorite.user_id),
        "tip_id": str(favorite.tip_id),
        "added_at": favorite.added_at,
    }


def favorite_from_document(data: dict) -> UserFavorite:
    return UserFavorite(
        user_id=uuid.UUID(data["user_id"]),
        tip_id=uuid.UUID(data["tip_id"]),
        added_at=data["added_at"],
    )


# ---------- Repositorios ----------

class _FirestoreRepository:
    def __init__(self, client, collection_name: str):
        self.client = client
        self.collection = client.collection(collection_name)

    def _get_document(self, doc_id: str):
        snapshot = self.collection.document(doc_id).get()
        return snapshot if snapshot.exists else None

    def _stream(self, *filters):
        query = self.collection
        for field_path, op, value in filters:
            query = query.where(filter=FieldFilter(field_path, op, value))
        return query.stream()

    def _get_all(self, doc_ids: list[str]):
        refs = [self.collection.document(doc_id) for doc_id in dict.fromkeys(doc_ids)]
        if not refs:
            return []
        return [snap for snap in self.client.get_all(refs) if snap.exists]


class FirestoreCategoryRepository(_FirestoreRepository, CategoryRepository):
    def __init__(self, client, names: CollectionNames):
        super().__init__(client, names.categories)

    def get_by_id(self, category_id, include_deleted=False):
        with _firestore_call("categories.get_by_id"):
            snapshot = self._get_document(str(category_id))
        if snapshot is None:
            return None
        category = category_from_document(snapshot.id, snapshot.to_dict())
        if category.is_deleted and not include_deleted:
            return None
        return category

    def get_by_ids(self, category_ids):
        with _firestore_call("categories.get_by_ids"):
            snapshots = self._get_all([str(c) for c in category_ids])
        categories = [category_from_document(s.id, s.to_dict()) for s in snapshots]
        return {c.id: c for c in categories if not c.is_deleted}

    def get_by_name(self, name, include_deleted=False):
        filters = [("name_lower", "==", (name or "").strip().lower())]
        if not include_deleted:
            filters.append(("is_deleted", "==", False))
        with _firestore_call("categories.get_by_name"):
            for snapshot in self._stream(*filters):
                return category_from_document(snapshot.id, snapshot.to_dict())
        return None

    def list_active(self):
        with _firestore_call("categories.list_active"):
            return [category_from_document(s.id, s.to_dict()) for s in self._stream(("is_deleted", "==", False))]

    def add(self, category):
        with _firestore_call("categories.add"):
            self.collection.document(str(category.id)).create(category_to_document(category))

    def update(self, category):
        with _firestore_call("categories.update"):
            self.collection.document(str(category.id)).set(category_to_document(category))


class FirestoreTipRepository(_FirestoreRepository, TipRepository):
    def __init__(self, client, names: CollectionNames):
        super().__init__(client, names.tips)

    def get_by_id(self, tip_id, include_deleted=False):
        with _firestore_call("tips.get_by_id"):
            snapshot = self._get_document(str(tip_id))
        if snapshot is None:
            return None
        tip = tip_from_document(snapshot.id, snapshot.to_dict())
        if tip.is_deleted and not include_deleted:
            return None
        return tip

    def get_by_ids(self, tip_ids):
        with _firestore_call("tips.get_by_ids"):
            snapshots = self._get_all([str(t) for t in tip_ids])
        tips = [tip_from_document(s.id, s.to_dict()) for s in snapshots]
        return [tip for tip in tips if not tip.is_deleted]

    def get_by_category(self, category_id):
        with _firestore_call("tips.get_by_category"):
            snapshots = self._stream(("category_id", "==", str(category_id)), ("is_deleted", "==", False))
            return [tip_from_document(s.id, s.to_dict()) for s in snapshots]

    def count_by_category(self):
        counts: dict[uuid.UUID, int] = {}
        for tip in self.list_active():
            counts[tip.category_id] = counts.get(tip.category_id, 0) + 1
        return counts

    def search(self, criteria: TipQueryCriteria):
        if criteria.category_id is not None:
            candidates = self.get_by_category(criteria.category_id)
        else:
            candidates = self.list_active()
        return search_tips(candidates, criteria)

    def list_active(self):
        with _firestore_call("tips.list_active"):
            return [tip_from_document(s.id, s.to_dict()) for s in self._stream(("is_deleted", "==", False))]

    def add(self, tip):
        with _firestore_call("tips.add"):
            self.collection.document(str(tip.id)).create(tip_to_document(tip))

    def update(self, tip):
        with _firestore_call("tips.update"):
            self.collection.document(str(tip.id)).set(tip_to_document(tip))


class FirestoreFavoritesRepository(_FirestoreRepository, FavoritesRepository):
    def __init__(self, client, names: CollectionNames):
        super().__init__(client, names.favorites)

    def get(self, user_id, tip_id):
        with _firestore_call("favorites.get"):
            snapshot = self._get_document(f"{user_id}_{tip_id}")
        return favorite_from_document(snapshot.to_dict()) if snapshot else None

    def list_by_user(self, user_id):
        with _firestore_call("favorites.list_by_user"):
            return [favorite_from_document(s.to_dict()) for s in self._stream(("user_id", "==", str(user_id)))]

    def add(self, favorite):
        with _firestore_call("favorites.add"):
            self.collection.document(favorite.composite_key).set(favorite_to_document(favorite))

    def add_batch(self, favorites):
        with _firestore_call("favorites.add_batch"):
            for start in range(0, len(favorites), MAX_BATCH_WRITES):
                batch = self.client.batch()
                for favorite in favorites[start:start + MAX_BATCH_WRITES]:
                    batch.set(self.collection.document(favorite.composite_key), favorite_to_document(favorite))
                batch.commit()

    def remove(self, user_id, tip_id):
        with _firestore_call("favorites.remove"):
            ref = self.collection.document(f"{user_id}_{tip_id}")
            if not ref.get().exists:
                return False
            ref.delete()
            return True

    def remove_all_for_user(self, user_id):
        with _firestore_call("favorites.remove_all_for_user"):
            refs = [s.reference for s in self._stream(("user_id", "==", str(user_id)))]
            for start in range(0, len(refs), MAX_BATCH_WRITES):
                batch = self.client.batch()
                for ref in refs[start:start + MAX_BATCH_WRITES]:
                    batch.delete(ref)
                batch.commit()
        return len(refs)


class FirestoreUserRepository(_FirestoreRepository, UserRepository):
    def __init__(self, client, names: CollectionNames):
        super().__init__(client, names.users)

    def get_by_id(self, user_id, include_deleted=False):
        with _firestore_call("users.get_by_id"):
            snapshot = self._get_document(str(user_id))
        if snapshot is None:
            return None
        user = user_from_document(snapshot.id, snapshot.to_dict())
        if user.is_deleted and not include_deleted:
            return None
        return user

    def _first_active(self, field_path: str, value: str):
        with _firestore_call(f"users.get_by_{field_path}"):
            for snapshot in self._stream((field_path, "==", value), ("is_deleted", "==", False)):
                return user_from_document(snapshot.id, snapshot.to_dict())
        return None

    def get_by_email(self, email):
        return self._first_active("email", (email or "").strip().lower())

    def get_by_external_auth_id(self, external_auth_id):
        return self._first_active("external_auth_id", (external_auth_id or "").strip())

    def search(self, criteria: UserQueryCriteria):
        filters = []
        if criteria.is_deleted is not None:
            filters.append(("is_deleted", "==", criteria.is_deleted))
        with _firestore_call("users.search"):
            users = [user_from_document(s.id, s.to_dict()) for s in self._stream(*filters)]
        return search_users(users, criteria)

    def list_active(self):
        with _firestore_call("users.list_active"):
            return [user_from_document(s.id, s.to_dict()) for s in self._stream(("is_deleted", "==", False))]

    def add(self, user):
        with _firestore_call("users.add"):
            self.collection.document(str(user.id)).create(user_to_document(user))

    def update(self, user):
        with _firestore_call("users.update"):
            self.collection.document(str(user.id)).set(user_to_document(user))
