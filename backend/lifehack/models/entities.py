"""
Modulo de entidades de dominio.

Aqui viven los objetos que representan el negocio: categorias, trucos
(tips), usuarios y favoritos. A diferencia de los schemas de Pydantic
(models/schemas.py), que describen el JSON que viaja por HTTP, estas
clases protegen las reglas del dominio: un nombre de categoria siempre
tiene entre 2 y 100 caracteres, un truco siempre tiene al menos un paso,
una URL de video siempre pertenece a una plataforma soportada, etc.

Patron de diseno: Entidades + Objetos de valor
----------------------------------------------
- Entidades (Category, Tip, User, UserFavorite): tienen identidad (id) y
  cambian con el tiempo a traves de metodos (update_name, mark_deleted).
- Objetos de valor (ImageMetadata, TipStep, VideoUrl): inmutables
  (frozen=True) y validados al crearse con su metodo `create`.

Si un valor no cumple las reglas se lanza DomainValidationError, una
subclase de ValueError que indica el campo afectado. Los servicios la
convierten en ValidationException (HTTP 400).

Soft delete
-----------
Ninguna entidad se borra fisicamente: mark_deleted() marca is_deleted y
registra deleted_at. La operacion es idempotente: marcar dos veces no
cambia la fecha original del borrado.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from urllib.parse import urlparse


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DomainValidationError(ValueError):
    """
    Valor invalido para una regla del dominio.

    Atributos:
        message (str): Descripcion del problema (se muestra al cliente).
        field (str | None): Nombre del campo afectado, en el formato que
            usa la API ("Name", "ImageUrl", "Title"...).
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


# ---------- Imagenes ----------

IMAGE_MAX_URL_LENGTH = 2048
IMAGE_MAX_STORAGE_PATH_LENGTH = 1024
IMAGE_MAX_FILE_NAME_LENGTH = 255
IMAGE_MAX_SIZE_BYTES = 5 * 1024 * 1024
IMAGE_CONTENT_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc)


@dataclass(frozen=True)
class ImageMetadata:
    """
    Metadatos de una imagen ya subida a S3 y asociada a una categoria o
    a un truco. La imagen en si no se guarda en la base de datos, solo
    donde esta y como es.
    """

    image_url: str
    image_storage_path: str
    original_file_name: str
    content_type: str
    file_size_bytes: int
    uploaded_at: datetime

    @classmethod
    def create(
        cls,
        image_url: str,
        image_storage_path: str,
        original_file_name: str,
        content_type: str,
        file_size_bytes: int,
        uploaded_at: datetime | None = None,
    ) -> "ImageMetadata":
        if not image_url or not image_url.strip():
            raise DomainValidationError("Image URL cannot be empty", "ImageUrl")
        if len(image_url) > IMAGE_MAX_URL_LENGTH:
            raise DomainValidationError(
                f"Image URL cannot exceed {IMAGE_MAX_URL_LENGTH} characters", "ImageUrl"
            )
        if not _is_absolute_url(image_url):
            raise DomainValidationError("Image URL must be a valid absolute URL", "ImageUrl")

        if not image_storage_path or not image_storage_path.strip():
            raise DomainValidationError("Image storage path cannot be empty", "ImageStoragePath")
        if len(image_storage_path) > IMAGE_MAX_STORAGE_PATH_LENGTH:
            raise DomainValidationError(
                f"Image storage path cannot exceed {IMAGE_MAX_STORAGE_PATH_LENGTH} characters",
                "ImageStoragePath",
            )

        if not original_file_name or not original_file_name.strip():
            raise DomainValidationError("Original file name cannot be empty", "OriginalFileName")
        if len(original_file_name) > IMAGE_MAX_FILE_NAME_LENGTH:
            raise DomainValidationError(
                f"Original file name cannot exceed {IMAGE_MAX_FILE_NAME_LENGTH} characters",
                "OriginalFileName",
            )

        normalized_type = (content_type or "").strip().lower()
        if normalized_type not in IMAGE_CONTENT_TYPES:
            raise DomainValidationError(
                f"Content type must be one of: {', '.join(IMAGE_CONTENT_TYPES)}", "ContentType"
            )

        if file_size_bytes <= 0:
            raise DomainValidationError("File size must be greater than 0 bytes", "FileSizeBytes")
        if file_size_bytes > IMAGE_MAX_SIZE_BYTES:
            raise DomainValidationError("File size cannot exceed 5MB", "FileSizeBytes")

        return cls(
            image_url=image_url,
            image_storage_path=image_storage_path,
            original_file_name=original_file_name,
            content_type=normalized_type,
            file_size_bytes=file_size_bytes,
            uploaded_at=uploaded_at or utcnow(),
        )


# ---------- Categorias ----------

CATEGORY_NAME_MIN_LENGTH = 2
CATEGORY_NAME_MAX_LENGTH = 100


def validate_category_name(name: str | None) -> str:
    """
    Valida y normaliza el nombre de una categoria.

    El nombre se recorta (strip) ANTES de medirlo, asi "  ab  " es un
    nombre valido de 2 caracteres y "   " se considera vacio.

    Retorna:
        str: El nombre recortado.

    Raises:
        DomainValidationError: Si esta vacio o fuera de 2..100 caracteres.
    """
    if name is None or not name.strip():
        raise DomainValidationError("Category name cannot be empty", "Name")

    trimmed = name.strip()
    if len(trimmed) < CATEGORY_NAME_MIN_LENGTH:
        raise DomainValidationError(
            f"Category name must be at least {CATEGORY_NAME_MIN_LENGTH} characters", "Name"
        )
    if len(trimmed) > CATEGORY_NAME_MAX_LENGTH:
        raise DomainValidationError(
            f"Category name cannot exceed {CATEGORY_NAME_MAX_LENGTH} characters", "Name"
        )
    return trimmed


@dataclass
class Category:
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime | None = None
    is_deleted: bool = False
    deleted_at: datetime | None = None
    image: ImageMetadata | None = None

    @classmethod
    def create(cls, name: str, image: ImageMetadata | None = None) -> "Category":
        return cls(
            id=uuid.uuid4(),
            name=validate_category_name(name),
            created_at=utcnow(),
            image=image,
        )

    def update_name(self, name: str) -> None:
        self.name = validate_category_name(name)
        self.updated_at = utcnow()

    def update_image(self, image: ImageMetadata | None) -> None:
        self.image = image
        self.updated_at = utcnow()

    def mark_deleted(self) -> None:
        if self.is_deleted:
            return
        now = utcnow()
        self.is_deleted = True
        self.deleted_at = now
        self.updated_at = now


# ---------- Trucos (tips) ----------

TIP_TITLE_MIN_LENGTH = 5
TIP_TITLE_MAX_LENGTH = 200
TIP_DESCRIPTION_MIN_LENGTH = 10
TIP_DESCRIPTION_MAX_LENGTH = 2000
STEP_DESCRIPTION_MIN_LENGTH = 10
STEP_DESCRIPTION_MAX_LENGTH = 500
TAG_MAX_LENGTH = 50
TIP_MAX_TAGS = 10


def _validate_text(value: str | None, label: str, field_name: str, min_length: int, max_length: int) -> str:
    if value is None or not value.strip():
        raise DomainValidationError(f"{label} cannot be empty", field_name)
    trimmed = value.strip()
    if len(trimmed) < min_length:
        raise DomainValidationError(f"{label} must be at least {min_length} characters", field_name)
    if len(trimmed) > max_length:
        raise DomainValidationError(f"{label} cannot exceed {max_length} characters", field_name)
    return trimmed


def validate_tip_title(title: str | None) -> str:
    return _validate_text(title, "Tip title", "Title", TIP_TITLE_MIN_LENGTH, TIP_TITLE_MAX_LENGTH)


def validate_tip_description(description: str | None) -> str:
    return _validate_text(
        description, "Tip description", "Description", TIP_DESCRIPTION_MIN_LENGTH, TIP_DESCRIPTION_MAX_LENGTH
    )


def validate_tag(tag: str | None) -> str:
    if tag is None or not tag.strip():
        raise DomainValidationError("Tag cannot be empty", "Tags")
    trimmed = tag.strip()
    if len(trimmed) > TAG_MAX_LENGTH:
        raise DomainValidationError(f"Tag cannot exceed {TAG_MAX_LENGTH} characters", "Tags")
    return trimmed


@dataclass(frozen=True)
class TipStep:
    step_number: int
    description: str

    @classmethod
    def create(cls, step_number: int, description: str | None) -> "TipStep":
        if step_number < 1:
            raise DomainValidationError("Step number must be greater than or equal to 1", "Steps")
        text = _validate_text(
            description, "Step description", "Steps", STEP_DESCRIPTION_MIN_LENGTH, STEP_DESCRIPTION_MAX_LENGTH
        )
        return cls(step_number=step_number, description=text)


# Plataformas de video aceptadas y los formatos de URL de cada una.
VIDEO_ALLOWED_HOSTS = ("youtube.com", "www.youtube.com", "instagram.com", "www.instagram.com")
VIDEO_URL_PATTERNS = (
    re.compile(r"^https?://(www\.)?youtube\.com/watch\?v=[\w-]+", re.IGNORECASE),
    re.compile(r"^https?://(www\.)?youtube\.com/shorts/[\w-]+", re.IGNORECASE),
    re.compile(r"^https?://(www\.)?instagram\.com/p/[\w-]+", re.IGNORECASE),
)
_VIDEO_ID_PATTERN = re.compile(r"[?&]v=([\w-]+)")


@dataclass(frozen=True)
class VideoUrl:
    """
    URL de un video (YouTube watch, YouTube Shorts o post de Instagram).

    Atributos:
        url (str): URL original recortada.
        video_id (str | None): Identificador del video dentro de la
            plataforma: el valor de `v=` en las URLs watch de YouTube,
            None en Shorts e Instagram.
    """

    url: str
    video_id: str | None = None

    @classmethod
    def create(cls, url: str | None) -> "VideoUrl":
        if url is None or not url.strip():
            raise DomainValidationError("Video URL cannot be empty", "VideoUrl")
        url = url.strip()

        parsed = urlparse(url)
        if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
            raise DomainValidationError("Video URL format is invalid", "VideoUrl")

        host = (parsed.hostname or "").lower()
        if host not in VIDEO_ALLOWED_HOSTS:
            raise DomainValidationError(
                "URL must be from a supported platform (YouTube, Instagram)", "VideoUrl"
            )

        if not any(pattern.match(url) for pattern in VIDEO_URL_PATTERNS):
            raise DomainValidationError(
                "Video URL must be a YouTube watch URL (youtube.com/watch?v=...), "
                "a YouTube Shorts URL (youtube.com/shorts/...) or an Instagram post URL (instagram.com/p/...)",
                "VideoUrl",
            )

        # Solo las URLs watch traen un id explicito; Shorts e Instagram quedan sin id.
        match = _VIDEO_ID_PATTERN.search(url)
        return cls(url=url, video_id=match.group(1) if match else None)


@dataclass
class Tip:
    id: uuid.UUID
    title: str
    description: str
    steps: list[TipStep]
    category_id: uuid.UUID
    created_at: datetime
    tags: list[str] = field(default_factory=list)
    video_url: VideoUrl | None = None
    image: ImageMetadata | None = None
    updated_at: datetime | None = None
    is_deleted: bool = False
    deleted_at: datetime | None = None

    @staticmethod
    def _check_collections(steps: list[TipStep], tags: list[str]) -> None:
        if not steps:
            raise DomainValidationError("Tip must have at least one step", "Steps")
        if len(tags) > TIP_MAX_TAGS:
            raise DomainValidationError(f"Tip cannot have more than {TIP_MAX_TAGS} tags", "Tags")

    @classmethod
    def create(
        cls,
        title: str,
        description: str,
        steps: list[TipStep],
        category_id: uuid.UUID,
        tags: list[str] | None = None,
        video_url: VideoUrl | None = None,
        image: ImageMetadata | None = None,
    ) -> "Tip":
        tags = list(tags or [])
        cls._check_collections(steps, tags)
        return cls(
            id=uuid.uuid4(),
            title=validate_tip_title(title),
            description=validate_tip_description(description),
            steps=sorted(steps, key=lambda step: step.step_number),
            category_id=category_id,
            created_at=utcnow(),
            tags=tags,
            video_url=video_url,
            image=image,
        )

    def update(
        self,
        title: str,
        description: str,
        steps: list[TipStep],
        category_id: uuid.UUID,
        tags: list[str] | None = None,
        video_url: VideoUrl | None = None,
        image: ImageMetadata | None = None,
    ) -> None:
        tags = list(tags or [])
        self._check_collections(steps, tags)
        self.title = validate_tip_title(title)
        self.description = validate_tip_description(description)
        self.steps = sorted(steps, key=lambda step: step.step_number)
        self.category_id = category_id
        self.tags = tags
        self.video_url = video_url
        self.image = image
        self.updated_at = utcnow()

    def mark_deleted(self) -> None:
        if self.is_deleted:
            return
        now = utcnow()
        self.is_deleted = True
        self.deleted_at = now
        self.updated_at = now


# ---------- Usuarios ----------

EMAIL_MAX_LENGTH = 254
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USER_NAME_MIN_LENGTH = 2
USER_NAME_MAX_LENGTH = 100
EXTERNAL_AUTH_ID_MAX_LENGTH = 255


class UserRole(str, Enum):
    ADMIN = "Admin"
    USER = "User"


def validate_email(email: str | None) -> str:
    """Recorta y pasa a minusculas el email; valida longitud y formato."""
    if email is None or not email.strip():
        raise DomainValidationError("Email cannot be empty", "Email")
    normalized = email.strip().lower()
    if len(normalized) > EMAIL_MAX_LENGTH:
        raise DomainValidationError(f"Email cannot exceed {EMAIL_MAX_LENGTH} characters", "Email")
    if not EMAIL_PATTERN.match(normalized):
        raise DomainValidationError("Email format is invalid", "Email")
    return normalized


def validate_user_name(name: str | None) -> str:
    return _validate_text(name, "User name", "Name", USER_NAME_MIN_LENGTH, USER_NAME_MAX_LENGTH)


def validate_external_auth_id(external_auth_id: str | None) -> str:
    if external_auth_id is None or not external_auth_id.strip():
        raise DomainValidationError("External auth ID cannot be empty", "ExternalAuthId")
    trimmed = external_auth_id.strip()
    if len(trimmed) > EXTERNAL_AUTH_ID_MAX_LENGTH:
        raise DomainValidationError(
            f"External auth ID cannot exceed {EXTERNAL_AUTH_ID_MAX_LENGTH} characters", "ExternalAuthId"
        )
    return trimmed


@dataclass
class User:
    id: uuid.UUID
    email: str
    name: str
    external_auth_id: str
    role: UserRole
    created_at: datetime
    updated_at: datetime | None = None
    is_deleted: bool = False
    deleted_at: datetime | None = None

    @classmethod
    def create(cls, email: str, name: str, external_auth_id: str, role: UserRole = UserRole.USER) -> "User":
        return cls(
            id=uuid.uuid4(),
            email=validate_email(email),
            name=validate_user_name(name),
            external_auth_id=validate_external_auth_id(external_auth_id),
            role=role,
            created_at=utcnow(),
        )

    @classmethod
    def create_admin(cls, email: str, name: str, external_auth_id: str) -> "User":
        return cls.create(email, name, external_auth_id, role=UserRole.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def update_name(self, name: str) -> None:
        self.name = validate_user_name(name)
        self.updated_at = utcnow()

    def promote_to_admin(self) -> None:
        if self.role != UserRole.ADMIN:
            self.role = UserRole.ADMIN
            self.updated_at = utcnow()

    def mark_deleted(self) -> None:
        if self.is_deleted:
            return
        now = utcnow()
        self.is_deleted = True
        self.deleted_at = now
        self.updated_at = now


# ---------- Favoritos ----------

@dataclass(frozen=True)
class UserFavorite:
    """Relacion usuario -> truco favorito. No tiene id propio."""

    user_id: uuid.UUID
    tip_id: uuid.UUID
    added_at: datetime

    @classmethod
    def create(cls, user_id: uuid.UUID, tip_id: uuid.UUID) -> "UserFavorite":
        return cls(user_id=user_id, tip_id=tip_id, added_at=utcnow())

    @property
    def composite_key(self) -> str:
        return f"{self.user_id}_{self.tip_id}"
