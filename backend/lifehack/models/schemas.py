"""
Modulo de esquemas (schemas) de datos de la API.

Define la estructura exacta del JSON que entra y sale de la API usando
Pydantic. Es el "contrato" con el frontend y el panel de administracion.

Convencion de nombres
---------------------
En Python los atributos van en snake_case (created_at), pero el JSON de
la API usa camelCase (createdAt), que es lo que esperan los clientes
JavaScript. `alias_generator=to_camel` genera los alias automaticamente
y `populate_by_name=True` permite construir los modelos con cualquiera de
los dos nombres. FastAPI serializa las respuestas usando los alias.

Las reglas de negocio (longitudes, formatos) NO se validan aqui sino en
las entidades de dominio (models/entities.py): asi los mensajes de error
son los mismos sin importar por donde lleguen los datos.

Patron de diseno: Data Transfer Objects (DTOs)
----------------------------------------------
    JSON del cliente -> Pydantic -> servicio -> entidad -> DTO de respuesta -> JSON
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lifehack.models.entities import Category, ImageMetadata, Tip, User, UserFavorite
from lifehack.models.queries import Page


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Imagenes ----------

class ImageDto(ApiModel):
    """
    Metadatos de una imagen ya subida (respuesta de los endpoints de
    subida y parte opcional de los requests de categorias y trucos).
    """
    image_url: str
    image_storage_path: str
    original_file_name: str
    content_type: str
    file_size_bytes: int
    uploaded_at: datetime

    @classmethod
    def from_entity(cls, image: ImageMetadata | None) -> "ImageDto | None":
        if image is None:
            return None
        return cls(
            image_url=image.image_url,
            image_storage_path=image.image_storage_path,
            original_file_name=image.original_file_name,
            content_type=image.content_type,
            file_size_bytes=image.file_size_bytes,
            uploaded_at=image.uploaded_at,
        )


# ---------- Paginacion ----------

class PaginationMetadata(ApiModel):
    total_items: int
    page_number: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "PaginationMetadata":
        return cls(
            total_items=page.total_items,
            page_number=page.page_number,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


# ---------- Categorias ----------

class CreateCategoryRequest(ApiModel):
    name: str
    image: ImageDto | None = None


class UpdateCategoryRequest(ApiModel):
    name: str
    image: ImageDto | None = None


class CategoryResponse(ApiModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime | None = None
    image: ImageDto | None = None
    tip_count: int = 0

    @classmethod
    def from_entity(cls, category: Category, tip_count: int = 0) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            created_at=category.created_at,
            updated_at=category.updated_at,
            image=ImageDto.from_entity(category.image),
            tip_count=tip_count,
        )


class CategoryListResponse(ApiModel):
    items: list[CategoryResponse]


# ---------- Trucos ----------

class TipStepDto(ApiModel):
    step_number: int
    description: str


class CreateTipRequest(ApiModel):
    title: str
    description: str
    steps: list[TipStepDto] = Field(default_factory=list)
    category_id: uuid.UUID
    tags: list[str] | None = None
    video_url: str | None = None
    image: ImageDto | None = None


class UpdateTipRequest(CreateTipRequest):
    pass


class TipDetailResponse(ApiModel):
    id: uuid.UUID
    title: str
    description: str
    steps: list[TipStepDto]
    category_id: uuid.UUID
    category_name: str
    tags: list[str]
    video_url: str | None = None
    video_id: str | None = None
    image: ImageDto | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, tip: Tip, category_name: str) -> "TipDetailResponse":
        return cls(
            id=tip.id,
            title=tip.title,
            description=tip.description,
            steps=[TipStepDto(step_number=s.step_number, description=s.description) for s in tip.steps],
            category_id=tip.category_id,
            category_name=category_name,
            tags=list(tip.tags),
            video_url=tip.video_url.url if tip.video_url else None,
            video_id=tip.video_url.video_id if tip.video_url else None,
            image=ImageDto.from_entity(tip.image),
            created_at=tip.created_at,
            updated_at=tip.updated_at,
        )


class TipSummaryResponse(ApiModel):
    id: uuid.UUID
    title: str
    description: str
    category_id: uuid.UUID
    category_name: str
    tags: list[str]
    video_url: str | None = None
    image: ImageDto | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, tip: Tip, category_name: str) -> "TipSummaryResponse":
        return cls(
            id=tip.id,
            title=tip.title,
            description=tip.description,
            category_id=tip.category_id,
            category_name=category_name,
            tags=list(tip.tags),
            video_url=tip.video_url.url if tip.video_url else None,
            image=ImageDto.from_entity(tip.image),
            created_at=tip.created_at,
        )


class PagedTipsResponse(ApiModel):
    items: list[TipSummaryResponse]
    metadata: PaginationMetadata


# ---------- Usuarios ----------

class CreateUserRequest(ApiModel):
    email: str
    name: str


class CreateAdminUserRequest(ApiModel):
    email: str
    password: str
    display_name: str


class UpdateUserNameRequest(ApiModel):
    name: str


class UserResponse(ApiModel):
    id: uuid.UUID
    email: str
    name: str
    external_auth_id: str
    role: str
    created_at: datetime
    updated_at: datetime | None = None
    is_deleted: bool

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            external_auth_id=user.external_auth_id,
            role=user.role.value,
            created_at=user.created_at,
            updated_at=user.updated_at,
            is_deleted=user.is_deleted,
        )


class PagedUsersResponse(ApiModel):
    items: list[UserResponse]
    metadata: PaginationMetadata


# ---------- Favoritos ----------

class FavoriteResponse(ApiModel):
    tip_id: uuid.UUID
    added_at: datetime
    tip_details: TipDetailResponse

    @classmethod
    def from_entity(cls, favorite: UserFavorite, tip: Tip, category_name: str) -> "FavoriteResponse":
        return cls(
            tip_id=favorite.tip_id,
            added_at=favorite.added_at,
            tip_details=TipDetailResponse.from_entity(tip, category_name),
        )


class PagedFavoritesResponse(ApiModel):
    favorites: list[FavoriteResponse]
    metadata: PaginationMetadata


class MergeFavoritesRequest(ApiModel):
    # Strings y no UUIDs: los ids invalidos se reportan en `failed`
    # en vez de rechazar toda la peticion.
    tip_ids: list[str] = Field(default_factory=list)


class FailedTip(ApiModel):
    tip_id: str
    error_message: str


class MergeFavoritesResponse(ApiModel):
    total_received: int
    added: int
    skipped: int
    failed: list[FailedTip]


# ---------- Dashboard ----------

class EntityStatistics(ApiModel):
    total: int
    this_month: int
    last_month: int


class DashboardResponse(ApiModel):
    users: EntityStatistics
    categories: EntityStatistics
    tips: EntityStatistics


# ---------- Errores ----------

class ErrorResponse(ApiModel):
    """
    Sobre de error comun a toda la API (estilo RFC 7807).

    Ejemplo:
        {
            "status": 404,
            "type": "https://httpstatuses.io/404/resource-not-found",
            "title": "Resource not found",
            "detail": "Tip with ID '...' was not found.",
            "instance": "/api/Tip/...",
            "correlationId": "c0ffee-..."
        }
    """
    status: int
    type: str
    title: str
    detail: str
    instance: str
    correlation_id: str
    errors: dict[str, list[str]] | None = None
