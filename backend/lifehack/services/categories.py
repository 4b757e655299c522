"""
Casos de uso de categorias.

Reglas principales:
- El nombre es unico SIN distinguir mayusculas, y la unicidad incluye
  las categorias borradas logicamente: "Cocina" no se puede crear si
  existio una "cocina" que luego se borro. Asi un nombre "borrado" no
  se reutiliza en silencio.
- Borrar una categoria la marca como borrada y marca tambien todos sus
  trucos (borrado en cascada), con la misma semantica de is_deleted y
  deleted_at.
- Los listados solo muestran categorias activas, con la cantidad de
  trucos activos de cada una.
- El listado y el detalle de cada categoria se sirven desde CategoryCache;
  toda escritura invalida las claves que toca.
"""

import logging
import uuid

from lifehack.exceptions import ConflictException, NotFoundException, ValidationErrorBuilder, ValidationException
from lifehack.models.entities import Category, DomainValidationError, ImageMetadata, validate_category_name
from lifehack.models.queries import SortDirection, TipQueryCriteria, TipSortField, validate_pagination
from lifehack.models.schemas import (
    CategoryListResponse,
    CategoryResponse,
    CreateCategoryRequest,
    ImageDto,
    PagedTipsResponse,
    PaginationMetadata,
    TipSummaryResponse,
    UpdateCategoryRequest,
)
from lifehack.repositories.base import CategoryRepository, TipRepository
from lifehack.services.cache import CATEGORY_LIST_KEY, CategoryCache, category_key

logger = logging.getLogger(__name__)


def image_from_dto(dto: ImageDto | None, builder: ValidationErrorBuilder) -> ImageMetadata | None:
    """
    Convierte el DTO de imagen en ImageMetadata, acumulando los errores
    en el builder con claves "Image.<Campo>".
    """
    if dto is None:
        return None
    try:
        return ImageMetadata.create(
            image_url=dto.image_url,
            image_storage_path=dto.image_storage_path,
            original_file_name=dto.original_file_name,
            content_type=dto.content_type,
            file_size_bytes=dto.file_size_bytes,
            uploaded_at=dto.uploaded_at,
        )
    except DomainValidationError as e:
        builder.add_error(f"Image.{e.field or 'Image'}", e.message)
        return None


def parse_category_id(raw_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw_id))
    except ValueError:
        raise ValidationException(f"Invalid category ID format: '{raw_id}'. Expected a valid GUID.") from None


class CategoryService:
    def __init__(self, categories: CategoryRepository, tips: TipRepository, cache: CategoryCache | None = None):
        self.categories = categories
        self.tips = tips
        self.cache = cache or CategoryCache()

    def _ensure_unique_name(self, name: str, exclude_id: uuid.UUID | None = None) -> None:
        existing = self.categories.get_by_name(name, include_deleted=True)
        if existing is not None and existing.id != exclude_id:
            raise ConflictException(f"Category with name '{name}' already exists")

    def _get_active(self, category_id: uuid.UUID) -> Category:
        category = self.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundException.for_resource("Category", category_id)
        return category

    def create_category(self, request: CreateCategoryRequest) -> CategoryResponse:
        builder = ValidationErrorBuilder()
        image = image_from_dto(request.image, builder)

        name = None
        try:
            name = validate_category_name(request.name)
        except DomainValidationError as e:
            builder.add_error("Name", e.message)

        if builder.has_errors:
            raise builder.build()

        self._ensure_unique_name(name)

        category = Category.create(name, image)
        self.categories.add(category)
        self.cache.invalidate_category_list()
        logger.info(f"Created category {category.id} ({category.name})")
        return CategoryResponse.from_entity(category, tip_count=0)

    def update_category(self, category_id: uuid.UUID, request: UpdateCategoryRequest) -> CategoryResponse:
        builder = ValidationErrorBuilder()
        image = image_from_dto(request.image, builder)

        name = None
        try:
            name = validate_category_name(request.name)
        except DomainValidationError as e:
            builder.add_error("Name", e.message)

        if builder.has_errors:
            raise builder.build()

        category = self._get_active(category_id)
        self._ensure_unique_name(name, exclude_id=category.id)

        category.update_name(name)
        if image is not None:
            category.update_image(image)
        self.categories.update(category)
        self.cache.invalidate_category_and_list(category.id)
        logger.info(f"Updated category {category.id}")

        tip_count = self.tips.count_by_category().get(category.id, 0)
        return CategoryResponse.from_entity(category, tip_count)

    def delete_category(self, category_id: uuid.UUID) -> None:
        """
        Borra la categoria y, en cascada, todos sus trucos activos.
        """
        category = self._get_active(category_id)
        tips = self.tips.get_by_category(category.id)

        category.mark_deleted()
        self.categories.update(category)

        for tip in tips:
            tip.mark_deleted()
            self.tips.update(tip)

        self.cache.invalidate_category_and_list(category.id)
        logger.info(f"Deleted category {category.id} and {len(tips)} tip(s)")

    def get_categories(self) -> CategoryListResponse:
        cached = self.cache.get(CATEGORY_LIST_KEY)
        if cached is not None:
            return cached

        counts = self.tips.count_by_category()
        categories = sorted(self.categories.list_active(), key=lambda c: c.name.lower())
        response = CategoryListResponse(
            items=[CategoryResponse.from_entity(c, counts.get(c.id, 0)) for c in categories]
        )
        self.cache.set(CATEGORY_LIST_KEY, response)
        return response

    def get_category(self, raw_id: str) -> CategoryResponse:
        category_id = parse_category_id(raw_id)
        key = category_key(category_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        category = self._get_active(category_id)
        tip_count = self.tips.count_by_category().get(category.id, 0)
        response = CategoryResponse.from_entity(category, tip_count)
        self.cache.set(key, response)
        return response

    def get_tips_by_category(
        self,
        raw_id: str,
        sort_field: TipSortField | None = None,
        sort_direction: SortDirection | None = None,
        page_number: int | None = None,
        page_size: int | None = None,
    ) -> PagedTipsResponse:
        category_id = parse_category_id(raw_id)
        category = self._get_active(category_id)

        page_number = 1 if page_number is None else page_number
        page_size = 10 if page_size is None else page_size
        validate_pagination(page_number, page_size)

        criteria = TipQueryCriteria(
            category_id=category_id,
            sort_field=sort_field or TipSortField.CREATED_AT,
            sort_direction=sort_direction or SortDirection.DESCENDING,
            page_number=page_number,
            page_size=page_size,
        )
        page = self.tips.search(criteria)
        return PagedTipsResponse(
            items=[TipSummaryResponse.from_entity(tip, category.name) for tip in page.items],
            metadata=PaginationMetadata.from_page(page),
        )
