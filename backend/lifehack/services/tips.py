"""
Casos de uso de trucos (tips).

Un truco pertenece a una categoria activa. Crear o mover un truco a una
categoria inexistente o borrada es un error de validacion (400), no un
404: el problema esta en los datos enviados, no en la URL.
"""

import logging
import uuid

from lifehack.exceptions import NotFoundException, ValidationErrorBuilder, ValidationException
from lifehack.models.entities import DomainValidationError, Tip, TipStep, VideoUrl, validate_tag
from lifehack.models.queries import TipQueryCriteria, validate_pagination
from lifehack.models.schemas import (
    CreateTipRequest,
    PagedTipsResponse,
    PaginationMetadata,
    TipDetailResponse,
    TipSummaryResponse,
    UpdateTipRequest,
)
from lifehack.repositories.base import CategoryRepository, TipRepository
from lifehack.services.cache import CategoryCache
from lifehack.services.categories import image_from_dto

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown Category"


def parse_tip_id(raw_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw_id))
    except ValueError:
        raise ValidationException(f"Invalid tip ID format: '{raw_id}'. Expected a valid GUID.") from None


class TipService:
    def __init__(self, tips: TipRepository, categories: CategoryRepository, cache: CategoryCache | None = None):
        self.tips = tips
        self.categories = categories
        self.cache = cache or CategoryCache()

    def _build_parts(self, request: CreateTipRequest):
        """
        Valida pasos, etiquetas, video e imagen del request.

        Retorna:
            tuple: (steps, tags, video_url, image)
        """
        if not request.steps:
            raise ValidationException("At least one step is required")

        try:
            steps = [TipStep.create(s.step_number, s.description) for s in request.steps]
            tags = [validate_tag(tag) for tag in (request.tags or [])]
            video_url = VideoUrl.create(request.video_url) if request.video_url and request.video_url.strip() else None
        except DomainValidationError as e:
            raise ValidationException(e.message, errors={e.field or "Tip": [e.message]}) from None

        builder = ValidationErrorBuilder()
        image = image_from_dto(request.image, builder)
        if builder.has_errors:
            raise builder.build()

        return steps, tags, video_url, image

    def _ensure_assignable_category(self, category_id: uuid.UUID):
        category = self.categories.get_by_id(category_id, include_deleted=True)
        if category is None:
            raise ValidationException("Category does not exist")
        if category.is_deleted:
            raise ValidationException("Cannot assign tip to a deleted category")
        return category

    def create_tip(self, request: CreateTipRequest) -> TipDetailResponse:
        steps, tags, video_url, image = self._build_parts(request)
        category = self._ensure_assignable_category(request.category_id)

        try:
            tip = Tip.create(
                request.title,
                request.description,
                steps,
                category.id,
                tags=tags,
                video_url=video_url,
                image=image,
            )
        except DomainValidationError as e:
            raise ValidationException(e.message, errors={e.field or "Tip": [e.message]}) from None

        self.tips.add(tip)
        self.cache.invalidate_category_and_list(category.id)
        logger.info(f"Created tip {tip.id} in category {category.id}")
        return TipDetailResponse.from_entity(tip, category.name)

    def update_tip(self, tip_id: uuid.UUID, request: UpdateTipRequest) -> TipDetailResponse:
        tip = self.tips.get_by_id(tip_id)
        if tip is None:
            raise NotFoundException.for_resource("Tip", tip_id)
        previous_category_id = tip.category_id

        steps, tags, video_url, image = self._build_parts(request)
        category = self._ensure_assignable_category(request.category_id)

        try:
            tip.update(
                request.title,
                request.description,
                steps,
                category.id,
                tags=tags,
                video_url=video_url,
                image=image if image is not None else tip.image,
            )
        except DomainValidationError as e:
            raise ValidationException(e.message, errors={e.field or "Tip": [e.message]}) from None

        self.tips.update(tip)
        self.cache.invalidate_category_and_list(previous_category_id, category.id)
        logger.info(f"Updated tip {tip.id}")
        return TipDetailResponse.from_entity(tip, category.name)

    def delete_tip(self, tip_id: uuid.UUID) -> None:
        tip = self.tips.get_by_id(tip_id)
        if tip is None:
            raise NotFoundException.for_resource("Tip", tip_id)
        tip.mark_deleted()
        self.tips.update(tip)
        self.cache.invalidate_category_and_list(tip.category_id)
        logger.info(f"Deleted tip {tip.id}")

    def get_tip(self, raw_id: str) -> TipDetailResponse:
        tip_id = parse_tip_id(raw_id)
        tip = self.tips.get_by_id(tip_id)
        if tip is None:
            raise NotFoundException(f"Tip with ID '{tip_id}' was not found.")

        category = self.categories.get_by_id(tip.category_id)
        if category is None:
            raise NotFoundException.for_resource("Category", tip.category_id)
        return TipDetailResponse.from_entity(tip, category.name)

    def category_names(self, tips: list[Tip]) -> dict[uuid.UUID, str]:
        """Resuelve los nombres de categoria de varios trucos en una sola consulta."""
        categories = self.categories.get_by_ids(list({tip.category_id for tip in tips}))
        return {category_id: category.name for category_id, category in categories.items()}

    def search_tips(self, criteria: TipQueryCriteria) -> PagedTipsResponse:
        validate_pagination(criteria.page_number, criteria.page_size)
        page = self.tips.search(criteria)
        names = self.category_names(page.items)
        return PagedTipsResponse(
            items=[
                TipSummaryResponse.from_entity(tip, names.get(tip.category_id, UNKNOWN_CATEGORY))
                for tip in page.items
            ],
            metadata=PaginationMetadata.from_page(page),
        )
