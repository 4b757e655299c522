import uuid

import pytest

from lifehack.exceptions import ConflictException, NotFoundException, ValidationException
from lifehack.models.schemas import CreateCategoryRequest, ImageDto, UpdateCategoryRequest


def test_create_category(container):
    response = container.category_service.create_category(CreateCategoryRequest(name="  Kitchen  "))

    assert response.name == "Kitchen"
    assert response.tip_count == 0
    assert container.categories.get_by_id(response.id) is not None


def test_create_category_rejects_duplicate_name_ignoring_case(container, make_category):
    make_category("Kitchen")

    with pytest.raises(ConflictException, match="Category with name 'KITCHEN' already exists"):
        container.category_service.create_category(CreateCategoryRequest(name="KITCHEN"))


def test_create_category_rejects_name_of_deleted_category(container, make_category):
    category = make_category("Garden")
    container.category_service.delete_category(category.id)

    with pytest.raises(ConflictException):
        container.category_service.create_category(CreateCategoryRequest(name="garden"))


def test_create_category_collects_name_and_image_errors(container):
    image = ImageDto(
        image_url="relative/path.png",
        image_storage_path="public/categories/x.png",
        original_file_name="x.png",
        content_type="image/png",
        file_size_bytes=10,
        uploaded_at="2026-10-01T00:00:00Z",
    )

    with pytest.raises(ValidationException) as exc:
        container.category_service.create_category(CreateCategoryRequest(name="a", image=image))

    assert set(exc.value.errors) == {"Name", "Image.ImageUrl"}


def test_update_category_keeps_own_name(container, make_category):
    category = make_category("Kitchen")

    response = container.category_service.update_category(category.id, UpdateCategoryRequest(name="kitchen"))

    assert response.name == "kitchen"
    assert response.updated_at is not None


def test_update_category_conflicts_with_other_category(container, make_category):
    make_category("Kitchen")
    garden = make_category("Garden")

    with pytest.raises(ConflictException):
        container.category_service.update_category(garden.id, UpdateCategoryRequest(name="Kitchen"))


def test_update_missing_category(container):
    missing = uuid.uuid4()
    with pytest.raises(NotFoundException, match=f"Category with ID '{missing}' not found"):
        container.category_service.update_category(missing, UpdateCategoryRequest(name="Whatever"))


def test_delete_category_cascades_to_tips(container, make_category, make_tip):
    category = make_category("Kitchen")
    first = make_tip(category, title="First tip here")
    second = make_tip(category, title="Second tip here")
    other_category = make_category("Garden")
    untouched = make_tip(other_category, title="Garden tip here")

    container.category_service.delete_category(category.id)

    deleted_category = container.categories.get_by_id(category.id, include_deleted=True)
    assert deleted_category.is_deleted is True
    for tip_id in (first.id, second.id):
        tip = container.tips.get_by_id(tip_id, include_deleted=True)
        assert tip.is_deleted is True
        assert tip.deleted_at == deleted_category.deleted_at
    assert container.tips.get_by_id(untouched.id) is not None


def test_delete_category_twice_is_not_found(container, make_category):
    category = make_category("Kitchen")
    container.category_service.delete_category(category.id)

    with pytest.raises(NotFoundException):
        container.category_service.delete_category(category.id)


def test_get_categories_sorted_with_counts(container, make_category, make_tip):
    kitchen = make_category("kitchen")
    make_category("Bathroom")
    make_tip(kitchen)
    make_tip(kitchen, title="Another kitchen tip")

    response = container.category_service.get_categories()

    assert [c.name for c in response.items] == ["Bathroom", "kitchen"]
    assert [c.tip_count for c in response.items] == [0, 2]


def test_get_category_invalid_id(container):
    with pytest.raises(ValidationException, match="Invalid category ID format: 'abc'. Expected a valid GUID."):
        container.category_service.get_category("abc")


def test_get_tips_by_category_paginates(container, make_category, make_tip):
    category = make_category("Kitchen")
    for i in range(3):
        make_tip(category, title=f"Kitchen tip {i}")

    response = container.category_service.get_tips_by_category(str(category.id), page_size=2)

    assert len(response.items) == 2
    assert response.metadata.total_items == 3
    assert response.metadata.total_pages == 2
    assert all(item.category_name == "Kitchen" for item in response.items)
