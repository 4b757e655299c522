import uuid

import pytest

from lifehack.exceptions import NotFoundException, ValidationException
from lifehack.models.queries import TipQueryCriteria
from lifehack.models.schemas import CreateTipRequest, UpdateTipRequest

from conftest import tip_payload


def _request(category_id, cls=CreateTipRequest, **overrides):
    return cls.model_validate(tip_payload(category_id, **overrides))


def test_create_tip(container, make_category):
    category = make_category()

    response = container.tip_service.create_tip(
        _request(category.id, videoUrl="https://www.youtube.com/watch?v=dQw4w9WgXcQ")
    )

    assert response.category_name == "Kitchen"
    assert [s.step_number for s in response.steps] == [1, 2]
    assert response.video_id == "dQw4w9WgXcQ"


def test_create_tip_requires_steps(container, make_category):
    with pytest.raises(ValidationException, match="At least one step is required"):
        container.tip_service.create_tip(_request(make_category().id, steps=[]))


def test_create_tip_rejects_unknown_category(container):
    with pytest.raises(ValidationException, match="Category does not exist"):
        container.tip_service.create_tip(_request(uuid.uuid4()))


def test_create_tip_rejects_deleted_category(container, make_category):
    category = make_category()
    container.category_service.delete_category(category.id)

    with pytest.raises(ValidationException, match="Cannot assign tip to a deleted category"):
        container.tip_service.create_tip(_request(category.id))


def test_create_tip_rejects_bad_video_url(container, make_category):
    with pytest.raises(ValidationException) as exc:
        container.tip_service.create_tip(_request(make_category().id, videoUrl="https://vimeo.com/1"))
    assert "VideoUrl" in exc.value.errors


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"title": "t" * 201}, "Title"),
        ({"description": "d" * 9}, "Description"),
        ({"tags": ["g" * 51]}, "Tags"),
        ({"steps": [{"stepNumber": 1, "description": "s" * 501}]}, "Steps"),
    ],
)
def test_create_tip_length_errors_are_keyed_by_field(container, make_category, overrides, field):
    with pytest.raises(ValidationException) as exc:
        container.tip_service.create_tip(_request(make_category().id, **overrides))
    assert field in exc.value.errors


def test_update_tip(container, make_category, make_tip):
    category = make_category()
    tip = make_tip(category)

    response = container.tip_service.update_tip(
        tip.id, _request(category.id, UpdateTipRequest, title="A brand new title")
    )

    assert response.title == "A brand new title"
    assert response.updated_at is not None


def test_update_missing_tip(container, make_category):
    with pytest.raises(NotFoundException):
        container.tip_service.update_tip(uuid.uuid4(), _request(make_category().id, UpdateTipRequest))


def test_get_tip_messages(container, make_category, make_tip):
    tip = make_tip(make_category())
    container.tip_service.delete_tip(tip.id)

    with pytest.raises(NotFoundException, match=f"Tip with ID '{tip.id}' was not found."):
        container.tip_service.get_tip(str(tip.id))
    with pytest.raises(ValidationException):
        container.tip_service.get_tip("not-a-guid")


def test_search_tips_resolves_category_names(container, make_category, make_tip):
    kitchen = make_category("Kitchen")
    garden = make_category("Garden")
    make_tip(kitchen, title="Kitchen trick one")
    make_tip(garden, title="Garden trick one")

    response = container.tip_service.search_tips(TipQueryCriteria(search_term="trick"))

    assert sorted(item.category_name for item in response.items) == ["Garden", "Kitchen"]
    assert response.metadata.total_items == 2


def test_search_tips_rejects_bad_page_size(container):
    with pytest.raises(ValidationException):
        container.tip_service.search_tips(TipQueryCriteria(page_size=0))
