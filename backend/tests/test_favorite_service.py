import uuid

import pytest

from lifehack.exceptions import ConflictException, NotFoundException
from lifehack.models.queries import TipQueryCriteria


def test_add_favorite(container, current_user, make_category, make_tip):
    tip = make_tip(make_category())

    response = container.favorite_service.add_favorite(current_user.id, tip.id)

    assert response.tip_id == tip.id
    assert response.tip_details.category_name == "Kitchen"
    assert container.favorites.exists(current_user.id, tip.id)


def test_add_favorite_twice_conflicts(container, current_user, make_category, make_tip):
    tip = make_tip(make_category())
    container.favorite_service.add_favorite(current_user.id, tip.id)

    with pytest.raises(ConflictException, match=f"Tip '{tip.id}' is already in user's favorites."):
        container.favorite_service.add_favorite(current_user.id, tip.id)


def test_add_favorite_unknown_user(container, make_category, make_tip):
    tip = make_tip(make_category())
    missing = uuid.uuid4()

    with pytest.raises(NotFoundException, match=f"User with ID '{missing}' not found."):
        container.favorite_service.add_favorite(missing, tip.id)


def test_add_favorite_unknown_tip(container, current_user):
    with pytest.raises(NotFoundException):
        container.favorite_service.add_favorite(current_user.id, uuid.uuid4())


def test_remove_missing_favorite(container, current_user):
    tip_id = uuid.uuid4()
    with pytest.raises(NotFoundException, match=f"Tip '{tip_id}' not found in user's favorites."):
        container.favorite_service.remove_favorite(current_user.id, tip_id)


def test_merge_favorites_is_idempotent(container, current_user, make_category, make_tip):
    category = make_category()
    first = make_tip(category, title="First tip here")
    second = make_tip(category, title="Second tip here")
    missing = uuid.uuid4()
    ids = [str(first.id), str(second.id), str(first.id), "not-a-uuid", str(missing)]

    result = container.favorite_service.merge_favorites(current_user.id, ids)

    assert result.total_received == 5
    assert result.added == 2
    assert result.skipped == 0
    assert {(f.tip_id, f.error_message) for f in result.failed} == {
        ("not-a-uuid", "Invalid tip ID format"),
        (str(missing), "Tip not found"),
    }

    again = container.favorite_service.merge_favorites(current_user.id, [str(first.id), str(second.id)])

    assert again.added == 0
    assert again.skipped == 2
    assert len(container.favorites.list_by_user(current_user.id)) == 2


def test_merge_favorites_empty_input(container, current_user):
    result = container.favorite_service.merge_favorites(current_user.id, [])
    assert (result.total_received, result.added, result.skipped, result.failed) == (0, 0, 0, [])


@pytest.mark.parametrize("tip_ids", [[], ["not-a-guid"]])
def test_merge_favorites_unknown_user(container, tip_ids):
    user_id = uuid.uuid4()
    with pytest.raises(NotFoundException, match=f"User with ID '{user_id}' not found."):
        container.favorite_service.merge_favorites(user_id, tip_ids)


def test_search_favorites_filters_and_keeps_added_at(container, current_user, make_category, make_tip):
    category = make_category()
    oven = make_tip(category, title="Clean the oven", tags=["oven"])
    garlic = make_tip(category, title="Peel garlic fast")
    container.favorite_service.add_favorite(current_user.id, oven.id)
    container.favorite_service.add_favorite(current_user.id, garlic.id)
    stored = container.favorites.get(current_user.id, oven.id)

    response = container.favorite_service.search_favorites(current_user.id, TipQueryCriteria(search_term="OVEN"))

    assert [f.tip_id for f in response.favorites] == [oven.id]
    assert response.favorites[0].added_at == stored.added_at
    assert response.metadata.total_items == 1


def test_search_favorites_skips_deleted_tips(container, current_user, make_category, make_tip):
    category = make_category()
    tip = make_tip(category)
    container.favorite_service.add_favorite(current_user.id, tip.id)
    container.tip_service.delete_tip(tip.id)

    response = container.favorite_service.search_favorites(current_user.id, TipQueryCriteria())

    assert response.favorites == []
    assert response.metadata.total_pages == 0
