import uuid
from datetime import timedelta

import pytest

from lifehack.exceptions import ValidationException
from lifehack.models.entities import Tip, TipStep, User
from lifehack.models.queries import (
    SortDirection,
    TipQueryCriteria,
    TipSortField,
    UserQueryCriteria,
    UserSortField,
    paginate,
    search_tips,
    search_users,
    total_pages,
    validate_pagination,
)


def _tip(title, category_id, tags=(), description="A helpful description", step="Do the thing carefully"):
    return Tip.create(title, description, [TipStep.create(1, step)], category_id, tags=list(tags))


@pytest.mark.parametrize(
    "total, size, expected",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5), (101, 100, 2)],
)
def test_total_pages_is_ceiling(total, size, expected):
    assert total_pages(total, size) == expected


def test_paginate_slices_and_keeps_total():
    page = paginate(list(range(23)), page_number=3, page_size=10)
    assert page.items == [20, 21, 22]
    assert page.total_items == 23
    assert page.total_pages == 3


def test_validate_pagination_limits():
    validate_pagination(1, 100)
    with pytest.raises(ValidationException, match="Page number must be greater than or equal to 1"):
        validate_pagination(0, 10)
    with pytest.raises(ValidationException, match="Page size must be between 1 and 100"):
        validate_pagination(1, 101)


def test_search_term_matches_title_steps_and_tags_case_insensitively():
    category_id = uuid.uuid4()
    by_title = _tip("Clean the OVEN", category_id)
    by_step = _tip("Other trick", category_id, step="Use baking soda and oven heat")
    by_tag = _tip("Another one", category_id, tags=["Oven"])
    unrelated = _tip("Fold shirts", category_id)

    page = search_tips([by_title, by_step, by_tag, unrelated], TipQueryCriteria(search_term="oven"))

    assert {tip.id for tip in page.items} == {by_title.id, by_step.id, by_tag.id}


def test_tags_filter_requires_all_tags():
    category_id = uuid.uuid4()
    both = _tip("Has both tags", category_id, tags=["Kitchen", "fast"])
    one = _tip("Has one tag", category_id, tags=["kitchen"])

    page = search_tips([both, one], TipQueryCriteria(tags=("kitchen", "FAST")))

    assert [tip.id for tip in page.items] == [both.id]


def test_category_filter():
    wanted, other = uuid.uuid4(), uuid.uuid4()
    tips = [_tip("In wanted category", wanted), _tip("In other category", other)]

    page = search_tips(tips, TipQueryCriteria(category_id=wanted))

    assert [tip.category_id for tip in page.items] == [wanted]


def test_sort_by_title_ascending():
    category_id = uuid.uuid4()
    tips = [_tip("Charlie trick", category_id), _tip("alpha trick", category_id), _tip("Bravo trick", category_id)]

    criteria = TipQueryCriteria(sort_field=TipSortField.TITLE, sort_direction=SortDirection.ASCENDING)
    page = search_tips(tips, criteria)

    assert [tip.title for tip in page.items] == ["alpha trick", "Bravo trick", "Charlie trick"]


def test_sort_by_created_at_descending_is_default():
    category_id = uuid.uuid4()
    older = _tip("Older trick", category_id)
    newer = _tip("Newer trick", category_id)
    older.created_at = newer.created_at - timedelta(days=1)

    page = search_tips([older, newer], TipQueryCriteria())

    assert [tip.id for tip in page.items] == [newer.id, older.id]


def test_search_users_filters_deleted_and_text():
    alice = User.create("alice@example.com", "Alice", "ext-a")
    bob = User.create("bob@example.com", "Bob", "ext-b")
    bob.mark_deleted()

    active = search_users([alice, bob], UserQueryCriteria(is_deleted=False))
    by_text = search_users([alice, bob], UserQueryCriteria(search="BOB"))
    by_email = search_users(
        [alice, bob], UserQueryCriteria(sort_field=UserSortField.EMAIL, sort_direction=SortDirection.ASCENDING)
    )

    assert [u.id for u in active.items] == [alice.id]
    assert [u.id for u in by_text.items] == [bob.id]
    assert [u.email for u in by_email.items] == ["alice@example.com", "bob@example.com"]


def test_search_users_empty_has_zero_pages():
    page = search_users([], UserQueryCriteria())
    assert page.total_items == 0
    assert page.total_pages == 0
