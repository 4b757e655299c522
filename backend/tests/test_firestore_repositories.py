import uuid
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import ServiceUnavailable

from lifehack.exceptions import InfraException
from lifehack.models.entities import Category, Tip, TipStep, UserFavorite, VideoUrl
from lifehack.repositories.firestore import (
    CollectionNames,
    FirestoreCategoryRepository,
    FirestoreFavoritesRepository,
    FirestoreTipRepository,
    category_to_document,
    tip_from_document,
    tip_to_document,
)


def _snapshot(doc_id, data):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = True
    snapshot.to_dict.return_value = data
    return snapshot


def test_collection_names_use_prefix():
    names = CollectionNames("test_")
    assert (names.users, names.tips, names.categories, names.favorites) == (
        "test_users",
        "test_tips",
        "test_categories",
        "test_favorites",
    )


def test_category_document_stores_lowercase_name():
    document = category_to_document(Category.create("Kitchen Hacks"))
    assert document["name_lower"] == "kitchen hacks"


def test_tip_document_keeps_video_and_steps():
    tip = Tip.create(
        "Peel garlic fast",
        "Shake the cloves in a closed jar.",
        [TipStep.create(1, "Put the cloves in a jar and shake it.")],
        uuid.uuid4(),
        tags=["kitchen"],
        video_url=VideoUrl.create("https://www.youtube.com/watch?v=abc123"),
    )

    document = tip_to_document(tip)
    restored = tip_from_document(str(tip.id), document)

    assert document["category_id"] == str(tip.category_id)
    assert document["video_id"] == "abc123"
    assert restored == tip


def test_get_by_id_hides_deleted_category():
    category = Category.create("Kitchen")
    category.mark_deleted()
    client = MagicMock()
    client.collection.return_value.document.return_value.get.return_value = _snapshot(
        str(category.id), category_to_document(category)
    )
    repo = FirestoreCategoryRepository(client, CollectionNames())

    assert repo.get_by_id(category.id) is None
    assert repo.get_by_id(category.id, include_deleted=True).is_deleted is True
    client.collection.assert_called_with("categories")


def test_google_errors_become_infra_exceptions():
    client = MagicMock()
    client.collection.return_value.document.return_value.get.side_effect = ServiceUnavailable("down")
    repo = FirestoreTipRepository(client, CollectionNames())

    with pytest.raises(InfraException) as exc:
        repo.get_by_id(uuid.uuid4())

    assert isinstance(exc.value.cause, ServiceUnavailable)


def test_add_batch_commits_in_chunks_of_500():
    client = MagicMock()
    repo = FirestoreFavoritesRepository(client, CollectionNames())
    user_id = uuid.uuid4()
    favorites = [UserFavorite.create(user_id, uuid.uuid4()) for _ in range(501)]

    repo.add_batch(favorites)

    assert client.batch.call_count == 2
    assert client.batch.return_value.set.call_count == 501
    assert client.batch.return_value.commit.call_count == 2


def test_favorite_uses_composite_document_id():
    client = MagicMock()
    repo = FirestoreFavoritesRepository(client, CollectionNames())
    favorite = UserFavorite.create(uuid.uuid4(), uuid.uuid4())

    repo.add(favorite)

    client.collection.return_value.document.assert_called_with(favorite.composite_key)
