import time
import uuid

from lifehack.models.entities import Category
from lifehack.models.schemas import CreateCategoryRequest, CreateTipRequest, UpdateCategoryRequest, UpdateTipRequest
from lifehack.services.cache import CATEGORY_LIST_KEY, CategoryCache, category_key

from conftest import tip_payload


def test_category_key_is_normalized():
    category_id = uuid.uuid4()
    assert category_key(category_id) == f"Category_{category_id}"
    assert category_key(str(category_id).upper()) == f"Category_{category_id}"


def test_entries_expire_after_ttl():
    cache = CategoryCache(ttl_seconds=0.05)
    cache.set(CATEGORY_LIST_KEY, "value")
    assert cache.get(CATEGORY_LIST_KEY) == "value"

    time.sleep(0.1)

    assert cache.get(CATEGORY_LIST_KEY) is None


def test_category_list_is_served_from_cache(container, make_category):
    make_category("Kitchen")
    first = container.category_service.get_categories()

    container.categories.add(Category.create("Garden"))

    assert container.category_service.get_categories() is first
    assert CATEGORY_LIST_KEY in container.category_cache


def test_create_category_refreshes_list(container, make_category):
    make_category("Kitchen")
    container.category_service.get_categories()

    container.category_service.create_category(CreateCategoryRequest(name="Garden"))

    names = [c.name for c in container.category_service.get_categories().items]
    assert names == ["Garden", "Kitchen"]


def test_rename_refreshes_list_and_detail(container, make_category):
    category = make_category("Kitchen")
    container.category_service.get_categories()
    container.category_service.get_category(str(category.id))

    container.category_service.update_category(category.id, UpdateCategoryRequest(name="Cooking"))

    assert [c.name for c in container.category_service.get_categories().items] == ["Cooking"]
    assert container.category_service.get_category(str(category.id)).name == "Cooking"


def test_tip_writes_refresh_tip_counts(container, make_category):
    kitchen = make_category("Kitchen")
    garden = make_category("Garden")
    container.category_service.get_categories()
    container.category_service.get_category(str(kitchen.id))

    tip = container.tip_service.create_tip(CreateTipRequest.model_validate(tip_payload(kitchen.id)))
    assert container.category_service.get_category(str(kitchen.id)).tip_count == 1

    container.category_service.get_category(str(garden.id))
    container.tip_service.update_tip(tip.id, UpdateTipRequest.model_validate(tip_payload(garden.id)))
    counts = {c.name: c.tip_count for c in container.category_service.get_categories().items}
    assert counts == {"Garden": 1, "Kitchen": 0}
    assert container.category_service.get_category(str(garden.id)).tip_count == 1

    container.tip_service.delete_tip(tip.id)
    counts = {c.name: c.tip_count for c in container.category_service.get_categories().items}
    assert counts == {"Garden": 0, "Kitchen": 0}


def test_deleted_category_leaves_cache(client, admin_headers, make_category):
    category = make_category("Kitchen")
    assert client.get(f"/api/Category/{category.id}").status_code == 200
    assert len(client.get("/api/Category").json()["items"]) == 1

    client.delete(f"/api/admin/categories/{category.id}", headers=admin_headers)

    assert client.get(f"/api/Category/{category.id}").status_code == 404
    assert client.get("/api/Category").json()["items"] == []


def test_admin_tip_delete_refreshes_public_count(client, admin_headers, make_category, make_tip):
    category = make_category("Kitchen")
    tip = make_tip(category)
    assert client.get("/api/Category").json()["items"][0]["tipCount"] == 1

    client.delete(f"/api/admin/tips/{tip.id}", headers=admin_headers)

    assert client.get("/api/Category").json()["items"][0]["tipCount"] == 0
