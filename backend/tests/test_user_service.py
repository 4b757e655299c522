import uuid

import pytest

from lifehack.exceptions import ConflictException, NotFoundException, ValidationException
from lifehack.models.entities import UserFavorite, UserRole
from lifehack.services.users import CurrentUserContext


def test_create_user_normalizes_email(container):
    response = container.user_service.create_user(" New.User@Example.com ", "New User", "ext-new")

    assert response.email == "new.user@example.com"
    assert response.role == "User"


def test_create_user_duplicate_email(container, current_user):
    with pytest.raises(ConflictException, match="User with email 'user@example.com' already exists"):
        container.user_service.create_user("USER@example.com", "Someone", "another-ext")


def test_create_user_duplicate_external_id(container, current_user):
    with pytest.raises(ConflictException, match="User with external auth ID already exists"):
        container.user_service.create_user("different@example.com", "Someone", current_user.external_auth_id)


def test_create_user_invalid_name(container):
    with pytest.raises(ValidationException) as exc:
        container.user_service.create_user("a@example.com", "x", "ext")
    assert "Name" in exc.value.errors


def test_owner_can_read_self_but_not_others(container, current_user):
    other = container.user_service.create_user("other@example.com", "Other User", "other-uid")
    context = CurrentUserContext(user_id=current_user.id)

    assert container.user_service.get_by_id(current_user.id, context).id == current_user.id
    with pytest.raises(NotFoundException):
        container.user_service.get_by_id(other.id, context)


def test_admin_context_can_update_any_user(container, current_user):
    admin_context = CurrentUserContext(user_id=uuid.uuid4(), is_admin=True)

    response = container.user_service.update_name(current_user.id, "Renamed User", admin_context)

    assert response.name == "Renamed User"


def test_delete_user_removes_favorites_and_identity(container, identity_provider, current_user):
    container.favorites.add(UserFavorite.create(current_user.id, uuid.uuid4()))

    container.user_service.delete_user(current_user.id, CurrentUserContext(user_id=current_user.id))

    assert container.users.get_by_id(current_user.id) is None
    assert container.users.get_by_id(current_user.id, include_deleted=True).is_deleted is True
    assert container.favorites.list_by_user(current_user.id) == []
    assert identity_provider.deleted == ["user-uid"]


@pytest.mark.parametrize(
    "page_number, page_size, expected_page, expected_size",
    [(0, 10, 1, 10), (-3, 0, 1, 20), (2, 500, 2, 100)],
)
def test_get_users_normalizes_paging(container, page_number, page_size, expected_page, expected_size):
    response = container.user_service.get_users(page_number=page_number, page_size=page_size)

    assert response.metadata.page_number == expected_page
    assert response.metadata.page_size == expected_size
    assert response.metadata.total_pages == 0


def test_get_by_email_not_found(container):
    with pytest.raises(NotFoundException):
        container.user_service.get_by_email("nobody@example.com")


def test_create_admin_user(container, identity_provider):
    response, created = container.user_service.create_admin_user("Boss@Example.com", "a-long-password", "The Boss")

    assert created is True
    assert response.role == "Admin"
    assert response.external_auth_id == "uid-boss@example.com"
    assert identity_provider.ensured_admins == ["boss@example.com"]


def test_create_admin_user_promotes_existing(container, current_user):
    response, created = container.user_service.create_admin_user("user@example.com", "a-long-password", "Admin")

    assert created is False
    assert response.id == current_user.id
    assert container.users.get_by_id(current_user.id).role == UserRole.ADMIN
