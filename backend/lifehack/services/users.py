"""
Casos de uso de usuarios.

Un usuario local (User) se vincula a su cuenta de Firebase mediante
external_auth_id (el `sub` del ID token).

Control de propiedad (ownership)
--------------------------------
Las operaciones sobre un usuario concreto reciben opcionalmente el
contexto del usuario que hace la peticion (CurrentUserContext):
- Sin contexto (llamadas internas) o si es Admin: puede operar sobre
  cualquier usuario.
- Si no: solo sobre si mismo. Si intenta operar sobre otro usuario la
  respuesta es 404 (no 403), para no revelar si ese id existe.
"""

import logging
import uuid
from dataclasses import dataclass

from lifehack.exceptions import ConflictException, NotFoundException, ValidationException
from lifehack.models.entities import (
    DomainValidationError,
    User,
    validate_email,
    validate_user_name,
)
from lifehack.models.queries import MAX_PAGE_SIZE, SortDirection, UserQueryCriteria, UserSortField
from lifehack.models.schemas import PagedUsersResponse, PaginationMetadata, UserResponse
from lifehack.repositories.base import FavoritesRepository, UserRepository

logger = logging.getLogger(__name__)

DEFAULT_USERS_PAGE_SIZE = 20


@dataclass(frozen=True)
class CurrentUserContext:
    user_id: uuid.UUID
    is_admin: bool = False


def _as_validation_error(error: DomainValidationError) -> ValidationException:
    return ValidationException(error.message, errors={error.field or "User": [error.message]})


class UserService:
    def __init__(self, users: UserRepository, favorites: FavoritesRepository, identity_provider):
        self.users = users
        self.favorites = favorites
        self.identity_provider = identity_provider

    @staticmethod
    def _check_ownership(target_id: uuid.UUID, current: CurrentUserContext | None) -> None:
        if current is None or current.is_admin:
            return
        if current.user_id != target_id:
            raise NotFoundException.for_resource("User", target_id)

    def _get_owned(self, user_id: uuid.UUID, current: CurrentUserContext | None) -> User:
        self._check_ownership(user_id, current)
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundException.for_resource("User", user_id)
        return user

    def create_user(self, email: str, name: str, external_auth_id: str) -> UserResponse:
        try:
            user = User.create(email, name, external_auth_id)
        except DomainValidationError as e:
            raise _as_validation_error(e) from None

        if self.users.get_by_email(user.email) is not None:
            raise ConflictException(f"User with email '{user.email}' already exists")
        if self.users.get_by_external_auth_id(user.external_auth_id) is not None:
            raise ConflictException("User with external auth ID already exists")

        self.users.add(user)
        logger.info(f"Created user {user.id}")
        return UserResponse.from_entity(user)

    def find_by_external_auth_id(self, external_auth_id: str) -> User | None:
        return self.users.get_by_external_auth_id(external_auth_id)

    def get_by_external_auth_id(self, external_auth_id: str) -> UserResponse:
        user = self.find_by_external_auth_id(external_auth_id)
        if user is None:
            raise NotFoundException("User with the provided external auth ID not found")
        return UserResponse.from_entity(user)

    def get_by_email(self, email: str) -> UserResponse:
        try:
            normalized = validate_email(email)
        except DomainValidationError as e:
            raise _as_validation_error(e) from None
        user = self.users.get_by_email(normalized)
        if user is None:
            raise NotFoundException(f"User with email '{normalized}' not found")
        return UserResponse.from_entity(user)

    def get_by_id(self, user_id: uuid.UUID, current: CurrentUserContext | None = None) -> UserResponse:
        return UserResponse.from_entity(self._get_owned(user_id, current))

    def update_name(self, user_id: uuid.UUID, name: str, current: CurrentUserContext | None = None) -> UserResponse:
        try:
            validate_user_name(name)
        except DomainValidationError as e:
            raise _as_validation_error(e) from None

        user = self._get_owned(user_id, current)
        user.update_name(name)
        self.users.update(user)
        logger.info(f"Updated name of user {user.id}")
        return UserResponse.from_entity(user)

    def delete_user(self, user_id: uuid.UUID, current: CurrentUserContext | None = None) -> None:
        """
        Borra un usuario:
            1. Elimina todos sus favoritos.
            2. Lo marca como borrado (soft delete).
            3. Borra su cuenta en el proveedor de identidad.
        """
        user = self._get_owned(user_id, current)

        removed = self.favorites.remove_all_for_user(user.id)
        user.mark_deleted()
        self.users.update(user)
        self.identity_provider.delete_user(user.external_auth_id)
        logger.info(f"Deleted user {user.id} ({removed} favorite(s) removed)")

    def get_users(
        self,
        search: str | None = None,
        sort_field: UserSortField | None = None,
        sort_direction: SortDirection | None = None,
        page_number: int = 1,
        page_size: int = DEFAULT_USERS_PAGE_SIZE,
        is_deleted: bool | None = None,
    ) -> PagedUsersResponse:
        # Normaliza en vez de rechazar: la tabla del panel nunca falla
        # por una pagina fuera de rango.
        page_number = max(page_number, 1)
        if page_size <= 0:
            page_size = DEFAULT_USERS_PAGE_SIZE
        page_size = min(page_size, MAX_PAGE_SIZE)

        criteria = UserQueryCriteria(
            search=search,
            sort_field=sort_field or UserSortField.CREATED_AT,
            sort_direction=sort_direction or SortDirection.DESCENDING,
            page_number=page_number,
            page_size=page_size,
            is_deleted=is_deleted,
        )
        page = self.users.search(criteria)
        return PagedUsersResponse(
            items=[UserResponse.from_entity(user) for user in page.items],
            metadata=PaginationMetadata.from_page(page),
        )

    def create_admin_user(self, email: str, password: str, display_name: str) -> tuple[UserResponse, bool]:
        """
        Crea (o reutiliza) un administrador en Firebase y localmente.

        Retorna:
            tuple[UserResponse, bool]: El usuario y True si se creo un
                registro local nuevo (False si ya existia).
        """
        try:
            normalized_email = validate_email(email)
            validate_user_name(display_name)
        except DomainValidationError as e:
            raise _as_validation_error(e) from None
        if not password or not password.strip():
            raise ValidationException("Password cannot be empty", errors={"Password": ["Password cannot be empty"]})

        external_id = self.identity_provider.ensure_admin_user(normalized_email, password, display_name)

        existing = self.users.get_by_email(normalized_email) or self.users.get_by_external_auth_id(external_id)
        if existing is not None:
            if not existing.is_admin:
                existing.promote_to_admin()
                self.users.update(existing)
            logger.info(f"Admin user {existing.id} already registered")
            return UserResponse.from_entity(existing), False

        user = User.create_admin(normalized_email, display_name, external_id)
        self.users.add(user)
        logger.info(f"Created admin user {user.id}")
        return UserResponse.from_entity(user), True
