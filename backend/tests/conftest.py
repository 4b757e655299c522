import uuid

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from lifehack.config import settings
from lifehack.dependencies import Container, get_container
from lifehack.limiter import limiter
from lifehack.main import app
from lifehack.models.entities import Category, Tip, TipStep, User
from lifehack.repositories.memory import (
    InMemoryCategoryRepository,
    InMemoryFavoritesRepository,
    InMemoryTipRepository,
    InMemoryUserRepository,
)
from lifehack.services.identity import InvalidTokenError

ADMIN_TOKEN = "admin-token"
USER_TOKEN = "user-token"
OTHER_TOKEN = "other-token"


class FakeIdentityProvider:
    """Token -> claims in memory, recording every call made to it."""

    def __init__(self):
        self.tokens = {
            ADMIN_TOKEN: {"sub": "admin-uid", "email": "admin@example.com", "role": "Admin"},
            USER_TOKEN: {"sub": "user-uid", "email": "user@example.com"},
            OTHER_TOKEN: {"sub": "other-uid", "email": "other@example.com"},
        }
        self.deleted = []
        self.ensured_admins = []

    def verify_token(self, token):
        if token not in self.tokens:
            raise InvalidTokenError("Invalid authentication token")
        return self.tokens[token]

    def delete_user(self, external_auth_id):
        self.deleted.append(external_auth_id)

    def ensure_admin_user(self, email, password, display_name):
        self.ensured_admins.append(email)
        return f"uid-{email}"


class FakeStorage:
    def __init__(self):
        self.uploaded = {}

    def upload_image(self, data, key, content_type):
        self.uploaded[key] = (data, content_type)
        return f"https://{settings.CLOUDFRONT_DOMAIN}/{key}"


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def s3_client():
    """Provide a mocked S3 client with a test bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name=settings.AWS_REGION)
        client.create_bucket(Bucket=settings.S3_BUCKET)
        yield client


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def container(identity_provider, storage):
    return Container(
        categories=InMemoryCategoryRepository(),
        tips=InMemoryTipRepository(),
        favorites=InMemoryFavoritesRepository(),
        users=InMemoryUserRepository(),
        identity_provider=identity_provider,
        storage=storage,
    )


@pytest.fixture
def client(container):
    app.dependency_overrides[get_container] = lambda: container
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {USER_TOKEN}"}


@pytest.fixture
def current_user(container):
    user = User.create("user@example.com", "Regular User", "user-uid")
    container.users.add(user)
    return user


@pytest.fixture
def make_category(container):
    def _make(name="Kitchen"):
        category = Category.create(name)
        container.categories.add(category)
        return category

    return _make


@pytest.fixture
def make_tip(container):
    def _make(category, title="Peel garlic fast", tags=None, description="Shake the cloves in a closed jar."):
        tip = Tip.create(
            title,
            description,
            [TipStep.create(1, "Put the cloves in a jar and shake it.")],
            category.id,
            tags=tags or [],
        )
        container.tips.add(tip)
        return tip

    return _make


def tip_payload(category_id, **overrides):
    payload = {
        "title": "Fold a fitted sheet",
        "description": "A quick way to fold the hardest sheet in the closet.",
        "steps": [
            {"stepNumber": 2, "description": "Tuck the corners into each other."},
            {"stepNumber": 1, "description": "Hold the sheet by two adjacent corners."},
        ],
        "categoryId": str(category_id),
        "tags": ["laundry", "home"],
    }
    payload.update(overrides)
    return payload


def random_id():
    return str(uuid.uuid4())
