import uuid
from datetime import datetime, timezone

import pytest

from lifehack.models.entities import (
    Category,
    DomainValidationError,
    ImageMetadata,
    Tip,
    TipStep,
    User,
    UserFavorite,
    UserRole,
    VideoUrl,
    validate_email,
    validate_tag,
)


def _image(**overrides):
    values = {
        "image_url": "https://cdn.example.com/public/categories/2026/10/a.png",
        "image_storage_path": "public/categories/2026/10/a.png",
        "original_file_name": "a.png",
        "content_type": "image/png",
        "file_size_bytes": 1024,
        "uploaded_at": datetime(2026, 10, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return ImageMetadata.create(**values)


@pytest.mark.parametrize("length", [2, 100])
def test_category_name_length_limits_accepted(length):
    category = Category.create("a" * length)
    assert len(category.name) == length


def test_category_name_too_long():
    with pytest.raises(DomainValidationError) as exc:
        Category.create("a" * 101)
    assert exc.value.field == "Name"
    assert "cannot exceed 100" in exc.value.message


def test_category_name_is_trimmed_before_measuring():
    assert Category.create("  ab  ").name == "ab"
    with pytest.raises(DomainValidationError):
        Category.create("   ")
    with pytest.raises(DomainValidationError):
        Category.create(" a ")


def test_category_mark_deleted_is_idempotent():
    category = Category.create("Kitchen")
    category.mark_deleted()
    first_deleted_at = category.deleted_at

    category.mark_deleted()

    assert category.is_deleted is True
    assert category.deleted_at == first_deleted_at


def test_image_metadata_rejects_relative_url():
    with pytest.raises(DomainValidationError) as exc:
        _image(image_url="/images/a.png")
    assert exc.value.field == "ImageUrl"


def test_image_metadata_rejects_unsupported_content_type():
    with pytest.raises(DomainValidationError) as exc:
        _image(content_type="image/bmp")
    assert exc.value.field == "ContentType"


def test_image_metadata_rejects_oversized_file():
    with pytest.raises(DomainValidationError) as exc:
        _image(file_size_bytes=5 * 1024 * 1024 + 1)
    assert exc.value.message == "File size cannot exceed 5MB"


@pytest.mark.parametrize(
    "url, video_id",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtube.com/shorts/abc123", None),
        ("https://www.instagram.com/p/Cx9_AbC/", None),
    ],
)
def test_video_url_supported_formats(url, video_id):
    video = VideoUrl.create(url)
    assert video.url == url
    assert video.video_id == video_id


def test_video_id_only_comes_from_watch_urls():
    assert VideoUrl.create("https://www.youtube.com/shorts/dQw4w9WgXcQ").video_id is None
    assert VideoUrl.create("https://www.instagram.com/p/ABC123xyz").video_id is None
    assert VideoUrl.create("https://www.youtube.com/watch?v=abc-123&t=10").video_id == "abc-123"


def test_video_url_rejects_unsupported_platform():
    with pytest.raises(DomainValidationError) as exc:
        VideoUrl.create("https://vimeo.com/12345")
    assert exc.value.message == "URL must be from a supported platform (YouTube, Instagram)"


def test_video_url_rejects_malformed_url():
    with pytest.raises(DomainValidationError) as exc:
        VideoUrl.create("not a url")
    assert exc.value.message == "Video URL format is invalid"


def test_video_url_rejects_unsupported_youtube_path():
    with pytest.raises(DomainValidationError) as exc:
        VideoUrl.create("https://www.youtube.com/channel/xyz")
    assert "YouTube watch URL" in exc.value.message


def test_tip_requires_steps_and_sorts_them():
    category_id = uuid.uuid4()
    with pytest.raises(DomainValidationError) as exc:
        Tip.create("Valid title", "A valid description", [], category_id)
    assert exc.value.message == "Tip must have at least one step"

    steps = [TipStep.create(2, "Second step text"), TipStep.create(1, "First step text")]
    tip = Tip.create("Valid title", "A valid description", steps, category_id)
    assert [s.step_number for s in tip.steps] == [1, 2]


def test_tip_rejects_more_than_ten_tags():
    steps = [TipStep.create(1, "Only step of the tip")]
    with pytest.raises(DomainValidationError) as exc:
        Tip.create("Valid title", "A valid description", steps, uuid.uuid4(), tags=[f"t{i}" for i in range(11)])
    assert exc.value.message == "Tip cannot have more than 10 tags"


def test_tip_step_number_must_be_positive():
    with pytest.raises(DomainValidationError):
        TipStep.create(0, "Step with a bad number")


def test_email_is_normalized():
    assert validate_email("  John.Doe@Example.COM ") == "john.doe@example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "a@b", "a b@example.com", "x" * 250 + "@a.com"])
def test_email_rejects_invalid_values(email):
    with pytest.raises(DomainValidationError):
        validate_email(email)


def test_user_promotion_and_roles():
    user = User.create("user@example.com", "Some User", "ext-1")
    assert user.role == UserRole.USER
    assert user.is_admin is False

    user.promote_to_admin()

    assert user.is_admin is True
    assert User.create_admin("admin@example.com", "Admin", "ext-2").role == UserRole.ADMIN


def test_favorite_composite_key():
    user_id, tip_id = uuid.uuid4(), uuid.uuid4()
    favorite = UserFavorite.create(user_id, tip_id)
    assert favorite.composite_key == f"{user_id}_{tip_id}"


STEP = TipStep.create(1, "Put the cloves in a jar and shake it.")


def _tip(title="Peel garlic fast", description="Shake the cloves in a closed jar.", steps=None, tags=None):
    return Tip.create(title, description, steps or [STEP], uuid.uuid4(), tags=tags)


@pytest.mark.parametrize("length", [5, 200])
def test_tip_title_length_limits_accepted(length):
    assert len(_tip(title="t" * length).title) == length


@pytest.mark.parametrize("length, message", [(4, "at least 5"), (201, "cannot exceed 200")])
def test_tip_title_length_limits_rejected(length, message):
    with pytest.raises(DomainValidationError) as exc:
        _tip(title="t" * length)
    assert exc.value.field == "Title"
    assert message in exc.value.message


@pytest.mark.parametrize("length", [10, 2000])
def test_tip_description_length_limits_accepted(length):
    assert len(_tip(description="d" * length).description) == length


@pytest.mark.parametrize("length, message", [(9, "at least 10"), (2001, "cannot exceed 2000")])
def test_tip_description_length_limits_rejected(length, message):
    with pytest.raises(DomainValidationError) as exc:
        _tip(description="d" * length)
    assert exc.value.field == "Description"
    assert message in exc.value.message


@pytest.mark.parametrize("length", [10, 500])
def test_step_description_length_limits_accepted(length):
    assert len(TipStep.create(1, "s" * length).description) == length


@pytest.mark.parametrize("length, message", [(9, "at least 10"), (501, "cannot exceed 500")])
def test_step_description_length_limits_rejected(length, message):
    with pytest.raises(DomainValidationError) as exc:
        TipStep.create(1, "s" * length)
    assert exc.value.field == "Steps"
    assert message in exc.value.message


def test_tag_length_limit():
    assert validate_tag("g" * 50) == "g" * 50
    with pytest.raises(DomainValidationError) as exc:
        validate_tag("g" * 51)
    assert exc.value.message == "Tag cannot exceed 50 characters"


def test_tip_title_is_trimmed_before_measuring():
    assert _tip(title="  abcde  ").title == "abcde"
    with pytest.raises(DomainValidationError):
        _tip(title="  abcd  ")
