import base64
from unittest.mock import patch

from lifehack.services.validator import sanitize_file_name, validate_image

PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


def test_valid_png():
    result = validate_image(PNG_1X1, "image/png")
    assert result.is_valid is True
    assert result.mime_type == "image/png"


def test_rejects_png_declared_as_jpeg():
    result = validate_image(PNG_1X1, "image/jpeg")
    assert result.is_valid is False
    assert result.error == "File format does not match the declared content type"


def test_rejects_html_disguised_as_png():
    result = validate_image(b"<html><script>alert(1)</script></html>", "image/png")
    assert result.is_valid is False


def test_rejects_unknown_content_type():
    result = validate_image(PNG_1X1, "image/bmp")
    assert result.is_valid is False
    assert result.error == "Content type must be one of: image/jpeg, image/png, image/gif, image/webp"


def test_rejects_oversized_file():
    data = b"x" * (5 * 1024 * 1024 + 1)
    result = validate_image(data, "image/png")
    assert result.is_valid is False
    assert result.error == "File size cannot exceed 5MB"


def test_rejects_empty_file():
    result = validate_image(b"", "image/png")
    assert result.is_valid is False
    assert result.error == "File cannot be empty"


@patch("lifehack.services.validator.magic")
def test_declared_type_is_case_insensitive(mock_magic):
    mock_magic.from_buffer.return_value = "image/webp"

    result = validate_image(b"RIFF....WEBPVP8 ", " Image/WebP ")

    assert result.is_valid is True
    mock_magic.from_buffer.assert_called_once_with(b"RIFF....WEBPVP8 ", mime=True)


def test_sanitize_file_name_strips_traversal_and_separators():
    assert sanitize_file_name("../../etc/passwd") == "etcpasswd"
    assert sanitize_file_name("..\\windows\\system.ini") == "windowssystem.ini"
    assert sanitize_file_name("  photo\0.png  ") == "photo.png"
    assert sanitize_file_name(None) == ""


def test_sanitize_file_name_keeps_extension_when_truncating():
    name = "a" * 300 + ".jpeg"
    sanitized = sanitize_file_name(name)
    assert len(sanitized) == 255
    assert sanitized.endswith(".jpeg")
