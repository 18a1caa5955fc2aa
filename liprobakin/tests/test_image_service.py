"""
Tests for image_service ID image validation.
"""

from io import BytesIO

from PIL import Image

from liprobakin.services import image_service


def _make_image(width=100, height=100, fmt="JPEG"):
    """Create a minimal test image and return its bytes."""
    img = Image.new("RGB", (width, height), color=(255, 0, 0))
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class TestValidateIdImage:

    def test_valid_jpeg(self):
        is_valid, err = image_service.validate_id_image(_make_image(), "image/jpeg")
        assert is_valid is True
        assert err == ""

    def test_valid_png(self):
        is_valid, _ = image_service.validate_id_image(_make_image(fmt="PNG"), "image/png")
        assert is_valid is True

    def test_empty_file(self):
        is_valid, err = image_service.validate_id_image(b"", "image/jpeg")
        assert is_valid is False
        assert "required" in err

    def test_file_too_large(self):
        data = b"\x00" * (image_service.MAX_FILE_SIZE_BYTES + 1)
        is_valid, err = image_service.validate_id_image(data, "image/jpeg")
        assert is_valid is False
        assert "5MB" in err

    def test_wrong_content_type(self):
        is_valid, err = image_service.validate_id_image(_make_image(), "application/pdf")
        assert is_valid is False
        assert "Invalid file type" in err

    def test_missing_content_type(self):
        is_valid, _ = image_service.validate_id_image(_make_image(), None)
        assert is_valid is False

    def test_corrupted_file(self):
        is_valid, err = image_service.validate_id_image(b"this is not an image", "image/jpeg")
        assert is_valid is False
        assert "Invalid or corrupted" in err


def test_extension_for():
    assert image_service.extension_for("image/jpeg") == "jpg"
    assert image_service.extension_for("image/png") == "png"
    assert image_service.extension_for("text/plain") == "bin"
