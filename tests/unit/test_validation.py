"""
Unit tests for upload request validation.

Validation is a pure function of request metadata, so these tests need
no storage at all.
"""

import pytest

from media_relay.core.upload.errors import PayloadTooLargeError, UnsupportedMediaTypeError
from media_relay.core.upload.validation import (
    FILENAME_EXTENSIONS,
    filename_extension,
    validate_upload_request,
)

MIB = 1024 * 1024
LIMIT = 2500 * MIB


class TestContentType:
    """Only image/* and video/* are accepted."""

    @pytest.mark.parametrize("content_type", [
        "image/png",
        "image/jpeg",
        "image/x-custom",
        "video/mp4",
        "video/webm",
        "IMAGE/PNG",
        "image/png; charset=binary",
    ])
    def test_accepts_images_and_videos(self, content_type):
        request = validate_upload_request(content_type, 10, LIMIT)
        assert request.content_type == content_type

    @pytest.mark.parametrize("content_type", [
        "application/octet-stream",
        "text/plain",
        "audio/mpeg",
        "application/json",
        "imagepng",
        "",
        None,
    ])
    def test_rejects_other_types(self, content_type):
        with pytest.raises(UnsupportedMediaTypeError):
            validate_upload_request(content_type, 10, LIMIT)

    def test_content_type_checked_before_size(self):
        """A bad type with an oversized body is still a media type error."""
        with pytest.raises(UnsupportedMediaTypeError):
            validate_upload_request("text/plain", LIMIT + 1, LIMIT)


class TestDeclaredLength:
    """Declared Content-Length is checked against the maximum."""

    def test_rejects_length_above_limit(self):
        with pytest.raises(PayloadTooLargeError) as exc_info:
            validate_upload_request("video/mp4", LIMIT + 1, LIMIT)

        assert exc_info.value.size == LIMIT + 1
        assert exc_info.value.limit == LIMIT

    def test_accepts_length_at_limit(self):
        request = validate_upload_request("video/mp4", LIMIT, LIMIT)
        assert request.declared_length == LIMIT

    def test_missing_length_passes_through(self):
        """Unknown length is not a rejection; the uploader enforces the cap."""
        request = validate_upload_request("video/mp4", None, LIMIT)
        assert request.declared_length is None

    def test_zero_length_is_accepted(self):
        request = validate_upload_request("image/gif", 0, LIMIT)
        assert request.declared_length == 0


class TestFilenameExtension:
    """Extension lookup is a fixed table."""

    @pytest.mark.parametrize("content_type,extension", [
        ("image/gif", ".gif"),
        ("image/jpeg", ".jpeg"),
        ("image/png", ".png"),
        ("image/tiff", ".tiff"),
        ("video/quicktime", ".mov"),
        ("video/mpeg", ".mpeg"),
        ("video/mp4", ".mp4"),
        ("video/webm", ".webm"),
    ])
    def test_known_types(self, content_type, extension):
        assert filename_extension(content_type) == extension

    def test_table_has_exactly_the_supported_types(self):
        assert len(FILENAME_EXTENSIONS) == 8

    def test_unmapped_type_yields_empty_suffix(self):
        assert filename_extension("image/x-icon") == ""
        assert filename_extension("video/x-msvideo") == ""

    def test_lookup_is_stable(self):
        """The same content type always gives the same suffix."""
        results = {filename_extension("image/png") for _ in range(5)}
        assert results == {".png"}

    def test_parameters_and_case_are_ignored(self):
        assert filename_extension("Image/PNG; q=0.9") == ".png"

    def test_validation_attaches_extension(self):
        request = validate_upload_request("video/quicktime", None, LIMIT)
        assert request.extension == ".mov"
