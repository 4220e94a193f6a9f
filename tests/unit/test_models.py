"""
Unit tests for the upload domain models.

Testing philosophy:
- Test behavior, not implementation
- Use descriptive names that explain what we're testing
- Prefer real objects over mocks where practical
"""

import pytest

from media_relay.core.upload.models import (
    ObjectReference,
    PartRecord,
    UploadSession,
    UploadState,
    generate_object_key,
)


class TestPartRecord:
    """Tests for the PartRecord value object."""

    def test_part_numbers_start_at_one(self):
        with pytest.raises(ValueError, match="start at 1"):
            PartRecord(part_number=0, etag='"abc"')

    def test_etag_is_required(self):
        with pytest.raises(ValueError, match="etag"):
            PartRecord(part_number=1, etag="")

    def test_is_immutable(self):
        record = PartRecord(part_number=1, etag='"abc"')
        with pytest.raises(AttributeError):
            record.part_number = 2


class TestUploadSession:
    """Tests for the UploadSession lifecycle."""

    @pytest.fixture
    def session(self) -> UploadSession:
        session = UploadSession(key="k.png", content_type="image/png", upload_id="u-1")
        session.state = UploadState.STREAMING
        return session

    def test_new_session_starts_in_init(self):
        session = UploadSession(key="k", content_type="image/png", upload_id="u")

        assert session.state is UploadState.INIT
        assert session.parts == []
        assert session.next_part_number == 1

    def test_record_part_appends_in_order(self, session):
        session.record_part(1, '"a"', 10)
        session.record_part(2, '"b"', 5)

        assert [p.part_number for p in session.parts] == [1, 2]
        assert session.next_part_number == 3
        assert session.bytes_received == 15

    def test_record_part_rejects_gaps(self, session):
        session.record_part(1, '"a"', 10)

        with pytest.raises(ValueError, match="Expected part 2"):
            session.record_part(3, '"c"', 10)

    def test_record_part_rejects_repeats(self, session):
        session.record_part(1, '"a"', 10)

        with pytest.raises(ValueError):
            session.record_part(1, '"a"', 10)

    def test_record_part_requires_streaming_state(self):
        session = UploadSession(key="k", content_type="image/png", upload_id="u")

        with pytest.raises(ValueError, match="state"):
            session.record_part(1, '"a"', 10)

    def test_complete_produces_reference(self, session):
        session.record_part(1, '"a"', 10)
        session.state = UploadState.FINALIZING

        reference = session.complete("https://bucket/k.png")

        assert reference == ObjectReference(key="k.png", location="https://bucket/k.png")
        assert session.state is UploadState.DONE

    def test_failed_session_cannot_complete(self, session):
        """A session that never finalizes never yields a reference."""
        session.fail()

        with pytest.raises(ValueError):
            session.complete("https://bucket/k.png")

        assert session.state is UploadState.FAILED


class TestObjectKeys:
    """Tests for object key generation."""

    def test_key_carries_extension(self):
        assert generate_object_key(".png").endswith(".png")

    def test_key_without_extension_is_bare_uuid(self):
        key = generate_object_key()
        assert len(key) == 36
        assert "." not in key

    def test_keys_are_unique(self):
        keys = {generate_object_key(".mp4") for _ in range(100)}
        assert len(keys) == 100
