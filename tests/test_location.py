"""Tests for lock location parsing"""
import pytest

from gslock.core.exceptions import MalformedLocationError
from gslock.location import LockLocation, parse_location


class TestParseLocation:
    """Test gs:// location parsing"""

    def test_bucket_and_key(self):
        """Test a simple bucket/object location"""
        location = parse_location("gs://ops-locks/nightly")
        assert location == LockLocation(container="ops-locks", key="nightly")

    def test_key_keeps_nested_slashes(self):
        """Test that only the first separator splits bucket from key"""
        location = parse_location("gs://ops-locks/jobs/backup/nightly.lock")
        assert location.container == "ops-locks"
        assert location.key == "jobs/backup/nightly.lock"

    def test_uri_round_trips(self):
        """Test that the rendered URI matches the input"""
        assert parse_location("gs://b/a/b/c").uri == "gs://b/a/b/c"
        assert str(parse_location("gs://b/k")) == "gs://b/k"

    @pytest.mark.parametrize(
        "path",
        [
            "not-a-valid-location",
            "s3://bucket/key",
            "gs:/bucket/key",
            "GS://bucket/key",
            "/tmp/lock",
            "",
        ],
    )
    def test_rejects_missing_scheme(self, path):
        """Test that anything without the gs:// prefix is malformed"""
        with pytest.raises(MalformedLocationError) as exc_info:
            parse_location(path)
        assert "gs://" in exc_info.value.reason

    @pytest.mark.parametrize("path", ["gs://bucket", "gs://bucket/"])
    def test_rejects_bare_bucket(self, path):
        """Test that a bucket without an object key cannot be a lock"""
        with pytest.raises(MalformedLocationError) as exc_info:
            parse_location(path)
        assert exc_info.value.reason == "object key is empty"

    @pytest.mark.parametrize("path", ["gs://", "gs:///key"])
    def test_rejects_empty_bucket(self, path):
        """Test that an empty bucket name is malformed"""
        with pytest.raises(MalformedLocationError) as exc_info:
            parse_location(path)
        assert exc_info.value.reason == "bucket name is empty"

    def test_error_message_names_location(self):
        """Test that the error message carries the offending location"""
        with pytest.raises(MalformedLocationError) as exc_info:
            parse_location("gs://bucket")
        assert str(exc_info.value) == "Invalid lock location 'gs://bucket': object key is empty"
        assert exc_info.value.location == "gs://bucket"
