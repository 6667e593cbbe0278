"""Tests for the direct-to-storage upload hand-off."""

import re
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.recording import PORTAL_SENTINEL_NAME, Recording
from app.services import storage
from app.services.portal import PortalService
from app.services.result import ErrorKind
from app.services.upload import UploadService, build_object_key, extension_for, sanitize_name, validate_display_name
from tests.conftest import FakeObjectStore

KEY_RE = re.compile(r"^recording-\d+-JaneDoe-[0-9a-f]{8}\.webm$")
VALID_KEY = "recording-1-x-0a1b2c3d.webm"


@pytest.fixture(name="slug")
def slug_fixture(db_session: Session) -> str:
    return PortalService().rotate(db_session).value.slug


class TestObjectKeys:
    """Tests for object key derivation."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Jane Doe", "JaneDoe"),
            ("../../etc/passwd", "etcpasswd"),
            ("<script>alert(1)</script>", "scriptalert1script"),
            ("   ", "anonymous"),
            ("", "anonymous"),
        ],
    )
    def test_sanitize_name(self, name: str, expected: str):
        assert sanitize_name(name) == expected

    def test_sanitize_name_is_bounded(self):
        assert sanitize_name("a" * 300) == "a" * 64

    @pytest.mark.parametrize(
        ("name", "error"),
        [
            ("", "Name is required"),
            ("   ", "Name is required"),
            (PORTAL_SENTINEL_NAME, "Name is reserved"),
            ("x" * 257, "Name is too long (maximum 256 characters)"),
            ("x" * 256, None),
            ("Jane Doe", None),
        ],
    )
    def test_validate_display_name(self, name: str, error: str | None):
        assert validate_display_name(name) == error

    @pytest.mark.parametrize(
        ("content_type", "ext"),
        [
            ("video/webm", "webm"),
            ("video/webm;codecs=vp9,opus", "webm"),
            ("video/mp4", "mp4"),
            ("VIDEO/MP4", "mp4"),
            ("video/quicktime", "mov"),
            ("video/x-unknown", "webm"),
        ],
    )
    def test_extension_for(self, content_type: str, ext: str):
        assert extension_for(content_type) == ext

    def test_build_object_key(self):
        assert build_object_key("Jane Doe", "video/webm", timestamp_ms=1700000000000, suffix="0a1b2c3d") == (
            "recording-1700000000000-JaneDoe-0a1b2c3d.webm"
        )

    def test_same_millisecond_keys_differ(self):
        """Two respondents with the same name in the same millisecond get distinct objects."""
        with patch("app.services.upload.time.time", return_value=1700000000.0):
            first = build_object_key("Jane Doe", "video/webm")
            second = build_object_key("Jane Doe", "video/webm")
        assert first != second
        assert KEY_RE.match(first)
        assert KEY_RE.match(second)


class TestUploadService:
    """Tests for the upload service."""

    def test_request_target(self, object_store: FakeObjectStore):
        result = UploadService().request_upload_target("Jane Doe", "video/webm")
        assert result.success
        target = result.value
        assert KEY_RE.match(target.object_key)
        assert target.expires_in == 300
        assert object_store.presigned == [("PUT", target.object_key, 300, "video/webm")]

    def test_request_target_requires_content_type(self, object_store: FakeObjectStore):
        result = UploadService().request_upload_target("Jane Doe", None)
        assert not result.success
        assert result.kind is ErrorKind.VALIDATION
        assert object_store.presigned == []

    @pytest.mark.parametrize("name", ["", "   ", PORTAL_SENTINEL_NAME, "x" * 257])
    def test_request_target_rejects_bad_names(self, object_store: FakeObjectStore, name: str):
        """No upload URL is issued for a name that could never be committed."""
        result = UploadService().request_upload_target(name, "video/webm")
        assert not result.success
        assert result.kind is ErrorKind.VALIDATION
        assert object_store.presigned == []

    def test_request_target_unconfigured_storage(self, object_store: FakeObjectStore):
        """Missing bucket configuration is reported by name."""
        settings = Settings()
        settings.S3_BUCKET_NAME = ""
        storage._object_store = FakeObjectStore(settings)

        result = UploadService().request_upload_target("Jane Doe", "video/webm")
        assert not result.success
        assert result.kind is ErrorKind.CONFIGURATION
        assert result.error == "S3_BUCKET_NAME is not set"

    def test_commit_keeps_raw_name(self, db_session: Session, object_store: FakeObjectStore):
        """The stored name is the raw input; only the key is sanitized."""
        key = UploadService().request_upload_target("Jane <Doe>", "video/mp4").value.object_key
        object_store.upload(key)

        result = UploadService().commit_metadata(db_session, "Jane <Doe>", key)
        assert result.success
        row = db_session.get(Recording, result.value.id)
        assert row.name == "Jane <Doe>"
        assert row.url == f"https://test-bucket.s3.us-east-1.amazonaws.com/{key}"

    @pytest.mark.parametrize(
        "key",
        [
            "../secrets.txt",
            "recording-1-a/b-0a1b2c3d.webm",
            "recording-1-Jane.webm",
            "other-1-Jane-0a1b2c3d.webm",
            "",
        ],
    )
    def test_commit_rejects_foreign_keys(self, db_session: Session, object_store: FakeObjectStore, key: str):
        object_store.upload(key)
        result = UploadService().commit_metadata(db_session, "Jane", key)
        assert not result.success
        assert result.kind is ErrorKind.VALIDATION
        assert db_session.query(Recording).count() == 0

    def test_commit_requires_uploaded_object(self, db_session: Session, object_store: FakeObjectStore):
        """A key that was issued but never PUT to the bucket leaves no row behind."""
        key = UploadService().request_upload_target("Jane Doe", "video/webm").value.object_key

        result = UploadService().commit_metadata(db_session, "Jane Doe", key)
        assert not result.success
        assert result.kind is ErrorKind.VALIDATION
        assert result.error == "Upload not found"
        assert db_session.query(Recording).count() == 0

    def test_commit_storage_failure(self, db_session: Session, object_store: FakeObjectStore):
        object_store.upload(VALID_KEY)
        with patch.object(object_store, "object_exists", side_effect=storage.StorageError("HeadObject timed out")):
            result = UploadService().commit_metadata(db_session, "Jane", VALID_KEY)
        assert not result.success
        assert result.kind is ErrorKind.UPSTREAM
        assert db_session.query(Recording).count() == 0

    def test_commit_rejects_reserved_name(self, db_session: Session, object_store: FakeObjectStore):
        object_store.upload(VALID_KEY)
        result = UploadService().commit_metadata(db_session, PORTAL_SENTINEL_NAME, VALID_KEY)
        assert not result.success
        assert result.kind is ErrorKind.VALIDATION

    def test_commit_rejects_blank_name(self, db_session: Session, object_store: FakeObjectStore):
        object_store.upload(VALID_KEY)
        result = UploadService().commit_metadata(db_session, "  ", VALID_KEY)
        assert not result.success
        assert result.kind is ErrorKind.VALIDATION

    def test_commit_rejects_overlong_name(self, db_session: Session, object_store: FakeObjectStore):
        object_store.upload(VALID_KEY)
        result = UploadService().commit_metadata(db_session, "x" * 257, VALID_KEY)
        assert not result.success
        assert result.kind is ErrorKind.VALIDATION
        assert db_session.query(Recording).count() == 0


class TestUploadEndpoints:
    """Tests for the upload HTTP surface."""

    def test_full_handoff(self, client: TestClient, db_session: Session, object_store: FakeObjectStore, slug: str):
        """Target, browser PUT, commit, then the admin sees the recording."""
        response = client.post(
            "/api/v1/uploads/target",
            json={"slug": slug, "name": "Jane Doe", "content_type": "video/webm"},
        )
        assert response.status_code == 200
        data = response.json()
        key = data["object_key"]
        assert KEY_RE.match(key)
        assert data["put_url"].startswith(f"https://test-bucket.s3.us-east-1.amazonaws.com/{key}?")

        object_store.upload(key)

        response = client.post("/api/v1/uploads/commit", json={"slug": slug, "name": "Jane Doe", "object_key": key})
        assert response.status_code == 200
        assert response.json()["detail"] == "Recording saved"

        row = db_session.get(Recording, response.json()["id"])
        assert row.name == "Jane Doe"
        assert row.url.endswith(f"/{key}")

    def test_target_requires_valid_slug(self, client: TestClient, object_store: FakeObjectStore, slug: str):
        response = client.post(
            "/api/v1/uploads/target",
            json={"slug": "wrong", "name": "Jane Doe", "content_type": "video/webm"},
        )
        assert response.status_code == 403
        assert object_store.presigned == []

    def test_target_without_portal(self, client: TestClient):
        response = client.post(
            "/api/v1/uploads/target",
            json={"slug": "anything", "name": "Jane Doe", "content_type": "video/webm"},
        )
        assert response.status_code == 403

    def test_commit_requires_valid_slug(self, client: TestClient, db_session: Session, slug: str):
        response = client.post(
            "/api/v1/uploads/commit",
            json={"slug": "wrong", "name": "Jane", "object_key": VALID_KEY},
        )
        assert response.status_code == 403
        assert db_session.query(Recording).filter(Recording.name == "Jane").count() == 0

    def test_commit_without_upload(self, client: TestClient, db_session: Session, slug: str):
        response = client.post(
            "/api/v1/uploads/target",
            json={"slug": slug, "name": "Jane Doe", "content_type": "video/webm"},
        )
        key = response.json()["object_key"]

        response = client.post("/api/v1/uploads/commit", json={"slug": slug, "name": "Jane Doe", "object_key": key})
        assert response.status_code == 400
        assert response.json()["detail"] == "Upload not found"
        assert db_session.query(Recording).filter(Recording.name == "Jane Doe").count() == 0

    @pytest.mark.parametrize("path", ["/api/v1/uploads/target", "/api/v1/uploads/commit"])
    def test_overlong_name_rejected(
        self, client: TestClient, object_store: FakeObjectStore, slug: str, path: str
    ):
        response = client.post(
            path,
            json={"slug": slug, "name": "x" * 257, "content_type": "video/webm", "object_key": VALID_KEY},
        )
        assert response.status_code == 422
        assert object_store.presigned == []

    def test_target_reserved_name(self, client: TestClient, object_store: FakeObjectStore, slug: str):
        response = client.post(
            "/api/v1/uploads/target",
            json={"slug": slug, "name": PORTAL_SENTINEL_NAME, "content_type": "video/webm"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Name is reserved"
        assert object_store.presigned == []

    def test_target_missing_content_type(self, client: TestClient, slug: str):
        response = client.post("/api/v1/uploads/target", json={"slug": slug, "name": "Jane Doe"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Content type is required"

    def test_target_unconfigured_storage_is_coarse(self, client: TestClient, slug: str):
        """Respondents do not see configuration details."""
        settings = Settings()
        settings.AWS_ACCESS_KEY_ID = ""
        storage._object_store = FakeObjectStore(settings)

        response = client.post(
            "/api/v1/uploads/target",
            json={"slug": slug, "name": "Jane Doe", "content_type": "video/webm"},
        )
        assert response.status_code == 500
        assert response.json()["detail"] == "Service unavailable"

    def test_oversized_body_rejected(self, client: TestClient, slug: str):
        """Video bytes never pass through the application."""
        response = client.post(
            "/api/v1/uploads/commit",
            content=b"x" * (1024 * 1024 + 1),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
