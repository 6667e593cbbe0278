"""Pytest configuration and fixtures."""

import os

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASSWORD"] = "admin-password"
os.environ["AWS_ACCESS_KEY_ID"] = "test-access-key"
os.environ["AWS_SECRET_ACCESS_KEY"] = "test-secret-key"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["S3_BUCKET_NAME"] = "test-bucket"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config import Settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.models.recording import Recording  # noqa: E402, F401
from app.services import storage  # noqa: E402
from app.services.storage import ObjectStore, StorageError  # noqa: E402


class FakeObjectStore(ObjectStore):
    """In-memory stand-in for the S3 bucket."""

    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__(settings)
        self.objects: set[str] = set()
        self.presigned: list[tuple[str, str, int, str | None]] = []
        self.deleted: list[str] = []
        self.cors_rules: list[dict] | None = None
        self.fail_deletes = False

    def presign(self, method: str, key: str, expires_in: int, content_type: str | None = None) -> str:
        self.ensure_configured()
        self.presigned.append((method, key, expires_in, content_type))
        return f"{self.canonical_url(key)}?X-Amz-Expires={expires_in}&X-Amz-Signature=fake-{method.lower()}"

    def delete_object(self, key: str) -> None:
        self.ensure_configured()
        if self.fail_deletes:
            raise StorageError(f"Failed to delete {key}: simulated outage")
        self.deleted.append(key)
        self.objects.discard(key)

    def object_exists(self, key: str) -> bool:
        self.ensure_configured()
        return key in self.objects

    def put_cors(self, rules: list[dict]) -> None:
        self.ensure_configured()
        self.cors_rules = rules

    def upload(self, key: str) -> None:
        """Simulate the browser PUT against a presigned URL."""
        self.objects.add(key)


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="object_store")
def object_store_fixture():
    """Install an in-memory object store as the process-wide singleton."""
    fake = FakeObjectStore()
    previous = storage._object_store
    storage._object_store = fake
    yield fake
    storage._object_store = previous


@pytest.fixture(name="client")
def client_fixture(db_session: Session, object_store: FakeObjectStore):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="admin_headers")
def admin_headers_fixture() -> dict:
    """Authorization header carrying a valid admin session token."""
    from app.services.jwt import get_jwt_service

    token = get_jwt_service().create_token(email="admin@example.com")
    return {"Authorization": f"Bearer {token}"}
