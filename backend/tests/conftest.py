from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Make the usermgmt package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from usermgmt.api.deps import get_blob_store
from usermgmt.core.config import Settings
from usermgmt.core.database import Base, get_db
from usermgmt.core.security import create_access_token, hash_password
from usermgmt.core.storage import StorageError
from usermgmt.main import create_app
from usermgmt.models.audit_log import AuditLog  # noqa: F401
from usermgmt.models.role import UserRole
from usermgmt.models.user import User

TEST_SECRET = "test-secret"


class FakeBlobStore:
    """In-memory blob store that records calls and can be told to fail."""

    def __init__(self):
        self.uploads = []
        self.deletes = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, file, namespace):
        if self.fail_upload:
            raise StorageError("upload refused")
        data = file.file.read()
        self.uploads.append((namespace, file.filename, data))
        return f"https://cdn.test/{namespace}/{len(self.uploads)}.png"

    def delete(self, reference):
        self.deletes.append(reference)
        if self.fail_delete:
            raise StorageError("delete refused")


def make_settings(**overrides) -> Settings:
    values = {
        "auth_disabled": False,
        "jwt_secret_key": TEST_SECRET,
        "storage_backend": "local",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def session_factory(tmp_path):
    """Temporary SQLite file so request sessions and test sessions are isolated."""
    db_file = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_file}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def blob_store():
    return FakeBlobStore()


@pytest.fixture()
def make_client(session_factory, blob_store):
    def _make(**overrides) -> TestClient:
        app = create_app(make_settings(**overrides))

        def override_get_db():
            session = session_factory()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_blob_store] = lambda: blob_store
        # unhandled errors must come back as 500 responses, not raise
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture()
def client(make_client):
    return make_client()


@pytest.fixture()
def bypass_client(make_client):
    return make_client(auth_disabled=True)


@pytest.fixture()
def roles(db):
    admin = UserRole(id="role-admin", name="Administrator", is_default=True)
    editor = UserRole(id="role-editor", name="Editor", is_default=False)
    viewer = UserRole(id="role-viewer", name="Viewer", is_default=False)
    db.add_all([admin, editor, viewer])
    db.commit()
    return {"admin": admin.id, "editor": editor.id, "viewer": viewer.id}


@pytest.fixture()
def users(db, roles):
    alice = User(
        id="user-alice",
        name="Alice",
        email="alice@example.com",
        avatar=None,
        password_hash=hash_password("wonderland"),
        role_id=roles["admin"],
        created_at=datetime(2024, 1, 1, 9, 0, 0),
    )
    bob = User(
        id="user-bob",
        name="Bob",
        email="bob@example.com",
        avatar="https://cdn.test/avatars/bob.png",
        role_id=roles["editor"],
        created_at=datetime(2024, 2, 1, 9, 0, 0),
    )
    db.add_all([alice, bob])
    db.commit()
    return {"alice": alice.id, "bob": bob.id}


def auth_headers(user_id: str, email: str) -> dict:
    token = create_access_token({"sub": user_id, "email": email}, make_settings())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def alice_headers(users):
    return auth_headers("user-alice", "alice@example.com")


@pytest.fixture()
def bob_headers(users):
    return auth_headers("user-bob", "bob@example.com")
