import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from portal_api.config import Settings
from portal_api.deps import Services
from portal_api.documents import DocumentStore
from portal_api.main import create_app
from portal_api.uploads import FileIntake


@pytest.fixture
def store():
    store = DocumentStore(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    store.init()
    yield store
    store.close()


@pytest.fixture
def intake(tmp_path):
    return FileIntake(tmp_path / "uploads")


@pytest.fixture
def services(store, intake):
    return Services(store, intake)


@pytest.fixture
def app(store, intake, tmp_path):
    settings = Settings(DATABASE_URL="sqlite://", UPLOAD_DIR=str(tmp_path / "uploads"))
    return create_app(settings, store=store, intake=intake)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
