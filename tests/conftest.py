import mongomock
import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

import database
from main import app

DB_ENV_VARS = (
    "DATABASE_URL",
    "DATABASE_LOCAL_URL",
    "USE_LOCAL_DB",
    "APP_ENV",
    "DATABASE_NAME",
    "DATABASE_TIMEOUT_MS",
    "DEFAULT_LANG",
)


class UnreachableCollection:
    """Collection stand-in whose every call fails like a down server."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ServerSelectionTimeoutError("No servers found yet")
        return fail


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in DB_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    database.close_client()
    yield
    database.close_client()


@pytest.fixture
def collection():
    return mongomock.MongoClient()[database.DEFAULT_DATABASE_NAME][database.SCORES_COLLECTION]


@pytest.fixture
def unreachable():
    return UnreachableCollection()


@pytest.fixture
def client(collection):
    app.dependency_overrides[database.get_scores_collection] = lambda: collection
    yield TestClient(app)
    app.dependency_overrides.clear()
