from pathlib import Path

import mongomock
import pytest
from fastapi.testclient import TestClient

from taskboard.app import TaskboardApp
from taskboard.storage import JsonDatabase, MongoDatabase
from taskboard.utils.config import (
    AuthSettings,
    LoggingSettings,
    Settings,
    StorageSettings,
)

TEST_SECRET = "test-secret-key"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    # 4 rounds is bcrypt's minimum; keeps hashing fast in tests
    return Settings(
        auth=AuthSettings(secret_key=TEST_SECRET, bcrypt_rounds=4),
        storage=StorageSettings(backend="json", data_dir=str(tmp_path / "data")),
        logging=LoggingSettings(level="WARNING", format="console"),
    )


@pytest.fixture
def json_db(tmp_path: Path) -> JsonDatabase:
    return JsonDatabase(str(tmp_path / "data"))


@pytest.fixture
def mongo_db() -> MongoDatabase:
    return MongoDatabase(db_name="taskboard_test", client=mongomock.MongoClient())


@pytest.fixture(params=["json", "mongo"])
def database(request, tmp_path: Path):
    """Run a test once per storage backend"""
    if request.param == "json":
        return JsonDatabase(str(tmp_path / "data"))
    return MongoDatabase(db_name="taskboard_test", client=mongomock.MongoClient())


@pytest.fixture
def taskboard(settings: Settings, database) -> TaskboardApp:
    return TaskboardApp(settings, database).initialize(configure_logging=False)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    from web.main import create_app

    app = create_app(settings, configure_logging=False)
    return TestClient(app)

