import os
import tempfile

import mongomock
import pytest

# Must be set before config is imported anywhere
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="seating-logs-"))


@pytest.fixture
def db():
    return mongomock.MongoClient()["exam_seating_test"]


@pytest.fixture
def client(db, monkeypatch):
    import app as app_module

    monkeypatch.setattr(app_module, "db", db)
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()
