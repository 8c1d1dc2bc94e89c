"""Shared test fixtures for the web test suite."""

import os
from pathlib import Path

import pytest

# Keep test runs from writing JSONL logs into the project
os.environ.setdefault("LOG_TO_FILE", "false")


@pytest.fixture
def repo_root():
    """Get the repository root directory."""
    return Path(__file__).resolve().parents[2]


@pytest.fixture
def data_dir(repo_root):
    """Sample sheet exports shipped with the project."""
    return repo_root / "data"


@pytest.fixture
def app(data_dir):
    """Flask app pointed at the sample sheets."""
    from web.app import app as flask_app

    flask_app.config["TESTING"] = True
    previous = flask_app.config["DATA_DIR"]
    flask_app.config["DATA_DIR"] = str(data_dir)
    yield flask_app
    flask_app.config["DATA_DIR"] = previous


@pytest.fixture
def client(app):
    """Create Flask test client."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def empty_client(app, tmp_path):
    """Test client whose data directory has no sheets."""
    app.config["DATA_DIR"] = str(tmp_path)
    with app.test_client() as test_client:
        yield test_client
