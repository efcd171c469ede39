"""Pytest fixtures for testing"""

import importlib.util
from pathlib import Path
from typing import Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from fraudguard.api.dependencies import get_dashboard, get_data_access, get_threshold_store
from fraudguard.api.main import create_app
from fraudguard.infrastructure.backend.rest import RestBackend
from fraudguard.infrastructure.database.models import TABLES, Base
from fraudguard.infrastructure.database.repositories import SqlBackend
from fraudguard.infrastructure.thresholds import ThresholdStore
from fraudguard.services.views import Dashboard
from fraudguard.utils.date_utils import parse_timestamp

MOCK_SERVER_PATH = Path(__file__).resolve().parents[1] / "mock" / "backend_server" / "main.py"
FIXTURES_DIR = MOCK_SERVER_PATH.parent / "fixtures"


def _load_mock_server():
    spec = importlib.util.spec_from_file_location("mock_backend_server", MOCK_SERVER_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


mock_server = _load_mock_server()


def load_fixture_rows() -> dict:
    return mock_server.load_fixtures(FIXTURES_DIR)


def seed(db: Session, tables: dict) -> None:
    """Insert raw backend rows, parsing *_at columns into datetimes"""
    for table, rows in tables.items():
        model = TABLES[table]
        for row in rows:
            values = {
                k: parse_timestamp(v) if k.endswith("_at") and isinstance(v, str) else v
                for k, v in row.items()
            }
            db.add(model(**values))
    db.commit()


@pytest.fixture
def session_factory(tmp_path: Path) -> Generator[sessionmaker, None, None]:
    """Create test database and a session factory bound to it"""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_sessions(session_factory: sessionmaker, db: Session) -> sessionmaker:
    """Session factory over a database seeded with the shared fixtures"""
    seed(db, load_fixture_rows())
    return session_factory


@pytest.fixture
def mock_backend_tables() -> dict:
    return load_fixture_rows()


def rest_backend(tables: dict) -> RestBackend:
    """RestBackend wired in-process to the mock PostgREST server"""
    return RestBackend(
        base_url="http://backend.test",
        api_key="test-key",
        timeout=2.0,
        transport=httpx.ASGITransport(app=mock_server.create_app(tables)),
    )


@pytest.fixture(params=["sql", "rest"])
def data(request: pytest.FixtureRequest):
    """Backend seeded with the shared fixtures, once per implementation"""
    if request.param == "sql":
        return SqlBackend(request.getfixturevalue("seeded_sessions"))
    return rest_backend(request.getfixturevalue("mock_backend_tables"))


@pytest.fixture
def threshold_store(tmp_path: Path) -> ThresholdStore:
    return ThresholdStore(tmp_path / "blacklist_thresholds.json")


@pytest.fixture
def client(seeded_sessions: sessionmaker, threshold_store: ThresholdStore) -> TestClient:
    """Create FastAPI test client over the seeded SQLite backend"""
    app = create_app()
    backend = SqlBackend(seeded_sessions)
    dashboard = Dashboard.build(backend, threshold_store, timeout=5.0)

    app.dependency_overrides[get_data_access] = lambda: backend
    app.dependency_overrides[get_threshold_store] = lambda: threshold_store
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    return TestClient(app)

