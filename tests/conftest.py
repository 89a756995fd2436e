"""Pytest configuration and fixtures."""

import sqlite3
from collections.abc import Callable, Generator

import pytest
from flask import Flask
from prometheus_client import REGISTRY
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app import create_app
from app.config import Settings
from app.database import upgrade_database
from app.models.part import Part, PartType
from app.services.container import ServiceContainer


@pytest.fixture(autouse=True)
def clear_prometheus_registry():
    """Clear Prometheus registry before and after each test to ensure isolation.

    Every app instance creates its own MetricsService, and metrics cannot be
    registered twice in the same registry.
    """
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            # Collector may have already been unregistered or not exist
            pass
    yield
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            pass


def _build_test_settings() -> Settings:
    """Construct base Settings object for tests."""
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        SECRET_KEY="test-secret-key",
        DEBUG=True,
        FLASK_ENV="testing",
        CORS_ORIGINS=["http://localhost:3000"],
    )


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with in-memory database."""
    return _build_test_settings()


@pytest.fixture(scope="session")
def template_connection() -> Generator[sqlite3.Connection, None, None]:
    """Create a template SQLite database once and apply migrations."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)

    settings = _build_test_settings().model_copy()
    settings.DATABASE_URL = "sqlite://"
    settings.set_engine_options_override({
        "poolclass": StaticPool,
        "creator": lambda: conn,
    })

    template_app = create_app(settings)
    with template_app.app_context():
        upgrade_database(recreate=True)

    yield conn

    conn.close()


@pytest.fixture
def app(test_settings: Settings, template_connection: sqlite3.Connection) -> Generator[Flask, None, None]:
    """Create Flask app for testing using a fresh copy of the template database."""
    clone_conn = sqlite3.connect(":memory:", check_same_thread=False)
    template_connection.backup(clone_conn)

    settings = test_settings.model_copy()
    settings.DATABASE_URL = "sqlite://"
    settings.set_engine_options_override({
        "poolclass": StaticPool,
        "creator": lambda: clone_conn,
    })

    app = create_app(settings)

    try:
        yield app
    finally:
        with app.app_context():
            from app.extensions import db as flask_db

            flask_db.session.remove()

        clone_conn.close()


@pytest.fixture
def session(container: ServiceContainer) -> Generator[Session, None, None]:
    """Create a new database session for a test."""

    session = container.db_session()

    exc = None
    try:
        yield session
    except Exception as e:
        exc = e

    if exc:
        session.rollback()
    else:
        session.commit()
    session.close()

    container.db_session.reset()


@pytest.fixture
def client(app: Flask):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def container(app: Flask):
    """Access to the DI container for testing with session provided."""
    return app.container


@pytest.fixture
def make_raw_part(container: ServiceContainer, session: Session) -> Callable[..., Part]:
    """Create a committed raw part, optionally stocked."""

    def _make(name: str, quantity: int = 0) -> Part:
        part = container.part_service().create_part(name, PartType.RAW)
        if quantity:
            result = container.inventory_service().adjust_quantity(part.id, quantity)
            assert result.succeeded, result.message
        session.commit()
        return part

    return _make


@pytest.fixture
def make_assembly(container: ServiceContainer, session: Session) -> Callable[..., Part]:
    """Create a committed assembled part from (component, quantity) pairs."""

    def _make(name: str, components: list[tuple[Part, int]]) -> Part:
        part = container.part_service().create_part(
            name,
            PartType.ASSEMBLED,
            components=[(component.id, quantity) for component, quantity in components],
        )
        session.commit()
        return part

    return _make
