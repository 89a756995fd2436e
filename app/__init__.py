"""Flask application factory for Assembly Inventory backend."""

import logging
from typing import TYPE_CHECKING

from flask_cors import CORS
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

if TYPE_CHECKING:
    from app.config import Settings

from app.app import App
from app.config import get_settings
from app.extensions import db
from app.services.container import ServiceContainer

# Modules using @inject with Provide[...] markers
WIRED_MODULES = ['app.api.parts', 'app.api.metrics']


def _log_pool_events(engine: Engine) -> None:
    """Log connection checkouts and checkins (echo_pool is unreliable in SQLAlchemy 2.x)."""
    pool_logger = logging.getLogger("sqlalchemy.pool")
    pool_logger.setLevel(logging.DEBUG)
    if not pool_logger.handlers:
        pool_logger.addHandler(logging.StreamHandler())

    @event.listens_for(engine, "checkout")
    def _on_checkout(dbapi_conn: object, conn_record: object, conn_proxy: object) -> None:
        pool_logger.debug("CHECKOUT conn=%s", id(dbapi_conn))

    @event.listens_for(engine, "checkin")
    def _on_checkin(dbapi_conn: object, conn_record: object) -> None:
        pool_logger.debug("CHECKIN conn=%s", id(dbapi_conn))


def create_app(settings: "Settings | None" = None) -> App:
    """Create and configure Flask application."""
    app = App(__name__)

    if settings is None:
        settings = get_settings()

    app.config.from_object(settings)

    db.init_app(app)

    # Register models with the SQLAlchemy metadata
    from app import models  # noqa: F401

    # db.engine is only available inside an application context
    with app.app_context():
        # One session per request; services share it through the container
        session_factory: sessionmaker[Session] = sessionmaker(
            class_=Session,
            bind=db.engine,
            autoflush=True,
            expire_on_commit=False,
        )

        if settings.DB_POOL_ECHO:
            _log_pool_events(db.engine)

    # SpecTree must exist before the API modules are imported
    from app.utils.spectree_config import configure_spectree

    configure_spectree(app)

    container = ServiceContainer()
    container.config.override(settings)
    container.session_maker.override(session_factory)
    container.wire(modules=WIRED_MODULES)
    app.container = container

    CORS(app, origins=settings.CORS_ORIGINS)

    # Correlation ids for log lines and error reports
    from flask_log_request_id import RequestID

    RequestID(app)

    from app.utils.flask_error_handlers import register_error_handlers

    register_error_handlers(app)

    from app.api import api_bp

    app.register_blueprint(api_bp)

    @app.teardown_request
    def close_session(exc: Exception | None) -> None:
        """Commit the request session, or roll it back when the request failed."""
        try:
            db_session = container.db_session()
            if exc or db_session.info.pop('needs_rollback', False):
                db_session.rollback()
            else:
                db_session.commit()
            db_session.close()
        finally:
            container.db_session.reset()

    return app
