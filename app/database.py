"""Database connection and migration helpers."""

import logging
from pathlib import Path

from sqlalchemy import MetaData, inspect, text
from sqlalchemy.exc import SQLAlchemyError

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from app.extensions import db

logger = logging.getLogger(__name__)


def check_db_connection() -> bool:
    """Check if database connection is working."""
    try:
        result = db.session.execute(text("SELECT 1"))
        return result.scalar() == 1
    except SQLAlchemyError as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


def _get_alembic_config() -> Config:
    """Get Alembic configuration pointing at the configured database."""
    # alembic.ini lives in the project root (parent of app/)
    alembic_cfg_path = Path(__file__).parent.parent / "alembic.ini"

    config = Config(str(alembic_cfg_path))
    # Escape % for configparser interpolation
    url = db.engine.url.render_as_string(hide_password=False)
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return config


def get_current_revision() -> str | None:
    """Get current database revision from the Alembic version table."""
    if "alembic_version" not in inspect(db.engine).get_table_names():
        return None

    with db.engine.connect() as connection:
        row = connection.execute(text("SELECT version_num FROM alembic_version")).fetchone()
        return row[0] if row else None


def get_pending_migrations() -> list[str]:
    """Get pending migration revisions in the order they will be applied."""
    script = ScriptDirectory.from_config(_get_alembic_config())
    head_rev = script.get_current_head()
    if not head_rev:
        return []

    current_rev = get_current_revision()
    if current_rev == head_rev:
        return []

    base = current_rev or "base"
    revisions = [
        rev.revision
        for rev in script.walk_revisions(base=base, head=head_rev)
        if rev.revision != current_rev
    ]
    revisions.reverse()
    return revisions


def drop_all_tables() -> None:
    """Drop all tables including the Alembic version table."""
    metadata = MetaData()
    metadata.reflect(bind=db.engine)
    metadata.drop_all(bind=db.engine)


def upgrade_database(recreate: bool = False) -> list[tuple[str, str]]:
    """Apply pending migrations one at a time.

    Args:
        recreate: If True, drop all tables first

    Returns:
        List of (revision, description) tuples for applied migrations
    """
    config = _get_alembic_config()
    script = ScriptDirectory.from_config(config)

    if recreate:
        logger.warning("Dropping all tables before migrating")
        drop_all_tables()

    pending = get_pending_migrations()
    applied: list[tuple[str, str]] = []

    # Migrations run on the application engine so in-memory test databases are reused
    with db.engine.begin() as connection:
        config.attributes["connection"] = connection
        for revision in pending:
            description = script.get_revision(revision).doc or "Migration"
            logger.info(f"Applying schema {revision} - {description}")
            command.upgrade(config, revision)
            applied.append((revision, description))

    return applied
