# clientdb/database.py
import logging
from typing import List

from fastapi import Request
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from clientdb.config import Settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def create_db_engine(database_url: str, settings: Settings) -> Engine:
    """Create the shared engine; SQLite gets a thread-safe connection instead of pool sizing."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connection health
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        echo=settings.DEBUG
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def describe_url(database_url: str) -> str:
    """Strip credentials from a database URL for logging"""
    return make_url(database_url).render_as_string(hide_password=True)


def check_connectivity(engine: Engine) -> bool:
    """Run a trivial query; True when the database answers"""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}")
        return False


def ensure_schema(engine: Engine) -> List[str]:
    """
    Create missing tables and add missing nullable columns to existing ones.

    Only additive changes are made. A NOT NULL column missing from an existing
    table is reported and skipped.

    Returns:
        Names of the columns that were added, as "table.column"
    """
    # Register models on Base.metadata
    import clientdb.models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    added = []
    inspector = inspect(engine)
    with engine.begin() as connection:
        for table in Base.metadata.sorted_tables:
            existing = {column["name"] for column in inspector.get_columns(table.name)}
            for column in table.columns:
                if column.name in existing:
                    continue
                if not column.nullable:
                    logger.warning(
                        f"⚠️  Column {table.name}.{column.name} is missing and NOT NULL - skipped"
                    )
                    continue
                column_type = column.type.compile(dialect=engine.dialect)
                connection.execute(
                    text(f'ALTER TABLE {table.name} ADD COLUMN {column.name} {column_type}')
                )
                added.append(f"{table.name}.{column.name}")
                logger.info(f"Added column {table.name}.{column.name} ({column_type})")

    return added


# Dependency to get DB session
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
