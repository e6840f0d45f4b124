from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from .config import BASE_DIR, settings

ALEMBIC_INI = BASE_DIR / "backend" / "alembic.ini"

_is_sqlite = settings.resolved_database_url.startswith("sqlite")

# check_same_thread=False is required for SQLite behind FastAPI's threadpool
engine = create_engine(
    settings.resolved_database_url,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)


def enable_sqlite_fk(dbapi_connection, _):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


if _is_sqlite:
    event.listen(engine, "connect", enable_sqlite_fk)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def upgrade_schema(connection, revision: str = "head") -> None:
    """Run alembic migrations up to `revision` on an open connection."""
    config = AlembicConfig(str(ALEMBIC_INI))
    config.attributes["configure_logger"] = False
    config.attributes["connection"] = connection
    command.upgrade(config, revision)


def init_db() -> None:
    """Bring the database schema up to date (alembic upgrade head)."""
    if _is_sqlite:
        db_path = settings.resolved_database_url.replace("sqlite:///", "", 1)
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    with engine.begin() as connection:
        upgrade_schema(connection)
