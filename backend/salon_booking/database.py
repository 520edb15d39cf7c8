from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from .config import settings


def configure_sqlite(engine: Engine) -> Engine:
    """
    SQLite connection setup.

    Foreign keys are switched on, and every transaction starts with
    BEGIN IMMEDIATE so the reservation conflict check and the insert
    hold the database write lock together. A second writer waits for
    the first to commit and then sees its row.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _):
        # Let SQLAlchemy emit BEGIN itself instead of pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def _connect_args(url: str) -> dict:
    # SQLite is used from FastAPI worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": 15}
    return {}


engine = configure_sqlite(
    create_engine(
        settings.resolved_database_url,
        connect_args=_connect_args(settings.resolved_database_url),
    )
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create tables for a fresh database."""
    from .models import Base
    Base.metadata.create_all(bind=engine)
