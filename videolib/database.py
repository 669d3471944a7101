"""
Database connection and session management

SQLAlchemy 2.0 style. SQLite is the default store; foreign keys are
switched on per connection so ON DELETE rules are enforced.
"""
import os
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from videolib.config import get_settings

settings = get_settings()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless the pragma is set."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connection before use
        echo=echo,
        pool_size=5,
        max_overflow=10
    )


# Create database engine
engine = create_db_engine(settings.database_url, echo=settings.debug)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session

    Usage in FastAPI:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None):
    """Initialize database (create all tables)"""
    # Import all models to register them with Base
    from videolib.models import Video, Tag, VideoTag, ActivityLog  # noqa
    bind = bind or engine

    # SQLite creates the file but not its parent directory
    db_file = bind.url.database
    if bind.url.get_backend_name() == "sqlite" and db_file and db_file != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_file)), exist_ok=True)

    Base.metadata.create_all(bind=bind)
