"""
Database configuration and session management for Dancefloor.
"""

import logging
import os
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///database/dancefloor.db"

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)
Base = declarative_base()

engine = None


def normalize_database_url(database_url):
    """Heroku still hands out postgres:// URLs, SQLAlchemy wants postgresql://"""
    if database_url and database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    return database_url or DEFAULT_DATABASE_URL


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url=None):
    """Build an engine for the given URL with settings suited to its backend"""
    database_url = normalize_database_url(database_url)

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        new_engine = create_engine(database_url, echo=False, **kwargs)
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine

    return create_engine(
        database_url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300
    )


def configure_engine(database_url=None):
    """(Re)bind the session factory to a new engine"""
    global engine
    if engine is not None:
        engine.dispose()
    engine = create_db_engine(database_url)
    SessionLocal.configure(bind=engine)
    return engine


def init_db():
    """Initialize database tables"""
    logger.info("Creating database tables...")
    database = engine.url.database
    if engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def drop_db():
    Base.metadata.drop_all(bind=engine)


@contextmanager
def get_db():
    """Context manager for database sessions with automatic commit/rollback"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


configure_engine(os.getenv("DATABASE_URL"))
