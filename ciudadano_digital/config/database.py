"""
Database configuration and session management.

This module owns the SQLAlchemy engine and session factory used by the feature
routers. The engine is created by `init_db()` during application startup from
the `Settings` handed to the application factory; until then (or if startup
initialisation failed) `get_db()` refuses to hand out sessions.

Key Features:
- SSL mode handling for localhost connections (see `database_url.py`)
- Connection pooling for server databases, StaticPool for in-memory SQLite
- `init_db()` verifies connectivity and creates registered tables
- `get_db()` session dependency for FastAPI route handlers

**Documentation References:**
- URL Configuration: See `ciudadano_digital/config/database_url.py`
- Startup: `ciudadano_digital/core/application.py` awaits `init_db()` in the lifespan
"""
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ciudadano_digital.config.database_url import (
    is_memory_sqlite_url,
    is_sqlite_url,
    parse_database_url,
)
from ciudadano_digital.config.settings import Settings
from ciudadano_digital.utils.errors import DatabaseUnavailableError
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)

# Base class for feature models
Base = declarative_base()

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def create_database_engine(
    database_url: str,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> Engine:
    """
    Create SQLAlchemy database engine.

    Pool sizing only applies to server databases; SQLite uses its own pool
    classes and an in-memory database is shared through a StaticPool.
    """
    url = parse_database_url(database_url)

    if is_sqlite_url(url):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if is_memory_sqlite_url(url):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        echo=echo,
    )


def configure_database(settings: Settings) -> Engine:
    """Create the module engine and session factory from settings."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = create_database_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_engine() -> Optional[Engine]:
    return _engine


def dispose_database() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_db() -> Generator[Session, None, None]:
    """
    Get database session for dependency injection.

    The session is closed after the request.

    Raises:
        DatabaseUnavailableError: If the datastore was never initialised

    Example:
        @router.get("/items")
        async def get_items(db: Session = Depends(get_db)):
            ...
    """
    if _SessionLocal is None:
        raise DatabaseUnavailableError()

    db = _SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def init_db(settings: Settings) -> None:
    """
    Initialize the datastore.

    1. Creates the engine and session factory
    2. Checks that the database answers
    3. Creates tables registered on `Base.metadata`

    Should be called during application startup.

    Raises:
        Exception: If the database cannot be reached or initialised
    """
    try:
        engine = configure_database(settings)
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized successfully", dialect=engine.dialect.name)
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise
