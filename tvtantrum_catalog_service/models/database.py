"""tvtantrum_catalog_service/models/database.py"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tvtantrum_catalog_service.config import (
    get_database_url,
    get_db_max_overflow,
    get_db_pool_size,
    get_db_pool_timeout,
)

# Get database URL
DATABASE_URL = get_database_url()

# Validate database URL is provided
if DATABASE_URL is None:
    raise ValueError("DATABASE_URL is not configured. Set the DATABASE_URL environment variable.")


def engine_options(database_url: str) -> dict:
    """
    Engine keyword arguments for a database URL.

    Server databases get a bounded QueuePool: a caller that cannot get a
    connection within the pool timeout fails instead of queuing forever.
    SQLite (tests, local runs) keeps its default pool, which rejects sizing
    arguments.
    """
    options = {
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "echo": False,  # Set to True for SQL debugging
    }
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=get_db_pool_size(),
            max_overflow=get_db_max_overflow(),
            pool_timeout=get_db_pool_timeout(),
        )
    return options


# Create engine
engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
