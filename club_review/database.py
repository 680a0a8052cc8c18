"""Database configuration and session management."""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from club_review.config import get_settings

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    # Render/Heroku hand out postgres:// but SQLAlchemy needs postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def build_engine(url: str):
    """Create an engine configured for the database behind ``url``."""
    url = normalize_database_url(url)
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


SQLALCHEMY_DATABASE_URL = normalize_database_url(get_settings().database_url)

engine = build_engine(SQLALCHEMY_DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def initialize_database() -> None:
    """Ensure every ORM model has its table."""
    # Import models to register them with Base
    from club_review.models import audit, domain  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized at %s", engine.url.render_as_string(hide_password=True))


def get_db():
    """Dependency for FastAPI endpoints to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
