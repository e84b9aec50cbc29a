from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from moodplaces.core.config import settings
from moodplaces.db.base import Base

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables (development; production schemas come from Alembic)."""
    import moodplaces.models  # noqa: F401  registers models on Base.metadata

    Base.metadata.create_all(bind=engine)
