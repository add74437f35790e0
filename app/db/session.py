from sqlmodel import SQLModel, create_engine, Session

from app.core.config import settings

_engine = None


def get_engine():
    global _engine

    if _engine is not None:
        return _engine

    db_url = settings.DATABASE_URL

    # SQLite fix for multithreading
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}

    _engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)
    return _engine


engine = get_engine()


def init_db() -> None:
    """Create any missing tables for the registered models."""
    import app.models  # noqa: F401  registers tables on SQLModel.metadata

    SQLModel.metadata.create_all(engine)


def get_db():
    with Session(engine) as session:
        yield session
