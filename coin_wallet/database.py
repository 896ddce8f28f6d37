from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from coin_wallet.config import settings

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def _engine_kwargs(db_url: str) -> dict:
    if not db_url.startswith("sqlite"):
        return {}
    # Every session needs its own connection: closing a session rolls back
    # its connection, which must never discard another request's writes.
    # An in-memory database cannot be shared between connections that way.
    if db_url in IN_MEMORY_SQLITE_URLS:
        raise ValueError("in-memory SQLite is not supported, use a file URL such as sqlite:///./coin_wallet.db")
    return {"connect_args": {"check_same_thread": False}}


engine = create_engine(settings.db_url, **_engine_kwargs(settings.db_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
