from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from memberdues.core.config import settings


engine = create_engine(settings.DATABASE_URL, future=True, pool_pre_ping=True)
# Services refresh rows after commit themselves; keep loaded attributes usable.
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield one session per request; every service receives it explicitly."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
