from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine
from settings import DATABASE_URL, logger


def build_engine(url: str) -> Engine:
    """Create the SQLAlchemy engine for the given database URL."""
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are request scoped but FastAPI may hop threads between dependencies
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


# Built once at process start, shared read-only afterwards
engine = build_engine(DATABASE_URL)


def get_session() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request."""
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    All-or-nothing unit of work.

    Commits when the block exits normally. Any exception (including one raised
    by the commit itself) rolls back everything done in the block and is
    re-raised to the caller.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def init_db() -> None:
    """Create all database tables."""
    # Register table metadata before create_all
    import models  # noqa: F401

    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created successfully")


def reset_db() -> None:
    """Drop and recreate all database tables."""
    import models  # noqa: F401

    logger.warning("Dropping all database tables...")
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    logger.info("Database reset successfully")
