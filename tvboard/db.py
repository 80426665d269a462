import os
import logging
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from tvboard.errors import StorageFailure

logger = logging.getLogger(__name__)

SIGNAGE_ENV = os.getenv("SIGNAGE_ENV", "development").strip().lower()
_DEFAULT_DATABASE_URL = "sqlite:////data/db.sqlite" if SIGNAGE_ENV == "production" else "sqlite:///./signage.db"
DATABASE_URL = os.getenv("SIGNAGE_DATABASE_URL", "").strip() or _DEFAULT_DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    kwargs: dict = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in {"sqlite://", "sqlite:///:memory:"}:
            # One shared connection, otherwise every checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def utcnow() -> datetime:
    # Naive UTC wall clock, matching what SQLite stores.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_fail(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise StorageFailure(f"Failed to {action}") from exc
