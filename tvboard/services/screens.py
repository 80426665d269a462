import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tvboard.db import commit_or_fail, utcnow
from tvboard.errors import NotFound, StorageFailure
from tvboard.models.screen import Screen
from tvboard.services.urls import require_image_url

logger = logging.getLogger(__name__)

SCREEN_IDS = ("1", "2", "3")
EPOCH = datetime(1970, 1, 1)


def default_image_url(screen_id: str) -> str:
    return f"/image{screen_id}.png"


def _ordered(db: Session):
    return db.query(Screen).order_by(Screen.position.asc(), Screen.id.asc())


def _get_screen(db: Session, screen_id: str) -> Screen:
    screen = db.get(Screen, screen_id)
    if not screen:
        raise NotFound(f"Screen {screen_id} not found")
    return screen


def ensure_seeded(db: Session) -> None:
    """Insert the fixed screen set if the table is empty.

    The existence check and the inserts share one transaction. A concurrent
    seed that commits first makes ours fail on the primary key, which is
    rolled back and ignored.
    """
    if db.query(Screen.id).first() is not None:
        return
    now = utcnow()
    for index, screen_id in enumerate(SCREEN_IDS):
        db.add(
            Screen(
                id=screen_id,
                position=index + 1,
                image_url=default_image_url(screen_id),
                updated_at=now,
                created_at=now,
            )
        )
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Screens already seeded by a concurrent request")
        return
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to seed screens")
        raise StorageFailure("Failed to seed screens") from exc
    logger.info("Seeded %d default screens", len(SCREEN_IDS))


def list_screens(db: Session) -> list[Screen]:
    ensure_seeded(db)
    return _ordered(db).all()


def reorder_screens(db: Session, updates: Iterable[tuple[str, int]]) -> list[Screen]:
    """Apply every (id, position) pair together or not at all."""
    pairs = list(updates)
    ensure_seeded(db)
    wanted = {screen_id for screen_id, _ in pairs}
    found = {screen.id: screen for screen in db.query(Screen).filter(Screen.id.in_(list(wanted))).all()}
    missing = sorted(wanted - set(found))
    if missing:
        db.rollback()
        raise NotFound(f"Unknown screen id: {', '.join(missing)}")

    now = utcnow()
    for screen_id, position in pairs:
        screen = found[screen_id]
        screen.position = position
        screen.updated_at = now
    commit_or_fail(db, "reorder screens")
    logger.info("Reordered screens: %s", ", ".join(f"{sid}->{pos}" for sid, pos in pairs))
    return _ordered(db).all()


def set_screen_image(db: Session, screen_id: str, image_url: str | None) -> Screen:
    value = require_image_url(image_url)
    ensure_seeded(db)
    screen = _get_screen(db, screen_id)
    screen.image_url = value
    screen.updated_at = utcnow()
    commit_or_fail(db, f"update image of screen {screen_id}")
    db.refresh(screen)
    logger.info("Screen %s image set to %s", screen_id, value)
    return screen


def reset_screen_image(db: Session, screen_id: str) -> Screen:
    ensure_seeded(db)
    screen = _get_screen(db, screen_id)
    screen.image_url = default_image_url(screen_id)
    screen.updated_at = utcnow()
    commit_or_fail(db, f"reset image of screen {screen_id}")
    db.refresh(screen)
    logger.info("Screen %s image reset to default", screen_id)
    return screen


def reset_all_screens(db: Session) -> list[Screen]:
    ensure_seeded(db)
    now = utcnow()
    for screen in db.query(Screen).all():
        screen.image_url = default_image_url(screen.id)
        screen.updated_at = now
    commit_or_fail(db, "reset all screen images")
    logger.info("All screen images reset to defaults")
    return _ordered(db).all()


def changes_since(db: Session, since: datetime | None = None) -> list[Screen]:
    cutoff = since or EPOCH
    if cutoff.tzinfo is not None:
        cutoff = cutoff.astimezone(timezone.utc).replace(tzinfo=None)
    return _ordered(db).filter(Screen.updated_at > cutoff).all()
