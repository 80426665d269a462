import logging

from sqlalchemy.orm import Session

from tvboard.db import commit_or_fail, utcnow
from tvboard.errors import NotFound, ValidationError
from tvboard.models.layout import Layout, new_layout_id
from tvboard.models.screen import Screen
from tvboard.services import screens
from tvboard.services.urls import require_image_url

logger = logging.getLogger(__name__)

# Layout rows carry exactly one column per screen slot.
SLOT_FIELDS = (("1", "tv1_url"), ("2", "tv2_url"), ("3", "tv3_url"))


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Layout name is required")
    return cleaned


def _get_layout(db: Session, layout_id: str) -> Layout:
    layout = db.get(Layout, layout_id)
    if not layout:
        raise NotFound("Layout not found")
    return layout


def list_layouts(db: Session) -> list[Layout]:
    return db.query(Layout).order_by(Layout.created_at.desc(), Layout.id.asc()).all()


def get_layout(db: Session, layout_id: str) -> Layout:
    return _get_layout(db, layout_id)


def save_layout(
    db: Session,
    name: str,
    tv1_url: str | None,
    tv2_url: str | None,
    tv3_url: str | None,
) -> Layout:
    now = utcnow()
    layout = Layout(
        id=new_layout_id(),
        name=_clean_name(name),
        tv1_url=require_image_url(tv1_url, "tv1_url"),
        tv2_url=require_image_url(tv2_url, "tv2_url"),
        tv3_url=require_image_url(tv3_url, "tv3_url"),
        created_at=now,
        updated_at=now,
    )
    db.add(layout)
    commit_or_fail(db, "save layout")
    db.refresh(layout)
    logger.info("Saved layout %s (%s)", layout.id, layout.name)
    return layout


def restore_layout(db: Session, layout_id: str) -> list[Screen]:
    """Copy a layout's slots onto screens 1-3 in one transaction.

    The layout row itself is only read.
    """
    layout = _get_layout(db, layout_id)
    screens.ensure_seeded(db)
    rows = {
        screen.id: screen
        for screen in db.query(Screen).filter(Screen.id.in_([sid for sid, _ in SLOT_FIELDS])).all()
    }
    missing = [sid for sid, _ in SLOT_FIELDS if sid not in rows]
    if missing:
        db.rollback()
        raise NotFound(f"Unknown screen id: {', '.join(missing)}")

    now = utcnow()
    for screen_id, field in SLOT_FIELDS:
        screen = rows[screen_id]
        screen.image_url = getattr(layout, field)
        screen.updated_at = now
    commit_or_fail(db, f"restore layout {layout_id}")
    logger.info("Restored layout %s (%s)", layout.id, layout.name)
    return screens.list_screens(db)


def rename_layout(db: Session, layout_id: str, name: str) -> Layout:
    cleaned = _clean_name(name)
    layout = _get_layout(db, layout_id)
    layout.name = cleaned
    layout.updated_at = utcnow()
    commit_or_fail(db, f"rename layout {layout_id}")
    db.refresh(layout)
    return layout


def delete_layout(db: Session, layout_id: str) -> None:
    layout = _get_layout(db, layout_id)
    db.delete(layout)
    commit_or_fail(db, f"delete layout {layout_id}")
    logger.info("Deleted layout %s", layout_id)
