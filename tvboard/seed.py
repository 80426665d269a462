import base64
import logging
import os
from sqlalchemy.orm import Session
from tvboard.db import SessionLocal, Base, engine
from tvboard.services import screens

import tvboard.models.layout  # noqa: F401
import tvboard.models.screen  # noqa: F401

logger = logging.getLogger(__name__)

# 1x1 transparent PNG used until real default artwork is dropped in.
PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGNgYAAAAAMAASsJTYQAAAAASUVORK5CYII="
)


def write_default_images(public_dir: str) -> list[str]:
    """Write a placeholder for every missing ``image{id}.png``; existing files are kept."""
    os.makedirs(public_dir, exist_ok=True)
    written: list[str] = []
    for screen_id in screens.SCREEN_IDS:
        filename = screens.default_image_url(screen_id).lstrip("/")
        path = os.path.join(public_dir, filename)
        if os.path.exists(path):
            continue
        with open(path, "wb") as f:
            f.write(PLACEHOLDER_PNG)
        written.append(filename)
    return written


def seed(public_dir: str | None = None) -> None:
    Base.metadata.create_all(bind=engine)
    db: Session = SessionLocal()
    try:
        screens.ensure_seeded(db)
    finally:
        db.close()
    target = public_dir or os.getenv("SIGNAGE_PUBLIC_DIR", "").strip() or "public"
    for filename in write_default_images(target):
        logger.info("Wrote placeholder %s", os.path.join(target, filename))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
