import base64
import binascii
import logging
import os
import re
import stat
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote, unquote

from fastapi import UploadFile

from tvboard.errors import NotFound, StorageFailure, ValidationError

logger = logging.getLogger(__name__)

SIGNAGE_ENV = os.getenv("SIGNAGE_ENV", "development").strip().lower()
IMAGE_DIR = os.getenv("SIGNAGE_IMAGE_DIR", "").strip() or (
    "/data/images" if SIGNAGE_ENV == "production" else "./data/images"
)
MAX_IMAGE_BYTES = int(os.getenv("SIGNAGE_MAX_IMAGE_BYTES", str(15 * 1024 * 1024)))
IMAGE_URL_PREFIX = "/api/images/"
MAX_PAGE_LIMIT = 100

IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
}
ALLOWED_UPLOAD_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/bmp": ".bmp",
}
_DATA_URL_PREFIX = re.compile(r"^data:[\w.+/-]*;base64,", re.IGNORECASE)


@dataclass
class StoredImage:
    name: str
    size: int
    last_modified: datetime
    url: str


@dataclass
class UploadedImage(StoredImage):
    original_name: str


@dataclass
class ImageBlob:
    name: str
    content: bytes
    media_type: str
    size: int
    last_modified: datetime


@dataclass
class ImageFile:
    name: str
    path: str
    media_type: str
    stat_result: os.stat_result


def ensure_storage() -> None:
    os.makedirs(IMAGE_DIR, exist_ok=True)


def image_url(name: str) -> str:
    return f"{IMAGE_URL_PREFIX}{quote(name, safe='')}"


def is_image_file(filename: str) -> bool:
    _, ext = os.path.splitext(filename.lower())
    return ext in IMAGE_MIME_TYPES


def _describe(name: str, path: str) -> StoredImage:
    stats = os.stat(path)
    return StoredImage(
        name=name,
        size=stats.st_size,
        last_modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
        url=image_url(name),
    )


def _resolve_image_path(name: str) -> str:
    """Map a stored image name to its path, refusing anything outside IMAGE_DIR."""
    candidate = (name or "").strip()
    decoded = unquote(candidate)
    for value in (candidate, decoded):
        if not value or ".." in value or "/" in value or "\\" in value or "\x00" in value:
            raise ValidationError("Invalid filename")
    if not is_image_file(candidate):
        raise ValidationError("File is not a valid image")
    root = os.path.realpath(IMAGE_DIR)
    path = os.path.realpath(os.path.join(root, candidate))
    if os.path.dirname(path) != root:
        raise ValidationError("Invalid file path")
    return path


def list_images() -> list[StoredImage]:
    if not os.path.isdir(IMAGE_DIR):
        ensure_storage()
        return []
    images: list[StoredImage] = []
    try:
        for entry in os.scandir(IMAGE_DIR):
            if not (entry.is_file() and is_image_file(entry.name)):
                continue
            try:
                images.append(_describe(entry.name, entry.path))
            except FileNotFoundError:
                # Deleted between the directory scan and the stat.
                continue
    except OSError as exc:
        logger.exception("Error reading images directory %s", IMAGE_DIR)
        raise StorageFailure("Failed to read images directory") from exc
    images.sort(key=lambda item: (item.last_modified, item.name), reverse=True)
    return images


def list_images_page(page: int = 1, limit: int = 20) -> dict:
    safe_page = max(1, page)
    safe_limit = max(1, min(limit, MAX_PAGE_LIMIT))
    images = list_images()
    total = len(images)
    start = (safe_page - 1) * safe_limit
    return {
        "images": images[start:start + safe_limit],
        "total": total,
        "page": safe_page,
        "limit": safe_limit,
        "total_pages": (total + safe_limit - 1) // safe_limit,
    }


def get_image(name: str) -> StoredImage:
    path = _resolve_image_path(name)
    if not os.path.isfile(path):
        raise NotFound("Image not found")
    return _describe(name, path)


def _stored_extension(original_name: str, mime_type: str) -> str:
    _, ext = os.path.splitext(os.path.basename((original_name or "").replace("\\", "/")))
    ext = ext.lower()
    if ext in IMAGE_MIME_TYPES:
        return ext
    return ALLOWED_UPLOAD_MIME_TYPES[mime_type]


def _write_new_image(content: bytes, original_name: str, mime_type: str) -> UploadedImage:
    if not content:
        raise ValidationError("Empty file cannot be uploaded")
    if len(content) > MAX_IMAGE_BYTES:
        raise ValidationError(f"Image exceeds the {MAX_IMAGE_BYTES // (1024 * 1024)} MB limit")
    ensure_storage()
    stored_name = f"{uuid.uuid4()}{_stored_extension(original_name, mime_type)}"
    path = os.path.join(IMAGE_DIR, stored_name)
    try:
        # "x" never clobbers an existing file.
        with open(path, "xb") as f:
            f.write(content)
        described = _describe(stored_name, path)
    except OSError as exc:
        logger.exception("Error writing image %s", path)
        raise StorageFailure("Failed to upload image") from exc
    logger.info("Stored upload %r as %s (%d bytes)", original_name, stored_name, described.size)
    return UploadedImage(
        name=described.name,
        size=described.size,
        last_modified=described.last_modified,
        url=described.url,
        original_name=original_name,
    )


def _normalized_mime_type(raw: str | None) -> str:
    mime_type = (raw or "").strip().lower()
    if mime_type not in ALLOWED_UPLOAD_MIME_TYPES:
        raise ValidationError("Invalid image type")
    return mime_type


def save_upload(original_name: str, data: str, mime_type: str) -> UploadedImage:
    """Decode a base64 payload and store it under a freshly generated name."""
    normalized = _normalized_mime_type(mime_type)
    payload = _DATA_URL_PREFIX.sub("", (data or "").strip(), count=1)
    payload = "".join(payload.split())
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image data is not valid base64") from exc
    return _write_new_image(content, original_name, normalized)


def save_upload_file(file: UploadFile) -> UploadedImage:
    normalized = _normalized_mime_type(file.content_type)
    content = file.file.read()
    return _write_new_image(content, file.filename or "upload", normalized)


def delete_image(name: str) -> None:
    path = _resolve_image_path(name)
    if not os.path.isfile(path):
        raise NotFound("Image not found")
    try:
        os.remove(path)
    except FileNotFoundError as exc:
        raise NotFound("Image not found") from exc
    except OSError as exc:
        logger.exception("Error deleting image %s", path)
        raise StorageFailure("Failed to delete image") from exc
    logger.info("Deleted image %s", name)


def locate_image(name: str) -> ImageFile:
    """Validate ``name`` and stat the stored file, without reading it."""
    path = _resolve_image_path(name)
    try:
        stat_result = os.stat(path)
    except FileNotFoundError as exc:
        raise NotFound("Image not found") from exc
    except OSError as exc:
        logger.exception("Error reading image %s", path)
        raise StorageFailure("Failed to read image") from exc
    if not stat.S_ISREG(stat_result.st_mode):
        raise NotFound("Image not found")
    _, ext = os.path.splitext(path.lower())
    return ImageFile(
        name=os.path.basename(path),
        path=path,
        media_type=IMAGE_MIME_TYPES.get(ext, "application/octet-stream"),
        stat_result=stat_result,
    )


def read_image(name: str) -> ImageBlob:
    found = locate_image(name)
    try:
        with open(found.path, "rb") as f:
            content = f.read()
    except FileNotFoundError as exc:
        raise NotFound("Image not found") from exc
    except OSError as exc:
        logger.exception("Error serving image %s", found.path)
        raise StorageFailure("Failed to read image") from exc
    return ImageBlob(
        name=found.name,
        content=content,
        media_type=found.media_type,
        size=len(content),
        last_modified=datetime.fromtimestamp(found.stat_result.st_mtime, tz=timezone.utc),
    )
