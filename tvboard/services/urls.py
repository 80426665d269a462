import re
from typing import NamedTuple
from urllib.parse import urlsplit

from tvboard.errors import ValidationError

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
_NETWORK_SCHEMES = {"http", "https", "ftp", "ws", "wss"}
INVALID_IMAGE_URL = "Image URL must be a valid URL or a relative path starting with '/'"


class UrlCheck(NamedTuple):
    ok: bool
    value: str | None
    reason: str | None = None


def check_image_url(raw: str | None) -> UrlCheck:
    """Classify an image reference used by screens and layouts.

    Accepts None (no image), a path rooted at "/" or an absolute URL.
    Blank strings are treated as None.
    """
    if raw is None:
        return UrlCheck(True, None)
    value = raw.strip()
    if not value:
        return UrlCheck(True, None)
    if value.startswith("/"):
        return UrlCheck(True, value)
    if any(ch.isspace() for ch in value):
        return UrlCheck(False, None, INVALID_IMAGE_URL)
    try:
        parts = urlsplit(value)
    except ValueError:
        return UrlCheck(False, None, INVALID_IMAGE_URL)
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return UrlCheck(False, None, INVALID_IMAGE_URL)
    if parts.scheme.lower() in _NETWORK_SCHEMES and not parts.netloc:
        return UrlCheck(False, None, INVALID_IMAGE_URL)
    if not (parts.netloc or parts.path):
        return UrlCheck(False, None, INVALID_IMAGE_URL)
    return UrlCheck(True, value)


def require_image_url(raw: str | None, field_name: str = "image_url") -> str | None:
    result = check_image_url(raw)
    if not result.ok:
        raise ValidationError(f"{field_name}: {result.reason}")
    return result.value
