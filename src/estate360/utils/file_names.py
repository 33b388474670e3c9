"""Filename and URL helpers for uploaded property media."""

import re
import secrets
from typing import Final

_UNSAFE_CHARS: Final = re.compile(r"[^a-z0-9.]")
_REPEATED_DASHES: Final = re.compile(r"-{2,}")
_UNSAFE_ID_CHARS: Final = ("/", "\\", "\x00")

FALLBACK_NAME: Final = "file"
TOKEN_BYTES: Final = 4


def sanitize_filename(name: str) -> str:
    """Reduce an uploaded filename to ``[a-z0-9.-]``.

    E.g. "My Villa (Front).JPG" -> "my-villa-front-.jpg"
    """
    cleaned = _UNSAFE_CHARS.sub("-", name.lower())
    cleaned = _REPEATED_DASHES.sub("-", cleaned)
    cleaned = cleaned.strip(".")
    return cleaned or FALLBACK_NAME


def short_token() -> str:
    """Random hex token that separates uploads landing in the same millisecond."""
    return secrets.token_hex(TOKEN_BYTES)


def build_stored_filename(original: str, key_prefix: str, timestamp_ms: int, token: str) -> str:
    """Compose ``{key_prefix}-{timestamp}-{token}-{sanitized name}``."""
    return f"{key_prefix}-{timestamp_ms}-{token}-{sanitize_filename(original)}"


def cache_busted_url(url_prefix: str, property_id: str, filename: str, timestamp_ms: int) -> str:
    """Public URL for a stored file with a ``?t=`` suffix that defeats HTTP caches."""
    return f"{url_prefix}/{property_id}/{filename}?t={timestamp_ms}"


def is_safe_property_id(property_id: str) -> bool:
    """Whether an id can be used as a single directory name under the uploads root."""
    if not property_id or property_id in (".", ".."):
        return False
    return not any(ch in property_id for ch in _UNSAFE_ID_CHARS) and ".." not in property_id
