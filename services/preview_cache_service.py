"""
Temporary storage for bulk action sessions.
Keeps planned actions in memory with TTL expiration between preview
and confirm. Single-process only.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

from config import settings

_cache: dict[str, tuple[datetime, Any]] = {}


def store_preview(data: Any, ttl_minutes: Optional[int] = None) -> str:
    """Store a session, return preview_id."""
    preview_id = str(uuid.uuid4())
    ttl = ttl_minutes if ttl_minutes is not None else settings.preview_ttl_minutes
    _cache[preview_id] = (datetime.now() + timedelta(minutes=ttl), data)
    _cleanup_expired()
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[Any]:
    """Retrieve a session by preview_id. Returns None if expired/not found."""
    entry = _cache.get(preview_id)
    if entry is None:
        return None
    expires_at, data = entry
    if datetime.now() > expires_at:
        del _cache[preview_id]
        return None
    return data


def refresh_preview(preview_id: str, ttl_minutes: Optional[int] = None) -> None:
    """Push the expiry of a live session forward (after a failed run the operator may retry later)."""
    entry = _cache.get(preview_id)
    if entry is None:
        return
    ttl = ttl_minutes if ttl_minutes is not None else settings.preview_ttl_minutes
    _cache[preview_id] = (datetime.now() + timedelta(minutes=ttl), entry[1])


def delete_preview(preview_id: str) -> None:
    """Remove a session after it completes or is cancelled."""
    _cache.pop(preview_id, None)


def clear_previews() -> None:
    """Drop every session."""
    _cache.clear()


def _cleanup_expired() -> None:
    """Remove all expired entries."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]
