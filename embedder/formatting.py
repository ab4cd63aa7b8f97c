"""Pure text formatting helpers used when rendering preview cards."""
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Optional, Union

Number = Union[int, float]


def format_duration(seconds: Optional[Number]) -> str:
    """
    Format a duration in seconds as ``mm:ss`` or ``hh:mm:ss``.

    The hour segment is only emitted when nonzero. Zero or missing input
    renders as ``00:00``.
    """
    if not seconds or seconds < 0:
        return "00:00"
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = int(seconds % 60)
    if h:
        return f"{h:02d}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


def truncate(text: str, limit: int, suffix: str = "") -> str:
    """Cut text to at most ``limit`` characters, ending with ``suffix`` when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - len(suffix)] + suffix


def format_post_date(raw: str) -> str:
    """Render an ISO-8601 or RFC 2822 timestamp as M/D/YYYY; pass anything else through."""
    raw = raw.strip()
    if not raw:
        return ""
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(raw)
        except (TypeError, ValueError, IndexError):
            parsed = None
    if parsed is None:
        return raw
    return f"{parsed.month}/{parsed.day}/{parsed.year}"
