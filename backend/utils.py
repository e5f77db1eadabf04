from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlsplit, quote

FAVICON_SERVICE = "https://www.google.com/s2/favicons?domain={domain}&sz=64"
WEB_SCHEMES = ("http", "https")


def clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _hostname(url: str) -> str:
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def is_web_url(url: str) -> bool:
    try:
        return urlsplit(url).scheme.lower() in WEB_SCHEMES
    except ValueError:
        return False


def domain_name(url: str) -> str:
    """Hostname for display, without a leading 'www.'; the raw url if there is none."""
    host = _hostname(url)
    if not host:
        return url
    return host[4:] if host.startswith("www.") else host


def favicon_url(url: str) -> Optional[str]:
    host = _hostname(url)
    if not host:
        return None
    return FAVICON_SERVICE.format(domain=quote(host))


def short_date(dt: datetime) -> str:
    # e.g. "Mar 5", always the UTC day so it matches what the page script shows
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return f"{dt.strftime('%b')} {dt.day}"


def pluralize_bookmarks(n: int) -> str:
    return "bookmark" if n == 1 else "bookmarks"
