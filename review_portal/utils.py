"""Utility functions for sanitization, formatting and UTC timestamps."""

import re
from datetime import datetime, timezone

import bleach

_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def sanitize_text(text: str | None) -> str:
    """Strip all HTML from user supplied display text."""
    if not text:
        return ""
    return bleach.clean(text, tags=[], strip=True).strip()


def slugify(name: str) -> str:
    """Lower-case, whitespace to underscore, drop everything except word chars and hyphens."""
    slug = re.sub(r"\s+", "_", name.strip().lower())
    return re.sub(r"[^\w-]+", "", slug)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive values (as SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: datetime) -> str:
    """Format as '5 Mar 2025'."""
    return f"{value.day} {_MONTHS[value.month - 1]} {value.year}"
