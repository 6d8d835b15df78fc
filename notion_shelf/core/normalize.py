from __future__ import annotations

import re
from typing import Optional

_GOODREADS_WRAP = re.compile(r'[="]')


def clean_identifier(x: str) -> str:
    # no checksum validation, only trim + hyphens
    return (x or "").strip().replace("-", "")


def clean_goodreads_isbn(x: Optional[str]) -> Optional[str]:
    """Goodreads exports ISBNs as ="0306406152"; strip the wrapper."""
    if not x:
        return None
    v = _GOODREADS_WRAP.sub("", x).strip()
    return v or None


def clean_goodreads_title(x: Optional[str]) -> str:
    v = (x or "").strip()
    if v.startswith('"'):
        v = v[1:]
    if v.endswith('"'):
        v = v[:-1]
    return v.strip()


def coerce_page_count(val) -> Optional[int]:
    if val is None or isinstance(val, bool):
        return None
    try:
        n = int(val)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None
