from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from .utils import atomic_write_text

logger = logging.getLogger(__name__)

FAILED_PREFIX = "failed-isbns"


def file_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with ':' and '.' replaced, e.g. 2024-05-01T12-30-00-123Z."""
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def _free_path(directory: Path, stem: str) -> Path:
    path = directory / f"{stem}.txt"
    n = 1
    while path.exists():
        path = directory / f"{stem}-{n}.txt"
        n += 1
    return path


def flush_failures(
    identifiers: Sequence[str],
    directory: str = ".",
    *,
    prefix: str = FAILED_PREFIX,
    now: Optional[datetime] = None,
) -> Optional[Path]:
    """Write identifiers one per line to a new timestamped file. No-op when empty."""
    if not identifiers:
        return None
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = _free_path(out_dir, f"{prefix}-{file_timestamp(now)}")
    atomic_write_text("\n".join(identifiers), str(path))
    logger.info("%s failed ISBNs saved to %s", len(identifiers), path)
    return path
