from __future__ import annotations

import logging
from typing import Dict, List, Optional

from notion_shelf.core.stats_tracker import RunStats

logger = logging.getLogger(__name__)

LABELS: Dict[str, str] = {
    "created": "Total books added",
    "updated": "Total books updated",
    "force_updated": "Total books force updated",
    "skipped": "Total books skipped",
    "missing_isbn": "Total books missing ISBN",
    "missing_status": "Total books missing status",
    "no_isbn": "Total rows without ISBN/ISBN13",
    "not_found": "Total ISBNs not found",
    "fetch_failed": "Total books failed to fetch/update",
    "create_failed": "Total books failed to create",
    "failed": "Total books failed to update",
}


def _label(name: str) -> str:
    return LABELS.get(name) or name.replace("_", " ").capitalize()


def summary_lines(stats: RunStats, title: str = "Summary", failed_file: Optional[str] = None) -> List[str]:
    lines = ["", f"--- {title} ---"]
    for name, count in stats.snapshot_dict().items():
        lines.append(f"{_label(name)}: {count}")
    if stats.pages:
        lines.append(f"Pages fetched: {stats.pages}")
    lines.append(f"Elapsed: {stats.elapsed_s():.1f}s")
    if failed_file:
        lines.append(f"Failed ISBNs: {failed_file}")
    return lines


def log_summary(stats: RunStats, title: str = "Summary", failed_file: Optional[str] = None) -> None:
    for line in summary_lines(stats, title, failed_file):
        logger.info("%s", line)
