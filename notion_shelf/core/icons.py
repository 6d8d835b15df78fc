from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from .models import Decision, Icon, PagePatch, RemotePage

logger = logging.getLogger(__name__)

STATUS_ICONS: Dict[str, str] = {
    "Currently Reading": "📖",
    "To Read": "📘",
    "Completed": "📗",
    "DNF": "📕",
}
# also used for statuses missing from the table
FALLBACK_ICON = "📚"
# newly imported pages have no status yet
DEFAULT_IMPORT_ICON = STATUS_ICONS["To Read"]

UPDATED = "updated"
SKIPPED = "skipped"
MISSING_STATUS = "missing_status"
FAILED = "failed"

ICON_OUTCOMES = (UPDATED, SKIPPED, MISSING_STATUS, FAILED)


def expected_icon(status: str, table: Optional[Mapping[str, str]] = None) -> str:
    table = STATUS_ICONS if table is None else table
    return table.get(status, FALLBACK_ICON)


class IconPolicy:
    def __init__(self, table: Optional[Mapping[str, str]] = None) -> None:
        self.table = dict(STATUS_ICONS if table is None else table)

    def __call__(self, page: RemotePage) -> Decision:
        if not page.status:
            logger.info('Skipping "%s" - no status found', page.title)
            return Decision.skip(MISSING_STATUS)

        want = expected_icon(page.status, self.table)
        if page.current_emoji == want:
            logger.info('Skipping "%s" - emoji already matches status (%s)', page.title, want)
            return Decision.skip(SKIPPED)

        return Decision.update(
            UPDATED,
            PagePatch(icon=Icon.emoji(want)),
            note=f'Updated icon for "{page.title}" to {want} ({page.status})',
        )
