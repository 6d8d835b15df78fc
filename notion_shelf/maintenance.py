from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from notion_shelf.core import icons, page_count
from notion_shelf.core.icons import IconPolicy
from notion_shelf.core.page_count import PageCountPolicy
from notion_shelf.core.reconcile import reconcile
from notion_shelf.core.stats_tracker import RunStats
from notion_shelf.io.failure_log import flush_failures

logger = logging.getLogger(__name__)


@dataclass
class MaintenanceResult:
    stats: RunStats
    failures: List[str] = field(default_factory=list)
    failed_file: Optional[Path] = None

    @classmethod
    def for_icons(cls) -> "MaintenanceResult":
        return cls(stats=RunStats(icons.ICON_OUTCOMES))

    @classmethod
    def for_page_counts(cls) -> "MaintenanceResult":
        return cls(stats=RunStats(page_count.PAGE_COUNT_OUTCOMES))


def update_icons(
    notion,
    *,
    throttle,
    table=None,
    dry_run: bool = False,
    result: Optional[MaintenanceResult] = None,
) -> MaintenanceResult:
    """Set every page's emoji icon from its status."""
    result = result if result is not None else MaintenanceResult.for_icons()
    reconcile(
        notion.query_database,
        IconPolicy(table),
        notion.apply_patch,
        throttle=throttle,
        stats=result.stats,
        failure_outcome=icons.FAILED,
        dry_run=dry_run,
    )
    logger.info(
        "Icon update complete! Updated %s books, skipped %s books (already had correct icon).",
        result.stats[icons.UPDATED],
        result.stats[icons.SKIPPED],
    )
    return result


def backfill_total_pages(
    notion,
    lookup,
    *,
    throttle,
    force: bool = False,
    dry_run: bool = False,
    failed_dir: str = ".",
    result: Optional[MaintenanceResult] = None,
) -> MaintenanceResult:
    """
    Fill the page-count property from Open Library.

    ISBNs that could not be looked up are written to a failure log even when
    the run aborts on a query error.
    """
    result = result if result is not None else MaintenanceResult.for_page_counts()
    logger.info("Starting to update book total pages...")
    if force:
        logger.info("FORCE MODE ENABLED: Will update Total Pages even if already populated")

    policy = PageCountPolicy(
        lookup,
        property_name=notion.names.total_pages,
        force=force,
        failures=result.failures,
    )
    try:
        reconcile(
            notion.query_database,
            policy,
            notion.apply_patch,
            throttle=throttle,
            stats=result.stats,
            failure_outcome=page_count.FETCH_FAILED,
            dry_run=dry_run,
        )
    finally:
        result.failed_file = flush_failures(result.failures, failed_dir)
    return result
