from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

import requests

from notion_shelf.errors import PaginationError, TransportError

from .models import Decision, PageCursor, PagePatch, RemotePage
from .stats_tracker import RunStats

logger = logging.getLogger(__name__)

FetchPage = Callable[[Optional[str]], Tuple[List[RemotePage], PageCursor]]
Decide = Callable[[RemotePage], Decision]
ApplyPatch = Callable[[str, PagePatch], None]


def _next_cursor(cursor: PageCursor) -> Optional[str]:
    if not cursor.has_more:
        return None
    if not cursor.next_cursor:
        raise PaginationError("has_more is true but no next_cursor was returned")
    return cursor.next_cursor


def reconcile(
    fetch_page: FetchPage,
    decide: Decide,
    apply_patch: ApplyPatch,
    *,
    throttle,
    stats: Optional[RunStats] = None,
    failure_outcome: str = "failed",
    dry_run: bool = False,
) -> RunStats:
    """
    Walk every page of a remote collection and patch records that need it.

    Records are handled in order. `decide` may itself hit the network (a
    lookup); in that case, or after a patch, `throttle.pace()` runs once
    before the next record. Errors from `decide`/`apply_patch` are counted
    under `failure_outcome` and the walk continues; errors from `fetch_page`
    propagate.
    """
    stats = stats if stats is not None else RunStats()
    stats.expect(failure_outcome)

    cursor: Optional[str] = None
    while True:
        records, page_cursor = fetch_page(cursor)
        stats.inc_pages()
        logger.info("Processing batch of %s books...", len(records))

        for record in records:
            stats.inc_records()
            touched_network = False
            try:
                decision = decide(record)
                touched_network = decision.used_network
                if decision.is_update and decision.patch is not None:
                    if dry_run:
                        logger.info("[dry-run] %s", decision.note or f'would update "{record.title}"')
                    else:
                        touched_network = True
                        apply_patch(record.page_id, decision.patch)
                        if decision.note:
                            logger.info("%s", decision.note)
                stats.inc(decision.outcome)
            except (TransportError, requests.RequestException) as e:
                touched_network = True
                logger.error('Error processing "%s": %s', record.title, e)
                stats.inc(failure_outcome)

            if touched_network:
                throttle.pace()

        cursor = _next_cursor(page_cursor)
        if cursor is None:
            logger.info("Batch complete. No more pages.")
            break
        logger.info("Batch complete. Moving to next page...")

    return stats
