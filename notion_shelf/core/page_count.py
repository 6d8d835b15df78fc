from __future__ import annotations

import logging
from typing import List, Optional

from .models import Decision, PagePatch, RemotePage

logger = logging.getLogger(__name__)

UPDATED = "updated"
FORCE_UPDATED = "force_updated"
SKIPPED = "skipped"
MISSING_ISBN = "missing_isbn"
FETCH_FAILED = "fetch_failed"

PAGE_COUNT_OUTCOMES = (UPDATED, FORCE_UPDATED, SKIPPED, MISSING_ISBN, FETCH_FAILED)


class PageCountPolicy:
    """
    Decide whether a page needs its page-count property (re)filled.

    `lookup` is anything with fetch_book_info(identifier, failures); ISBNs
    whose lookup fails are appended to `failures`.
    """

    def __init__(
        self,
        lookup,
        *,
        property_name: str = "Total Pages",
        force: bool = False,
        failures: Optional[List[str]] = None,
    ) -> None:
        self.lookup = lookup
        self.property_name = property_name
        self.force = force
        self.failures = failures

    def __call__(self, page: RemotePage) -> Decision:
        if not page.isbn:
            logger.info('Skipping "%s" - no ISBN found', page.title)
            return Decision.skip(MISSING_ISBN)

        if page.has_total_pages:
            if not self.force:
                logger.info('Skipping "%s" - already has %s pages', page.title, page.total_pages)
                return Decision.skip(SKIPPED)
            logger.info('Force updating "%s" - currently has %s pages', page.title, page.total_pages)

        logger.info('Fetching data for "%s" with ISBN: %s...', page.title, page.isbn)
        book = self.lookup.fetch_book_info(page.isbn, self.failures)
        if book is None:
            logger.info('No OpenLibrary data found for "%s" (ISBN: %s)', page.title, page.isbn)
            return Decision.skip(FETCH_FAILED, used_network=True)
        if not book.page_count:
            logger.info('No page count information available for "%s" (ISBN: %s)', page.title, page.isbn)
            return Decision.skip(FETCH_FAILED, used_network=True)

        patch = PagePatch(properties={self.property_name: {"number": book.page_count}})
        if page.has_total_pages:
            return Decision.update(
                FORCE_UPDATED,
                patch,
                used_network=True,
                note=f'Force updated "{page.title}" from {page.total_pages} to {book.page_count} total pages',
            )
        return Decision.update(
            UPDATED,
            patch,
            used_network=True,
            note=f'Updated "{page.title}" with {book.page_count} total pages',
        )
