from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

import requests

from notion_shelf.config import PropertyNames
from notion_shelf.core.csv_line import parse_line
from notion_shelf.core.icons import DEFAULT_IMPORT_ICON
from notion_shelf.core.models import BookRecord, Icon
from notion_shelf.core.normalize import clean_goodreads_isbn, clean_goodreads_title, clean_identifier
from notion_shelf.core.stats_tracker import RunStats
from notion_shelf.errors import TransportError, ValidationError
from notion_shelf.integrations.notion import book_properties

logger = logging.getLogger(__name__)

CREATED = "created"
NOT_FOUND = "not_found"
CREATE_FAILED = "create_failed"
NO_ISBN = "no_isbn"

IMPORT_OUTCOMES = (CREATED, NOT_FOUND, CREATE_FAILED)


@dataclass
class ImportResult:
    stats: RunStats = field(default_factory=lambda: RunStats(IMPORT_OUTCOMES))
    failures: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class GoodreadsRow:
    title: str
    isbn: Optional[str]
    isbn13: Optional[str]


def read_identifiers(path: str) -> List[str]:
    text = Path(path).read_text(encoding="utf-8")
    return [clean_identifier(line) for line in text.splitlines() if line.strip()]


def read_goodreads_rows(path: str, skipped: Optional[RunStats] = None) -> List[GoodreadsRow]:
    """
    Parse a Goodreads library export into rows that carry at least one ISBN.

    Rows with neither ISBN nor ISBN13 are logged and dropped; they are
    counted under "no_isbn" when `skipped` is given.
    """
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    if not lines:
        raise ValidationError("Goodreads CSV file is empty", path)

    headers = [h.strip() for h in parse_line(lines[0])]
    isbn_idx = headers.index("ISBN") if "ISBN" in headers else -1
    isbn13_idx = headers.index("ISBN13") if "ISBN13" in headers else -1
    title_idx = headers.index("Title") if "Title" in headers else -1
    if isbn_idx == -1 and isbn13_idx == -1:
        raise ValidationError("Could not find ISBN or ISBN13 columns in the Goodreads CSV file", path)

    def _col(values: List[str], idx: int) -> Optional[str]:
        if idx == -1 or idx >= len(values):
            return None
        return values[idx] or None

    out: List[GoodreadsRow] = []
    for line in lines[1:]:
        if not line.strip():
            continue
        values = parse_line(line)
        title = clean_goodreads_title(_col(values, title_idx)) or "Unknown Title"
        row = GoodreadsRow(
            title=title,
            isbn=clean_goodreads_isbn(_col(values, isbn_idx)),
            isbn13=clean_goodreads_isbn(_col(values, isbn13_idx)),
        )
        if not (row.isbn13 or row.isbn):
            logger.info('Skipping book "%s" - no ISBN/ISBN13 found', title)
            if skipped is not None:
                skipped.inc(NO_ISBN)
            continue
        out.append(row)
    return out


class Importer:
    def __init__(self, notion, lookup, *, throttle, names: Optional[PropertyNames] = None) -> None:
        self.notion = notion
        self.lookup = lookup
        self.throttle = throttle
        self.names = names or PropertyNames()
        self.icon = Icon.emoji(DEFAULT_IMPORT_ICON)

    def add_book(self, book: BookRecord, result: ImportResult) -> bool:
        try:
            self.notion.create_page(book_properties(book, self.names), icon=self.icon)
        except (TransportError, requests.RequestException) as e:
            logger.error('Error adding "%s" to Notion: %s', book.title, e)
            result.stats.inc(CREATE_FAILED)
            return False
        logger.info('Added "%s" to Notion database', book.title)
        result.stats.inc(CREATED)
        return True

    def _import_one(self, isbn: str, result: ImportResult) -> Optional[BookRecord]:
        logger.info("Fetching data for ISBN: %s", isbn)
        book = self.lookup.fetch_book_info(isbn, result.failures)
        if book is None:
            logger.info("No data found for ISBN: %s", isbn)
            result.stats.inc(NOT_FOUND)
            return None
        logger.info("Found: %s", book.title)
        self.add_book(book, result)
        return book

    def import_isbn(self, isbn: str, result: Optional[ImportResult] = None) -> ImportResult:
        result = result if result is not None else ImportResult()
        self._import_one(clean_identifier(isbn), result)
        return result

    def import_identifiers(self, identifiers: List[str], result: Optional[ImportResult] = None) -> ImportResult:
        result = result if result is not None else ImportResult()
        logger.info("Processing %s ISBNs...", len(identifiers))
        for isbn in identifiers:
            self._import_one(isbn, result)
            self.throttle.pace()
        return result

    def import_file(self, path: str, result: Optional[ImportResult] = None) -> ImportResult:
        return self.import_identifiers(read_identifiers(path), result)

    def _attempts(self, row: GoodreadsRow) -> Iterator[str]:
        if row.isbn13:
            yield clean_identifier(row.isbn13)
        if row.isbn:
            yield clean_identifier(row.isbn)

    def import_goodreads(self, path: str, result: Optional[ImportResult] = None) -> ImportResult:
        result = result if result is not None else ImportResult()
        result.stats.expect(NO_ISBN)
        logger.info("Processing Goodreads export file...")
        rows = read_goodreads_rows(path, skipped=result.stats)
        logger.info("Found %s books with ISBNs in the Goodreads export.", len(rows))

        for row in rows:
            logger.info("Processing book: %s", row.title)
            book = None
            last = None
            for isbn in self._attempts(row):
                logger.info("Trying ISBN: %s", isbn)
                last = isbn
                # failures are recorded per row, not per attempt
                book = self.lookup.fetch_book_info(isbn)
                if book is not None:
                    break

            if book is not None:
                logger.info("Found: %s", book.title)
                self.add_book(book, result)
            else:
                logger.info("No data found for book: %s", row.title)
                result.stats.inc(NOT_FOUND)
                if last:
                    result.failures.append(last)
            self.throttle.pace()

        logger.info(
            "Processing complete. Successfully imported %s books out of %s.",
            result.stats[CREATED],
            len(rows),
        )
        return result
