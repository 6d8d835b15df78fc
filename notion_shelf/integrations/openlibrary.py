from __future__ import annotations

import logging
from typing import List, Optional

import requests

from notion_shelf.core.models import BookRecord
from notion_shelf.core.normalize import clean_identifier, coerce_page_count
from notion_shelf.errors import TransportError

from .http_client import DEFAULT_TIMEOUT_S, make_session, request_json

OPENLIBRARY_BOOKS_URL = "https://openlibrary.org/api/books"

logger = logging.getLogger(__name__)


def _author_names(book: dict) -> List[str]:
    names = []
    for a in book.get("authors") or []:
        name = a.get("name") if isinstance(a, dict) else str(a)
        if name:
            names.append(str(name))
    return names


def parse_books_payload(data, isbn: str) -> Optional[BookRecord]:
    """Map an /api/books?jscmd=data payload to a BookRecord, or None."""
    if not isinstance(data, dict):
        return None
    book = data.get(f"ISBN:{isbn}")
    if not isinstance(book, dict):
        return None
    title = book.get("title")
    if not title:
        return None
    return BookRecord(
        title=str(title),
        authors=_author_names(book),
        isbn=isbn,
        page_count=coerce_page_count(book.get("number_of_pages")),
    )


class OpenLibraryLookup:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        base_url: str = OPENLIBRARY_BOOKS_URL,
    ) -> None:
        self.session = session or make_session()
        self.timeout_s = timeout_s
        self.base_url = base_url

    def fetch_book_info(self, identifier: str, failures: Optional[List[str]] = None) -> Optional[BookRecord]:
        """
        Look up one ISBN. Returns None when nothing usable came back, in
        which case the cleaned identifier is appended to `failures`.
        """
        isbn = clean_identifier(identifier)
        params = {"bibkeys": f"ISBN:{isbn}", "format": "json", "jscmd": "data"}
        try:
            data = request_json(
                self.session,
                "GET",
                self.base_url,
                params=params,
                timeout_s=self.timeout_s,
                label="OpenLibrary",
            )
        except TransportError as e:
            logger.error("lookup failed | isbn=%s | err=%s", isbn, e)
            data = None

        record = parse_books_payload(data, isbn)
        if record is None:
            if data is not None:
                logger.debug("lookup returned no usable record | isbn=%s", isbn)
            if failures is not None:
                failures.append(isbn)
        return record
