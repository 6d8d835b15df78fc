from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from notion_shelf.config import PropertyNames
from notion_shelf.core.models import BookRecord, Icon, PageCursor, PagePatch, RemotePage
from notion_shelf.core.normalize import coerce_page_count

from .http_client import DEFAULT_TIMEOUT_S, NoopThrottle, make_session, request_json

NOTION_BASE_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"

logger = logging.getLogger(__name__)


def make_notion_session(api_key: str, version: str = NOTION_VERSION) -> requests.Session:
    return make_session({
        "Authorization": f"Bearer {api_key}",
        "Notion-Version": version,
        "Content-Type": "application/json",
    })


# -----------------------------
# Property readers
# -----------------------------
def _first_plain_text(items) -> Optional[str]:
    if not isinstance(items, list) or not items:
        return None
    first = items[0]
    if not isinstance(first, dict):
        return None
    text = first.get("plain_text")
    if text is None:
        text = (first.get("text") or {}).get("content")
    return str(text) if text else None


def _read_title(prop: Optional[dict]) -> Optional[str]:
    if not isinstance(prop, dict):
        return None
    return _first_plain_text(prop.get("title"))


def _read_text(prop: Optional[dict]) -> Optional[str]:
    if not isinstance(prop, dict):
        return None
    if prop.get("type") == "number" or "number" in prop:
        n = prop.get("number")
        return str(n) if n is not None else None
    return _first_plain_text(prop.get("rich_text"))


def _read_status(prop: Optional[dict]) -> Optional[str]:
    if not isinstance(prop, dict):
        return None
    for key in ("status", "select"):
        val = prop.get(key)
        if isinstance(val, dict) and val.get("name"):
            return str(val["name"])
    return None


def _read_icon(raw: Optional[dict]) -> Optional[Icon]:
    if not isinstance(raw, dict) or not raw.get("type"):
        return None
    kind = str(raw["type"])
    val = raw.get(kind)
    if isinstance(val, dict):
        val = val.get("url") or ""
    return Icon(kind=kind, value=str(val or ""))


def parse_page(page: Dict[str, Any], names: PropertyNames) -> RemotePage:
    props = page.get("properties") or {}
    total = props.get(names.total_pages)
    return RemotePage(
        page_id=str(page.get("id") or ""),
        title=_read_title(props.get(names.title)) or "Unknown Title",
        status=_read_status(props.get(names.status)),
        isbn=_read_text(props.get(names.isbn)),
        total_pages=coerce_page_count(total.get("number")) if isinstance(total, dict) else None,
        icon=_read_icon(page.get("icon")),
    )


def book_properties(book: BookRecord, names: PropertyNames) -> Dict[str, Any]:
    return {
        names.title: {"title": [{"text": {"content": book.title}}]},
        names.authors: {"multi_select": [{"name": a} for a in book.authors]},
        names.isbn: {"rich_text": [{"text": {"content": book.isbn}}]},
        names.total_pages: {"number": book.page_count},
    }


class NotionClient:
    """
    The three database operations the scripts need: paginated query,
    page create and page update.
    """

    def __init__(
        self,
        session: requests.Session,
        database_id: str,
        *,
        names: Optional[PropertyNames] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        rate_limiter=None,
        base_url: str = NOTION_BASE_URL,
    ) -> None:
        self.session = session
        self.database_id = database_id
        self.names = names or PropertyNames()
        self.timeout_s = timeout_s
        self.rate_limiter = rate_limiter or NoopThrottle()
        self.base_url = base_url.rstrip("/")

    def _call(self, method: str, path: str, body: Optional[dict] = None) -> Any:
        self.rate_limiter.pace()
        return request_json(
            self.session,
            method,
            f"{self.base_url}{path}",
            json_body=body,
            timeout_s=self.timeout_s,
            label="Notion",
        )

    def query_database(self, cursor: Optional[str] = None) -> Tuple[List[RemotePage], PageCursor]:
        body: Dict[str, Any] = {}
        if cursor:
            body["start_cursor"] = cursor
        data = self._call("POST", f"/databases/{self.database_id}/query", body)
        if not isinstance(data, dict):
            data = {}
        pages = [parse_page(p, self.names) for p in data.get("results") or [] if isinstance(p, dict)]
        return pages, PageCursor(has_more=bool(data.get("has_more")), next_cursor=data.get("next_cursor"))

    def create_page(self, properties: Dict[str, Any], icon: Optional[Icon] = None) -> dict:
        body: Dict[str, Any] = {
            "parent": {"database_id": self.database_id},
            "properties": properties,
        }
        if icon is not None:
            body["icon"] = icon.to_notion()
        return self._call("POST", "/pages", body)

    def update_page(
        self,
        page_id: str,
        properties: Optional[Dict[str, Any]] = None,
        icon: Optional[Icon] = None,
    ) -> dict:
        body: Dict[str, Any] = {}
        if properties:
            body["properties"] = properties
        if icon is not None:
            body["icon"] = icon.to_notion()
        return self._call("PATCH", f"/pages/{page_id}", body)

    def apply_patch(self, page_id: str, patch: PagePatch) -> None:
        self.update_page(page_id, properties=patch.properties or None, icon=patch.icon)
