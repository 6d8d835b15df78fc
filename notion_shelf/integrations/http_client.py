from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Dict, Optional

import requests

from notion_shelf.errors import NotionAPIError, TransportError

DEFAULT_TIMEOUT_S = 30.0
USER_AGENT = "notion-shelf/1.0"

logger = logging.getLogger(__name__)


def _safe_body_preview(resp: requests.Response, limit: int = 800) -> str:
    try:
        if "application/json" in (resp.headers.get("Content-Type") or "").lower():
            try:
                payload = resp.json()
                text = json.dumps(payload, ensure_ascii=False)
            except ValueError:
                text = resp.text or ""
        else:
            text = resp.text or ""
    except Exception:
        return "<unavailable>"
    text = text.replace("\r", " ").replace("\n", " ").strip()
    if len(text) > limit:
        return text[:limit].rstrip() + "..."
    return text


class NoopThrottle:
    def pace(self) -> None:
        return None


class FixedIntervalThrottle:
    """Sleeps a fixed interval each time pace() is called."""

    def __init__(self, interval_s: float, sleep=time.sleep) -> None:
        self.interval_s = max(0.0, float(interval_s))
        self._sleep = sleep

    def pace(self) -> None:
        if self.interval_s:
            self._sleep(self.interval_s)


class TokenBucket:
    def __init__(self, rate_per_sec: float, burst: int) -> None:
        self.rate = max(0.01, float(rate_per_sec))
        self.capacity = max(1, int(burst))
        self.tokens = float(self.capacity)
        self.lock = threading.Lock()
        self.last = time.monotonic()

    def take(self, n: float = 1.0) -> None:
        while True:
            with self.lock:
                now = time.monotonic()
                elapsed = now - self.last
                self.last = now
                self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
                if self.tokens >= n:
                    self.tokens -= n
                    return
                need = (n - self.tokens) / self.rate
            time.sleep(min(0.25, max(0.01, need)))

    def pace(self) -> None:
        self.take()


def make_session(headers: Optional[Dict[str, str]] = None) -> requests.Session:
    s = requests.Session()
    s.headers.update({
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    })
    if headers:
        s.headers.update(headers)
    return s


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    params: Optional[dict] = None,
    json_body: Optional[dict] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    label: str = "HTTP",
) -> Any:
    """
    Single request, no retries. Returns the decoded JSON body.

    Network errors, non-2xx statuses and undecodable bodies raise
    TransportError; Notion-shaped error bodies ({"object": "error", ...})
    raise NotionAPIError so callers can log the code.
    """
    logger.debug("request | label=%s | method=%s | url=%s | params=%s", label, method, url, params)
    try:
        r = session.request(method, url, params=params, json=json_body, timeout=timeout_s)
    except requests.RequestException as e:
        raise TransportError(f"{label} request failed: {method} {url} error={e}") from e

    data = None
    try:
        if r.content:
            data = r.json()
    except ValueError:
        data = None

    if r.status_code >= 400:
        if isinstance(data, dict) and data.get("object") == "error":
            logger.debug(
                "api error | label=%s | status=%s | code=%s | msg=%s",
                label,
                r.status_code,
                data.get("code"),
                data.get("message"),
            )
            raise NotionAPIError(r.status_code, str(data.get("code") or ""), str(data.get("message") or ""))
        raise TransportError(
            f"{label} http error: status={r.status_code} url={url} body={_safe_body_preview(r)}"
        )

    if data is None:
        raise TransportError(f"{label} returned a non-JSON body: url={url} body={_safe_body_preview(r)}")
    return data
