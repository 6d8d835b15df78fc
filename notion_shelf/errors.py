from __future__ import annotations

from typing import Optional


class NotionShelfError(RuntimeError):
    pass


class TransportError(NotionShelfError):
    pass


class NotionAPIError(TransportError):
    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(f"Notion API error (status={status_code} code={code}): {message}")
        self.status_code = status_code
        self.code = code
        self.message = message


class PaginationError(NotionShelfError):
    pass


class ValidationError(NotionShelfError):
    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(f"{message} ({path})" if path else message)
        self.path = path
