from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

EMOJI = "emoji"


@dataclass(frozen=True)
class BookRecord:
    title: str
    authors: List[str]
    isbn: str
    page_count: Optional[int] = None


@dataclass(frozen=True)
class Icon:
    kind: str
    value: str

    @classmethod
    def emoji(cls, value: str) -> "Icon":
        return cls(kind=EMOJI, value=value)

    def to_notion(self) -> Dict[str, str]:
        return {"type": self.kind, self.kind: self.value}


@dataclass(frozen=True)
class RemotePage:
    page_id: str
    title: str = "Unknown Title"
    status: Optional[str] = None
    isbn: Optional[str] = None
    total_pages: Optional[int] = None
    icon: Optional[Icon] = None

    @property
    def current_emoji(self) -> Optional[str]:
        if self.icon is None or self.icon.kind != EMOJI:
            return None
        return self.icon.value

    @property
    def has_total_pages(self) -> bool:
        # 0 counts as missing
        return bool(self.total_pages)


@dataclass(frozen=True)
class PageCursor:
    has_more: bool
    next_cursor: Optional[str] = None


@dataclass(frozen=True)
class PagePatch:
    properties: Dict[str, Any] = field(default_factory=dict)
    icon: Optional[Icon] = None


SKIP = "skip"
UPDATE = "update"


@dataclass(frozen=True)
class Decision:
    action: str  # "skip" | "update"
    outcome: str
    patch: Optional[PagePatch] = None
    used_network: bool = False
    note: str = ""

    @classmethod
    def skip(cls, outcome: str, *, used_network: bool = False, note: str = "") -> "Decision":
        return cls(action=SKIP, outcome=outcome, used_network=used_network, note=note)

    @classmethod
    def update(cls, outcome: str, patch: PagePatch, *, used_network: bool = False, note: str = "") -> "Decision":
        return cls(action=UPDATE, outcome=outcome, patch=patch, used_network=used_network, note=note)

    @property
    def is_update(self) -> bool:
        return self.action == UPDATE
