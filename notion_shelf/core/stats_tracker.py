from __future__ import annotations

import time
from collections import Counter
from typing import Dict, Iterable, Optional


class RunStats:
    """
    Per-run outcome counters.

    Outcome names are free-form ("updated", "skipped", "missing_isbn", ...);
    callers register the ones they always want reported with `expect(...)`
    so a zero still shows up in the summary.
    """

    def __init__(self, expected: Optional[Iterable[str]] = None) -> None:
        self._counts: Counter = Counter()
        self._order = []
        self.pages = 0
        self.records = 0
        self._start_ts = time.monotonic()
        for name in expected or ():
            self.expect(name)

    def expect(self, name: str) -> None:
        if name not in self._order:
            self._order.append(name)

    def inc(self, name: str, n: int = 1) -> None:
        self.expect(name)
        self._counts[name] += int(n)

    def inc_pages(self, n: int = 1) -> None:
        self.pages += int(n)

    def inc_records(self, n: int = 1) -> None:
        self.records += int(n)

    def get(self, name: str) -> int:
        return self._counts.get(name, 0)

    def __getitem__(self, name: str) -> int:
        return self.get(name)

    def snapshot_dict(self) -> Dict[str, int]:
        return {name: self._counts.get(name, 0) for name in self._order}

    def elapsed_s(self) -> float:
        return max(0.0, time.monotonic() - self._start_ts)
