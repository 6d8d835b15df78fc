from __future__ import annotations

from typing import List


def parse_line(line: str) -> List[str]:
    """
    Split one CSV line into fields.

    A double quote toggles the in-quotes flag and is dropped; commas only
    split outside quotes. Escaped quotes ("") and multi-line fields are not
    supported. The trailing field is always emitted, so 'x,y,' gives
    ['x', 'y', ''].
    """
    out: List[str] = []
    current: List[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            out.append("".join(current))
            current = []
        else:
            current.append(ch)
    out.append("".join(current))
    return out
