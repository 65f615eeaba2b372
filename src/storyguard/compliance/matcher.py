from __future__ import annotations

import re
from typing import Any, NamedTuple


class Match(NamedTuple):
    text: str
    start: int
    end: int


def find_matches(pattern: re.Pattern, text: Any) -> list[Match]:
    """
    pattern の全出現を左から順に返す（重なりなし）。
    空文字・非文字列は「マッチなし」扱いで、例外は出さない。
    """
    if not isinstance(text, str) or not text:
        return []
    return [Match(m.group(0), m.start(), m.end()) for m in pattern.finditer(text)]
