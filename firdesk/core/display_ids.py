"""Display-id allocation.

Ids are proposed from whatever issues the client currently sees: scan the
numeric suffixes, take the max, add one. Two clients submitting before either
sees the other's write will propose the same id.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

from firdesk.core.issue_model import Issue
from firdesk.core.issue_schema import DISPLAY_ID_PREFIX

_LEADING_DIGITS = re.compile(r"\d+")


def format_display_id(n: int) -> str:
    return f"{DISPLAY_ID_PREFIX}{int(n):04d}"


def parse_display_number(display_id: str | None) -> int:
    """Leading digits after the prefix ("FIR-12abc" -> 12); no digits counts as 0."""
    s = str(display_id or "").strip()
    if s.upper().startswith(DISPLAY_ID_PREFIX):
        s = s[len(DISPLAY_ID_PREFIX):]
    m = _LEADING_DIGITS.match(s.strip())
    return int(m.group(0)) if m else 0


def _ids(items: Iterable[Issue | str]) -> list[str]:
    out = []
    for it in items:
        out.append(it.display_id if isinstance(it, Issue) else str(it or ""))
    return out


def next_display_id(items: Iterable[Issue | str]) -> str:
    highest = max((parse_display_number(d) for d in _ids(items)), default=0)
    return format_display_id(highest + 1)


def find_duplicate_display_ids(items: Iterable[Issue | str]) -> dict[str, int]:
    """Display ids used by more than one record, with their counts."""
    counts = Counter(d for d in _ids(items) if d)
    return {d: n for d, n in sorted(counts.items()) if n > 1}
