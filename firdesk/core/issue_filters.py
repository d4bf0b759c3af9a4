from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from firdesk.core.issue_model import Issue
from firdesk.core.issue_schema import ALL, HIGH_PRIORITIES, PENDING_STATUSES
from firdesk.core.issue_time import format_local, to_epoch_seconds


def sort_newest_first(issues: Iterable[Issue]) -> list[Issue]:
    """createdAt descending; records still waiting for a server timestamp sort last."""
    return sorted(issues, key=lambda i: to_epoch_seconds(i.created_at), reverse=True)


def matches_filters(data: dict, filters: Optional[dict]) -> bool:
    """Equality match on raw document data. Values equal to ALL are ignored."""
    for k, v in (filters or {}).items():
        if v in (None, "", ALL):
            continue
        if data.get(k) != v:
            return False
    return True


def equality_filters(priority: str = ALL, department: str = ALL) -> dict:
    out = {}
    if priority and priority != ALL:
        out["priority"] = priority
    if department and department != ALL:
        out["department"] = department
    return out


def filter_issues(issues: Iterable[Issue], priority: str = ALL, department: str = ALL) -> list[Issue]:
    flt = equality_filters(priority, department)
    return [i for i in issues if matches_filters(i.to_doc(), flt)]


def search_issues(issues: Iterable[Issue], text: str) -> list[Issue]:
    """Case-insensitive substring search over display id, room, title and description."""
    needle = str(text or "").strip().lower()
    issues = list(issues)
    if not needle:
        return issues

    def _hit(i: Issue) -> bool:
        for v in (i.display_id, i.room_number, i.issue_title, i.description):
            if needle in str(v or "").lower():
                return True
        return False

    return [i for i in issues if _hit(i)]


@dataclass
class DashboardMetrics:
    total: int = 0
    pending: int = 0
    completed: int = 0
    high_priority: int = 0


def compute_metrics(issues: Iterable[Issue]) -> DashboardMetrics:
    m = DashboardMetrics()
    for i in issues:
        m.total += 1
        if i.status in PENDING_STATUSES:
            m.pending += 1
        if i.status == "Completed":
            m.completed += 1
        if i.priority in HIGH_PRIORITIES:
            m.high_priority += 1
    return m


def top_pending(issues: Iterable[Issue], n: int = 5) -> list[Issue]:
    return [i for i in sort_newest_first(issues) if i.is_pending][: max(int(n), 0)]


TABLE_COLUMNS = [
    "id",
    "displayId",
    "roomNumber",
    "issueTitle",
    "description",
    "priority",
    "status",
    "department",
    "imageUrl",
    "created",
]


def issues_to_frame(issues: Iterable[Issue]) -> pd.DataFrame:
    rows = []
    for i in issues:
        doc = i.to_doc()
        rows.append(
            {
                "id": i.id,
                "displayId": doc["displayId"],
                "roomNumber": doc["roomNumber"],
                "issueTitle": doc["issueTitle"],
                "description": doc["description"],
                "priority": doc["priority"],
                "status": doc["status"],
                "department": doc["department"],
                "imageUrl": doc["imageUrl"] or "",
                "created": format_local(doc["createdAt"]),
            }
        )
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)
