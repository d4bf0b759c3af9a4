# ui/table_helpers.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from firdesk.core.issue_schema import IssueField

EDITABLE_FIELDS = [IssueField.PRIORITY, IssueField.STATUS, IssueField.DEPARTMENT]


@dataclass
class FieldChange:
    issue_id: str
    field: IssueField
    value: str
    previous: str
    display_id: str = ""


def diff_editor_changes(original: pd.DataFrame, edited: pd.DataFrame) -> list[FieldChange]:
    """
    Compare the frame shown in st.data_editor with what came back.

    Both frames are indexed by issue id. Only the mutable fields are
    considered; rows missing from either side are ignored.
    """
    if original is None or edited is None or original.empty or edited.empty:
        return []

    changes: list[FieldChange] = []
    for issue_id in edited.index:
        if issue_id not in original.index:
            continue
        before = original.loc[issue_id]
        after = edited.loc[issue_id]
        for f in EDITABLE_FIELDS:
            col = f.value
            if col not in edited.columns or col not in original.columns:
                continue
            new_v = _clean(after.get(col))
            old_v = _clean(before.get(col))
            if new_v is None or new_v == old_v:
                continue
            changes.append(
                FieldChange(
                    issue_id=str(issue_id),
                    field=f,
                    value=new_v,
                    previous=old_v or "",
                    display_id=str(before.get("displayId", "") or ""),
                )
            )
    return changes


def _clean(v) -> Optional[str]:
    if v is None:
        return None
    try:
        if pd.isna(v):
            return None
    except (TypeError, ValueError):
        pass
    s = str(v).strip()
    return s or None
