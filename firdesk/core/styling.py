# core/styling.py
from __future__ import annotations

import pandas as pd

PRIORITY_COLORS = {
    "Critical": "background-color: #ffd6d6;",
    "High": "background-color: #fff1cc;",
    "Medium": "",
    "Low": "",
}

STATUS_COLORS = {
    "Submitted": "color: #0b6e99;",
    "In Progress": "color: #9a6700;",
    "Completed": "color: #1a7f37;",
    "Canceled": "color: #cf222e;",
}


def style_issue_table(df: pd.DataFrame):
    """
    Row-highlights issues by priority and colours the status cell.
    """
    if df is None or df.empty or "priority" not in df.columns:
        return df.style if isinstance(df, pd.DataFrame) else pd.DataFrame().style

    def row_style(row):
        base = PRIORITY_COLORS.get(str(row.get("priority", "")), "")
        out = []
        for col in row.index:
            css = base
            if col == "status":
                css = (base + " " + STATUS_COLORS.get(str(row.get("status", "")), "")).strip()
            out.append(css)
        return out

    return df.style.apply(row_style, axis=1)
