# ui/dashboard_ui.py
from __future__ import annotations

from typing import Optional

import pandas as pd
import streamlit as st

from firdesk.core.activity_log import ActivityLog
from firdesk.core.issue_filters import compute_metrics, issues_to_frame, top_pending
from firdesk.core.issue_model import Issue
from firdesk.core.styling import style_issue_table


def render_dashboard(
    *,
    issues: list[Issue],
    activity: Optional[ActivityLog] = None,
    ready: bool = True,
    title: str = "Dashboard",
) -> None:
    st.subheader(title)

    if not ready:
        st.info("Loading issues…")
        return

    m = compute_metrics(issues)
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Total Issues", m.total)
    k2.metric("Pending", m.pending)
    k3.metric("Completed", m.completed)
    k4.metric("High Priority", m.high_priority)

    st.markdown("**Top 5 pending**")
    pending = top_pending(issues, n=5)
    if not pending:
        st.info("No pending issues 🎉")
    else:
        view = issues_to_frame(pending)[["displayId", "roomNumber", "issueTitle", "priority", "status", "created"]]
        st.dataframe(style_issue_table(view), use_container_width=True, hide_index=True)

    if activity is not None:
        with st.expander("Recent activity", expanded=False):
            events = activity.read_recent(limit=15)
            if not events:
                st.caption("No activity recorded yet.")
            else:
                df = pd.DataFrame(events)
                cols = [c for c in ["ts", "summary", "actor_id"] if c in df.columns]
                st.dataframe(df[cols], use_container_width=True, hide_index=True)
