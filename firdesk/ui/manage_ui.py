# ui/manage_ui.py
from __future__ import annotations

import streamlit as st

from firdesk.core.config import Settings
from firdesk.core.display_ids import find_duplicate_display_ids
from firdesk.core.issue_filters import issues_to_frame, search_issues
from firdesk.core.issue_schema import ALL, DEPARTMENT_OPTIONS, PRIORITY_OPTIONS, STATUS_OPTIONS
from firdesk.core.issue_store import IssueStore
from firdesk.core.logs import get_logger
from firdesk.core.subscription import IssueSubscription
from firdesk.ui.banners import push_banner, render_banners
from firdesk.ui.table_helpers import diff_editor_changes

log = get_logger(__name__)


def render_filter_controls(*, key_prefix: str = "fir_manage") -> tuple[str, str, str]:
    """Search box + equality filters. Returns (search, priority, department)."""
    c1, c2, c3 = st.columns([2, 1, 1])
    with c1:
        search = st.text_input(
            "Search",
            placeholder="FIR id, room, title or description",
            key=f"{key_prefix}_search",
        )
    with c2:
        priority = st.selectbox("Priority", [ALL] + PRIORITY_OPTIONS, key=f"{key_prefix}_priority")
    with c3:
        department = st.selectbox("Department", [ALL] + DEPARTMENT_OPTIONS, key=f"{key_prefix}_department")
    return search, priority, department


def render_management_table(
    *,
    store: IssueStore,
    subscription: IssueSubscription,
    search: str,
    settings: Settings,
    all_issues: list | None = None,
    key_prefix: str = "fir_manage",
) -> None:
    """
    Per-row inline editors for priority / status / department.

    Each changed cell becomes one partial update. The editor key includes the
    snapshot version so positional edits never land on a different row after
    the list changes underneath.
    """
    # re-checked every second so banners dismiss themselves
    st.fragment(run_every=1)(render_banners)(slot="manage")

    if subscription.error is not None:
        st.warning("Live updates stopped for this view. Reload the page to reconnect.")

    if not subscription.ready:
        st.info("Loading issues…")
        return

    dupes = find_duplicate_display_ids(all_issues if all_issues is not None else subscription.issues())
    if dupes:
        st.warning(
            "Duplicate display ids detected: "
            + ", ".join(f"{d} ×{n}" for d, n in dupes.items())
            + ". Two requests were submitted at the same time."
        )

    issues = search_issues(subscription.issues(), search)
    st.caption(f"{len(issues)} issue(s)")
    if not issues:
        st.info("No issues match the current filters.")
        return

    df = issues_to_frame(issues).set_index("id")
    saves = int(st.session_state.get(f"{key_prefix}_saves", 0))

    edited = st.data_editor(
        df,
        use_container_width=True,
        hide_index=True,
        num_rows="fixed",
        key=f"{key_prefix}_editor_{subscription.version}_{saves}",
        disabled=["displayId", "roomNumber", "issueTitle", "description", "imageUrl", "created"],
        column_order=["displayId", "roomNumber", "issueTitle", "description", "priority", "status", "department", "imageUrl", "created"],
        column_config={
            "displayId": st.column_config.TextColumn("FIR"),
            "roomNumber": st.column_config.TextColumn("Room"),
            "issueTitle": st.column_config.TextColumn("Title"),
            "description": st.column_config.TextColumn("Description", width="large"),
            "priority": st.column_config.SelectboxColumn("Priority", options=PRIORITY_OPTIONS, required=True),
            "status": st.column_config.SelectboxColumn("Status", options=STATUS_OPTIONS, required=True),
            "department": st.column_config.SelectboxColumn("Department", options=DEPARTMENT_OPTIONS, required=True),
            "imageUrl": st.column_config.LinkColumn("Image", display_text="view"),
            "created": st.column_config.TextColumn("Created"),
        },
    )

    changes = diff_editor_changes(df, edited)
    if not changes:
        return

    failed = 0
    for ch in changes:
        try:
            store.update_field(ch.issue_id, ch.field, ch.value, previous=ch.previous, display_id=ch.display_id)
        except Exception as e:
            failed += 1
            log.error("Update error for %s (%s): %s", ch.issue_id, ch.field.value, e)

    if failed:
        push_banner("error", f"{failed} update(s) failed.", settings.error_banner_seconds, slot="manage")
    else:
        push_banner("success", "Saved ✅", settings.success_banner_seconds, slot="manage")
    st.session_state[f"{key_prefix}_saves"] = saves + 1
    st.rerun()
