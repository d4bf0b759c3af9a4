# ui/submit_ui.py
from __future__ import annotations

import streamlit as st

from firdesk.core.config import Settings
from firdesk.core.errors import IssueValidationError, NotAuthenticatedError
from firdesk.core.issue_model import ImageUpload, NewIssue
from firdesk.core.issue_schema import DEFAULT_PRIORITY, PRIORITY_OPTIONS
from firdesk.core.issue_store import IssueStore
from firdesk.core.logs import get_logger
from firdesk.core.session import Session
from firdesk.core.subscription import IssueSubscription
from firdesk.ui.banners import push_banner, render_banners

log = get_logger(__name__)


def _image_from_upload(uploaded) -> ImageUpload | None:
    if uploaded is None:
        return None
    return ImageUpload(
        name=str(getattr(uploaded, "name", "") or "image"),
        data=uploaded.getvalue(),
        content_type=str(getattr(uploaded, "type", "") or "application/octet-stream"),
    )


def submission_ready(subscription: IssueSubscription, session: Session) -> bool:
    """The proposed display id is only trustworthy once the first snapshot is in and the user is signed in."""
    return bool(session.authenticated and subscription.ready)


def render_submission_form(
    *,
    store: IssueStore,
    next_display_id: str,
    settings: Settings,
    ready: bool = True,
    key_prefix: str = "fir_form",
) -> None:
    """
    New maintenance request form.

    A failed submit keeps the widget values (same form key); a successful one
    bumps the form key so the next render starts empty. The submit button
    stays disabled until `ready`.
    """
    st.subheader("New Maintenance Request")
    if ready:
        st.caption(f"This request will be filed as **{next_display_id}**.")
    else:
        st.caption("Loading existing requests… submitting opens once they are in.")

    # re-checked every second so banners dismiss themselves
    st.fragment(run_every=1)(render_banners)(slot="submit")

    with st.form(key=f"{key_prefix}_{st.session_state.get(f'{key_prefix}_n', 0)}", clear_on_submit=False):
        room = st.text_input("Room Number *", placeholder="e.g., Room 301 or Lobby A")
        title = st.text_input("Issue Title *", placeholder="e.g., AC is making noise")
        description = st.text_area(
            "Description *",
            placeholder="Describe the issue in detail...",
            height=120,
        )
        priority = st.selectbox(
            "Priority",
            PRIORITY_OPTIONS,
            index=PRIORITY_OPTIONS.index(DEFAULT_PRIORITY),
        )
        uploaded = st.file_uploader("Attach image (optional)", type=["png", "jpg", "jpeg", "gif", "webp"])
        submitted = st.form_submit_button("Submit Request", use_container_width=True, disabled=not ready)

    if not submitted or not ready:
        return

    form = NewIssue(
        room_number=room,
        issue_title=title,
        description=description,
        priority=priority,
        image=_image_from_upload(uploaded),
    )
    try:
        with st.spinner("Submitting…"):
            issue = store.create_issue(form, next_display_id)
    except NotAuthenticatedError:
        log.error("Authentication not ready. Cannot submit.")
        push_banner("error", "Not signed in yet. Please wait a moment and try again.", settings.error_banner_seconds, slot="submit")
    except IssueValidationError as e:
        log.error("Invalid submission: %s", e)
        push_banner("warning", str(e), settings.error_banner_seconds, slot="submit")
    except Exception as e:
        log.exception("Submission error: %s", e)
        push_banner("error", "Submission failed. Please try again.", settings.error_banner_seconds, slot="submit")
    else:
        push_banner(
            "success",
            f"Request {issue.display_id} submitted ✅",
            settings.success_banner_seconds,
            slot="submit",
        )
        # new form key -> fresh, empty widgets
        st.session_state[f"{key_prefix}_n"] = int(st.session_state.get(f"{key_prefix}_n", 0)) + 1
    st.rerun()
