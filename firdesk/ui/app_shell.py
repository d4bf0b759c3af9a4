# ui/app_shell.py
from __future__ import annotations

from datetime import datetime

import streamlit as st

from firdesk.core.activity_log import ActivityLog
from firdesk.core.auth import authenticate
from firdesk.core.backends import create_backend
from firdesk.core.config import Settings, load_settings
from firdesk.core.display_ids import next_display_id
from firdesk.core.errors import BackendInitError, ConfigError
from firdesk.core.issue_schema import ALL
from firdesk.core.issue_store import IssueStore
from firdesk.core.logs import configure_logging, get_logger
from firdesk.core.session import Session
from firdesk.core.subscription import IssueSubscription
from firdesk.ui.dashboard_ui import render_dashboard
from firdesk.ui.manage_ui import render_filter_controls, render_management_table
from firdesk.ui.submit_ui import render_submission_form, submission_ready

log = get_logger(__name__)

_SESSION_KEY = "_fir_session"
_SUBS_KEY = "_fir_subscriptions"


@st.cache_resource(show_spinner=False)
def _shared_backend(backend_key: tuple, _settings: Settings):
    """One backend per process; Streamlit reruns and browser sessions share it."""
    return create_backend(_settings)


def _get_session(settings: Settings) -> Session:
    sess = st.session_state.get(_SESSION_KEY)
    if isinstance(sess, Session) and sess.app_id == settings.app_id:
        return sess
    sess = authenticate(settings)
    st.session_state[_SESSION_KEY] = sess
    return sess


def ensure_subscription(store: IssueStore, name: str, priority: str = ALL, department: str = ALL) -> IssueSubscription:
    """
    One live subscription per (name, user, filters).

    Changing the filters tears the old listener down and opens a new one.
    A subscription that failed stays failed; there is no automatic retry.
    A stream the backend closed silently is marked failed here.
    """
    subs = st.session_state.setdefault(_SUBS_KEY, {})
    wanted = (store.session.user_id, priority, department)
    cur = subs.get(name)
    if cur is not None and cur["key"] == wanted:
        cur["sub"].check_alive()
        return cur["sub"]
    if cur is not None:
        cur["sub"].cancel()
    sub = store.subscribe(priority=priority, department=department)
    subs[name] = {"key": wanted, "sub": sub}
    return sub


def _boot() -> tuple[Settings, IssueStore]:
    try:
        settings = load_settings()
    except ConfigError as e:
        st.error("Configuration error.")
        st.code(str(e))
        st.stop()

    configure_logging(settings.log_level)
    try:
        backend = _shared_backend((settings.backend, settings.project_id, settings.credentials_path), settings)
    except BackendInitError as e:
        log.error("Firebase Initialization Failed: %s", e)
        st.error("Could not connect to the issue database. The app is not functional right now.")
        st.code(str(e))
        st.stop()

    session = _get_session(settings)
    store = IssueStore(backend, session, activity=ActivityLog(settings.activity_log_path))
    return settings, store


def _render_header(session: Session) -> None:
    st.title("🛠️ FIR Desk")
    left, right = st.columns([3, 1])
    with left:
        st.caption("Facility Issue Reports: submit, triage, track.")
    with right:
        st.caption(datetime.now().strftime("%a %d %b %Y, %H:%M:%S"))
    if not session.authenticated:
        st.warning("Not signed in. Viewing and submitting are disabled until sign-in succeeds.")


def render_app() -> None:
    st.set_page_config(page_title="FIR Desk", page_icon="🛠️", layout="wide")

    settings, store = _boot()
    _render_header(store.session)

    all_sub = ensure_subscription(store, "all")

    tab_dash, tab_new, tab_manage = st.tabs(["Dashboard", "New Request", "Manage Issues"])

    with tab_dash:

        @st.fragment(run_every=settings.refresh_seconds)
        def _live_dashboard() -> None:
            all_sub.check_alive()
            render_dashboard(issues=all_sub.issues(), activity=store.activity, ready=all_sub.ready)
            if all_sub.error is not None:
                st.warning("Live updates stopped. Reload the page to reconnect.")

        _live_dashboard()

    with tab_new:
        ready = submission_ready(all_sub, store.session)
        if not ready and store.session.authenticated and all_sub.active:

            @st.fragment(run_every=1)
            def _await_first_snapshot() -> None:
                if submission_ready(all_sub, store.session):
                    st.rerun()

            _await_first_snapshot()
        try:
            render_submission_form(
                store=store,
                next_display_id=next_display_id(all_sub.issues()),
                settings=settings,
                ready=ready,
            )
        except Exception as e:
            st.warning("Submission form failed to render (non-critical).")
            st.code(str(e))

    with tab_manage:
        search, priority, department = render_filter_controls()
        filtered_sub = ensure_subscription(store, "manage", priority=priority, department=department)
        render_management_table(
            store=store,
            subscription=filtered_sub,
            search=search,
            settings=settings,
            all_issues=all_sub.issues(),
        )
