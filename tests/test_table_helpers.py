from __future__ import annotations

import time

from firdesk.core.config import Settings
from firdesk.core.issue_filters import issues_to_frame
from firdesk.core.issue_model import Issue
from firdesk.core.issue_schema import IssueField
from firdesk.core.subscription import IssueSubscription
from firdesk.ui import banners, manage_ui
from firdesk.ui.banners import active_banners, push_banner
from firdesk.ui.table_helpers import diff_editor_changes


def _frame():
    issues = [
        Issue(id="a", display_id="FIR-0001", priority="Low", status="Submitted", department="Unassigned"),
        Issue(id="b", display_id="FIR-0002", priority="High", status="In Progress", department="IT"),
    ]
    return issues_to_frame(issues).set_index("id")


def test_only_changed_mutable_cells_are_reported():
    original = _frame()
    edited = original.copy()
    edited.loc["b", "status"] = "Completed"
    edited.loc["a", "roomNumber"] = "ignored"

    changes = diff_editor_changes(original, edited)

    assert len(changes) == 1
    ch = changes[0]
    assert (ch.issue_id, ch.field, ch.value, ch.previous, ch.display_id) == (
        "b",
        IssueField.STATUS,
        "Completed",
        "In Progress",
        "FIR-0002",
    )


def test_cleared_cells_are_not_updates():
    original = _frame()
    edited = original.copy()
    edited.loc["a", "priority"] = None
    assert diff_editor_changes(original, edited) == []


def test_identical_frames_have_no_changes():
    assert diff_editor_changes(_frame(), _frame()) == []


def test_expired_banners_are_dropped():
    banners = [
        {"kind": "success", "text": "saved", "slot": "main", "expires_at": 103.0},
        {"kind": "error", "text": "failed", "slot": "main", "expires_at": 99.0},
    ]
    assert [b["text"] for b in active_banners(banners, now=100.0)] == ["saved"]


def test_pushed_banner_expires_after_its_lifetime(monkeypatch):
    monkeypatch.setattr(banners.st, "session_state", {})
    before = time.time()
    push_banner("success", "Saved", 3, slot="manage")
    push_banner("success", "Saved again", 3, slot="manage")
    after = time.time()

    queued = banners.st.session_state[banners._BANNERS_KEY]
    assert [b["text"] for b in queued] == ["Saved again"]
    assert before + 3 <= queued[0]["expires_at"] <= after + 3
    assert active_banners(queued, now=before + 2) == queued
    assert active_banners(queued, now=after + 3.5) == []


class _RecordingStreamlit:
    """Just enough of `st` to watch how the manage view renders its banners."""

    def __init__(self):
        self.fragments = []
        self.shown = []

    def fragment(self, func=None, *, run_every=None):
        def _wrap(fn):
            self.fragments.append((fn, run_every))
            return fn

        return _wrap(func) if func is not None else _wrap

    def info(self, text):
        self.shown.append(("info", text))

    def warning(self, text):
        self.shown.append(("warning", text))


def test_manage_banners_render_in_a_timed_fragment(monkeypatch, store):
    fake = _RecordingStreamlit()
    monkeypatch.setattr(manage_ui, "st", fake)
    monkeypatch.setattr(manage_ui, "render_banners", lambda slot="main": fake.shown.append(("banners", slot)))

    manage_ui.render_management_table(
        store=store,
        subscription=IssueSubscription(),
        search="",
        settings=Settings(),
    )

    assert [run_every for _, run_every in fake.fragments] == [1]
    assert fake.shown[0] == ("banners", "manage")
    assert ("info", "Loading issues…") in fake.shown
