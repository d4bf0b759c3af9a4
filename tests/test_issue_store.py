from __future__ import annotations

import json

import pytest

from firdesk.core.display_ids import find_duplicate_display_ids, next_display_id
from firdesk.core.errors import IssueValidationError, NotAuthenticatedError
from firdesk.core.issue_model import ImageUpload
from firdesk.core.issue_schema import IssueField
from firdesk.core.issue_store import IssueStore
from firdesk.core.session import Session

PATH = "artifacts/hotel-test/public/data/firs"


def test_collection_path_uses_app_id(store):
    assert store.path == PATH


def test_submission_without_image_gets_defaults(store, backend, make_form):
    issue = store.create_issue(make_form(), "FIR-0001")

    doc = backend.get(PATH, issue.id)
    assert doc["imageUrl"] is None
    assert doc["status"] == "Submitted"
    assert doc["department"] == "Unassigned"
    assert doc["priority"] == "Medium"
    assert doc["displayId"] == "FIR-0001"
    assert doc["submittedBy"] == "user-1"
    assert doc["createdAt"] is not None
    assert doc["createdAt"] == doc["updatedAt"]


def test_submission_with_image_stores_fetchable_url(store, backend, make_form):
    data = b"\x89PNG\r\n\x1a\nfake-image"
    form = make_form(image=ImageUpload(name="leak.png", data=data, content_type="image/png"))

    issue = store.create_issue(form, "FIR-0002")

    url = backend.get(PATH, issue.id)["imageUrl"]
    assert url
    assert backend.fetch(url) == data
    [blob_path] = backend.blob_paths()
    assert blob_path.startswith("firs/user-1/")
    assert blob_path.endswith("_leak.png")


def test_missing_required_field_has_no_side_effect(store, backend, make_form, activity):
    form = make_form(issue_title="   ", image=ImageUpload(name="x.png", data=b"x"))

    with pytest.raises(IssueValidationError) as exc:
        store.create_issue(form, "FIR-0001")

    assert exc.value.missing == ["issueTitle"]
    assert backend.blob_paths() == []
    sub = store.subscribe()
    assert sub.issues() == []
    assert activity.read_recent() == []


def test_unknown_priority_is_rejected(store, make_form):
    with pytest.raises(IssueValidationError):
        store.create_issue(make_form(priority="Urgent"), "FIR-0001")


def test_writes_blocked_without_user(backend, make_form):
    anon = IssueStore(backend, Session(app_id="hotel-test"))
    with pytest.raises(NotAuthenticatedError):
        anon.create_issue(make_form(), "FIR-0001")
    with pytest.raises(NotAuthenticatedError):
        anon.update_field("whatever", IssueField.STATUS, "Completed")


def test_failed_write_after_upload_leaves_orphaned_blob(store, backend, make_form, monkeypatch):
    def _boom(path, data):
        raise ConnectionError("backend unreachable")

    monkeypatch.setattr(backend, "add", _boom)
    form = make_form(image=ImageUpload(name="a.jpg", data=b"jpeg"))

    with pytest.raises(ConnectionError):
        store.create_issue(form, "FIR-0001")

    assert len(backend.blob_paths()) == 1


def test_status_update_changes_only_status_and_updated_at(store, backend, make_form):
    issue = store.create_issue(make_form(), "FIR-0001")
    before = backend.get(PATH, issue.id)

    store.update_field(issue.id, IssueField.STATUS, "In Progress", previous="Submitted")

    after = backend.get(PATH, issue.id)
    assert after["status"] == "In Progress"
    assert after["updatedAt"] > before["updatedAt"]
    changed = {k for k in before if before[k] != after[k]}
    assert changed == {"status", "updatedAt"}
    assert set(after) == set(before)


def test_update_rejects_values_outside_the_field_options(store, make_form):
    issue = store.create_issue(make_form(), "FIR-0001")
    with pytest.raises(IssueValidationError):
        store.update_field(issue.id, IssueField.DEPARTMENT, "Security")
    with pytest.raises(ValueError):
        store.update_field(issue.id, "roomNumber", "Room 1")


def test_update_field_accepts_plain_field_names(store, backend, make_form):
    issue = store.create_issue(make_form(), "FIR-0001")
    store.update_field(issue.id, "department", "Plumbing")
    assert backend.get(PATH, issue.id)["department"] == "Plumbing"


def test_subscription_pushes_full_snapshot_newest_first(store, make_form):
    seen = []
    sub = store.subscribe(on_change=seen.append)
    assert sub.ready and sub.issues() == []

    store.create_issue(make_form(room_number="101"), "FIR-0001")
    store.create_issue(make_form(room_number="102"), "FIR-0002")

    assert [i.display_id for i in sub.issues()] == ["FIR-0002", "FIR-0001"]
    assert [len(s) for s in seen] == [0, 1, 2]
    assert sub.version == 3


def test_subscription_applies_equality_filters(store, make_form):
    for n, prio in enumerate(["Low", "High", "Critical", "Medium"], start=1):
        store.create_issue(make_form(priority=prio), f"FIR-{n:04d}")

    sub = store.subscribe(priority="High")
    assert [i.priority for i in sub.issues()] == ["High"]

    issue_id = sub.issues()[0].id
    store.update_field(issue_id, IssueField.PRIORITY, "Low")
    assert sub.issues() == []


def test_subscription_sees_field_updates(store, make_form):
    issue = store.create_issue(make_form(), "FIR-0001")
    sub = store.subscribe(department="HVAC")
    assert sub.issues() == []

    store.update_field(issue.id, IssueField.DEPARTMENT, "HVAC")
    assert [i.id for i in sub.issues()] == [issue.id]


def test_cancelled_subscription_stops_receiving(store, backend, make_form):
    sub = store.subscribe()
    assert backend.watcher_count(PATH) == 1

    sub.cancel()
    sub.cancel()
    store.create_issue(make_form(), "FIR-0001")

    assert sub.issues() == []
    assert backend.watcher_count(PATH) == 0
    assert not sub.active


def test_stream_error_leaves_subscription_stale(store, make_form):
    calls = []

    def _on_change(issues):
        calls.append(len(issues))
        if len(calls) == 2:
            raise RuntimeError("listener exploded")

    sub = store.subscribe(on_change=_on_change)
    store.create_issue(make_form(), "FIR-0001")
    store.create_issue(make_form(), "FIR-0002")

    assert isinstance(sub.error, RuntimeError)
    assert not sub.active
    assert calls == [0, 1]


def test_no_subscription_without_user(backend):
    anon = IssueStore(backend, Session(app_id="hotel-test"))
    sub = anon.subscribe()
    assert not sub.ready
    assert backend.watcher_count() == 0


def test_racing_submissions_produce_detectable_duplicate_ids(backend, make_form):
    a = IssueStore(backend, Session(app_id="hotel-test", user_id="front-desk"))
    b = IssueStore(backend, Session(app_id="hotel-test", user_id="housekeeping"))
    a.create_issue(make_form(), "FIR-0001")

    # both clients computed the next id from the same view before either wrote
    view = a.subscribe().issues()
    proposed_a = next_display_id(view)
    proposed_b = next_display_id(view)
    a.create_issue(make_form(room_number="201"), proposed_a)
    b.create_issue(make_form(room_number="202"), proposed_b)

    all_issues = a.subscribe().issues()
    assert find_duplicate_display_ids(all_issues) == {"FIR-0002": 2}


def test_activity_log_records_creation_and_changes(store, make_form, activity):
    issue = store.create_issue(make_form(), "FIR-0001")
    store.update_field(issue.id, IssueField.STATUS, "Completed", previous="Submitted", display_id="FIR-0001")

    events = activity.read_recent()
    assert [e["event_type"] for e in events] == ["issue.field_changed", "issue.created"]
    assert events[0]["data"] == {"field": "status", "prev": "Submitted", "new": "Completed"}
    assert events[1]["actor_id"] == "user-1"
    # stored as JSON lines
    lines = activity.path.read_text(encoding="utf-8").splitlines()
    assert all(json.loads(l)["issue_id"] == issue.id for l in lines)
