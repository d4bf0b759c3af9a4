from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from firdesk.core.activity_log import ActivityLog
from firdesk.core.backends.memory_backend import MemoryBackend
from firdesk.core.issue_model import NewIssue
from firdesk.core.issue_store import IssueStore
from firdesk.core.session import Session


class StepClock:
    """Each call returns a time one second after the previous one."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def backend(clock) -> MemoryBackend:
    return MemoryBackend(clock=clock)


@pytest.fixture
def session() -> Session:
    return Session(app_id="hotel-test", user_id="user-1", provider="local")


@pytest.fixture
def activity(tmp_path) -> ActivityLog:
    return ActivityLog(tmp_path / "activity.jsonl")


@pytest.fixture
def store(backend, session, activity) -> IssueStore:
    return IssueStore(backend, session, activity=activity)


@pytest.fixture
def make_form():
    def _make(**overrides) -> NewIssue:
        base = dict(
            room_number="Room 301",
            issue_title="AC is making noise",
            description="Rattling sound from the unit above the bed.",
        )
        base.update(overrides)
        return NewIssue(**base)

    return _make
