# core/activity_log.py
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

from firdesk.core.issue_time import utc_now_iso
from firdesk.core.logs import get_logger

log = get_logger(__name__)


@dataclass
class ActivityEvent:
    ts: str
    event_type: str  # "issue.created" | "issue.field_changed"
    summary: str

    issue_id: str = ""
    display_id: str = ""
    actor_id: str = ""
    data: Optional[Dict[str, Any]] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "event_id": str(uuid4()),
            "ts": self.ts,
            "event_type": self.event_type,
            "summary": self.summary,
            "issue_id": self.issue_id,
            "display_id": self.display_id,
            "actor_id": self.actor_id,
            "data": self.data or {},
        }


class ActivityLog:
    """
    Append-only JSONL history of FIR changes.
    Each line is a single event dict.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def append(self, event: Dict[str, Any]) -> None:
        """Never raises to callers; the activity log must never break a submission."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            line = json.dumps(event, ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            log.warning("Could not append to activity log %s: %s", self.path, e)

    def log(
        self,
        *,
        event_type: str,
        summary: str,
        issue_id: str = "",
        display_id: str = "",
        actor_id: str = "",
        data: Optional[Dict[str, Any]] = None,
        ts: Optional[str] = None,
    ) -> None:
        ev = ActivityEvent(
            ts=ts or utc_now_iso(),
            event_type=event_type,
            summary=summary,
            issue_id=str(issue_id or ""),
            display_id=str(display_id or ""),
            actor_id=str(actor_id or ""),
            data=data or {},
        )
        self.append(ev.as_dict())

    def read_recent(self, limit: int = 20) -> list[Dict[str, Any]]:
        """Newest first. Malformed lines are skipped."""
        if not self.path.exists():
            return []
        events = []
        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            log.warning("Could not read activity log %s: %s", self.path, e)
            return []
        for line in reversed(lines):
            if len(events) >= limit:
                break
            line = line.strip()
            if not line:
                continue
            try:
                ev = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(ev, dict):
                events.append(ev)
        return events
