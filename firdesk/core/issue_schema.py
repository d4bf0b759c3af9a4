"""FIR constants + tiny helpers shared by the store and the UI."""

from __future__ import annotations

from enum import Enum


PRIORITY_OPTIONS: list[str] = ["Low", "Medium", "High", "Critical"]

STATUS_OPTIONS: list[str] = ["Submitted", "In Progress", "Completed", "Canceled"]

DEPARTMENT_OPTIONS: list[str] = ["Unassigned", "Plumbing", "Electrical", "Housekeeping", "HVAC", "IT"]

DEFAULT_PRIORITY = "Medium"
DEFAULT_STATUS = "Submitted"
DEFAULT_DEPARTMENT = "Unassigned"

# Filter value meaning "no equality filter".
ALL = "All"

PENDING_STATUSES: tuple[str, ...] = ("Submitted", "In Progress")
HIGH_PRIORITIES: tuple[str, ...] = ("High", "Critical")

DISPLAY_ID_PREFIX = "FIR-"
IMAGE_NAMESPACE = "firs"


class IssueField(str, Enum):
    """The only fields that may change after submission."""

    PRIORITY = "priority"
    STATUS = "status"
    DEPARTMENT = "department"

    @property
    def options(self) -> list[str]:
        return {
            IssueField.PRIORITY: PRIORITY_OPTIONS,
            IssueField.STATUS: STATUS_OPTIONS,
            IssueField.DEPARTMENT: DEPARTMENT_OPTIONS,
        }[self]


def collection_path_for_app(app_id: str) -> str:
    """Public, shared collection: every signed-in user sees and edits every FIR."""
    return f"artifacts/{app_id}/public/data/firs"


def image_path_for(user_id: str, filename: str, ts_millis: int) -> str:
    name = str(filename or "image").replace("/", "_").replace("\\", "_").strip() or "image"
    return f"{IMAGE_NAMESPACE}/{user_id}/{int(ts_millis)}_{name}"
