from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from firdesk.core.issue_schema import DEFAULT_DEPARTMENT, DEFAULT_PRIORITY, DEFAULT_STATUS, PENDING_STATUSES

# Python attribute -> document key
_DOC_KEYS = {
    "display_id": "displayId",
    "room_number": "roomNumber",
    "issue_title": "issueTitle",
    "description": "description",
    "priority": "priority",
    "status": "status",
    "department": "department",
    "image_url": "imageUrl",
    "submitted_by": "submittedBy",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


@dataclass
class ImageUpload:
    name: str
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass
class NewIssue:
    """What the submission form collects."""

    room_number: str = ""
    issue_title: str = ""
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    image: Optional[ImageUpload] = None

    def missing_fields(self) -> list[str]:
        missing = []
        for attr in ("room_number", "issue_title", "description"):
            if not str(getattr(self, attr) or "").strip():
                missing.append(_DOC_KEYS[attr])
        return missing


@dataclass
class Issue:
    id: str
    display_id: str = ""
    room_number: str = ""
    issue_title: str = ""
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    status: str = DEFAULT_STATUS
    department: str = DEFAULT_DEPARTMENT
    image_url: Optional[str] = None
    submitted_by: str = ""
    created_at: Any = None
    updated_at: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_doc(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "Issue":
        data = dict(data or {})
        kwargs: Dict[str, Any] = {}
        for attr, key in _DOC_KEYS.items():
            if key in data:
                kwargs[attr] = data.pop(key)
        issue = cls(id=str(doc_id), **kwargs)
        issue.extra = data
        return issue

    def to_doc(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in _DOC_KEYS.items()}

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES
