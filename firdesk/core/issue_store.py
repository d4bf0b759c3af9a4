from __future__ import annotations

from typing import Any, Callable, List, Optional

from firdesk.core.activity_log import ActivityLog
from firdesk.core.errors import IssueValidationError, NotAuthenticatedError
from firdesk.core.issue_filters import equality_filters, sort_newest_first
from firdesk.core.issue_model import Issue, NewIssue
from firdesk.core.issue_schema import (
    ALL,
    DEFAULT_DEPARTMENT,
    DEFAULT_STATUS,
    PRIORITY_OPTIONS,
    IssueField,
    collection_path_for_app,
    image_path_for,
)
from firdesk.core.issue_time import epoch_millis
from firdesk.core.logs import get_logger
from firdesk.core.session import Session
from firdesk.core.subscription import IssueSubscription

log = get_logger(__name__)


class IssueStore:
    """Create / update / live-read FIRs in the shared collection for one session."""

    def __init__(self, backend, session: Session, activity: Optional[ActivityLog] = None):
        self.backend = backend
        self.session = session
        self.activity = activity
        self.path = collection_path_for_app(session.app_id)

    def _require_user(self) -> str:
        if not self.session.authenticated:
            raise NotAuthenticatedError("Authentication not ready. Cannot write.")
        return str(self.session.user_id)

    def _record(self, **kwargs: Any) -> None:
        if self.activity is not None:
            self.activity.log(actor_id=self.session.user_id or "", **kwargs)

    # ----------------------------
    # Read
    # ----------------------------
    def subscribe(
        self,
        on_change: Optional[Callable[[List[Issue]], None]] = None,
        priority: str = ALL,
        department: str = ALL,
    ) -> IssueSubscription:
        """
        Live, newest-first list of matching issues.

        Nothing is subscribed without a user id; the returned subscription
        then stays empty until cancelled.
        """
        label = f"priority={priority},department={department}"
        sub = IssueSubscription(on_change=on_change, label=label)
        if not self.session.authenticated:
            log.warning("Not subscribing to issues: no authenticated user")
            return sub

        def _on_snapshot(docs) -> None:
            issues = [Issue.from_doc(doc_id, data) for doc_id, data in docs]
            sub.publish(sort_newest_first(issues))

        def _on_error(exc: BaseException) -> None:
            log.error("Issue snapshot error (%s): %s", label, exc)
            sub.fail(exc)

        handle = self.backend.watch(self.path, equality_filters(priority, department), _on_snapshot, _on_error)
        sub.bind(handle)
        return sub

    def get_issue(self, issue_id: str) -> Optional[Issue]:
        data = self.backend.get(self.path, str(issue_id))
        return Issue.from_doc(issue_id, data) if data is not None else None

    # ----------------------------
    # Write
    # ----------------------------
    def create_issue(self, form: NewIssue, display_id: str) -> Issue:
        """
        Upload the optional image, then insert the FIR.

        Not transactional: if the insert fails after a successful upload the
        stored image is left behind.
        """
        user_id = self._require_user()

        missing = form.missing_fields()
        if missing:
            raise IssueValidationError(f"Missing required fields: {', '.join(missing)}", missing=missing)
        if form.priority not in PRIORITY_OPTIONS:
            raise IssueValidationError(f"Unknown priority: {form.priority!r}")

        image_url = None
        if form.image is not None:
            blob_path = image_path_for(user_id, form.image.name, epoch_millis())
            image_url = self.backend.upload(blob_path, form.image.data, form.image.content_type)
            log.info("Uploaded image for %s to %s", display_id, blob_path)

        now = self.backend.server_timestamp()
        issue = Issue(
            id="",
            display_id=display_id,
            room_number=form.room_number.strip(),
            issue_title=form.issue_title.strip(),
            description=form.description.strip(),
            priority=form.priority,
            status=DEFAULT_STATUS,
            department=DEFAULT_DEPARTMENT,
            image_url=image_url,
            submitted_by=user_id,
            created_at=now,
            updated_at=now,
        )
        issue.id = self.backend.add(self.path, issue.to_doc())
        log.info("Document written with ID: %s (%s)", issue.id, display_id)

        self._record(
            event_type="issue.created",
            summary=f"{display_id} submitted for {issue.room_number}: {issue.issue_title}",
            issue_id=issue.id,
            display_id=display_id,
            data={"priority": issue.priority, "has_image": image_url is not None},
        )
        return issue

    def update_field(
        self,
        issue_id: str,
        field: IssueField,
        value: str,
        previous: Optional[str] = None,
        display_id: str = "",
    ) -> None:
        """Set one mutable field plus updatedAt. Last writer wins."""
        self._require_user()

        field = IssueField(field)
        value = str(value or "").strip()
        if value not in field.options:
            raise IssueValidationError(f"{value!r} is not a valid {field.value}")
        issue_id = str(issue_id or "").strip()
        if not issue_id:
            raise IssueValidationError("Missing issue id")

        self.backend.update(
            self.path,
            issue_id,
            {field.value: value, "updatedAt": self.backend.server_timestamp()},
        )
        log.info("Updated issue %s: set %s to %s", issue_id, field.value, value)

        self._record(
            event_type="issue.field_changed",
            summary=f"{display_id or issue_id}: {field.value} set to {value}",
            issue_id=issue_id,
            display_id=display_id,
            data={"field": field.value, "prev": previous, "new": value},
        )
