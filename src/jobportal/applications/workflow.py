"""Application status state machine."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from jobportal.applications.status import (
    StatusLike,
    as_status,
    next_advance_status,
    valid_next_statuses,
    validate_transition,
)
from jobportal.core.errors import (
    BulkTransitionError,
    ConcurrentModification,
    InvalidTransition,
    JobPortalError,
)
from jobportal.core.models import Application, ApplicationStatus, StatusHistoryEntry
from jobportal.core.session import Session, actor_of
from jobportal.data.repository import ApplicationRepository
from jobportal.utils.logging import get_logger, log_transition

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransitionOutcome:
    """A committed status change."""
    application_id: str
    old_status: ApplicationStatus
    new_status: ApplicationStatus
    history_entry: StatusHistoryEntry

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_id": self.application_id,
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
            "history_entry": self.history_entry.model_dump(mode="json"),
        }


class BulkItemState(Enum):
    """Per-item state of a bulk transition."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class BulkItemResult:
    """Result of one application in a bulk transition."""
    application_id: str
    state: BulkItemState
    outcome: Optional[TransitionOutcome] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state is BulkItemState.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_id": self.application_id,
            "state": self.state.value,
            "success": self.success,
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


@dataclass
class BulkTransitionReport:
    """Per-item results of a bulk transition, in request order."""
    target_status: ApplicationStatus
    items: List[BulkItemResult] = field(default_factory=list)

    @property
    def attempted(self) -> List[BulkItemResult]:
        return [i for i in self.items if i.state is not BulkItemState.CANCELLED]

    @property
    def succeeded(self) -> List[BulkItemResult]:
        return [i for i in self.items if i.state is BulkItemState.SUCCEEDED]

    @property
    def failed(self) -> List[BulkItemResult]:
        return [i for i in self.items if i.state is BulkItemState.FAILED]

    @property
    def cancelled(self) -> List[BulkItemResult]:
        return [i for i in self.items if i.state is BulkItemState.CANCELLED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_status": self.target_status.value,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "cancelled": len(self.cancelled),
            "items": [i.to_dict() for i in self.items],
        }


class ApplicationWorkflow:
    """Moves applications through their lifecycle and keeps the audit trail."""

    def __init__(self, repository: ApplicationRepository, session: Optional[Session] = None):
        self.logger = logger.bind(component="application_workflow")
        self.repository = repository
        self.session = session

    @property
    def actor(self) -> Optional[str]:
        return actor_of(self.session)

    async def create_application(self, job_seeker_id: str, job_posting_id: str) -> Application:
        """Create an application in the initial status."""
        return await self.repository.create_application(
            job_seeker_id, job_posting_id, actor=self.actor
        )

    async def allowed_transitions(self, application_id: str) -> List[ApplicationStatus]:
        current = await self.repository.fetch_application_current_status(application_id)
        return valid_next_statuses(current)

    async def request_transition(
        self,
        application_id: str,
        target: StatusLike,
        notes: Optional[str] = None,
    ) -> TransitionOutcome:
        """
        Move an application to ``target``.

        The store re-checks the status it was read with, so a concurrent
        writer surfaces as ConcurrentModification instead of being overwritten.

        Raises:
            ApplicationNotFound: unknown application
            InvalidTransition: ``target`` is not reachable from the current status
            ConcurrentModification: the status changed after it was read
        """
        target_status = as_status(target)
        current = await self.repository.fetch_application_current_status(application_id)

        try:
            validate_transition(application_id, current, target_status)
            entry = await self.repository.commit_status_transition(
                application_id,
                expected_status=current,
                new_status=target_status,
                actor=self.actor,
                notes=notes,
            )
        except InvalidTransition as e:
            self.logger.warning(
                "Rejected status transition",
                allowed=[s.value for s in e.allowed],
                **log_transition(application_id, e.current_status, target_status, self.actor),
            )
            raise
        except ConcurrentModification as e:
            self.logger.warning(
                "Concurrent status modification",
                expected_status=current.value,
                actual_status=getattr(e.actual_status, "value", e.actual_status),
                **log_transition(application_id, current, target_status, self.actor),
            )
            raise

        self.logger.info(
            "Application status changed",
            **log_transition(application_id, current, target_status, self.actor),
        )
        return TransitionOutcome(
            application_id=application_id,
            old_status=current,
            new_status=target_status,
            history_entry=entry,
        )

    async def advance(self, application_id: str, notes: Optional[str] = None) -> TransitionOutcome:
        """Move to the next forward step of the hiring pipeline."""
        current = await self.repository.fetch_application_current_status(application_id)
        target = next_advance_status(current)
        if target is None:
            self.logger.warning(
                "No forward step available",
                application_id=application_id,
                status=current.value,
            )
            raise InvalidTransition(
                application_id,
                current,
                "advance",
                allowed=valid_next_statuses(current),
            )
        return await self.request_transition(application_id, target, notes=notes)

    async def reject(self, application_id: str, notes: Optional[str] = None) -> TransitionOutcome:
        return await self.request_transition(application_id, ApplicationStatus.REJECTED, notes=notes)

    async def withdraw(self, application_id: str, notes: Optional[str] = None) -> TransitionOutcome:
        return await self.request_transition(application_id, ApplicationStatus.WITHDRAWN, notes=notes)

    async def bulk_transition(
        self,
        application_ids: Iterable[str],
        target: StatusLike,
        notes: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BulkTransitionReport:
        """
        Apply the same transition to several applications, one after another.

        Every item is attempted independently; a failure never blocks the
        rest. Setting ``cancel_event`` stops further requests and the remaining
        items are reported as cancelled. Items already committed stay
        committed.

        Raises:
            BulkTransitionError: every attempted item failed
        """
        target_status = as_status(target)
        report = BulkTransitionReport(target_status=target_status)
        ids = list(application_ids)

        for application_id in ids:
            if cancel_event is not None and cancel_event.is_set():
                report.items.append(BulkItemResult(application_id, BulkItemState.CANCELLED))
                continue

            try:
                outcome = await self.request_transition(application_id, target_status, notes=notes)
            except JobPortalError as e:
                report.items.append(BulkItemResult(
                    application_id,
                    BulkItemState.FAILED,
                    error_type=type(e).__name__,
                    error_message=str(e),
                ))
            else:
                report.items.append(BulkItemResult(application_id, BulkItemState.SUCCEEDED, outcome=outcome))

        self.logger.info(
            "Bulk transition completed",
            target_status=target_status.value,
            requested=len(ids),
            succeeded=len(report.succeeded),
            failed=len(report.failed),
            cancelled=len(report.cancelled),
        )

        if report.attempted and not report.succeeded:
            raise BulkTransitionError(report)
        return report

    async def history(self, application_id: str) -> List[StatusHistoryEntry]:
        """Audit trail of an application, oldest first."""
        await self.repository.get_application(application_id)
        entries = await self.repository.fetch_status_history(application_id)
        return sorted(entries, key=lambda e: e.changed_at)
