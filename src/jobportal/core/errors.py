"""Error taxonomy for matching and application lifecycle operations."""

from typing import Iterable, Optional


class JobPortalError(Exception):
    """Base class for all domain errors."""


class InvalidTransition(JobPortalError):
    """Requested status is not reachable from the current status."""

    def __init__(
        self,
        application_id: Optional[str],
        current_status,
        target_status,
        allowed: Optional[Iterable] = None,
    ):
        self.application_id = application_id
        self.current_status = current_status
        self.target_status = target_status
        self.allowed = list(allowed) if allowed is not None else []

        current = getattr(current_status, "value", current_status)
        target = getattr(target_status, "value", target_status)
        allowed_text = ", ".join(getattr(s, "value", s) for s in self.allowed) or "none"
        super().__init__(
            f"Cannot move application {application_id} from '{current}' to '{target}'. "
            f"Current status is '{current}'; allowed next statuses: {allowed_text}"
        )


class ConcurrentModification(JobPortalError):
    """The persisted status changed between read and write. Safe to retry."""

    retryable = True

    def __init__(self, application_id: str, expected_status, actual_status):
        self.application_id = application_id
        self.expected_status = expected_status
        self.actual_status = actual_status

        expected = getattr(expected_status, "value", expected_status)
        actual = getattr(actual_status, "value", actual_status)
        super().__init__(
            f"Application {application_id} was modified concurrently: expected status "
            f"'{expected}' but it is now '{actual}'. Re-fetch and retry."
        )


class ApplicationNotFound(JobPortalError):
    """No application exists with the given identifier."""

    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(f"Application {application_id} not found")


class DuplicateApplication(JobPortalError):
    """The job seeker already applied to this job posting."""

    def __init__(self, job_seeker_id: str, job_posting_id: str):
        self.job_seeker_id = job_seeker_id
        self.job_posting_id = job_posting_id
        super().__init__(
            f"Job seeker {job_seeker_id} already applied to job posting {job_posting_id}"
        )


class DataAccessError(JobPortalError):
    """The backing data service failed or returned an unusable response."""


class PermissionDenied(JobPortalError):
    """The caller may not change this application."""

    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(f"Not allowed to change the status of application {application_id}")


class IncompleteInputError(JobPortalError):
    """A match was requested against a job posting without skill requirements."""

    def __init__(self, job_posting_id: Optional[str] = None):
        self.job_posting_id = job_posting_id
        super().__init__(
            f"Job posting {job_posting_id or '<unknown>'} lists no skills; "
            "there is not enough data to compute a match score"
        )


class BulkTransitionError(JobPortalError):
    """Every item of a bulk transition failed."""

    def __init__(self, report):
        self.report = report
        super().__init__(
            f"All {len(report.attempted)} bulk transition requests failed"
        )
