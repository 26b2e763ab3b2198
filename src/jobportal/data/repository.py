"""Interface to the external store holding skills, postings and applications."""

from abc import ABC, abstractmethod
from typing import List, Optional, Set

from jobportal.core.models import (
    Application,
    ApplicationStatus,
    CandidateSkill,
    JobPosting,
    JobSeeker,
    JobSkillRequirement,
    StatusHistoryEntry,
)


class ApplicationRepository(ABC):
    """
    Data access used by the matching engine and the status state machine.

    Implementations own atomicity: ``commit_status_transition`` must check the
    transition table and the expected current status and append the history
    entry as a single step, so racing writers cannot produce an illegal state.
    """

    @abstractmethod
    async def fetch_candidate_skills(self, job_seeker_id: str) -> List[CandidateSkill]:
        """Skills and proficiency of a job seeker."""

    @abstractmethod
    async def fetch_job_skill_requirements(self, job_posting_id: str) -> List[JobSkillRequirement]:
        """Required and optional skills of a job posting."""

    @abstractmethod
    async def fetch_application_current_status(self, application_id: str) -> ApplicationStatus:
        """Current status; raises ApplicationNotFound for unknown ids."""

    @abstractmethod
    async def commit_status_transition(
        self,
        application_id: str,
        expected_status: ApplicationStatus,
        new_status: ApplicationStatus,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> StatusHistoryEntry:
        """
        Atomically move an application from ``expected_status`` to ``new_status``.

        Raises:
            InvalidTransition: the transition table forbids the move
            ConcurrentModification: the stored status is no longer ``expected_status``
            ApplicationNotFound: unknown application
        """

    @abstractmethod
    async def append_status_history(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        """Append an audit record. Called by ``commit_status_transition``."""

    @abstractmethod
    async def create_application(
        self,
        job_seeker_id: str,
        job_posting_id: str,
        actor: Optional[str] = None,
    ) -> Application:
        """Create an application in the initial status with its creation record."""

    @abstractmethod
    async def get_application(self, application_id: str) -> Application:
        """Raises ApplicationNotFound for unknown ids."""

    @abstractmethod
    async def list_applications_for_job(self, job_posting_id: str) -> List[Application]:
        """Applications to a posting, oldest first."""

    @abstractmethod
    async def list_applied_job_ids(self, job_seeker_id: str) -> Set[str]:
        """Postings the job seeker already applied to."""

    @abstractmethod
    async def list_active_job_postings(self, limit: int) -> List[JobPosting]:
        """Active postings, newest first."""

    @abstractmethod
    async def get_job_seeker(self, job_seeker_id: str) -> Optional[JobSeeker]:
        """Job seeker profile or None."""

    @abstractmethod
    async def get_job_posting(self, job_posting_id: str) -> Optional[JobPosting]:
        """Job posting or None."""

    @abstractmethod
    async def fetch_status_history(self, application_id: str) -> List[StatusHistoryEntry]:
        """Audit records of an application, oldest first."""

    async def close(self) -> None:
        """Release backend resources."""
