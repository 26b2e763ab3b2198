"""In-process repository used for tests, demos and the default API backend."""

import asyncio
from typing import Dict, Iterable, List, Optional, Set

from jobportal.applications.status import INITIAL_STATUS, validate_transition
from jobportal.core.errors import (
    ApplicationNotFound,
    ConcurrentModification,
    DuplicateApplication,
)
from jobportal.core.models import (
    Application,
    ApplicationStatus,
    CandidateSkill,
    JobPosting,
    JobSeeker,
    JobSkillRequirement,
    Skill,
    StatusHistoryEntry,
    utcnow,
)
from jobportal.data.repository import ApplicationRepository
from jobportal.utils.logging import get_logger

logger = get_logger(__name__)


class InMemoryRepository(ApplicationRepository):
    """
    Dict-backed store.

    A single lock serialises the check-and-write of status transitions, which
    gives the same compare-and-swap guarantee the remote store provides.
    """

    def __init__(self):
        self.logger = logger.bind(component="memory_repository")
        self.skills: Dict[str, Skill] = {}
        self.job_seekers: Dict[str, JobSeeker] = {}
        self.job_postings: Dict[str, JobPosting] = {}
        self.applications: Dict[str, Application] = {}
        self.history: List[StatusHistoryEntry] = []
        self._lock = asyncio.Lock()

    # Seeding helpers

    def add_skill(self, skill: Skill) -> Skill:
        self.skills[skill.id] = skill
        return skill

    def add_job_seeker(self, job_seeker: JobSeeker) -> JobSeeker:
        for candidate_skill in job_seeker.skills:
            self.skills.setdefault(candidate_skill.skill_id, candidate_skill.skill)
        self.job_seekers[job_seeker.id] = job_seeker
        return job_seeker

    def add_job_posting(self, job_posting: JobPosting) -> JobPosting:
        for requirement in job_posting.skills:
            self.skills.setdefault(requirement.skill_id, requirement.skill)
        self.job_postings[job_posting.id] = job_posting
        return job_posting

    def add_application(self, application: Application) -> Application:
        """Insert an application as-is, bypassing the creation workflow."""
        self.applications[application.id] = application
        return application

    # Reads

    async def fetch_candidate_skills(self, job_seeker_id: str) -> List[CandidateSkill]:
        job_seeker = self.job_seekers.get(job_seeker_id)
        return list(job_seeker.skills) if job_seeker else []

    async def fetch_job_skill_requirements(self, job_posting_id: str) -> List[JobSkillRequirement]:
        job_posting = self.job_postings.get(job_posting_id)
        return list(job_posting.skills) if job_posting else []

    async def fetch_application_current_status(self, application_id: str) -> ApplicationStatus:
        return (await self.get_application(application_id)).status

    async def get_application(self, application_id: str) -> Application:
        application = self.applications.get(application_id)
        if application is None:
            raise ApplicationNotFound(application_id)
        return application.model_copy()

    async def list_applications_for_job(self, job_posting_id: str) -> List[Application]:
        matching = [a for a in self.applications.values() if a.job_posting_id == job_posting_id]
        return [a.model_copy() for a in sorted(matching, key=lambda a: a.applied_at)]

    async def list_applied_job_ids(self, job_seeker_id: str) -> Set[str]:
        return {
            a.job_posting_id for a in self.applications.values()
            if a.job_seeker_id == job_seeker_id
        }

    async def list_active_job_postings(self, limit: int) -> List[JobPosting]:
        active = [p for p in self.job_postings.values() if p.is_active]
        active.sort(key=lambda p: p.created_at, reverse=True)
        return active[:limit]

    async def get_job_seeker(self, job_seeker_id: str) -> Optional[JobSeeker]:
        return self.job_seekers.get(job_seeker_id)

    async def get_job_posting(self, job_posting_id: str) -> Optional[JobPosting]:
        return self.job_postings.get(job_posting_id)

    async def fetch_status_history(self, application_id: str) -> List[StatusHistoryEntry]:
        return [e for e in self.history if e.application_id == application_id]

    # Writes

    async def create_application(
        self,
        job_seeker_id: str,
        job_posting_id: str,
        actor: Optional[str] = None,
    ) -> Application:
        async with self._lock:
            for existing in self.applications.values():
                if existing.job_seeker_id == job_seeker_id and existing.job_posting_id == job_posting_id:
                    raise DuplicateApplication(job_seeker_id, job_posting_id)

            application = Application(
                job_seeker_id=job_seeker_id,
                job_posting_id=job_posting_id,
                status=INITIAL_STATUS,
            )
            self.applications[application.id] = application
            await self.append_status_history(StatusHistoryEntry(
                application_id=application.id,
                old_status=None,
                new_status=INITIAL_STATUS,
                changed_by=actor,
                changed_at=application.applied_at,
            ))

        self.logger.info(
            "Application created",
            application_id=application.id,
            job_seeker_id=job_seeker_id,
            job_posting_id=job_posting_id,
        )
        return application.model_copy()

    async def commit_status_transition(
        self,
        application_id: str,
        expected_status: ApplicationStatus,
        new_status: ApplicationStatus,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> StatusHistoryEntry:
        async with self._lock:
            application = self.applications.get(application_id)
            if application is None:
                raise ApplicationNotFound(application_id)

            if application.status != expected_status:
                raise ConcurrentModification(application_id, expected_status, application.status)

            validate_transition(application_id, application.status, new_status)

            now = utcnow()
            entry = StatusHistoryEntry(
                application_id=application_id,
                old_status=application.status,
                new_status=new_status,
                changed_by=actor,
                changed_at=now,
                notes=notes,
            )
            self.applications[application_id] = application.model_copy(
                update={"status": new_status, "updated_at": now}
            )
            return await self.append_status_history(entry)

    async def append_status_history(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        self.history.append(entry)
        return entry

    @classmethod
    def seeded(
        cls,
        job_seekers: Iterable[JobSeeker] = (),
        job_postings: Iterable[JobPosting] = (),
    ) -> "InMemoryRepository":
        """Repository pre-populated with profiles and postings."""
        repository = cls()
        for job_seeker in job_seekers:
            repository.add_job_seeker(job_seeker)
        for job_posting in job_postings:
            repository.add_job_posting(job_posting)
        return repository
