"""Domain models, errors and session context."""

from .models import (
    Application,
    ApplicationStatus,
    CandidateSkill,
    JobPosting,
    JobSeeker,
    JobSkillRequirement,
    Proficiency,
    Skill,
    StatusHistoryEntry,
)
from .errors import (
    ApplicationNotFound,
    BulkTransitionError,
    ConcurrentModification,
    DataAccessError,
    DuplicateApplication,
    IncompleteInputError,
    InvalidTransition,
    JobPortalError,
    PermissionDenied,
)
from .session import AdminRole, CompanyRole, JobSeekerRole, Session

__all__ = [
    "Application",
    "ApplicationStatus",
    "CandidateSkill",
    "JobPosting",
    "JobSeeker",
    "JobSkillRequirement",
    "Proficiency",
    "Skill",
    "StatusHistoryEntry",
    "ApplicationNotFound",
    "BulkTransitionError",
    "ConcurrentModification",
    "DataAccessError",
    "DuplicateApplication",
    "IncompleteInputError",
    "InvalidTransition",
    "JobPortalError",
    "PermissionDenied",
    "AdminRole",
    "CompanyRole",
    "JobSeekerRole",
    "Session",
]
