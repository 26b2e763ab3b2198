"""Core data models for the job portal matching and application lifecycle."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    """Timezone-aware current time used for every timestamp in the domain."""
    return datetime.now(timezone.utc)


class Proficiency(str, Enum):
    """Self-declared skill proficiency of a job seeker."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ApplicationStatus(str, Enum):
    """Lifecycle status of an application."""
    PENDING = "pending"
    REVIEWING = "reviewing"
    INTERVIEW = "interview"
    OFFERED = "offered"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class Skill(BaseModel):
    """Catalog skill. Reference data, never mutated by the cores."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Skill identifier")
    name: str = Field(..., description="Display name")
    category: Optional[str] = Field(None, description="Skill category")


class CandidateSkill(BaseModel):
    """A job seeker's skill with its proficiency."""
    skill: Skill = Field(..., description="Referenced skill")
    proficiency: Optional[Union[Proficiency, str]] = Field(
        None, description="Proficiency level; unknown values are kept as-is"
    )

    @property
    def skill_id(self) -> str:
        return self.skill.id


class JobSkillRequirement(BaseModel):
    """A skill listed on a job posting."""
    skill: Skill = Field(..., description="Referenced skill")
    is_required: bool = Field(False, description="Mandatory (True) or nice-to-have (False)")

    @property
    def skill_id(self) -> str:
        return self.skill.id


class JobSeeker(BaseModel):
    """Job seeker profile fields the cores read."""
    id: str = Field(default_factory=_new_id, description="Job seeker identifier")
    full_name: Optional[str] = Field(None, description="Full name")
    location: Optional[str] = Field(None, description="Current location")
    remote_ok: Optional[bool] = Field(None, description="Open to remote work")
    skills: List[CandidateSkill] = Field(default_factory=list, description="Skill inventory")


class JobPosting(BaseModel):
    """Job posting fields the cores read."""
    id: str = Field(default_factory=_new_id, description="Job posting identifier")
    title: str = Field(..., description="Job title")
    company_id: Optional[str] = Field(None, description="Owning company")
    location: Optional[str] = Field(None, description="Job location")
    remote_ok: Optional[bool] = Field(None, description="Remote work allowed")
    is_active: bool = Field(True, description="Listed publicly")
    created_at: datetime = Field(default_factory=utcnow, description="Creation time")
    skills: List[JobSkillRequirement] = Field(default_factory=list, description="Skill requirements")


class Application(BaseModel):
    """A job seeker's application to one job posting."""
    id: str = Field(default_factory=_new_id, description="Application identifier")
    job_seeker_id: str = Field(..., description="Applicant")
    job_posting_id: str = Field(..., description="Target job posting")
    status: ApplicationStatus = Field(ApplicationStatus.PENDING, description="Lifecycle status")
    applied_at: datetime = Field(default_factory=utcnow, description="Application time")
    updated_at: datetime = Field(default_factory=utcnow, description="Last status change")


class StatusHistoryEntry(BaseModel):
    """Append-only audit record of one status change."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, description="Entry identifier")
    application_id: str = Field(..., description="Application")
    old_status: Optional[ApplicationStatus] = Field(None, description="Previous status, None on creation")
    new_status: ApplicationStatus = Field(..., description="Status after the change")
    changed_by: Optional[str] = Field(None, description="Actor, None for system")
    changed_at: datetime = Field(default_factory=utcnow, description="Change time")
    notes: Optional[str] = Field(None, description="Optional notes")
