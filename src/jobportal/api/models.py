"""API models for request/response schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from jobportal.core.models import ApplicationStatus


class CandidateSkillInput(BaseModel):
    """A job seeker skill given by id or by name."""
    skill_id: Optional[str] = Field(None, description="Catalog skill id; resolved from name when omitted")
    name: str = Field(..., description="Skill name or synonym")
    category: Optional[str] = Field(None, description="Skill category")
    proficiency: Optional[str] = Field(None, description="beginner/intermediate/advanced/expert")


class JobSkillInput(BaseModel):
    """A job posting skill requirement given by id or by name."""
    skill_id: Optional[str] = Field(None, description="Catalog skill id; resolved from name when omitted")
    name: str = Field(..., description="Skill name or synonym")
    category: Optional[str] = Field(None, description="Skill category")
    is_required: bool = Field(False, description="Mandatory skill")


class ScoreRequest(BaseModel):
    """Ad-hoc match score request."""
    candidate_skills: List[CandidateSkillInput] = Field(default_factory=list, description="Candidate skills")
    job_skills: List[JobSkillInput] = Field(default_factory=list, description="Job skill requirements")
    job_seeker_id: Optional[str] = Field(None, description="Job seeker identifier")
    job_posting_id: Optional[str] = Field(None, description="Job posting identifier")
    job_location: Optional[str] = Field(None, description="Job location")
    job_remote_ok: Optional[bool] = Field(None, description="Job allows remote work")
    seeker_location: Optional[str] = Field(None, description="Job seeker location")
    seeker_remote_ok: Optional[bool] = Field(None, description="Job seeker open to remote work")

    @property
    def has_location_data(self) -> bool:
        return any(
            value is not None
            for value in (self.job_location, self.job_remote_ok, self.seeker_location, self.seeker_remote_ok)
        )


class ScoreResponse(BaseModel):
    """Match score with optional presentation breakdown."""
    match: Dict[str, Any] = Field(..., description="Skills-only match result")
    label: str = Field(..., description="Seeker-facing score label")
    explanation: Optional[Dict[str, Any]] = Field(None, description="Blended breakdown")


class RankedCandidatesResponse(BaseModel):
    """Applicants of a job posting ranked by match score."""
    job_posting_id: str = Field(..., description="Job posting identifier")
    ranked: List[Dict[str, Any]] = Field(..., description="Match results, best first")
    failures: Dict[str, str] = Field(default_factory=dict, description="Application id to error")


class RecommendationsResponse(BaseModel):
    """Top job postings for a job seeker."""
    job_seeker_id: str = Field(..., description="Job seeker identifier")
    recommendations: List[Dict[str, Any]] = Field(..., description="Scored job postings, best first")


class CreateApplicationRequest(BaseModel):
    """Request to apply to a job posting."""
    job_seeker_id: str = Field(..., description="Applicant")
    job_posting_id: str = Field(..., description="Target job posting")


class TransitionRequest(BaseModel):
    """Request to change an application's status."""
    target_status: ApplicationStatus = Field(..., description="Requested status")
    notes: Optional[str] = Field(None, description="Optional notes for the audit trail")


class AdvanceRequest(BaseModel):
    """Request to move an application to its next pipeline step."""
    notes: Optional[str] = Field(None, description="Optional notes for the audit trail")


class BulkTransitionRequest(BaseModel):
    """Request to apply one status change to several applications."""
    application_ids: List[str] = Field(..., description="Applications, processed in order")
    target_status: ApplicationStatus = Field(..., description="Requested status")
    notes: Optional[str] = Field(None, description="Optional notes for the audit trail")


class TransitionsResponse(BaseModel):
    """Current status and reachable statuses of an application."""
    application_id: str = Field(..., description="Application identifier")
    current_status: ApplicationStatus = Field(..., description="Current status")
    current_label: str = Field(..., description="Display label of the current status")
    allowed_statuses: List[ApplicationStatus] = Field(..., description="Valid next statuses")
    advance_status: Optional[ApplicationStatus] = Field(None, description="Next pipeline step, if any")
    is_terminal: bool = Field(..., description="No further transitions possible")


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="Service version")
    components: Dict[str, str] = Field(..., description="Component status")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
