"""API routes for the job portal matching core."""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from jobportal import __version__
from jobportal.api.models import (
    AdvanceRequest,
    BulkTransitionRequest,
    CreateApplicationRequest,
    HealthCheck,
    RankedCandidatesResponse,
    RecommendationsResponse,
    ScoreRequest,
    ScoreResponse,
    TransitionRequest,
    TransitionsResponse,
)
from jobportal.applications.status import (
    STATUS_LABELS,
    is_terminal,
    next_advance_status,
    valid_next_statuses,
)
from jobportal.applications.workflow import ApplicationWorkflow
from jobportal.config import settings
from jobportal.core.models import CandidateSkill, JobSkillRequirement
from jobportal.core.session import Session
from jobportal.data.repository import ApplicationRepository
from jobportal.matching.catalog import SkillCatalog
from jobportal.matching.explanation import explain_match, result_label
from jobportal.matching.ranking import rank_candidates, recommend_jobs
from jobportal.matching.scoring import MatchEngine
from jobportal.utils.logging import get_logger

logger = get_logger(__name__)

# Create routers
match_router = APIRouter(prefix="/match", tags=["match"])
applications_router = APIRouter(prefix="/applications", tags=["applications"])
health_router = APIRouter(prefix="/health", tags=["health"])


def get_repository(request: Request) -> ApplicationRepository:
    """Repository created by the application lifespan."""
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise HTTPException(status_code=503, detail="Data backend not initialized")
    return repository


async def get_session(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_profile_id: Optional[str] = Header(None),
) -> Optional[Session]:
    """Build the caller's session from identity headers; None acts as the system."""
    return Session.from_headers(x_user_id, x_user_role, x_profile_id)


def get_workflow(
    repository: ApplicationRepository = Depends(get_repository),
    session: Optional[Session] = Depends(get_session),
) -> ApplicationWorkflow:
    return ApplicationWorkflow(repository, session=session)


# Match scoring

@match_router.post("/score", response_model=ScoreResponse)
async def score(request: ScoreRequest):
    """Score candidate skills against job skills."""
    catalog = SkillCatalog.default()
    candidate_skills = [
        CandidateSkill(
            skill=catalog.skill_for(item.name, skill_id=item.skill_id, category=item.category),
            proficiency=item.proficiency,
        )
        for item in request.candidate_skills
    ]
    job_skills = [
        JobSkillRequirement(
            skill=catalog.skill_for(item.name, skill_id=item.skill_id, category=item.category),
            is_required=item.is_required,
        )
        for item in request.job_skills
    ]

    result = MatchEngine().score(
        candidate_skills,
        job_skills,
        job_seeker_id=request.job_seeker_id,
        job_posting_id=request.job_posting_id,
    )

    explanation = None
    if request.has_location_data:
        explanation = explain_match(
            result,
            job_location=request.job_location,
            job_remote_ok=request.job_remote_ok,
            seeker_location=request.seeker_location,
            seeker_remote_ok=request.seeker_remote_ok,
        ).to_dict()

    return ScoreResponse(
        match=result.to_dict(),
        label=result_label(result),
        explanation=explanation,
    )


@match_router.get("/jobs/{job_posting_id}/candidates", response_model=RankedCandidatesResponse)
async def ranked_candidates(
    job_posting_id: str,
    batch_size: Optional[int] = Query(None, ge=1, le=100),
    repository: ApplicationRepository = Depends(get_repository),
):
    """Applicants of a job posting, best match first."""
    applicants = await repository.list_applications_for_job(job_posting_id)
    batch = await rank_candidates(job_posting_id, applicants, repository, batch_size=batch_size)
    return RankedCandidatesResponse(**batch.to_dict())


@match_router.get("/seekers/{job_seeker_id}/recommendations", response_model=RecommendationsResponse)
async def recommendations(
    job_seeker_id: str,
    limit: int = Query(settings.recommendation_limit, ge=0, le=100),
    repository: ApplicationRepository = Depends(get_repository),
):
    """Top active job postings for a job seeker."""
    recommended = await recommend_jobs(job_seeker_id, repository, limit=limit)
    return RecommendationsResponse(
        job_seeker_id=job_seeker_id,
        recommendations=[r.to_dict() for r in recommended],
    )


# Application lifecycle

@applications_router.post("", status_code=201)
async def create_application(
    request: CreateApplicationRequest,
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """Apply to a job posting."""
    application = await workflow.create_application(request.job_seeker_id, request.job_posting_id)
    return application.model_dump(mode="json")


@applications_router.post("/bulk-transition")
async def bulk_transition(
    request: BulkTransitionRequest,
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """Apply one status change to several applications."""
    report = await workflow.bulk_transition(
        request.application_ids,
        request.target_status,
        notes=request.notes,
    )
    return report.to_dict()


@applications_router.get("/{application_id}")
async def get_application(
    application_id: str,
    repository: ApplicationRepository = Depends(get_repository),
):
    application = await repository.get_application(application_id)
    return application.model_dump(mode="json")


@applications_router.get("/{application_id}/transitions", response_model=TransitionsResponse)
async def get_transitions(
    application_id: str,
    repository: ApplicationRepository = Depends(get_repository),
):
    """Current status and the statuses it may move to."""
    current = await repository.fetch_application_current_status(application_id)
    return TransitionsResponse(
        application_id=application_id,
        current_status=current,
        current_label=STATUS_LABELS[current],
        allowed_statuses=valid_next_statuses(current),
        advance_status=next_advance_status(current),
        is_terminal=is_terminal(current),
    )


@applications_router.post("/{application_id}/transition")
async def transition(
    application_id: str,
    request: TransitionRequest,
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    outcome = await workflow.request_transition(application_id, request.target_status, notes=request.notes)
    return outcome.to_dict()


@applications_router.post("/{application_id}/advance")
async def advance(
    application_id: str,
    request: Optional[AdvanceRequest] = None,
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """Move an application to its next pipeline step."""
    outcome = await workflow.advance(application_id, notes=request.notes if request else None)
    return outcome.to_dict()


@applications_router.get("/{application_id}/history")
async def history(
    application_id: str,
    workflow: ApplicationWorkflow = Depends(get_workflow),
) -> List[dict]:
    entries = await workflow.history(application_id)
    return [e.model_dump(mode="json") for e in entries]


@health_router.get("/", response_model=HealthCheck)
async def health_check(request: Request):
    """Health check endpoint."""
    repository = getattr(request.app.state, "repository", None)
    components = {
        "repository": "healthy" if repository is not None else "unavailable",
        "data_backend": settings.data_backend,
    }

    return HealthCheck(
        status="healthy" if repository is not None else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        components=components,
    )


# Export all routers
all_routers = [
    match_router,
    applications_router,
    health_router,
]
