"""Batch scoring of applicants and top-K job recommendations."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from jobportal.config import settings
from jobportal.core.errors import DataAccessError
from jobportal.core.models import Application, JobPosting
from jobportal.data.repository import ApplicationRepository
from jobportal.matching.explanation import MatchExplanation, explain_match
from jobportal.matching.scoring import MatchEngine, MatchResult
from jobportal.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class BatchScoringResult:
    """Outcome of scoring every applicant of one job posting."""
    job_posting_id: str
    ranked: List[MatchResult] = field(default_factory=list)
    results: Dict[str, MatchResult] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def scored_count(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_posting_id": self.job_posting_id,
            "ranked": [r.to_dict() for r in self.ranked],
            "failures": dict(self.failures),
        }


@dataclass
class JobRecommendation:
    """A job posting scored for one job seeker."""
    job_posting: JobPosting
    result: MatchResult
    explanation: MatchExplanation

    @property
    def score(self) -> int:
        return self.result.skills_only_score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_posting_id": self.job_posting.id,
            "title": self.job_posting.title,
            "location": self.job_posting.location,
            "remote_ok": self.job_posting.remote_ok,
            "match": self.result.to_dict(),
            "explanation": self.explanation.to_dict(),
        }


def rank_results(results: Iterable[MatchResult], descending: bool = True) -> List[MatchResult]:
    """Sort by skills-only score. The sort is stable, so ties keep input order."""
    return sorted(results, key=lambda r: r.skills_only_score, reverse=descending)


async def rank_candidates(
    job_posting_id: str,
    applicants: List[Application],
    repository: ApplicationRepository,
    batch_size: Optional[int] = None,
    engine: Optional[MatchEngine] = None,
) -> BatchScoringResult:
    """
    Score every applicant of a job posting and rank them best first.

    At most ``batch_size`` candidate lookups run concurrently. An applicant
    whose skills cannot be fetched is reported in ``failures`` and left out of
    the ranking; the call raises only when no applicant could be scored.
    """
    engine = engine or MatchEngine()
    batch = BatchScoringResult(job_posting_id=job_posting_id)
    if not applicants:
        return batch

    log = logger.bind(component="ranking", job_posting_id=job_posting_id)
    log.info("Ranking candidates", applicant_count=len(applicants))

    job_skills = await repository.fetch_job_skill_requirements(job_posting_id)
    semaphore = asyncio.Semaphore(max(1, batch_size or settings.scoring_batch_size))

    async def score_one(application: Application) -> MatchResult:
        async with semaphore:
            candidate_skills = await repository.fetch_candidate_skills(application.job_seeker_id)
        return engine.score(
            candidate_skills,
            job_skills,
            job_seeker_id=application.job_seeker_id,
            job_posting_id=job_posting_id,
            application_id=application.id,
        )

    outcomes = await asyncio.gather(
        *(score_one(application) for application in applicants),
        return_exceptions=True,
    )

    for application, outcome in zip(applicants, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            log.error("Failed to score applicant", application_id=application.id, error=str(outcome))
            batch.failures[application.id] = str(outcome)
        else:
            batch.results[application.id] = outcome

    if not batch.results:
        raise DataAccessError(
            f"Could not score any of the {len(applicants)} applicants of job posting {job_posting_id}"
        )

    # Iterate in application order so the stable sort keeps it on ties
    batch.ranked = rank_results(
        batch.results[a.id] for a in applicants if a.id in batch.results
    )

    log.info(
        "Ranking completed",
        scored=batch.scored_count,
        failed=len(batch.failures),
    )
    return batch


async def recommend_jobs(
    job_seeker_id: str,
    repository: ApplicationRepository,
    limit: Optional[int] = None,
    catalog_limit: Optional[int] = None,
    engine: Optional[MatchEngine] = None,
) -> List[JobRecommendation]:
    """Top active job postings for a job seeker, excluding ones already applied to."""
    engine = engine or MatchEngine()
    limit = settings.recommendation_limit if limit is None else limit
    catalog_limit = settings.recommendation_catalog_limit if catalog_limit is None else catalog_limit
    log = logger.bind(component="recommendations", job_seeker_id=job_seeker_id)

    if limit <= 0:
        return []

    job_seeker = await repository.get_job_seeker(job_seeker_id)
    candidate_skills = (
        job_seeker.skills if job_seeker is not None
        else await repository.fetch_candidate_skills(job_seeker_id)
    )
    applied = await repository.list_applied_job_ids(job_seeker_id)
    postings = [
        p for p in await repository.list_active_job_postings(catalog_limit)
        if p.id not in applied
    ]

    recommendations = []
    for posting in postings:
        job_skills = posting.skills or await repository.fetch_job_skill_requirements(posting.id)
        result = engine.score(
            candidate_skills, job_skills, job_seeker_id=job_seeker_id, job_posting_id=posting.id
        )
        explanation = explain_match(
            result,
            job_location=posting.location,
            job_remote_ok=posting.remote_ok,
            seeker_location=job_seeker.location if job_seeker else None,
            seeker_remote_ok=job_seeker.remote_ok if job_seeker else None,
        )
        recommendations.append(JobRecommendation(posting, result, explanation))

    recommendations.sort(key=lambda r: r.score, reverse=True)

    log.info(
        "Recommendations computed",
        candidates=len(postings),
        excluded_applied=len(applied),
        returned=min(limit, len(recommendations)),
    )
    return recommendations[:limit]
