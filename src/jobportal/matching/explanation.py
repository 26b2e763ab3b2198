"""Seeker-facing breakdown of a match: skills, location and remote work.

The blended score shown to job seekers weights skills 60%, location 20% and
remote work 20%. It is a presentation of the core skills-only score, kept
separate from it and always reported next to it under a different name.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional

from jobportal.matching.scoring import MatchResult, proficiency_weight

SKILLS_WEIGHT = 60
LOCATION_WEIGHT = 20
REMOTE_WEIGHT = 20

NOT_ENOUGH_DATA_LABEL = "Not enough data"


class FactorStatus(Enum):
    """Display status of a score factor."""
    EXCELLENT = "excellent"
    GOOD = "good"
    PARTIAL = "partial"
    MISSING = "missing"


@dataclass(frozen=True)
class ScoreFactor:
    """One weighted factor of the blended score."""
    name: str
    score: Decimal
    max_score: int
    weight: int
    status: FactorStatus
    explanation: str

    @property
    def percentage(self) -> int:
        if not self.max_score:
            return 0
        value = self.score * 100 / self.max_score
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": float(self.score),
            "max_score": self.max_score,
            "weight": self.weight,
            "status": self.status.value,
            "percentage": self.percentage,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class MatchExplanation:
    """Blended score plus the reasoning shown to a job seeker."""
    skills_only_score: int
    blended_score: int
    factors: List[ScoreFactor]
    summary: str
    recommendations: List[str] = field(default_factory=list)
    location_match: bool = False
    remote_match: bool = False
    has_sufficient_data: bool = True

    @property
    def label(self) -> str:
        if not self.has_sufficient_data:
            return NOT_ENOUGH_DATA_LABEL
        return seeker_score_label(self.blended_score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skills_only_score": self.skills_only_score,
            "blended_score": self.blended_score,
            "label": self.label,
            "factors": [f.to_dict() for f in self.factors],
            "summary": self.summary,
            "recommendations": self.recommendations,
            "location_match": self.location_match,
            "remote_match": self.remote_match,
            "has_sufficient_data": self.has_sufficient_data,
        }


def location_matches(job_location: Optional[str], seeker_location: Optional[str]) -> bool:
    """A job without a location matches anyone; otherwise either must contain the other."""
    if not job_location:
        return True
    if not seeker_location:
        return False
    job_lower = job_location.lower()
    seeker_lower = seeker_location.lower()
    return seeker_lower in job_lower or job_lower in seeker_lower


def remote_matches(job_remote_ok: Optional[bool], seeker_remote_ok: Optional[bool]) -> bool:
    return bool(job_remote_ok) and bool(seeker_remote_ok)


def score_color(score: int) -> str:
    """Badge colour for a score."""
    if score >= 70:
        return "success"
    if score >= 40:
        return "warning"
    return "danger"


def seeker_score_label(score: int) -> str:
    if score >= 70:
        return "Excellent Match"
    if score >= 40:
        return "Good Match"
    return "Partial Match"


def employer_score_label(score: int) -> str:
    if score >= 80:
        return "Excellent Match"
    if score >= 60:
        return "Strong Match"
    if score >= 40:
        return "Moderate Match"
    return "Low Match"


def result_label(result: MatchResult, employer: bool = False) -> str:
    """Label for a core result, flagging jobs that list no skills."""
    if not result.has_sufficient_data:
        return NOT_ENOUGH_DATA_LABEL
    if employer:
        return employer_score_label(result.skills_only_score)
    return seeker_score_label(result.skills_only_score)


def _skills_factor(result: MatchResult) -> ScoreFactor:
    matched = result.matched_skills + result.partially_matched_skills
    matched_required = sum(1 for s in matched if s.is_required)
    matched_optional = len(matched) - matched_required
    missing_required = sum(1 for s in result.missing_skills if s.is_required)
    missing_optional = len(result.missing_skills) - missing_required
    total_required = matched_required + missing_required
    total_optional = matched_optional + missing_optional

    if not result.has_sufficient_data:
        return ScoreFactor(
            name="Skills Match",
            score=Decimal(0),
            max_score=SKILLS_WEIGHT,
            weight=SKILLS_WEIGHT,
            status=FactorStatus.MISSING,
            explanation="No specific skills are listed for this position, so there is not enough data to score skills.",
        )

    percentage = result.skills_only_score
    if percentage >= 70:
        status = FactorStatus.EXCELLENT
    elif percentage >= 50:
        status = FactorStatus.GOOD
    elif percentage >= 25:
        status = FactorStatus.PARTIAL
    else:
        status = FactorStatus.MISSING

    if total_required > 0:
        explanation = f"You match {matched_required} of {total_required} required skills"
        if total_optional > 0:
            explanation += f" and {matched_optional} of {total_optional} optional skills."
        else:
            explanation += "."
    else:
        explanation = f"You match {matched_optional} of {total_optional} skills for this position."

    strong = [
        s for s in matched
        if (s.candidate_proficiency or "").lower() in ("expert", "advanced")
    ]
    if strong:
        plural = "s" if len(strong) > 1 else ""
        explanation += f" Your advanced proficiency in {len(strong)} skill{plural} boosts your score."

    return ScoreFactor(
        name="Skills Match",
        score=Decimal(percentage) * SKILLS_WEIGHT / 100,
        max_score=SKILLS_WEIGHT,
        weight=SKILLS_WEIGHT,
        status=status,
        explanation=explanation,
    )


def _location_factor(
    is_match: bool,
    job_location: Optional[str],
    seeker_location: Optional[str],
) -> ScoreFactor:
    if is_match and job_location and seeker_location:
        score, status = Decimal(LOCATION_WEIGHT), FactorStatus.EXCELLENT
        explanation = f"Your location ({seeker_location}) matches the job location ({job_location})."
    elif not job_location:
        score, status = Decimal(LOCATION_WEIGHT), FactorStatus.EXCELLENT
        explanation = "This job has no specific location requirement."
    elif seeker_location:
        score, status = Decimal(0), FactorStatus.MISSING
        explanation = (
            f"This job is located in {job_location}, which doesn't match your location ({seeker_location})."
        )
    else:
        score, status = Decimal(LOCATION_WEIGHT) / 2, FactorStatus.PARTIAL
        explanation = "Location information is incomplete for accurate matching."

    return ScoreFactor(
        name="Location",
        score=score,
        max_score=LOCATION_WEIGHT,
        weight=LOCATION_WEIGHT,
        status=status,
        explanation=explanation,
    )


def _remote_factor(job_remote_ok: Optional[bool], seeker_remote_ok: Optional[bool]) -> ScoreFactor:
    if job_remote_ok is True and seeker_remote_ok is True:
        score, status = Decimal(REMOTE_WEIGHT), FactorStatus.EXCELLENT
        explanation = "This job offers remote work, which matches your preference."
    elif job_remote_ok is False and seeker_remote_ok is False:
        score, status = Decimal(REMOTE_WEIGHT), FactorStatus.EXCELLENT
        explanation = "This is an on-site position, matching your preference for office work."
    elif job_remote_ok is True and seeker_remote_ok is False:
        score, status = Decimal(REMOTE_WEIGHT) * 3 / 4, FactorStatus.GOOD
        explanation = "This job offers remote work. You prefer on-site, but remote option is available."
    elif job_remote_ok is False and seeker_remote_ok is True:
        score, status = Decimal(0), FactorStatus.MISSING
        explanation = "This is an on-site position, but you prefer remote work."
    else:
        score, status = Decimal(REMOTE_WEIGHT) / 2, FactorStatus.PARTIAL
        explanation = "Remote work preferences could not be fully determined."

    return ScoreFactor(
        name="Remote Work",
        score=score,
        max_score=REMOTE_WEIGHT,
        weight=REMOTE_WEIGHT,
        status=status,
        explanation=explanation,
    )


def _summary(blended_score: int, has_sufficient_data: bool) -> str:
    if not has_sufficient_data:
        return (
            "This job doesn't list any skills yet, so there is not enough data to judge "
            "how well your skills fit."
        )
    if blended_score >= 80:
        return (
            "You're an excellent match for this position! Your skills and preferences align "
            "very well with what the employer is looking for."
        )
    if blended_score >= 60:
        return "You're a strong match for this role. Consider highlighting your relevant experience when applying."
    if blended_score >= 40:
        return "You have some relevant qualifications for this role. Focus on transferable skills in your application."
    return (
        "This role may require skills or preferences that differ from your profile. "
        "Consider upskilling if this area interests you."
    )


def _recommendations(result: MatchResult, location_match: bool, remote_match: bool) -> List[str]:
    recommendations = []

    missing_required = [s for s in result.missing_skills if s.is_required]
    if missing_required:
        names = ", ".join(s.skill.name for s in missing_required[:3])
        extra = len(missing_required) - 3
        more = f" and {extra} more required skills" if extra > 0 else ""
        recommendations.append(f"Consider learning {names}{more} to improve your match.")

    have_required = [
        s for s in result.matched_skills + result.partially_matched_skills
        if s.is_required
    ]
    if have_required:
        weakest = min(have_required, key=lambda s: proficiency_weight(s.candidate_proficiency))
        if proficiency_weight(weakest.candidate_proficiency) < 1:
            recommendations.append(
                f"Improving your proficiency in {weakest.skill.name} could increase your match score."
            )

    if not location_match and not remote_match:
        recommendations.append(
            "Update your location preferences in your profile if you are open to relocation."
        )

    return recommendations


def explain_match(
    result: MatchResult,
    job_location: Optional[str] = None,
    job_remote_ok: Optional[bool] = None,
    seeker_location: Optional[str] = None,
    seeker_remote_ok: Optional[bool] = None,
) -> MatchExplanation:
    """Build the seeker-facing breakdown for a scored match."""
    is_location_match = location_matches(job_location, seeker_location)
    is_remote_match = remote_matches(job_remote_ok, seeker_remote_ok)

    factors = [
        _skills_factor(result),
        _location_factor(is_location_match, job_location, seeker_location),
        _remote_factor(job_remote_ok, seeker_remote_ok),
    ]

    total = sum((f.score for f in factors), Decimal(0))
    blended = int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return MatchExplanation(
        skills_only_score=result.skills_only_score,
        blended_score=max(0, min(100, blended)),
        factors=factors,
        summary=_summary(blended, result.has_sufficient_data),
        recommendations=_recommendations(result, is_location_match, is_remote_match),
        location_match=is_location_match,
        remote_match=is_remote_match,
        has_sufficient_data=result.has_sufficient_data,
    )
