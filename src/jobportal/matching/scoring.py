"""Skill-based match scoring between one job seeker and one job posting.

The score only looks at skills. Every job skill is weighted by whether it is
required (2) or optional (1) and, when the candidate has it, by the
candidate's proficiency. Location and remote preferences are layered on top
in :mod:`jobportal.matching.explanation` and never change this score.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from jobportal.core.errors import IncompleteInputError
from jobportal.core.models import CandidateSkill, JobSkillRequirement, Proficiency, Skill
from jobportal.utils.logging import get_logger

logger = get_logger(__name__)


PROFICIENCY_WEIGHTS: Dict[str, Decimal] = {
    Proficiency.EXPERT.value: Decimal("1.00"),
    Proficiency.ADVANCED.value: Decimal("0.85"),
    Proficiency.INTERMEDIATE.value: Decimal("0.70"),
    Proficiency.BEGINNER.value: Decimal("0.50"),
}
DEFAULT_PROFICIENCY_WEIGHT = Decimal("0.70")

# Proficiency weights at or above this count as an exact match
EXACT_MATCH_THRESHOLD = Decimal("0.70")

REQUIRED_SKILL_WEIGHT = 2
OPTIONAL_SKILL_WEIGHT = 1


class MatchType(Enum):
    """How well a candidate covers a job skill they have."""
    EXACT = "exact"
    PARTIAL = "partial"


class MatchBasis(Enum):
    """What the score was computed from."""
    SKILLS = "skills"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class MatchedSkill:
    """Job skill the candidate has at a sufficient proficiency."""
    skill: Skill
    is_required: bool
    candidate_proficiency: Optional[str]
    match_type: MatchType = MatchType.EXACT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_id": self.skill.id,
            "skill_name": self.skill.name,
            "is_required": self.is_required,
            "candidate_proficiency": self.candidate_proficiency,
            "match_type": self.match_type.value,
        }


@dataclass(frozen=True)
class PartialSkill:
    """Job skill the candidate has, but below the exact-match threshold."""
    skill: Skill
    is_required: bool
    candidate_proficiency: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_id": self.skill.id,
            "skill_name": self.skill.name,
            "is_required": self.is_required,
            "candidate_proficiency": self.candidate_proficiency,
        }


@dataclass(frozen=True)
class MissingSkill:
    """Job skill the candidate does not have."""
    skill: Skill
    is_required: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_id": self.skill.id,
            "skill_name": self.skill.name,
            "is_required": self.is_required,
        }


@dataclass(frozen=True)
class MatchResult:
    """Skills-only compatibility of one job seeker with one job posting."""
    skills_only_score: int
    matched_skills: List[MatchedSkill] = field(default_factory=list)
    partially_matched_skills: List[PartialSkill] = field(default_factory=list)
    missing_skills: List[MissingSkill] = field(default_factory=list)
    skill_coverage_percentage: int = 0
    required_skills_coverage: int = 100
    basis_size: int = 0
    basis: MatchBasis = MatchBasis.INSUFFICIENT_DATA
    job_seeker_id: Optional[str] = None
    job_posting_id: Optional[str] = None
    application_id: Optional[str] = None

    @property
    def score(self) -> int:
        return self.skills_only_score

    @property
    def has_sufficient_data(self) -> bool:
        return self.basis is MatchBasis.SKILLS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_seeker_id": self.job_seeker_id,
            "job_posting_id": self.job_posting_id,
            "application_id": self.application_id,
            "skills_only_score": self.skills_only_score,
            "matched_skills": [m.to_dict() for m in self.matched_skills],
            "partially_matched_skills": [p.to_dict() for p in self.partially_matched_skills],
            "missing_skills": [m.to_dict() for m in self.missing_skills],
            "skill_coverage_percentage": self.skill_coverage_percentage,
            "required_skills_coverage": self.required_skills_coverage,
            "basis_size": self.basis_size,
            "basis": self.basis.value,
            "has_sufficient_data": self.has_sufficient_data,
        }


def proficiency_label(proficiency: Any) -> Optional[str]:
    """Normalise a proficiency value (enum, string or None) to its text form."""
    if proficiency is None:
        return None
    value = getattr(proficiency, "value", proficiency)
    return str(value)


def proficiency_weight(proficiency: Any) -> Decimal:
    """Weight of a proficiency level; unset or unknown levels count as intermediate."""
    label = proficiency_label(proficiency)
    if label is None:
        return DEFAULT_PROFICIENCY_WEIGHT
    return PROFICIENCY_WEIGHTS.get(label.strip().lower(), DEFAULT_PROFICIENCY_WEIGHT)


def round_percentage(numerator, denominator) -> int:
    """Round ``numerator / denominator * 100`` half-up to an integer."""
    value = Decimal(numerator) * 100 / Decimal(denominator)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def score_match(
    candidate_skills: Iterable[CandidateSkill],
    job_skills: Iterable[JobSkillRequirement],
    *,
    job_seeker_id: Optional[str] = None,
    job_posting_id: Optional[str] = None,
    application_id: Optional[str] = None,
) -> MatchResult:
    """
    Score a candidate's skill inventory against a job's skill requirements.

    Pure function: the same inputs always produce an identical result.

    Args:
        candidate_skills: The job seeker's skills with proficiency
        job_skills: The job posting's skill requirements
        job_seeker_id: Carried through to the result
        job_posting_id: Carried through to the result
        application_id: Carried through to the result

    Returns:
        MatchResult whose three skill buckets partition the job's skills
    """
    candidate_by_skill: Dict[str, CandidateSkill] = {}
    for candidate_skill in candidate_skills:
        candidate_by_skill.setdefault(candidate_skill.skill_id, candidate_skill)

    requirements: List[JobSkillRequirement] = []
    seen_job_skills = set()
    for requirement in job_skills:
        if requirement.skill_id in seen_job_skills:
            continue
        seen_job_skills.add(requirement.skill_id)
        requirements.append(requirement)

    matched: List[MatchedSkill] = []
    partial: List[PartialSkill] = []
    missing: List[MissingSkill] = []

    raw_score = Decimal(0)
    max_score = 0
    total_required = 0
    required_matched = 0

    for requirement in requirements:
        base_weight = REQUIRED_SKILL_WEIGHT if requirement.is_required else OPTIONAL_SKILL_WEIGHT
        max_score += base_weight
        if requirement.is_required:
            total_required += 1

        candidate_skill = candidate_by_skill.get(requirement.skill_id)
        if candidate_skill is None:
            missing.append(MissingSkill(skill=requirement.skill, is_required=requirement.is_required))
            continue

        weight = proficiency_weight(candidate_skill.proficiency)
        raw_score += base_weight * weight
        if requirement.is_required:
            required_matched += 1

        label = proficiency_label(candidate_skill.proficiency)
        if weight >= EXACT_MATCH_THRESHOLD:
            matched.append(MatchedSkill(
                skill=requirement.skill,
                is_required=requirement.is_required,
                candidate_proficiency=label,
                match_type=MatchType.EXACT,
            ))
        else:
            partial.append(PartialSkill(
                skill=requirement.skill,
                is_required=requirement.is_required,
                candidate_proficiency=label,
            ))

    total_skills = len(requirements)

    if max_score > 0:
        score = round_percentage(raw_score, max_score)
        basis = MatchBasis.SKILLS
    else:
        # Nothing to compare against: report zero, flagged as insufficient data
        score = 0
        basis = MatchBasis.INSUFFICIENT_DATA

    coverage = round_percentage(len(matched) + len(partial), total_skills) if total_skills else 0

    # No required skills means every requirement is satisfied
    required_coverage = round_percentage(required_matched, total_required) if total_required else 100

    return MatchResult(
        skills_only_score=max(0, min(100, score)),
        matched_skills=matched,
        partially_matched_skills=partial,
        missing_skills=missing,
        skill_coverage_percentage=coverage,
        required_skills_coverage=required_coverage,
        basis_size=total_skills,
        basis=basis,
        job_seeker_id=job_seeker_id,
        job_posting_id=job_posting_id,
        application_id=application_id,
    )


def require_sufficient_data(result: MatchResult) -> MatchResult:
    """Return ``result`` or raise when the job listed no skills to score against."""
    if not result.has_sufficient_data:
        raise IncompleteInputError(result.job_posting_id)
    return result


class MatchEngine:
    """Scores job seekers against job postings."""

    def __init__(self):
        self.logger = logger.bind(component="match_engine")

    def score(
        self,
        candidate_skills: Iterable[CandidateSkill],
        job_skills: Iterable[JobSkillRequirement],
        *,
        job_seeker_id: Optional[str] = None,
        job_posting_id: Optional[str] = None,
        application_id: Optional[str] = None,
    ) -> MatchResult:
        """Score one (job seeker, job posting) pair."""
        result = score_match(
            candidate_skills,
            job_skills,
            job_seeker_id=job_seeker_id,
            job_posting_id=job_posting_id,
            application_id=application_id,
        )

        if result.has_sufficient_data:
            self.logger.debug(
                "Match scored",
                job_seeker_id=job_seeker_id,
                job_posting_id=job_posting_id,
                score=result.skills_only_score,
                matched=len(result.matched_skills),
                partial=len(result.partially_matched_skills),
                missing=len(result.missing_skills),
            )
        else:
            self.logger.info(
                "Job posting lists no skills, match has insufficient data",
                job_seeker_id=job_seeker_id,
                job_posting_id=job_posting_id,
            )

        return result
