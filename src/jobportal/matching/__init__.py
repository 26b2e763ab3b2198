"""Skill matching: catalog, scoring, explanations and ranking."""

from .catalog import SkillCatalog, SkillRelationship, RelationshipType
from .scoring import (
    MatchBasis,
    MatchEngine,
    MatchResult,
    MatchType,
    MatchedSkill,
    MissingSkill,
    PartialSkill,
    require_sufficient_data,
    score_match,
)
from .explanation import MatchExplanation, ScoreFactor, explain_match
from .ranking import (
    BatchScoringResult,
    JobRecommendation,
    rank_candidates,
    rank_results,
    recommend_jobs,
)

__all__ = [
    "SkillCatalog",
    "SkillRelationship",
    "RelationshipType",
    "MatchBasis",
    "MatchEngine",
    "MatchResult",
    "MatchType",
    "MatchedSkill",
    "MissingSkill",
    "PartialSkill",
    "require_sufficient_data",
    "score_match",
    "MatchExplanation",
    "ScoreFactor",
    "explain_match",
    "BatchScoringResult",
    "JobRecommendation",
    "rank_candidates",
    "rank_results",
    "recommend_jobs",
]
