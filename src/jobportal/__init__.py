"""
Job portal matching core.

Scores job seekers against job postings by skills and proficiency, ranks
applicants and recommends jobs, and moves applications through their
lifecycle under a strict status state machine with an audit trail.
"""

__version__ = "0.1.0"

from jobportal.applications.workflow import ApplicationWorkflow
from jobportal.core.models import ApplicationStatus
from jobportal.core.session import Session
from jobportal.matching.catalog import SkillCatalog
from jobportal.matching.scoring import MatchEngine, MatchResult, score_match

__all__ = [
    "ApplicationWorkflow",
    "ApplicationStatus",
    "Session",
    "SkillCatalog",
    "MatchEngine",
    "MatchResult",
    "score_match",
]
