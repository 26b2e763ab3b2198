"""Property-based tests for match scoring."""

import pytest
from hypothesis import given, strategies as st, settings

from jobportal.core.errors import IncompleteInputError
from jobportal.core.models import CandidateSkill, JobSkillRequirement, Proficiency, Skill
from jobportal.matching.scoring import (
    MatchBasis,
    MatchEngine,
    MatchResult,
    MatchType,
    proficiency_weight,
    require_sufficient_data,
    round_percentage,
    score_match,
)

SKILL_NAMES = [
    "Python", "JavaScript", "TypeScript", "React", "SQL", "PostgreSQL",
    "Docker", "Kubernetes", "AWS", "Go", "Rust", "GraphQL",
]


def make_skill(name: str) -> Skill:
    return Skill(id=name.lower(), name=name)


# Test data strategies
@st.composite
def job_skills_strategy(draw, min_size=0, max_size=8):
    """Generate a job's skill requirements with unique skills."""
    names = draw(st.lists(st.sampled_from(SKILL_NAMES), min_size=min_size, max_size=max_size, unique=True))
    return [JobSkillRequirement(skill=make_skill(n), is_required=draw(st.booleans())) for n in names]


@st.composite
def candidate_skills_strategy(draw, max_size=10):
    """Generate a candidate's skills, including unset and unrecognised proficiency."""
    names = draw(st.lists(st.sampled_from(SKILL_NAMES), max_size=max_size, unique=True))
    proficiency = st.one_of(
        st.none(),
        st.sampled_from(list(Proficiency)),
        st.sampled_from(["Expert", "ADVANCED", "guru", ""]),
    )
    return [CandidateSkill(skill=make_skill(n), proficiency=draw(proficiency)) for n in names]


class TestMatchScoringProperties:
    """Property-based tests for the skills-only scoring algorithm."""

    @given(candidate_skills=candidate_skills_strategy(), job_skills=job_skills_strategy())
    @settings(max_examples=100, deadline=2000)
    def test_skill_buckets_partition_job_skills(self, candidate_skills, job_skills):
        """
        Property: matched, partial and missing skills partition the job's skills.
        """
        result = score_match(candidate_skills, job_skills)

        matched = [m.skill.id for m in result.matched_skills]
        partial = [p.skill.id for p in result.partially_matched_skills]
        missing = [m.skill.id for m in result.missing_skills]

        assert len(matched) + len(partial) + len(missing) == len(job_skills)
        assert set(matched) | set(partial) | set(missing) == {j.skill_id for j in job_skills}
        assert not set(matched) & set(partial)
        assert not set(matched) & set(missing)
        assert not set(partial) & set(missing)

    @given(candidate_skills=candidate_skills_strategy(), job_skills=job_skills_strategy())
    @settings(max_examples=100, deadline=2000)
    def test_percentages_are_bounded(self, candidate_skills, job_skills):
        """
        Property: every score and coverage figure lies in [0, 100].
        """
        result = score_match(candidate_skills, job_skills)

        assert 0 <= result.skills_only_score <= 100
        assert 0 <= result.skill_coverage_percentage <= 100
        assert 0 <= result.required_skills_coverage <= 100
        assert isinstance(result.skills_only_score, int)

    @given(candidate_skills=candidate_skills_strategy(), job_skills=job_skills_strategy())
    @settings(max_examples=50, deadline=2000)
    def test_scoring_is_deterministic(self, candidate_skills, job_skills):
        """
        Property: the same inputs always give an identical result.
        """
        first = score_match(candidate_skills, job_skills, job_seeker_id="s1", job_posting_id="j1")
        second = score_match(candidate_skills, job_skills, job_seeker_id="s1", job_posting_id="j1")

        assert first == second
        assert first.to_dict() == second.to_dict()

    @given(candidate_skills=candidate_skills_strategy(), job_skills=job_skills_strategy())
    @settings(max_examples=50, deadline=2000)
    def test_no_required_skills_means_full_required_coverage(self, candidate_skills, job_skills):
        """
        Property: a job without required skills reports 100% required coverage.
        """
        optional_only = [
            JobSkillRequirement(skill=j.skill, is_required=False) for j in job_skills
        ]

        result = score_match(candidate_skills, optional_only)

        assert result.required_skills_coverage == 100

    @given(job_skills=job_skills_strategy(min_size=1))
    @settings(max_examples=50, deadline=2000)
    def test_expert_in_every_skill_scores_100(self, job_skills):
        """
        Property: a candidate with every job skill at expert level scores 100.
        """
        candidate_skills = [
            CandidateSkill(skill=j.skill, proficiency=Proficiency.EXPERT) for j in job_skills
        ]

        result = score_match(candidate_skills, job_skills)

        assert result.skills_only_score == 100
        assert result.skill_coverage_percentage == 100
        assert result.required_skills_coverage == 100
        assert not result.missing_skills
        assert all(m.match_type == MatchType.EXACT for m in result.matched_skills)

    @given(job_skills=job_skills_strategy(min_size=1, max_size=6))
    @settings(max_examples=50, deadline=2000)
    def test_no_overlap_scores_zero(self, job_skills):
        """
        Property: a candidate matching none of the job skills scores 0 and misses them all.
        """
        candidate_skills = [
            CandidateSkill(skill=Skill(id="cobol", name="COBOL"), proficiency=Proficiency.EXPERT)
        ]

        result = score_match(candidate_skills, job_skills)

        assert result.skills_only_score == 0
        assert [m.skill.id for m in result.missing_skills] == [j.skill_id for j in job_skills]
        assert result.has_sufficient_data

    @given(candidate_skills=candidate_skills_strategy(), job_skills=job_skills_strategy(min_size=1))
    @settings(max_examples=50, deadline=2000)
    def test_adding_expertise_never_lowers_the_score(self, candidate_skills, job_skills):
        """
        Property: upgrading every held skill to expert cannot decrease the score.
        """
        upgraded = [
            CandidateSkill(skill=c.skill, proficiency=Proficiency.EXPERT) for c in candidate_skills
        ]

        before = score_match(candidate_skills, job_skills)
        after = score_match(upgraded, job_skills)

        assert after.skills_only_score >= before.skills_only_score


class TestMatchScoringExamples:
    """Concrete scoring scenarios."""

    @pytest.fixture
    def react(self):
        return make_skill("React")

    @pytest.fixture
    def typescript(self):
        return make_skill("TypeScript")

    @pytest.fixture
    def sql(self):
        return make_skill("SQL")

    def test_mixed_profile_scenario(self, react, typescript, sql):
        """React advanced and SQL beginner against React, TypeScript required and SQL optional."""
        candidate_skills = [
            CandidateSkill(skill=react, proficiency=Proficiency.ADVANCED),
            CandidateSkill(skill=sql, proficiency=Proficiency.BEGINNER),
        ]
        job_skills = [
            JobSkillRequirement(skill=react, is_required=True),
            JobSkillRequirement(skill=typescript, is_required=True),
            JobSkillRequirement(skill=sql, is_required=False),
        ]

        result = score_match(candidate_skills, job_skills)

        assert result.skills_only_score == 44
        assert result.required_skills_coverage == 50
        assert result.skill_coverage_percentage == 67
        assert [m.skill.id for m in result.matched_skills] == ["react"]
        assert [p.skill.id for p in result.partially_matched_skills] == ["sql"]
        assert [m.skill.id for m in result.missing_skills] == ["typescript"]
        assert result.partially_matched_skills[0].candidate_proficiency == "beginner"
        assert result.basis_size == 3
        assert result.basis == MatchBasis.SKILLS

    def test_job_without_skills_is_flagged_insufficient(self):
        candidate_skills = [CandidateSkill(skill=make_skill("Python"), proficiency="expert")]

        result = score_match(candidate_skills, [], job_posting_id="empty-job")

        assert result.skills_only_score == 0
        assert result.basis == MatchBasis.INSUFFICIENT_DATA
        assert result.basis_size == 0
        assert not result.has_sufficient_data
        assert result.skill_coverage_percentage == 0
        assert result.to_dict()["has_sufficient_data"] is False

        with pytest.raises(IncompleteInputError):
            require_sufficient_data(result)

    def test_sufficient_result_passes_through(self, react):
        result = score_match([], [JobSkillRequirement(skill=react, is_required=True)])

        assert require_sufficient_data(result) is result
        assert result.required_skills_coverage == 0

    def test_unset_and_unknown_proficiency_count_as_intermediate(self, react, sql):
        job_skills = [
            JobSkillRequirement(skill=react, is_required=False),
            JobSkillRequirement(skill=sql, is_required=False),
        ]
        candidate_skills = [
            CandidateSkill(skill=react, proficiency=None),
            CandidateSkill(skill=sql, proficiency="wizard"),
        ]

        result = score_match(candidate_skills, job_skills)

        assert result.skills_only_score == 70
        assert len(result.matched_skills) == 2
        assert result.matched_skills[1].candidate_proficiency == "wizard"

    def test_partial_required_skill_counts_toward_required_coverage(self, react):
        candidate_skills = [CandidateSkill(skill=react, proficiency=Proficiency.BEGINNER)]
        job_skills = [JobSkillRequirement(skill=react, is_required=True)]

        result = score_match(candidate_skills, job_skills)

        assert result.skills_only_score == 50
        assert result.required_skills_coverage == 100
        assert len(result.partially_matched_skills) == 1

    def test_duplicate_job_skills_are_collapsed(self, react):
        job_skills = [
            JobSkillRequirement(skill=react, is_required=True),
            JobSkillRequirement(skill=react, is_required=False),
        ]

        result = score_match([], job_skills)

        assert result.basis_size == 1
        assert result.missing_skills[0].is_required is True

    def test_rounding_is_half_up(self):
        # 0.5 ties round away from zero, unlike round()
        assert round_percentage(1, 8) == 13
        assert round_percentage(5, 8) == 63
        assert round_percentage(2, 3) == 67
        assert round_percentage(0, 5) == 0

    def test_proficiency_weights(self):
        assert proficiency_weight(Proficiency.EXPERT) == proficiency_weight("Expert")
        assert float(proficiency_weight("advanced")) == 0.85
        assert float(proficiency_weight("beginner")) == 0.5
        assert float(proficiency_weight(None)) == 0.7

    def test_engine_carries_identifiers(self, react):
        engine = MatchEngine()

        result = engine.score(
            [CandidateSkill(skill=react, proficiency="expert")],
            [JobSkillRequirement(skill=react, is_required=True)],
            job_seeker_id="seeker-1",
            job_posting_id="job-1",
            application_id="app-1",
        )

        assert isinstance(result, MatchResult)
        assert result.score == 100
        assert (result.job_seeker_id, result.job_posting_id, result.application_id) == (
            "seeker-1", "job-1", "app-1"
        )
