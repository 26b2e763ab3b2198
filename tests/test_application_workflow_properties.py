"""Tests for the application status state machine."""

import asyncio

import pytest
from hypothesis import given, strategies as st, settings
from unittest.mock import AsyncMock

from jobportal.applications.status import VALID_STATUS_TRANSITIONS
from jobportal.applications.workflow import (
    ApplicationWorkflow,
    BulkItemState,
    BulkTransitionReport,
    TransitionOutcome,
)
from jobportal.core.errors import (
    ApplicationNotFound,
    BulkTransitionError,
    ConcurrentModification,
    DuplicateApplication,
    InvalidTransition,
)
from jobportal.core.models import Application, ApplicationStatus, JobPosting, JobSeeker
from jobportal.core.session import CompanyRole, Session
from jobportal.data.memory import InMemoryRepository

statuses = st.sampled_from(list(ApplicationStatus))


def seeded_repository(*statuses_by_id):
    """Repository holding one application per (id, status) pair."""
    repository = InMemoryRepository.seeded(
        job_seekers=[JobSeeker(id="seeker-1")],
        job_postings=[JobPosting(id="job-1", title="Backend Engineer")],
    )
    for application_id, status in statuses_by_id:
        repository.add_application(Application(
            id=application_id,
            job_seeker_id="seeker-1",
            job_posting_id="job-1",
            status=status,
        ))
    return repository


class TestTransitionProperties:
    """Property-based tests for request_transition."""

    @given(current=statuses, target=statuses)
    @settings(max_examples=60, deadline=5000)
    def test_transition_outcome_matches_table(self, current, target):
        """
        Property: a transition succeeds exactly when the table allows it, and a
        success appends exactly one history entry from current to target.
        """
        repository = seeded_repository(("app-1", current))
        workflow = ApplicationWorkflow(repository)

        async def run_test():
            if target in VALID_STATUS_TRANSITIONS[current]:
                outcome = await workflow.request_transition("app-1", target)

                assert isinstance(outcome, TransitionOutcome)
                assert (outcome.old_status, outcome.new_status) == (current, target)
                assert len(repository.history) == 1
                entry = repository.history[0]
                assert (entry.old_status, entry.new_status) == (current, target)
                assert await repository.fetch_application_current_status("app-1") == target
            else:
                with pytest.raises(InvalidTransition):
                    await workflow.request_transition("app-1", target)

                assert repository.history == []
                assert await repository.fetch_application_current_status("app-1") == current

        asyncio.run(run_test())


class TestApplicationWorkflow:
    """Test cases for ApplicationWorkflow."""

    @pytest.fixture
    def session(self):
        return Session(user_id="recruiter-7", role=CompanyRole(company_id="acme"))

    @pytest.fixture
    def repository(self):
        return seeded_repository(
            ("app-1", ApplicationStatus.PENDING),
            ("app-2", ApplicationStatus.REVIEWING),
            ("app-3", ApplicationStatus.INTERVIEW),
            ("app-4", ApplicationStatus.WITHDRAWN),
            ("app-5", ApplicationStatus.OFFERED),
        )

    @pytest.fixture
    def workflow(self, repository, session):
        return ApplicationWorkflow(repository, session=session)

    @pytest.mark.asyncio
    async def test_create_application_records_initial_status(self, session):
        repository = seeded_repository()
        workflow = ApplicationWorkflow(repository, session=session)

        application = await workflow.create_application("seeker-1", "job-1")

        assert application.status == ApplicationStatus.PENDING
        history = await workflow.history(application.id)
        assert len(history) == 1
        assert history[0].old_status is None
        assert history[0].new_status == ApplicationStatus.PENDING
        assert history[0].changed_by == "recruiter-7"

    @pytest.mark.asyncio
    async def test_duplicate_application_is_rejected(self, workflow):
        await workflow.create_application("seeker-1", "job-2")

        with pytest.raises(DuplicateApplication):
            await workflow.create_application("seeker-1", "job-2")

    @pytest.mark.asyncio
    async def test_transition_records_actor_and_notes(self, workflow, repository):
        outcome = await workflow.request_transition("app-1", "reviewing", notes="Strong CV")

        assert outcome.history_entry.changed_by == "recruiter-7"
        assert outcome.history_entry.notes == "Strong CV"
        application = await repository.get_application("app-1")
        assert application.status == ApplicationStatus.REVIEWING
        assert application.updated_at >= application.applied_at

    @pytest.mark.asyncio
    async def test_system_actor_without_session(self, repository):
        workflow = ApplicationWorkflow(repository)

        outcome = await workflow.request_transition("app-1", ApplicationStatus.REJECTED)

        assert outcome.history_entry.changed_by is None

    @pytest.mark.asyncio
    async def test_interview_to_pending_is_invalid(self, workflow, repository):
        with pytest.raises(InvalidTransition) as exc_info:
            await workflow.request_transition("app-3", ApplicationStatus.PENDING)

        assert exc_info.value.current_status == ApplicationStatus.INTERVIEW
        assert "interview" in str(exc_info.value)
        assert repository.history == []

    @pytest.mark.asyncio
    async def test_unknown_application(self, workflow):
        with pytest.raises(ApplicationNotFound):
            await workflow.request_transition("missing", ApplicationStatus.REVIEWING)

        with pytest.raises(ApplicationNotFound):
            await workflow.history("missing")

    @pytest.mark.asyncio
    async def test_advance_walks_the_pipeline(self, workflow):
        first = await workflow.advance("app-1")
        second = await workflow.advance("app-1")
        third = await workflow.advance("app-1")

        assert [o.new_status for o in (first, second, third)] == [
            ApplicationStatus.REVIEWING,
            ApplicationStatus.INTERVIEW,
            ApplicationStatus.OFFERED,
        ]
        with pytest.raises(InvalidTransition):
            await workflow.advance("app-1")

        history = await workflow.history("app-1")
        assert [(e.old_status, e.new_status) for e in history] == [
            (ApplicationStatus.PENDING, ApplicationStatus.REVIEWING),
            (ApplicationStatus.REVIEWING, ApplicationStatus.INTERVIEW),
            (ApplicationStatus.INTERVIEW, ApplicationStatus.OFFERED),
        ]

    @pytest.mark.asyncio
    async def test_reject_and_withdraw(self, workflow):
        rejected = await workflow.reject("app-5", notes="Offer declined")
        withdrawn = await workflow.withdraw("app-2")

        assert rejected.new_status == ApplicationStatus.REJECTED
        assert withdrawn.new_status == ApplicationStatus.WITHDRAWN
        with pytest.raises(InvalidTransition):
            await workflow.withdraw("app-2")

    @pytest.mark.asyncio
    async def test_concurrent_modification_when_status_moved(self, workflow, repository):
        # The store already moved on before this writer commits
        repository.fetch_application_current_status = AsyncMock(return_value=ApplicationStatus.PENDING)
        repository.applications["app-1"] = repository.applications["app-1"].model_copy(
            update={"status": ApplicationStatus.REJECTED}
        )

        with pytest.raises(ConcurrentModification) as exc_info:
            await workflow.request_transition("app-1", ApplicationStatus.REVIEWING)

        error = exc_info.value
        assert error.retryable is True
        assert error.expected_status == ApplicationStatus.PENDING
        assert error.actual_status == ApplicationStatus.REJECTED
        assert "rejected" in str(error)
        assert repository.history == []

    @pytest.mark.asyncio
    async def test_racing_transitions_commit_once(self, repository):
        first = ApplicationWorkflow(repository)
        second = ApplicationWorkflow(repository)

        results = await asyncio.gather(
            first.request_transition("app-1", ApplicationStatus.REVIEWING),
            second.request_transition("app-1", ApplicationStatus.REVIEWING),
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, TransitionOutcome)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], (ConcurrentModification, InvalidTransition))
        assert len(await repository.fetch_status_history("app-1")) == 1


class TestBulkTransition:
    """Bulk transitions report per item and only fail when everything fails."""

    @pytest.fixture
    def repository(self):
        return seeded_repository(
            ("app-1", ApplicationStatus.PENDING),
            ("app-2", ApplicationStatus.REVIEWING),
            ("app-3", ApplicationStatus.WITHDRAWN),
            ("app-4", ApplicationStatus.INTERVIEW),
            ("app-5", ApplicationStatus.OFFERED),
        )

    @pytest.mark.asyncio
    async def test_one_withdrawn_among_five(self, repository):
        workflow = ApplicationWorkflow(repository)

        report = await workflow.bulk_transition(
            ["app-1", "app-2", "app-3", "app-4", "app-5"],
            ApplicationStatus.REJECTED,
        )

        assert isinstance(report, BulkTransitionReport)
        assert [i.application_id for i in report.items] == ["app-1", "app-2", "app-3", "app-4", "app-5"]
        assert len(report.succeeded) == 4
        assert len(report.failed) == 1
        failed = report.failed[0]
        assert failed.application_id == "app-3"
        assert failed.error_type == "InvalidTransition"
        assert "withdrawn" in failed.error_message
        assert report.to_dict()["succeeded"] == 4

    @pytest.mark.asyncio
    async def test_every_item_failing_raises(self, repository):
        workflow = ApplicationWorkflow(repository)

        with pytest.raises(BulkTransitionError) as exc_info:
            await workflow.bulk_transition(["app-3", "missing"], ApplicationStatus.REVIEWING)

        report = exc_info.value.report
        assert [i.error_type for i in report.items] == ["InvalidTransition", "ApplicationNotFound"]

    @pytest.mark.asyncio
    async def test_empty_selection(self, repository):
        report = await ApplicationWorkflow(repository).bulk_transition([], ApplicationStatus.REJECTED)

        assert report.items == []

    @pytest.mark.asyncio
    async def test_cancellation_stops_remaining_items(self, repository):
        workflow = ApplicationWorkflow(repository)
        cancel_event = asyncio.Event()
        original = workflow.request_transition

        async def cancel_after_first(application_id, target, notes=None):
            outcome = await original(application_id, target, notes=notes)
            cancel_event.set()
            return outcome

        workflow.request_transition = cancel_after_first

        report = await workflow.bulk_transition(
            ["app-1", "app-2", "app-4"],
            ApplicationStatus.REJECTED,
            cancel_event=cancel_event,
        )

        assert [i.state for i in report.items] == [
            BulkItemState.SUCCEEDED,
            BulkItemState.CANCELLED,
            BulkItemState.CANCELLED,
        ]
        assert await repository.fetch_application_current_status("app-1") == ApplicationStatus.REJECTED
        assert await repository.fetch_application_current_status("app-2") == ApplicationStatus.REVIEWING
