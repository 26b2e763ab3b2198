"""Repository backed by a Supabase project through its PostgREST API."""

from typing import Any, Dict, List, Optional, Set

import httpx

from jobportal.applications.status import as_status, valid_next_statuses
from jobportal.config import settings
from jobportal.core.errors import (
    ApplicationNotFound,
    ConcurrentModification,
    DataAccessError,
    DuplicateApplication,
    InvalidTransition,
    PermissionDenied,
)
from jobportal.core.models import (
    Application,
    ApplicationStatus,
    CandidateSkill,
    JobPosting,
    JobSeeker,
    JobSkillRequirement,
    Skill,
    StatusHistoryEntry,
)
from jobportal.data.repository import ApplicationRepository
from jobportal.utils.logging import get_logger

logger = get_logger(__name__)

# SQLSTATE codes raised by transition_application_status (see sql/)
SERIALIZATION_FAILURE = "40001"
RAISE_EXCEPTION = "P0001"
UNIQUE_VIOLATION = "23505"
NO_DATA_FOUND = "P0002"
INSUFFICIENT_PRIVILEGE = "42501"

SKILL_SELECT = "skills(id,name,category)"


class _BackendError(DataAccessError):
    """PostgREST error carrying the database SQLSTATE."""

    def __init__(self, message: str, code: str = "", details: Optional[str] = None):
        self.code = code
        self.details = details
        super().__init__(message)


def _skill_from_row(row: Dict[str, Any]) -> Skill:
    skill = row.get("skills") or {}
    return Skill(
        id=str(skill.get("id") or row["skill_id"]),
        name=skill.get("name") or "Unknown",
        category=skill.get("category"),
    )


def _requirement_from_row(row: Dict[str, Any]) -> JobSkillRequirement:
    return JobSkillRequirement(skill=_skill_from_row(row), is_required=bool(row.get("is_required")))


def _history_from_row(row: Dict[str, Any]) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        id=str(row["id"]),
        application_id=str(row["application_id"]),
        old_status=row.get("old_status"),
        new_status=row["new_status"],
        changed_by=row.get("changed_by"),
        changed_at=row["changed_at"],
        notes=row.get("notes"),
    )


def _application_from_row(row: Dict[str, Any]) -> Application:
    return Application(
        id=str(row["id"]),
        job_seeker_id=str(row["job_seeker_id"]),
        job_posting_id=str(row["job_posting_id"]),
        status=row.get("status") or ApplicationStatus.PENDING,
        applied_at=row["applied_at"],
        updated_at=row.get("updated_at") or row["applied_at"],
    )


class SupabaseRepository(ApplicationRepository):
    """Reads tables over PostgREST and commits transitions through an RPC."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        schema: Optional[str] = None,
    ):
        self.logger = logger.bind(component="supabase_repository")
        base_url = base_url or settings.supabase_url
        api_key = api_key or settings.supabase_key

        if client is None:
            if not base_url or not api_key:
                raise DataAccessError("Supabase URL and key must be configured")
            client = httpx.AsyncClient(
                base_url=f"{base_url.rstrip('/')}/rest/v1",
                headers={
                    "apikey": api_key,
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                    "Accept-Profile": schema or settings.supabase_schema,
                    "Content-Profile": schema or settings.supabase_schema,
                },
                timeout=settings.request_timeout,
            )
        self.client = client

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Send a request and return decoded JSON, raising domain errors on failure."""
        try:
            response = await self.client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            self.logger.error("Backend request failed", method=method, path=path, error=str(e))
            raise DataAccessError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            raise self._map_error(path, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DataAccessError(f"Malformed response from {path}") from e

    def _map_error(self, path: str, response: httpx.Response) -> Exception:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        code = str(body.get("code") or "")
        message = body.get("message") or response.text
        self.logger.warning(
            "Backend returned an error",
            path=path,
            status_code=response.status_code,
            code=code,
            message=message,
        )
        details = body.get("details")
        return _BackendError(
            f"{path} failed with HTTP {response.status_code}: {message}",
            code=code,
            details=str(details) if details else None,
        )

    async def _select(self, table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        rows = await self._request("GET", f"/{table}", params=params)
        return rows or []

    # Reads

    async def fetch_candidate_skills(self, job_seeker_id: str) -> List[CandidateSkill]:
        rows = await self._select("job_seeker_skills", {
            "select": f"skill_id,proficiency,{SKILL_SELECT}",
            "job_seeker_id": f"eq.{job_seeker_id}",
        })
        return [
            CandidateSkill(skill=_skill_from_row(row), proficiency=row.get("proficiency"))
            for row in rows
        ]

    async def fetch_job_skill_requirements(self, job_posting_id: str) -> List[JobSkillRequirement]:
        rows = await self._select("job_posting_skills", {
            "select": f"skill_id,is_required,{SKILL_SELECT}",
            "job_posting_id": f"eq.{job_posting_id}",
        })
        return [_requirement_from_row(row) for row in rows]

    async def fetch_application_current_status(self, application_id: str) -> ApplicationStatus:
        rows = await self._select("applications", {
            "select": "id,status",
            "id": f"eq.{application_id}",
        })
        if not rows:
            raise ApplicationNotFound(application_id)
        return as_status(rows[0]["status"])

    async def get_application(self, application_id: str) -> Application:
        rows = await self._select("applications", {
            "select": "id,job_seeker_id,job_posting_id,status,applied_at,updated_at",
            "id": f"eq.{application_id}",
        })
        if not rows:
            raise ApplicationNotFound(application_id)
        return _application_from_row(rows[0])

    async def list_applications_for_job(self, job_posting_id: str) -> List[Application]:
        rows = await self._select("applications", {
            "select": "id,job_seeker_id,job_posting_id,status,applied_at,updated_at",
            "job_posting_id": f"eq.{job_posting_id}",
            "order": "applied_at.asc",
        })
        return [_application_from_row(row) for row in rows]

    async def list_applied_job_ids(self, job_seeker_id: str) -> Set[str]:
        rows = await self._select("applications", {
            "select": "job_posting_id",
            "job_seeker_id": f"eq.{job_seeker_id}",
        })
        return {str(row["job_posting_id"]) for row in rows}

    async def list_active_job_postings(self, limit: int) -> List[JobPosting]:
        rows = await self._select("job_postings", {
            "select": f"id,title,company_id,location,remote_ok,is_active,created_at,"
                      f"job_posting_skills(skill_id,is_required,{SKILL_SELECT})",
            "is_active": "eq.true",
            "order": "created_at.desc",
            "limit": str(limit),
        })
        return [self._posting_from_row(row) for row in rows]

    async def get_job_seeker(self, job_seeker_id: str) -> Optional[JobSeeker]:
        rows = await self._select("job_seekers", {
            "select": "id,full_name,location,remote_ok",
            "id": f"eq.{job_seeker_id}",
        })
        if not rows:
            return None
        row = rows[0]
        return JobSeeker(
            id=str(row["id"]),
            full_name=row.get("full_name"),
            location=row.get("location"),
            remote_ok=row.get("remote_ok"),
            skills=await self.fetch_candidate_skills(job_seeker_id),
        )

    async def get_job_posting(self, job_posting_id: str) -> Optional[JobPosting]:
        rows = await self._select("job_postings", {
            "select": f"id,title,company_id,location,remote_ok,is_active,created_at,"
                      f"job_posting_skills(skill_id,is_required,{SKILL_SELECT})",
            "id": f"eq.{job_posting_id}",
        })
        return self._posting_from_row(rows[0]) if rows else None

    async def fetch_status_history(self, application_id: str) -> List[StatusHistoryEntry]:
        rows = await self._select("application_status_history", {
            "select": "*",
            "application_id": f"eq.{application_id}",
            "order": "changed_at.asc",
        })
        return [_history_from_row(row) for row in rows]

    def _posting_from_row(self, row: Dict[str, Any]) -> JobPosting:
        return JobPosting(
            id=str(row["id"]),
            title=row.get("title") or "",
            company_id=row.get("company_id"),
            location=row.get("location"),
            remote_ok=row.get("remote_ok"),
            is_active=row.get("is_active", True),
            created_at=row["created_at"],
            skills=[_requirement_from_row(s) for s in row.get("job_posting_skills") or []],
        )

    # Writes

    async def create_application(
        self,
        job_seeker_id: str,
        job_posting_id: str,
        actor: Optional[str] = None,
    ) -> Application:
        # The initial history record is written by the insert trigger
        try:
            rows = await self._request(
                "POST",
                "/applications",
                json={"job_seeker_id": job_seeker_id, "job_posting_id": job_posting_id},
                headers={"Prefer": "return=representation"},
            )
        except _BackendError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateApplication(job_seeker_id, job_posting_id) from e
            raise

        if not rows:
            raise DataAccessError("Application insert returned no row")
        return _application_from_row(rows[0])

    async def commit_status_transition(
        self,
        application_id: str,
        expected_status: ApplicationStatus,
        new_status: ApplicationStatus,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> StatusHistoryEntry:
        payload = {
            "p_application_id": application_id,
            "p_expected_status": expected_status.value,
            "p_new_status": new_status.value,
            "p_actor": actor,
            "p_notes": notes,
        }
        try:
            row = await self._request("POST", "/rpc/transition_application_status", json=payload)
        except _BackendError as e:
            if e.code == SERIALIZATION_FAILURE:
                if e.details:
                    actual = as_status(e.details)
                else:
                    actual = await self.fetch_application_current_status(application_id)
                raise ConcurrentModification(application_id, expected_status, actual) from e
            if e.code == RAISE_EXCEPTION:
                raise InvalidTransition(
                    application_id,
                    expected_status,
                    new_status,
                    allowed=valid_next_statuses(expected_status),
                ) from e
            if e.code == NO_DATA_FOUND:
                raise ApplicationNotFound(application_id) from e
            if e.code == INSUFFICIENT_PRIVILEGE:
                raise PermissionDenied(application_id) from e
            raise

        if isinstance(row, list):
            row = row[0] if row else None
        if not row:
            raise DataAccessError("Status transition returned no history record")
        return _history_from_row(row)

    async def append_status_history(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        rows = await self._request(
            "POST",
            "/application_status_history",
            json={
                "application_id": entry.application_id,
                "old_status": entry.old_status.value if entry.old_status else None,
                "new_status": entry.new_status.value,
                "changed_by": entry.changed_by,
                "changed_at": entry.changed_at.isoformat(),
                "notes": entry.notes,
            },
            headers={"Prefer": "return=representation"},
        )
        return _history_from_row(rows[0]) if rows else entry

