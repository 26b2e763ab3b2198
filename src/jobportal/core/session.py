"""Explicit session context carrying the current user's identity and role."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field
from typing_extensions import Annotated


class JobSeekerRole(BaseModel):
    """Signed-in job seeker."""
    kind: Literal["jobseeker"] = "jobseeker"
    job_seeker_id: str = Field(..., description="Job seeker profile identifier")


class CompanyRole(BaseModel):
    """Signed-in employer."""
    kind: Literal["company"] = "company"
    company_id: Optional[str] = Field(None, description="Company profile identifier")


class AdminRole(BaseModel):
    """Signed-in administrator."""
    kind: Literal["admin"] = "admin"


Role = Annotated[
    Union[JobSeekerRole, CompanyRole, AdminRole],
    Field(discriminator="kind"),
]


class Session(BaseModel):
    """
    Identity of whoever is acting on the system.

    Passed explicitly to components that need the current user; there is no
    module-level session.
    """
    user_id: str = Field(..., description="Authenticated profile identifier")
    role: Role = Field(..., description="Role-specific context")

    @property
    def actor_id(self) -> str:
        return self.user_id

    @property
    def role_kind(self) -> str:
        return self.role.kind

    @classmethod
    def from_headers(
        cls,
        user_id: Optional[str],
        role: Optional[str],
        profile_id: Optional[str] = None,
    ) -> Optional["Session"]:
        """Build a session from request headers; None when unauthenticated."""
        if not user_id:
            return None

        kind = (role or "").lower()
        if kind == "jobseeker":
            return cls(user_id=user_id, role=JobSeekerRole(job_seeker_id=profile_id or user_id))
        if kind == "admin":
            return cls(user_id=user_id, role=AdminRole())
        return cls(user_id=user_id, role=CompanyRole(company_id=profile_id))


def actor_of(session: Optional[Session]) -> Optional[str]:
    """Actor id recorded in audit history; None stands for the system."""
    return session.actor_id if session is not None else None
