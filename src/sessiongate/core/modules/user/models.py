from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Login input handed to the user directory."""

    username: str
    password: str = Field(repr=False)


class Principal(BaseModel):
    """Authenticated identity owned by the user directory."""

    subject_id: str
    username: str


class PrincipalView(BaseModel):
    """Principal information (API representation)."""

    subject_id: str = Field(..., description="Stable identifier of the authenticated principal")
    username: str = Field(..., description="Username")

    @classmethod
    def from_domain(cls, principal: Principal) -> "PrincipalView":
        """Create view model from domain model."""
        return cls(subject_id=principal.subject_id, username=principal.username)
