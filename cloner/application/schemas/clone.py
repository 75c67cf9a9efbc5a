"""Pydantic DTOs (Data Transfer Objects) for the clone feature."""

from pydantic import BaseModel, Field


class CloneRequest(BaseModel):
    """Schema for a duplication request — the body is optional."""

    destination: str | None = Field(
        None,
        min_length=1,
        max_length=100,
        description="Configured destination store; omit to clone into the default database.",
        examples=["archive"],
    )


class CloneResponse(BaseModel):
    """Schema returned to the client after a successful duplication."""

    entity_type: str
    source_id: int | str
    clone_id: int | str
    destination: str | None = None
