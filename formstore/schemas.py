"""
Pydantic schemas for contact-form submissions.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubmissionInput(BaseModel):
    """What the contact form sends; validated before anything hits the network."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    company: str
    email: str
    phone: Optional[str] = None
    project_type: str = Field(..., alias="projectType", min_length=1)
    description: str
    budget: Optional[Union[str, int, float]] = None
    timeline: Optional[str] = None
    source: Optional[str] = None

    @field_validator("name", "company", "email", "description", mode="before")
    @classmethod
    def strip_required(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("phone", mode="before")
    @classmethod
    def strip_phone(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value or None

    @field_validator("budget", "timeline", "source", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return value or None


class Submission(BaseModel):
    """A row of the ``contact_submissions`` table."""

    # Rows read back may carry server-side columns such as ``id``, and older
    # rows may have nulls the input schema no longer allows.
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    project_type: Optional[str] = None
    description: Optional[str] = None
    budget: Optional[Union[str, int, float]] = None
    timeline: Optional[str] = None
    source: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_input(cls, payload: SubmissionInput, created_at: str) -> "Submission":
        return cls(
            name=payload.name,
            company=payload.company,
            email=payload.email,
            phone=payload.phone,
            project_type=payload.project_type,
            description=payload.description,
            budget=payload.budget,
            timeline=payload.timeline,
            source=payload.source,
            created_at=created_at,
        )

    def as_row(self) -> dict:
        return self.model_dump()


class SubmissionListResponse(BaseModel):
    submissions: list[Submission]
