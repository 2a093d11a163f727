"""
CV summary schemas.

Structured output requested from the language model, and the artifact
written to the object store around it.

Dependencies: pydantic
System role: Summarizer response schema definitions
"""

from typing import Any

from pydantic import BaseModel, Field


class ExperienceStats(BaseModel):
    """Headline numbers about the candidate's work history."""

    total_years: float | None = Field(default=None, description="Total years of professional experience")
    roles_count: int | None = Field(default=None, description="Number of distinct roles held")
    most_recent_title: str | None = Field(default=None, description="Most recent job title")
    most_recent_company: str | None = Field(default=None, description="Most recent employer")


class Education(BaseModel):
    """One education entry."""

    institution: str = Field(description="School or university name")
    degree: str | None = Field(default=None, description="Degree or qualification")
    year: str | None = Field(default=None, description="Graduation year or date range")


class ContactDetails(BaseModel):
    """Contact details found in the document."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    links: list[str] = Field(default_factory=list, description="Portfolio, LinkedIn, GitHub URLs")


class CVSummary(BaseModel):
    """Structured summary of a CV produced by the language model."""

    role: str = Field(description="Best-fit role or title for the candidate")
    summary: str = Field(description="Three to five sentence professional summary")
    skills: list[str] = Field(default_factory=list, description="Technical and soft skills")
    experience: ExperienceStats = Field(default_factory=ExperienceStats)
    strengths: list[str] = Field(default_factory=list, description="Key strengths")
    education: list[Education] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    contact: ContactDetails = Field(default_factory=ContactDetails)
    score: int = Field(ge=1, le=10, description="Overall CV quality score from 1 to 10")
    justification: str = Field(description="One-line justification for the score")


class SummaryOutcome(BaseModel):
    """Summarizer result plus model metadata."""

    result: CVSummary
    model_id: str
    usage: dict[str, Any] = Field(default_factory=dict)


class SummaryArtifact(BaseModel):
    """JSON document stored as the summary stage artifact."""

    job_id: str
    user_id: str
    source_text_key: str
    model_id: str
    usage: dict[str, Any] = Field(default_factory=dict)
    generated_at: str
    result: CVSummary
