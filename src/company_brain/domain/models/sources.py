"""Source entities owned by the application.

The embedding subsystem never writes these; it reads them to build
embeddable text and to know which embeddings should exist.
"""

from pydantic import BaseModel, Field


class CompanyBrain(BaseModel):
    """A tenant's company profile."""

    id: str
    tenant_id: str
    company_name: str | None = None
    company_tagline: str | None = None
    company_description: str | None = None
    industry: str | None = None
    company_size: str | None = None
    target_market: str | None = None
    key_products: str | None = None
    unique_value_prop: str | None = None
    mission_statement: str | None = None
    vision_statement: str | None = None
    core_values: list[str] = Field(default_factory=list)
    unique_selling_points: list[str] = Field(default_factory=list)
    target_audience: str | None = None
    key_features: list[str] = Field(default_factory=list)
    pricing_model: str | None = None
    additional_context: str | None = None


class BrainDocument(BaseModel):
    """A file uploaded to the company brain."""

    id: str
    tenant_id: str
    file_name: str
    file_type: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    storage_url: str | None = None
    is_deleted: bool = False


class Project(BaseModel):
    id: str
    tenant_id: str
    project_name: str
    status: str | None = None


class ProjectMetadata(BaseModel):
    """Structured description of a project; one row per project."""

    id: str
    project_id: str
    tenant_id: str
    domain: str | None = None
    industry: str | None = None
    project_type: str | None = None
    project_description: str | None = None
    project_goals: str | None = None
    target_audience: str | None = None
    budget_range: str | None = None
    timeline: str | None = None
    tech_stack: list[str] = Field(default_factory=list)
    key_features: list[str] = Field(default_factory=list)
    key_goals: list[str] = Field(default_factory=list)
    requirements: str | None = None
    team_size: str | None = None
    priority_level: str | None = None
    success_metrics: str | None = None
    constraints: str | None = None
    additional_context: str | None = None
    additional_notes: str | None = None


class ProjectDocument(BaseModel):
    id: str
    project_id: str
    tenant_id: str
    file_name: str
    file_type: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    storage_url: str | None = None
    is_deleted: bool = False
