"""Turning source rows into embeddable text and result metadata.

Each builder emits one ``Label: value`` line per populated field, lists
joined with ", ". Documents are described by their metadata only; file
contents are never read here.
"""

from typing import Any

from company_brain.domain.models import (
    BrainDocument,
    CompanyBrain,
    Project,
    ProjectDocument,
    ProjectMetadata,
)


def _lines(*pairs: tuple[str, Any]) -> str:
    parts = []
    for label, value in pairs:
        if isinstance(value, list | tuple):
            value = ", ".join(str(item) for item in value if item)
        if value:
            parts.append(f"{label}: {value}")
    return "\n".join(parts)


def prepare_company_info(brain: CompanyBrain) -> str:
    return _lines(
        ("Company", brain.company_name),
        ("Tagline", brain.company_tagline),
        ("Description", brain.company_description),
        ("Industry", brain.industry),
        ("Size", brain.company_size),
        ("Target Market", brain.target_market),
        ("Products", brain.key_products),
        ("Value Proposition", brain.unique_value_prop),
        ("Mission", brain.mission_statement),
        ("Vision", brain.vision_statement),
        ("Values", brain.core_values),
        ("USPs", brain.unique_selling_points),
        ("Target Audience", brain.target_audience),
        ("Features", brain.key_features),
        ("Pricing", brain.pricing_model),
    )


def company_info_metadata(brain: CompanyBrain) -> dict[str, Any]:
    return {
        "source": "company_brain_form",
        "company_name": brain.company_name,
        "industry": brain.industry,
        "company_size": brain.company_size,
    }


def prepare_project_metadata(metadata: ProjectMetadata, project_name: str) -> str:
    return _lines(
        ("Project", project_name),
        ("Domain", metadata.domain),
        ("Industry", metadata.industry),
        ("Type", metadata.project_type),
        ("Description", metadata.project_description),
        ("Goals", metadata.project_goals),
        ("Target Audience", metadata.target_audience),
        ("Budget", metadata.budget_range),
        ("Timeline", metadata.timeline),
        ("Tech Stack", metadata.tech_stack),
        ("Key Features", metadata.key_features),
        ("Key Goals", metadata.key_goals),
        ("Requirements", metadata.requirements),
        ("Team Size", metadata.team_size),
        ("Priority", metadata.priority_level),
        ("Success Metrics", metadata.success_metrics),
        ("Constraints", metadata.constraints),
        ("Additional Context", metadata.additional_context),
        ("Additional Notes", metadata.additional_notes),
    )


def project_metadata_metadata(project: Project) -> dict[str, Any]:
    return {
        "source": "project_metadata_form",
        "project_name": project.project_name,
        "status": project.status,
    }


def prepare_document(doc: BrainDocument | ProjectDocument, project_name: str | None = None) -> str:
    return _lines(
        ("Project", project_name),
        ("File", doc.file_name),
        ("Description", doc.description),
        ("Category", doc.category),
        ("Tags", doc.tags),
        ("Type", doc.file_type),
    )


def document_metadata(doc: BrainDocument | ProjectDocument, project_name: str | None = None) -> dict[str, Any]:
    metadata: dict[str, Any] = {
        "file_name": doc.file_name,
        "file_type": doc.file_type,
        "category": doc.category,
        "tags": list(doc.tags),
        "storage_url": doc.storage_url,
    }
    if project_name:
        metadata["project_name"] = project_name
    return metadata


def chunk_metadata(index: int, total: int, **extra: Any) -> dict[str, Any]:
    return {"chunk_index": index, "total_chunks": total, **extra}
