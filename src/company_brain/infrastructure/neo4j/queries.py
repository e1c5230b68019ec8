"""Centralized Cypher for embeddings, source rows and schema.

Labels are interpolated from ``EmbeddingScope.label`` (a closed enum), never
from caller input.
"""

from typing import Any, LiteralString, cast

from company_brain.domain.models import EmbeddingScope

GDS_COSINE = "gds.similarity.cosine"


class EmbeddingQueries:
    """All embedding-table queries in one place."""

    @staticmethod
    def insert(scope: EmbeddingScope) -> LiteralString:
        query = f"""
            UNWIND $rows AS row
            CREATE (e:{scope.label})
            SET e = row
            RETURN count(e) AS created
            """
        return cast(LiteralString, query)

    @staticmethod
    def delete_where(scope: EmbeddingScope, condition: str) -> LiteralString:
        query = f"""
            MATCH (e:{scope.label})
            WHERE {condition}
            DETACH DELETE e
            RETURN count(e) AS deleted
            """
        return cast(LiteralString, query)

    @staticmethod
    def count(scope: EmbeddingScope, condition: str) -> LiteralString:
        query = f"""
            MATCH (e:{scope.label})
            WHERE {condition}
            RETURN count(e) AS total
            """
        return cast(LiteralString, query)

    @staticmethod
    def rank(scope: EmbeddingScope, condition: str, limited: bool) -> LiteralString:
        """Raw cosine ranking; ties go to the newest record.

        ``gds.similarity.cosine`` is used rather than ``vector.similarity.cosine``
        because the latter rescales to [0, 1] and thresholds are expressed in
        plain cosine.
        """
        limit_clause = "LIMIT $limit" if limited else ""
        query = f"""
            MATCH (e:{scope.label})
            WHERE {condition}
            WITH e, {GDS_COSINE}(e.embedding, $query_embedding) AS similarity
            WHERE $threshold IS NULL OR similarity >= $threshold
            RETURN e {{.*}} AS node, similarity
            ORDER BY similarity DESC, node.created_at DESC
            {limit_clause}
            """
        return cast(LiteralString, query)


class SourceQueries:
    """Read-only queries over the application's source nodes."""

    @staticmethod
    def list_company_brains() -> tuple[LiteralString, dict[str, Any]]:
        return "MATCH (b:CompanyBrain) RETURN b {.*} AS row ORDER BY b.tenant_id", {}

    @staticmethod
    def list_brain_documents(tenant_id: str | None, include_deleted: bool) -> tuple[LiteralString, dict[str, Any]]:
        query = """
            MATCH (d:BrainDocument)
            WHERE ($tenant_id IS NULL OR d.tenant_id = $tenant_id)
              AND ($include_deleted OR coalesce(d.is_deleted, false) = false)
            RETURN d {.*} AS row
            ORDER BY d.tenant_id, d.file_name
            """
        return query, {"tenant_id": tenant_id, "include_deleted": include_deleted}

    @staticmethod
    def list_projects() -> tuple[LiteralString, dict[str, Any]]:
        return "MATCH (p:Project) RETURN p {.*} AS row ORDER BY p.tenant_id, p.project_name", {}

    @staticmethod
    def get_project(project_id: str) -> tuple[LiteralString, dict[str, Any]]:
        return "MATCH (p:Project {id: $project_id}) RETURN p {.*} AS row LIMIT 1", {"project_id": project_id}

    @staticmethod
    def get_project_metadata(project_id: str) -> tuple[LiteralString, dict[str, Any]]:
        query = """
            MATCH (m:ProjectMetadata {project_id: $project_id})
            RETURN m {.*} AS row
            LIMIT 1
            """
        return query, {"project_id": project_id}

    @staticmethod
    def list_project_documents(project_id: str, include_deleted: bool) -> tuple[LiteralString, dict[str, Any]]:
        query = """
            MATCH (d:ProjectDocument {project_id: $project_id})
            WHERE $include_deleted OR coalesce(d.is_deleted, false) = false
            RETURN d {.*} AS row
            ORDER BY d.file_name
            """
        return query, {"project_id": project_id, "include_deleted": include_deleted}

    @staticmethod
    def get_project_document(document_id: str) -> tuple[LiteralString, dict[str, Any]]:
        query = """
            MATCH (d:ProjectDocument {id: $document_id})
            RETURN d {.*} AS row
            LIMIT 1
            """
        return query, {"document_id": document_id}


class SchemaQueries:
    """Lookup and vector indexes for the two embedding labels."""

    @staticmethod
    def vector_index_name(scope: EmbeddingScope) -> str:
        return f"{scope.label.lower()}_vector"

    @staticmethod
    def create_lookup_index(scope: EmbeddingScope) -> LiteralString:
        query = f"""
            CREATE INDEX {scope.label.lower()}_lookup IF NOT EXISTS
            FOR (e:{scope.label}) ON (e.tenant_id, e.scope_id, e.content_type)
            """
        return cast(LiteralString, query)

    @staticmethod
    def create_content_id_index(scope: EmbeddingScope) -> LiteralString:
        query = f"""
            CREATE INDEX {scope.label.lower()}_content_id IF NOT EXISTS
            FOR (e:{scope.label}) ON (e.content_id)
            """
        return cast(LiteralString, query)

    @staticmethod
    def check_vector_index(scope: EmbeddingScope) -> tuple[LiteralString, dict[str, Any]]:
        query = """
            SHOW INDEXES
            YIELD name, type, options
            WHERE name = $name AND type = 'VECTOR'
            RETURN options
            """
        return query, {"name": SchemaQueries.vector_index_name(scope)}

    @staticmethod
    def create_vector_index(scope: EmbeddingScope, dimensions: int) -> LiteralString:
        query = f"""
            CREATE VECTOR INDEX {SchemaQueries.vector_index_name(scope)} IF NOT EXISTS
            FOR (e:{scope.label}) ON e.embedding
            OPTIONS {{indexConfig: {{
              `vector.dimensions`: {int(dimensions)},
              `vector.similarity_function`: 'cosine'
            }}}}
            """
        return cast(LiteralString, query)
