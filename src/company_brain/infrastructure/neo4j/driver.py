"""Neo4j driver and schema management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from company_brain.core.base import DatabaseErrorDetails, ErrorCode, ErrorLevel
from company_brain.core.config import Settings, settings
from company_brain.core.decorators import with_error_handling
from company_brain.core.errors import ConfigurationError, PersistenceError
from company_brain.core.logging import get_logger
from company_brain.domain.models import EmbeddingScope
from company_brain.infrastructure.neo4j.queries import SchemaQueries

logger = get_logger(__name__)


@asynccontextmanager
async def create_neo4j_driver(
    config: Settings | None = None,
    max_connection_pool_size: int = 50,
    max_connection_lifetime: int = 3600,
) -> AsyncGenerator[AsyncDriver]:
    """Open a verified Neo4j driver for the lifetime of the block.

    Args:
        config: Settings holding the URI and credentials
        max_connection_pool_size: Maximum size of the connection pool
        max_connection_lifetime: Maximum lifetime of connections in seconds

    Yields:
        AsyncDriver: Connected Neo4j driver

    Raises:
        PersistenceError: If the database cannot be reached
    """
    config = config or settings

    logger.info(
        "Creating Neo4j driver",
        uri=config.neo4j_uri,
        pool_size=max_connection_pool_size,
        connection_lifetime=max_connection_lifetime,
    )

    driver = AsyncGraphDatabase.driver(
        config.neo4j_uri,
        auth=(config.neo4j_user, config.neo4j_password.get_secret_value()),
        max_connection_pool_size=max_connection_pool_size,
        max_connection_lifetime=max_connection_lifetime,
    )

    try:
        try:
            await driver.verify_connectivity()
        except (DriverError, Neo4jError) as e:
            raise PersistenceError(
                message=f"Cannot connect to Neo4j: {e!s}",
                code=ErrorCode.DB_CONNECTION,
                details=DatabaseErrorDetails(
                    source="neo4j_driver",
                    operation="verify_connectivity",
                    service_name="neo4j",
                    endpoint=config.neo4j_uri,
                ),
            ) from e
        logger.info("Neo4j connection established")
        yield driver
    finally:
        await driver.close()
        logger.info("Neo4j driver closed")


@with_error_handling(error_level=ErrorLevel.ERROR)
async def ensure_schema(driver: AsyncDriver, dimensions: int) -> None:
    """Create lookup and vector indexes for both embedding labels.

    Raises:
        ConfigurationError: If an existing vector index was built for another
            dimensionality; vectors of different lengths never share a deployment
    """
    async with driver.session() as session:
        for scope in EmbeddingScope:
            await session.run(SchemaQueries.create_lookup_index(scope))
            await session.run(SchemaQueries.create_content_id_index(scope))

            query, params = SchemaQueries.check_vector_index(scope)
            result = await session.run(query, **params)
            record = await result.single()
            if record is not None:
                existing = record["options"].get("indexConfig", {}).get("vector.dimensions")
                if existing is not None and int(existing) != dimensions:
                    raise ConfigurationError(
                        message=(
                            f"Vector index for {scope.value} holds {existing}-dimension vectors, "
                            f"configured dimensions are {dimensions}"
                        ),
                        details={"source": "neo4j_schema", "operation": "ensure_schema", "scope": scope.value},
                        code=ErrorCode.CONFIG_INVALID,
                    )
                continue

            await session.run(SchemaQueries.create_vector_index(scope, dimensions))
            logger.info("Created vector index", scope=scope.value, dimensions=dimensions)
