from .embedding import Neo4jEmbeddingRepository
from .in_memory import InMemoryEmbeddingRepository, InMemorySourceRepository
from .sources import Neo4jSourceRepository

__all__ = [
    "InMemoryEmbeddingRepository",
    "InMemorySourceRepository",
    "Neo4jEmbeddingRepository",
    "Neo4jSourceRepository",
]
