"""Shared constants for embedding, search and regeneration."""

# Chunking
CHUNK_MAX_SIZE_DEFAULT = 1000
PARAGRAPH_SEPARATOR = "\n\n"

# Search
SIMILARITY_THRESHOLD_DEFAULT = 0.78
SEARCH_LIMIT_DEFAULT = 10

# Known output sizes; a deployment enforces exactly one of them
MODEL_DIMENSIONS = {
    "text-embedding-004": 768,
    "text-embedding-3-small": 1536,
    "voyage-3": 1024,
    "voyage-3-lite": 512,
    "voyage-large-2": 1536,
    "voyage-code-2": 1536,
}

# Regeneration
REGENERATION_JOB_ID = "nightly_regeneration"
REGENERATION_HOUR_DEFAULT = 3
REGENERATION_MINUTE_DEFAULT = 0
