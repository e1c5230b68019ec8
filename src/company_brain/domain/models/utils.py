"""Timestamp helpers for domain models."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get the current UTC datetime with timezone awareness."""
    return datetime.now(UTC)


def from_epoch(seconds: float) -> datetime:
    """Aware UTC datetime from epoch seconds, the form timestamps take in Neo4j properties."""
    return datetime.fromtimestamp(seconds, UTC)
