"""Company Brain: embedding and retrieval for company and project knowledge."""

__version__ = "0.1.0"
