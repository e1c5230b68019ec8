"""Configuration management."""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Embedding provider
    embedding_provider: Literal["gemini", "voyage"] = "gemini"
    embedding_dimensions: int = Field(default=768, gt=0, description="Vector length enforced for every stored embedding")  # noqa: E501
    embedding_timeout_seconds: float = Field(default=30.0, gt=0)

    # API Keys
    gemini_api_key: SecretStr = SecretStr("")
    gemini_embedding_model: str = "text-embedding-004"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    voyage_api_key: SecretStr = SecretStr("")
    voyage_model: str = "voyage-3"

    # Neo4j
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: SecretStr = SecretStr("password")

    # Chunking and search
    chunk_max_size: int = Field(default=1000, gt=0, description="Soft upper bound for chunk length in characters")  # noqa: E501
    search_default_threshold: float = Field(default=0.78, ge=-1.0, le=1.0)
    search_default_limit: int = Field(default=10, gt=0)

    # Regeneration sweep
    regeneration_enabled: bool = True
    regeneration_hour: int = Field(default=3, ge=0, le=23)
    regeneration_minute: int = Field(default=0, ge=0, le=59)

    # App config
    debug: bool = False
    json_logs: bool = False
    logfire_token: SecretStr | None = None
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore extra fields in .env file
        env_nested_delimiter="__",
    )

    @property
    def active_api_key(self) -> str:
        """API key of the configured embedding provider, empty when unset."""
        key = self.gemini_api_key if self.embedding_provider == "gemini" else self.voyage_api_key
        return key.get_secret_value()


settings = Settings()
