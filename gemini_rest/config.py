"""Configuration management for the client library."""

from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Credentials
    api_key: SecretStr | None = Field(
        default=None, description="Gemini API key for the public endpoint"
    )
    region: str | None = Field(default=None, description="GCP region for Vertex AI")
    project_id: str | None = Field(
        default=None, description="GCP project id for Vertex AI"
    )

    # Proxy Configuration
    proxy: str | None = Field(default=None, description="HTTP proxy URL")

    # Timeout Configuration
    timeout: int = Field(default=30, description="Request timeout in seconds")

    # Schema version
    beta: bool = Field(
        default=False,
        description="Use the v1beta public endpoint and enable beta-only request fields",
    )

    # Endpoints
    public_base_api: str = Field(
        default="https://generativelanguage.googleapis.com/v1",
        description="Public Gemini API base URL",
    )
    public_beta_base_api: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Public Gemini API beta base URL",
    )
    vertex_base_api: str = Field(
        default="https://{region}-aiplatform.googleapis.com/v1",
        description="Vertex AI base URL, {region} is substituted",
    )
    auth_scope: str = Field(
        default="https://www.googleapis.com/auth/cloud-platform",
        description="OAuth scope requested for Vertex AI tokens",
    )

    # Streaming Configuration
    max_fragment_size: int = Field(
        default=1024 * 1024,
        description="Maximum size in bytes of one streamed JSON array element",
    )
    stream_concurrency: int | None = Field(
        default=None,
        description="Maximum concurrently running per-fragment actions (None is unbounded)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level for configure_logging")

    class Config:
        env_prefix = "GEMINI_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def public_api_base(self) -> str:
        """Public base URL for the configured schema version."""
        return self.public_beta_base_api if self.beta else self.public_base_api


# Global settings instance
settings = Settings()
