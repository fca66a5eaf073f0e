"""Configuration management for Table Stakes."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    ENV: str = "local"
    SERVICE_NAME: str = "tablestakes"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_TYPE: str = "postgresql"  # "postgresql" or "bigquery"
    DATABASE_URL: str = ""
    DATABASE_SCHEMA: str = "public"
    DATABASE_QUERY_TIMEOUT_SECONDS: int = 60
    DATABASE_CONNECT_ATTEMPTS: int = 3

    # BigQuery Configuration
    GCP_PROJECT_ID: str = ""
    BIGQUERY_DATASET_ID: str = ""
    BQ_MAX_BYTES_BILLED: int | None = None  # Optional limit on BigQuery bytes billed

    # LLM Configuration (OpenAI or any OpenAI-compatible endpoint)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_ENABLED: bool = True
    LLM_TIMEOUT_SECONDS: int = 60

    # Generation parameters
    SQL_TEMPERATURE: float = 0.1
    SQL_MAX_TOKENS: int = 500
    VISUALIZATION_TEMPERATURE: float = 0.1
    VISUALIZATION_MAX_TOKENS: int = 2000
    VISUALIZATION_FULL_DATA_MAX_ROWS: int = 50  # Larger results are sampled
    VISUALIZATION_SAMPLE_ROWS: int = 20

    @property
    def bigquery_project(self) -> str | None:
        """Get BigQuery project ID, None lets the client auto-detect."""
        return self.GCP_PROJECT_ID or None


def obfuscate_secret(value: str) -> str:
    """Mask a secret so it can be logged.

    Shows the first and last 4 characters of long values and only the first
    2 characters of short ones.
    """
    if not value:
        return ""
    if len(value) > 8:
        return f"{value[:4]}...{value[-4:]}"
    return f"{value[:2]}..."


# Singleton settings instance
settings = Settings()
