"""Database connector factory."""

import logging

from tablestakes.core.config import Settings
from tablestakes.core.exceptions import ConfigurationError
from tablestakes.db.base import DatabaseConnector
from tablestakes.db.bigquery import BigQueryConnector
from tablestakes.db.postgresql import PostgreSQLConnector

logger = logging.getLogger(__name__)

_ALIASES = {
    "postgresql": "postgresql",
    "postgres": "postgresql",
    "bigquery": "bigquery",
}


def normalize_database_type(database_type: str) -> str:
    """Map a configured or requested data-source name to a connector kind.

    Raises:
        ConfigurationError: If the kind is not supported
    """
    kind = _ALIASES.get((database_type or "").strip().lower())
    if kind is None:
        raise ConfigurationError(f"Unsupported database type: {database_type}")
    return kind


def create_database_connector(settings: Settings, data_source: str | None = None) -> DatabaseConnector:
    """Create a fresh, unconnected connector for one request.

    Args:
        settings: Application settings
        data_source: Requested connector kind, defaults to ``DATABASE_TYPE``

    Returns:
        DatabaseConnector for the selected backing store

    Raises:
        ConfigurationError: If the kind is unsupported or its settings are missing
    """
    kind = normalize_database_type(data_source or settings.DATABASE_TYPE)

    if kind == "postgresql":
        return PostgreSQLConnector(
            settings.DATABASE_URL,
            schema=settings.DATABASE_SCHEMA,
            query_timeout_seconds=settings.DATABASE_QUERY_TIMEOUT_SECONDS,
            connect_attempts=settings.DATABASE_CONNECT_ATTEMPTS,
        )

    return BigQueryConnector(
        settings.BIGQUERY_DATASET_ID,
        project_id=settings.bigquery_project,
        query_timeout_seconds=settings.DATABASE_QUERY_TIMEOUT_SECONDS,
        max_bytes_billed=settings.BQ_MAX_BYTES_BILLED,
    )
