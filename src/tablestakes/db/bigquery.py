"""BigQuery connector.

The BigQuery client is synchronous, so every call runs in a worker thread to
keep the event loop free.
"""

import asyncio
import logging
import time

from google.cloud import bigquery
from google.cloud.exceptions import GoogleCloudError

from tablestakes.core.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    QueryExecutionError,
    SchemaError,
)
from tablestakes.db.base import DatabaseConnector, QueryResult
from tablestakes.nlq.schema_context import SchemaCatalog, build_schema_catalog

logger = logging.getLogger(__name__)


class BigQueryConnector(DatabaseConnector):
    """Connector for a single BigQuery dataset."""

    kind = "bigquery"

    def __init__(
        self,
        dataset_id: str,
        project_id: str | None = None,
        query_timeout_seconds: int = 60,
        max_bytes_billed: int | None = None,
    ):
        """Initialize connector without creating a client.

        Args:
            dataset_id: Dataset whose tables are introspected and queried
            project_id: GCP project, None lets the client auto-detect
            query_timeout_seconds: Wait limit for query jobs
            max_bytes_billed: Optional cost guard for query jobs

        Raises:
            ConfigurationError: If no dataset is configured
        """
        if not dataset_id:
            raise ConfigurationError("BIGQUERY_DATASET_ID environment variable is required")

        self.dataset_id = dataset_id
        self.project_id = project_id
        self.query_timeout_seconds = query_timeout_seconds
        self.max_bytes_billed = max_bytes_billed
        self._client: bigquery.Client | None = None

    async def connect(self) -> None:
        if self._client is not None:
            return
        try:
            self._client = await asyncio.to_thread(bigquery.Client, project=self.project_id)
        except Exception as e:
            logger.error("Failed to initialize BigQuery client", extra={"error": str(e)})
            raise DatabaseConnectionError(f"Failed to connect to BigQuery: {e}") from e

        if not self.project_id:
            self.project_id = self._client.project
        logger.info(f"Initialized BigQuery client for project: {self.project_id}")

    async def disconnect(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await asyncio.to_thread(client.close)

    def is_connected(self) -> bool:
        return self._client is not None

    def _job_config(self) -> bigquery.QueryJobConfig:
        job_config = bigquery.QueryJobConfig(use_legacy_sql=False)
        if self.max_bytes_billed:
            job_config.maximum_bytes_billed = self.max_bytes_billed
        return job_config

    async def get_schema(self) -> SchemaCatalog:
        if self._client is None:
            await self.connect()

        sql = (
            "SELECT table_name, column_name, data_type "
            f"FROM `{self.project_id}.{self.dataset_id}.INFORMATION_SCHEMA.COLUMNS` "
            "ORDER BY table_name, ordinal_position"
        )

        def _run() -> list[tuple]:
            job = self._client.query(sql, job_config=self._job_config())
            result = job.result(timeout=self.query_timeout_seconds)
            return [(row["table_name"], row["column_name"], row["data_type"]) for row in result]

        try:
            rows = await asyncio.to_thread(_run)
        except (GoogleCloudError, TimeoutError) as e:
            logger.error("BigQuery schema introspection failed", extra={"error": str(e)})
            raise SchemaError(f"Failed to get schema: {e}") from e

        catalog = build_schema_catalog(rows)
        logger.info(
            f"Retrieved schema with {len(catalog.tables)} tables",
            extra={"dataset_id": self.dataset_id},
        )
        return catalog

    async def execute_query(self, sql: str) -> QueryResult:
        if self._client is None:
            await self.connect()

        def _run() -> QueryResult:
            job = self._client.query(sql, job_config=self._job_config())
            result = job.result(timeout=self.query_timeout_seconds)

            if not result.schema:
                return QueryResult.affected(job.num_dml_affected_rows)

            columns = [schema_field.name for schema_field in result.schema]
            rows = [dict(row.items()) for row in result]

            logger.info(
                "BigQuery query completed",
                extra={
                    "bytes_processed": job.total_bytes_processed or 0,
                    "bytes_billed": job.total_bytes_billed or 0,
                    "cache_hit": job.cache_hit or False,
                    "num_rows": len(rows),
                },
            )
            return QueryResult(columns=columns, rows=rows)

        start_time = time.time()
        try:
            return await asyncio.to_thread(_run)
        except TimeoutError as e:
            raise QueryExecutionError(
                f"Query execution failed: timeout after {self.query_timeout_seconds}s"
            ) from e
        except GoogleCloudError as e:
            logger.error(
                "BigQuery query failed",
                extra={
                    "error": str(e),
                    "execution_time_seconds": round(time.time() - start_time, 2),
                },
            )
            raise QueryExecutionError(f"Query execution failed: {e}") from e
