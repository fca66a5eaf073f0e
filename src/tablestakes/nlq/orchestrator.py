"""Query pipeline orchestration.

Sequences connection, schema introspection, intent classification, SQL
generation, execution and formatting for one request. Failures come back as
a sanitized response instead of an exception.
"""

import logging
import re
from datetime import date
from enum import Enum
from typing import Annotated, Any, Callable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints

from tablestakes.core.config import Settings
from tablestakes.core.exceptions import (
    DatabaseConnectionError,
    GenerationError,
    QueryExecutionError,
    SchemaError,
)
from tablestakes.db.base import DatabaseConnector
from tablestakes.nlq.intent import ResultType, classify
from tablestakes.nlq.llm_client import CompletionClient
from tablestakes.nlq.llm_sql import SqlSynthesizer
from tablestakes.nlq.result_formatter import GraphResult, TableResult, format_for_table
from tablestakes.nlq.visualization import VisualizationSynthesizer

logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[str | None], DatabaseConnector]

GENERIC_ERROR_MESSAGE = "Database query failed"
GENERATION_ERROR_MESSAGE = "Unable to generate SQL for this question"
ERROR_EXECUTED_QUERY = "Error executing query"

# Driver phrases, checked in order. Object names are matched as a unit.
_OBJECT_NAME = r'(?:"[^"]*"|[\w.$]+)'
_ERROR_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (
        re.compile(
            r"password authentication failed|authentication failed|permission denied"
            r"|access denied|no pg_hba\.conf entry|must be owner of"
        ),
        "Database access error",
    ),
    (re.compile(r"\bsyntax error\b"), "SQL syntax error"),
    (
        re.compile(r"statement timeout|\btimeout after \d+|\btimed out\b|\bquery timeout\b"),
        "Database query timeout",
    ),
    (re.compile(rf"\bcolumn {_OBJECT_NAME} does not exist"), "Requested column does not exist"),
    (re.compile(r"\bunrecognized name: "), "Requested column does not exist"),
    (
        re.compile(rf"\b(?:relation|table) {_OBJECT_NAME} does not exist"),
        "Requested table does not exist",
    ),
    (re.compile(r"\bnot found: (?:table|dataset) "), "Requested table does not exist"),
)


def sanitize_error_message(error: Exception | str) -> str:
    """Map an error to a fixed, user-safe message.

    Matching is best-effort on the lower-cased error text. Anything not
    recognised becomes the generic message, so driver detail such as host
    names or user names never reaches the caller.
    """
    error_text = str(error).lower()

    for pattern, message in _ERROR_RULES:
        if pattern.search(error_text):
            return message

    return GENERIC_ERROR_MESSAGE


class PipelineState(str, Enum):
    """Stages of one request."""

    IDLE = "idle"
    CONNECTED = "connected"
    SCHEMA_LOADED = "schema_loaded"
    SQL_GENERATED = "sql_generated"
    EXECUTED = "executed"
    FORMATTED = "formatted"
    DISCONNECTED = "disconnected"


class QueryRequest(BaseModel):
    """Natural language query request."""

    model_config = ConfigDict(populate_by_name=True)

    query: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = Field(
        ..., description="Natural language question"
    )
    data_source: str | None = Field(
        None,
        validation_alias=AliasChoices("dataSource", "data_source"),
        serialization_alias="dataSource",
        description="Connector kind, defaults to DATABASE_TYPE",
    )


class DebugInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    executed_query: str = Field(..., alias="executedQuery")
    row_count: int = Field(..., alias="rowCount")


class QueryResponse(BaseModel):
    """Pipeline response. Failures carry ``message`` and an empty ``data``."""

    model_config = ConfigDict(populate_by_name=True)

    result_type: ResultType = Field(..., alias="resultType")
    data: TableResult | GraphResult | dict[str, Any]
    sql: str | None = None
    message: str | None = None
    debug: DebugInfo

    @classmethod
    def failure(cls, message: str) -> "QueryResponse":
        return cls(
            result_type="table",
            data={},
            message=message,
            debug=DebugInfo(executed_query=ERROR_EXECUTED_QUERY, row_count=0),
        )


class QueryOrchestrator:
    """Runs the query pipeline for one request at a time.

    Holds no per-request state, so a single instance can serve concurrent
    requests. Every request gets its own connector from the factory.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        connector_factory: ConnectorFactory,
        settings: Settings,
        today: Callable[[], date] = date.today,
    ):
        self.connector_factory = connector_factory
        self.sql_synthesizer = SqlSynthesizer(
            completion_client,
            temperature=settings.SQL_TEMPERATURE,
            max_tokens=settings.SQL_MAX_TOKENS,
            today=today,
        )
        self.visualization_synthesizer = VisualizationSynthesizer(
            completion_client,
            temperature=settings.VISUALIZATION_TEMPERATURE,
            max_tokens=settings.VISUALIZATION_MAX_TOKENS,
            full_data_max_rows=settings.VISUALIZATION_FULL_DATA_MAX_ROWS,
            sample_rows=settings.VISUALIZATION_SAMPLE_ROWS,
        )

    async def process(self, request: QueryRequest) -> QueryResponse:
        """Answer a natural language question.

        Args:
            request: Query and optional data source

        Returns:
            QueryResponse with a table or chart, or a sanitized failure

        Raises:
            ConfigurationError: If the data source is unsupported or unconfigured
        """
        query = request.query
        logger.info("Processing query", extra={"user_query": query, "data_source": request.data_source})

        # Configuration problems are fatal and surface before any connection
        connector = self.connector_factory(request.data_source)

        state = PipelineState.IDLE
        sql: str | None = None

        def advance(next_state: PipelineState) -> PipelineState:
            logger.debug(
                f"Pipeline state {state.value} -> {next_state.value}",
                extra={"state": next_state.value},
            )
            return next_state

        try:
            async with connector.session():
                state = advance(PipelineState.CONNECTED)

                catalog = await connector.get_schema()
                state = advance(PipelineState.SCHEMA_LOADED)

                result_type = classify(query)
                logger.info(f"Determined result type: {result_type}")

                sql = await self.sql_synthesizer.generate(query, catalog)
                state = advance(PipelineState.SQL_GENERATED)

                query_result = await connector.execute_query(sql)
                state = advance(PipelineState.EXECUTED)
                logger.info(f"Query executed with {len(query_result.rows)} results")

                if result_type == "graph":
                    data = await self.visualization_synthesizer.generate(query, query_result)
                else:
                    data = format_for_table(query_result)
                state = advance(PipelineState.FORMATTED)

            state = advance(PipelineState.DISCONNECTED)

        except (DatabaseConnectionError, SchemaError, QueryExecutionError) as e:
            logger.error(
                "Query pipeline failed",
                extra={"state": state.value, "error": str(e), "error_type": type(e).__name__, "sql": sql},
            )
            return QueryResponse.failure(sanitize_error_message(e))

        except GenerationError as e:
            logger.error(
                "SQL generation failed",
                extra={"state": state.value, "error": str(e)},
            )
            return QueryResponse.failure(GENERATION_ERROR_MESSAGE)

        except Exception:
            logger.exception("Unexpected error in query pipeline", extra={"state": state.value})
            return QueryResponse.failure(GENERIC_ERROR_MESSAGE)

        return QueryResponse(
            result_type=result_type,
            data=data,
            sql=sql,
            debug=DebugInfo(executed_query=sql, row_count=len(query_result.rows)),
        )
