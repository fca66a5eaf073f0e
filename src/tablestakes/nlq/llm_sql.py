"""LLM-based SQL generation from natural language.

Enrollment questions with a relative time window are answered by a fixed
SQL template. Every other question is translated by the completion service
using the live schema catalog as context.
"""

import logging
import re
from datetime import date, timedelta
from typing import Callable

from tablestakes.core.exceptions import GenerationError
from tablestakes.nlq.llm_client import CompletionClient
from tablestakes.nlq.schema_context import SchemaCatalog, format_schema_for_prompt

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a SQL expert that converts natural language to SQL queries."

# Checked in order; the first period found in the query wins, week is the default
ENROLLMENT_PERIODS = (
    ("month", 30, "in the last month"),
    ("quarter", 90, "in the last quarter"),
)
ENROLLMENT_DEFAULT_PERIOD = ("week", 7, "in the last week")
ENROLLMENT_TIME_TERMS = ("week", "month", "quarter")

_CODE_FENCE_START = re.compile(r"^```(?:sql|postgresql|postgres|bigquery)?\s*", re.IGNORECASE)
_CODE_FENCE_END = re.compile(r"\s*```$")


def is_enrollment_time_query(query: str) -> bool:
    """Return True when the query asks about enrollments over a relative period."""
    query_lower = query.lower()
    return "enrollment" in query_lower and any(term in query_lower for term in ENROLLMENT_TIME_TERMS)


def build_enrollment_sql(query: str, today: date) -> str:
    """Build the enrollment query for a relative time window ending today.

    Args:
        query: Natural language question
        today: Current date

    Returns:
        SELECT over ``enrollments`` bounded by ``enrollment_date``
    """
    query_lower = query.lower()

    period, days, description = ENROLLMENT_DEFAULT_PERIOD
    for candidate in ENROLLMENT_PERIODS:
        if candidate[0] in query_lower:
            period, days, description = candidate
            break

    start_date = today - timedelta(days=days)
    logger.info(
        f"Time period detected: {description} ({start_date.isoformat()} to {today.isoformat()})",
        extra={"period": period},
    )

    lines = [
        "SELECT * FROM enrollments",
        f"WHERE enrollment_date BETWEEN '{start_date.isoformat()}' AND '{today.isoformat()}'",
    ]
    if "active" in query_lower:
        lines.append("AND status = 'active'")
    lines.append("ORDER BY enrollment_date DESC")

    return "\n".join(lines)


def build_sql_prompt(query: str, catalog: SchemaCatalog, today: date) -> str:
    """Build the user prompt for SQL generation."""
    return f"""You are a SQL expert. Convert the following natural language query into a SQL query.

Database Schema:
{format_schema_for_prompt(catalog)}

Today's date: {today.isoformat()}

User Query: {query}

Important notes for time references:
1. For date calculations, always use ISO format (YYYY-MM-DD)
2. For "last week" use date >= (current_date - interval '7 days')
3. For "this month" use date >= date_trunc('month', current_date)
4. For "last month" use date BETWEEN date_trunc('month', current_date - interval '1 month') AND date_trunc('month', current_date) - interval '1 day'
5. For "last quarter" use date >= date_trunc('quarter', current_date - interval '3 months') AND date < date_trunc('quarter', current_date)
6. For "last year" use date >= date_trunc('year', current_date - interval '1 year') AND date < date_trunc('year', current_date)

Return only the SQL query without any explanation or markdown formatting."""


def strip_code_fences(text: str) -> str:
    """Remove a wrapping markdown code fence such as ```sql ... ```."""
    sql = text.strip()
    sql = _CODE_FENCE_START.sub("", sql)
    sql = _CODE_FENCE_END.sub("", sql)
    return sql.strip()


class SqlSynthesizer:
    """Translates natural language questions into SQL."""

    def __init__(
        self,
        client: CompletionClient,
        temperature: float = 0.1,
        max_tokens: int = 500,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.today = today

    async def generate(self, query: str, catalog: SchemaCatalog) -> str:
        """Generate one SQL statement for a question.

        The SQL is returned as text and is not parsed or validated here.

        Args:
            query: Natural language question
            catalog: Live schema catalog for prompt context

        Returns:
            SQL statement

        Raises:
            GenerationError: If the completion service fails or returns nothing
        """
        today = self.today()

        if is_enrollment_time_query(query):
            logger.info("Detected enrollment query with time reference")
            return build_enrollment_sql(query, today)

        prompt = build_sql_prompt(query, catalog, today)
        logger.debug("SQL generation prompt built", extra={"prompt": prompt})

        response = await self.client.complete(
            SYSTEM_PROMPT,
            prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        sql = strip_code_fences(response)
        if not sql:
            logger.error("LLM returned an empty SQL response")
            raise GenerationError("LLM returned an empty response")

        logger.info("Generated SQL from natural language", extra={"sql": sql})
        return sql
