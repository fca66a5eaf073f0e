"""Chart specification generation.

The completion service proposes a chart for the executed rows. When it is
unavailable or returns something unusable, a rule-based fallback picks the
axes from the column names instead. Either way ``rawData`` carries the
original rows untouched.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from tablestakes.core.exceptions import GenerationError, VisualizationError
from tablestakes.db.base import QueryResult
from tablestakes.nlq.llm_client import CompletionClient
from tablestakes.nlq.result_formatter import CHART_TYPES, GraphResult, SeriesConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a data visualization expert that transforms raw data into chart specifications."

FALLBACK_COLOR = "#8884d8"
TIME_COLUMN_HINTS = ("date", "time", "month", "year")


def no_data_result() -> GraphResult:
    """Sentinel chart for an empty result set."""
    return GraphResult(
        chart_type="none",
        title="No Data Available",
        x_axis="Category",
        y_axis="Value",
        labels=[],
        values=[],
        raw_data=[],
    )


def fallback_visualization(query_result: QueryResult) -> GraphResult:
    """Infer a chart from column names alone.

    The first column is the category axis and the second the value axis.
    A column whose name looks temporal becomes the category axis of a line
    chart instead.
    """
    rows = query_result.rows
    # Statements without a result set carry their keys only in the rows
    columns = query_result.columns or (list(rows[0].keys()) if rows else [])

    chart_type = "bar"
    x_axis_key = columns[0] if columns else "category"
    data_field = columns[1] if len(columns) > 1 else x_axis_key

    time_columns = [
        column for column in columns
        if any(hint in column.lower() for hint in TIME_COLUMN_HINTS)
    ]
    if time_columns:
        chart_type = "line"
        x_axis_key = time_columns[0]

    return GraphResult(
        chart_type=chart_type,
        title=f"{data_field} by {x_axis_key}",
        x_axis=x_axis_key,
        y_axis=data_field,
        x_axis_key=x_axis_key,
        series=[SeriesConfig(data_key=data_field, name=data_field, color=FALLBACK_COLOR)],
        processed_data=rows,
        raw_data=rows,
    )


def describe_data(query_result: QueryResult, full_data_max_rows: int = 50, sample_rows: int = 20) -> tuple[str, str]:
    """Summarize rows for the prompt, sampling large result sets.

    Returns:
        (description, JSON-encoded rows)
    """
    columns = ", ".join(query_result.columns)
    rows = query_result.rows
    total = len(rows)

    if total > full_data_max_rows:
        description = (
            f"{total} rows of data with columns: {columns}. "
            f"Showing first {sample_rows} rows as sample."
        )
        rows = rows[:sample_rows]
    else:
        description = f"{total} rows of data with columns: {columns}"

    return description, json.dumps(rows, default=str)


def build_visualization_prompt(query: str, description: str, data: str) -> str:
    return f"""You are a data visualization expert. Based on the following query and data, create a visualization specification.

User Query: "{query}"

Data Description: {description}

Data: {data}

Analyze this data and determine the best visualization approach. Return a JSON specification with the following structure:
{{
  "chartType": one of: "bar", "line", "pie", "scatter", "area", "composed",
  "title": "Clear descriptive title for the chart",
  "subtitle": "Optional subtitle with additional context",
  "xAxisLabel": "Label for the X axis",
  "yAxisLabel": "Label for the Y axis",
  "xAxisKey": "The data field to use for X axis",
  "series": [
    {{
      "dataKey": "Field name to visualize",
      "name": "Display name for the series",
      "color": "#hexcolor",
      "type": "Optional: bar, line, area, etc. for composed charts"
    }}
  ],
  "data": [
    // Transformed data ready for visualization, aggregated by date,
    // grouped by category, etc.
  ],
  "insights": "3-5 key insights about the data",
  "recommendedFilters": ["optional list of fields that would be useful as filters"]
}}

Important:
1. Create proper aggregations or transformations as needed (group by date, category, etc.)
2. For time series data, ensure dates are properly parsed and formatted
3. Choose appropriate colors that are visually distinct and accessible
4. For complex data, consider using a composed chart with multiple series
5. Return only the JSON object with no explanation"""


def parse_visualization_spec(content: str, query_result: QueryResult) -> GraphResult:
    """Map an LLM chart specification onto a GraphResult.

    Raises:
        VisualizationError: If the response is empty, not JSON, or lacks a
            usable ``chartType`` and ``data``, or a series names a key
            missing from a data record
    """
    if not content:
        raise VisualizationError("No content returned from LLM")

    try:
        spec = json.loads(content)
    except json.JSONDecodeError as e:
        raise VisualizationError(f"Invalid visualization JSON: {e}") from e

    if not isinstance(spec, dict) or not spec.get("chartType") or spec.get("data") is None:
        raise VisualizationError("Visualization spec missing required fields")
    if spec["chartType"] not in CHART_TYPES:
        raise VisualizationError(f"Unsupported chart type: {spec['chartType']}")
    if not isinstance(spec["data"], list):
        raise VisualizationError("Visualization data is not a list")

    try:
        graph = GraphResult(
            chart_type=spec["chartType"],
            title=spec.get("title") or "Data Visualization",
            subtitle=spec.get("subtitle"),
            x_axis=spec.get("xAxisLabel") or "",
            y_axis=spec.get("yAxisLabel") or "",
            x_axis_key=spec.get("xAxisKey"),
            series=spec.get("series") or [],
            processed_data=spec["data"],
            raw_data=query_result.rows,
            insights=spec.get("insights"),
            recommended_filters=spec.get("recommendedFilters") or [],
        )
    except ValidationError as e:
        raise VisualizationError(f"Invalid visualization spec: {e}") from e

    records = [record for record in graph.processed_data if isinstance(record, dict)]
    for series in graph.series:
        if any(series.data_key not in record for record in records):
            raise VisualizationError(f"Series key not present in data: {series.data_key}")

    return graph


class VisualizationSynthesizer:
    """Builds chart specifications for executed queries."""

    def __init__(
        self,
        client: CompletionClient,
        temperature: float = 0.1,
        max_tokens: int = 2000,
        full_data_max_rows: int = 50,
        sample_rows: int = 20,
    ):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.full_data_max_rows = full_data_max_rows
        self.sample_rows = sample_rows

    async def generate(self, query: str, query_result: QueryResult) -> GraphResult:
        """Produce a chart for the rows. Never raises for LLM problems.

        Args:
            query: Original natural language question
            query_result: Executed rows

        Returns:
            GraphResult from the LLM, or from the fallback heuristic
        """
        if not query_result.rows:
            return no_data_result()

        description, data = describe_data(query_result, self.full_data_max_rows, self.sample_rows)
        prompt = build_visualization_prompt(query, description, data)

        logger.info(
            f"Generating visualization specification for {len(query_result.rows)} rows of data"
        )

        try:
            content = await self.client.complete(
                SYSTEM_PROMPT,
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_response=True,
            )
            graph = parse_visualization_spec(content, query_result)
        except (GenerationError, VisualizationError) as e:
            logger.warning(
                "Visualization generation failed, using fallback",
                extra={"error": str(e)},
            )
            return fallback_visualization(query_result)

        logger.info(f"LLM generated visualization data with chart type: {graph.chart_type}")
        return graph
