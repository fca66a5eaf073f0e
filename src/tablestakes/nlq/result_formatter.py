"""Result models returned to the presentation layer.

Field names serialize in camelCase because the chart and grid widgets
consume them directly.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from tablestakes.db.base import QueryResult

ChartType = Literal["bar", "line", "pie", "scatter", "area", "composed", "none"]
CHART_TYPES: tuple[str, ...] = ("bar", "line", "pie", "scatter", "area", "composed")


class SeriesConfig(BaseModel):
    """One plotted dimension of a chart."""

    model_config = ConfigDict(populate_by_name=True)

    data_key: str = Field(..., alias="dataKey", description="Key present in every processedData record")
    name: str = Field(..., description="Display name for the series")
    color: str = Field(..., description="Hex colour")
    type: str | None = Field(None, description="Series kind for composed charts")


class TableResult(BaseModel):
    """Pass-through view of a query result."""

    columns: list[str]
    rows: list[dict[str, Any]]


class GraphResult(BaseModel):
    """Fully specified chart description."""

    model_config = ConfigDict(populate_by_name=True)

    chart_type: ChartType = Field(..., alias="chartType")
    title: str
    subtitle: str | None = None
    x_axis: str = Field(..., alias="xAxis", description="X axis label")
    y_axis: str = Field(..., alias="yAxis", description="Y axis label")
    x_axis_key: str | None = Field(None, alias="xAxisKey", description="Field used as category axis")
    series: list[SeriesConfig] = Field(default_factory=list)
    processed_data: list[Any] = Field(default_factory=list, alias="processedData")
    raw_data: list[dict[str, Any]] = Field(default_factory=list, alias="rawData")
    insights: str | None = None
    recommended_filters: list[str] | None = Field(None, alias="recommendedFilters")
    labels: list[str] | None = None
    values: list[float] | None = None


def format_for_table(query_result: QueryResult) -> TableResult:
    """Expose a query result as a table."""
    return TableResult(columns=query_result.columns, rows=query_result.rows)
