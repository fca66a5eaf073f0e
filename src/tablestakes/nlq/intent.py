"""Result-type classification for natural language queries."""

from typing import Literal

ResultType = Literal["table", "graph"]

GRAPH_KEYWORDS = (
    "trend",
    "over time",
    "chart",
    "graph",
    "plot",
    "visualization",
    "compare",
    "comparison",
    "week by week",
    "month by month",
    "distribution",
    "histogram",
    "pie chart",
    "bar chart",
)


def classify(query: str) -> ResultType:
    """Decide whether a query should render as a table or a chart.

    Case-insensitive substring match against ``GRAPH_KEYWORDS``; queries
    without any keyword render as a table.
    """
    query_lower = query.lower()
    for keyword in GRAPH_KEYWORDS:
        if keyword in query_lower:
            return "graph"
    return "table"
