"""Unit tests for result-type classification."""

import pytest

from tablestakes.nlq.intent import GRAPH_KEYWORDS, classify


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "query",
        [
            "Show me a trend of user signups",
            "Give me a graph of monthly sales",
            "Plot the distribution of ages",
            "Show a bar chart of product categories",
            "Compare sales across regions",
            "Show me week by week enrollment data",
            "Create a visualization of quarterly results",
            "Revenue over time for each store",
        ],
    )
    def test_visualization_keywords_return_graph(self, query):
        """Test that queries with visualization keywords return graph."""
        assert classify(query) == "graph"

    @pytest.mark.parametrize(
        "query",
        [
            "Show me all users",
            "List products",
            "Find orders with status pending",
            "Show transactions from yesterday",
            "Display active accounts",
            "list customers in California with orders over $1000",
        ],
    )
    def test_plain_queries_return_table(self, query):
        """Test that queries without keywords default to table."""
        assert classify(query) == "table"

    @pytest.mark.parametrize(
        "query",
        [
            "show me a GRAPH of user signups",
            "Create a BAR CHART of sales",
            "Generate a TREND analysis",
            "COMPARE the performance metrics",
        ],
    )
    def test_matching_is_case_insensitive(self, query):
        """Test that keyword matching ignores case."""
        assert classify(query) == "graph"

    def test_every_keyword_triggers_graph(self):
        """Test that each keyword on its own selects graph."""
        for keyword in GRAPH_KEYWORDS:
            assert classify(f"please {keyword} this") == "graph", keyword

    def test_empty_query_is_table(self):
        assert classify("") == "table"
