"""Natural Language Query (NLQ) pipeline.

Turns plain-English questions into SQL, runs it against the configured
database and returns either a table or a chart description.
"""

from tablestakes.nlq.schema_context import SchemaCatalog, build_schema_catalog, format_schema_for_prompt
from tablestakes.nlq.intent import classify
from tablestakes.nlq.llm_client import CompletionClient
from tablestakes.nlq.llm_sql import SqlSynthesizer
from tablestakes.nlq.visualization import VisualizationSynthesizer, fallback_visualization
from tablestakes.nlq.orchestrator import QueryOrchestrator, QueryRequest, QueryResponse, sanitize_error_message

__all__ = [
    "SchemaCatalog",
    "build_schema_catalog",
    "format_schema_for_prompt",
    "classify",
    "CompletionClient",
    "SqlSynthesizer",
    "VisualizationSynthesizer",
    "fallback_visualization",
    "QueryOrchestrator",
    "QueryRequest",
    "QueryResponse",
    "sanitize_error_message",
]
