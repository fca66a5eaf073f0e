"""Main application entrypoint for Table Stakes."""

from functools import partial

from fastapi import FastAPI

from tablestakes.api.middleware import RequestLoggingMiddleware
from tablestakes.api.v1 import routes_health
from tablestakes.api.v1.routes_query import router as query_router
from tablestakes.core.config import Settings, settings as default_settings
from tablestakes.core.logging import setup_logging
from tablestakes.db.factory import create_database_connector
from tablestakes.nlq.llm_client import CompletionClient
from tablestakes.nlq.orchestrator import QueryOrchestrator


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to the environment-loaded settings

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or default_settings

    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
    )

    app.state.settings = settings
    app.state.orchestrator = QueryOrchestrator(
        completion_client=CompletionClient(settings),
        connector_factory=partial(create_database_connector, settings),
        settings=settings,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(routes_health.router, tags=["health"])
    app.include_router(query_router, tags=["query"])

    return app


# Export app instance for ASGI servers
app = create_app()
