"""Natural language query API routes.

POST a question, get back a table or a chart description. Query failures
are returned as HTTP 200 with a sanitized ``message``; only configuration
problems produce an HTTP error.
"""

import logging
import re
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from tablestakes.core.exceptions import ConfigurationError
from tablestakes.nlq.export import MEDIA_TYPES, ExportFormat, export_filename, export_rows
from tablestakes.nlq.orchestrator import QueryOrchestrator, QueryRequest, QueryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")

_SAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]+")


class ExportRequest(BaseModel):
    """Request body for the export endpoint."""

    rows: list[dict[str, Any]] = Field(..., description="Table rows or chart rawData")
    format: ExportFormat = Field("json", description="Download format")
    filename: str = Field("query-results", description="File name without extension")


def get_orchestrator(request: Request) -> QueryOrchestrator:
    """Return the orchestrator built at application startup."""
    return request.app.state.orchestrator


@router.post(
    "/query",
    response_model=QueryResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
)
async def query(
    query_request: QueryRequest,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
) -> QueryResponse:
    """Translate a question to SQL, run it and format the result.

    Raises:
        HTTPException: 500 if the data source is not configured
    """
    try:
        return await orchestrator.process(query_request)
    except ConfigurationError as e:
        logger.error("Data source configuration error", extra={"error": str(e)})
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/query/export")
async def export(export_request: ExportRequest) -> Response:
    """Download rows verbatim as JSON or CSV."""
    stem = _SAFE_FILENAME.sub("-", export_request.filename).strip("-.") or "query-results"
    filename = export_filename(stem, export_request.format)
    content = export_rows(export_request.rows, export_request.format)

    logger.info(
        "Exporting rows",
        extra={"row_count": len(export_request.rows), "format": export_request.format},
    )

    return Response(
        content=content,
        media_type=MEDIA_TYPES[export_request.format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
