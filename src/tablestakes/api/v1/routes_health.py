"""Liveness endpoint."""

from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report service name and version. Never touches the database or LLM."""
    settings = request.app.state.settings
    return HealthResponse(service=settings.SERVICE_NAME, version=settings.SERVICE_VERSION)
