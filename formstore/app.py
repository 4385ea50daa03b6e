"""
FastAPI application entry point.

Run with ``uvicorn formstore.app:create_app --factory``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from formstore.config import get_settings
from formstore.dependencies import get_gateway
from formstore.gateway import SubmissionGateway
from formstore.routes import router


def create_app(gateway: Optional[SubmissionGateway] = None) -> FastAPI:
    settings = get_settings()
    if gateway is None:
        # Fail at startup, not on the first request, when config is missing.
        gateway = get_gateway()
    app = FastAPI(title="Form Submissions", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.dependency_overrides[get_gateway] = lambda: gateway
    return app
