"""FastAPI application for the Plek booking REST API.

This package provides REST endpoints for:
- Posts and their package settings
- Packages, the billing catalog and package suggestions
- Availability, bookings and invite links
- Estimates and their confirmation
- Subscription status
"""

import logging
import os
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from plek_api.exceptions import register_exception_handlers
from plek_api.middleware import CorrelationIdMiddleware
from plek_api.routes import (
    bookings_router,
    estimates_router,
    health_router,
    packages_router,
    posts_router,
    subscription_router,
)
from plek_shared.utils.logging import configure_logging

configure_logging(getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO))
logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def _cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(
    title="Plek API",
    description="REST API for posts, packages, estimates and bookings",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

# This matches CloudFront routing: /api/* → API Gateway
app.include_router(health_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(packages_router, prefix="/api")
app.include_router(bookings_router, prefix="/api")
app.include_router(estimates_router, prefix="/api")
app.include_router(subscription_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Root health check endpoint at /api/ping."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "plek-api",
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run(
            "plek_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["backend/api/src", "backend/shared/src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
