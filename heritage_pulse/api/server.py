"""
api/server.py
-------------
FastAPI application factory.

Run dev server:
    heritage-pulse
    # or
    uvicorn heritage_pulse.api.server:create_app --factory --reload --port 5000

Endpoints:
    GET    /api/health
    POST   /api/heritage/discover
    POST   /api/itinerary/generate
    GET    /api/itinerary/{itinerary_id}
    POST   /api/chat/message
    GET    /api/chat/{conversation_id}
    DELETE /api/chat/{conversation_id}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as SchemaValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..container import Container, get_container
from ..domain.errors import (
    GenerationError,
    GeocodingError,
    HeritagePulseError,
    ItineraryNotFoundError,
    LocationNotFoundError,
    RequestValidationError,
)
from ..observability import configure_logging
from .routes import chat, health, heritage, itinerary

logger = logging.getLogger(__name__)

# Checked in order, first match wins
_STATUS_BY_ERROR = (
    (RequestValidationError, 422),
    (LocationNotFoundError, 404),
    (ItineraryNotFoundError, 404),
    (GeocodingError, 503),
)


def error_response(status_code: int, error_type: str, message: str, **details: Any) -> JSONResponse:
    error: Dict[str, Any] = {"type": error_type, "message": message}
    error.update({k: v for k, v in details.items() if v is not None})
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def _domain_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HeritagePulseError)
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 500)
    details: Dict[str, Any] = {}
    if isinstance(exc, RequestValidationError):
        details["field_errors"] = exc.field_errors or None
    if isinstance(exc, GenerationError):
        details["fallback_summary"] = exc.fallback_summary

    if status >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__, "error": str(exc)},
        )
    # Internal causes stay in the log
    return error_response(status, type(exc).__name__, exc.message, **details)


async def _schema_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, SchemaValidationError)
    field_errors = {
        ".".join(str(part) for part in err["loc"] if part != "body") or "body": err["msg"]
        for err in exc.errors()
    }
    return error_response(
        422, RequestValidationError.__name__, "Invalid request", field_errors=field_errors
    )


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the API around a container.

    Args:
        container: Dependency container, the default one when omitted.
    """
    container = container or get_container()
    configure_logging(container.config.observability)

    app = FastAPI(
        title="Heritage Pulse API",
        version=__version__,
        description=(
            "Heritage site discovery and itinerary planning. "
            "Integrates Nominatim, Wikidata, Overpass, Wikipedia, OSRM and OpenRouter."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=container.config.api.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HeritagePulseError, _domain_error)
    app.add_exception_handler(SchemaValidationError, _schema_error)

    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(heritage.router, prefix="/api/heritage", tags=["Heritage"])
    app.include_router(itinerary.router, prefix="/api/itinerary", tags=["Itinerary"])
    app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
    return app


def main() -> None:
    import uvicorn

    config = get_container().config
    uvicorn.run(
        "heritage_pulse.api.server:create_app",
        factory=True,
        host=config.api.host,
        port=config.api.port,
        reload=config.api.environment == "development",
    )


if __name__ == "__main__":
    main()
