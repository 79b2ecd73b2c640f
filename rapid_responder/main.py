"""Regional Rapid Responder FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rapid_responder.api import health, sos, volunteers, ws
from rapid_responder.core.config import settings
from rapid_responder.core.errors import SosError

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)


@app.exception_handler(SosError)
async def sos_error_handler(request: Request, exc: SosError) -> JSONResponse:
    """Map service errors to HTTP status codes with the usual {"detail": ...} body."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(health.router)
app.include_router(sos.router)
app.include_router(volunteers.router)
app.include_router(ws.router)
