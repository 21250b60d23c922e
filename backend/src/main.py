import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core.logging import setup_logging

setup_logging()

from src.api.middleware.request_id import RequestIdMiddleware
from src.api.routes import health, uploads
from src.core.config import settings

logger = logging.getLogger(__name__)

try:
    settings.validate_secrets()
except ValueError as e:
    logger.critical("Secret validation failed: %s", e)
    raise SystemExit(f"FATAL: {e}") from e


app = FastAPI(
    title="Task Activity Guard API",
    version="1.0.0",
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.add_middleware(RequestIdMiddleware)

app.include_router(health.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
