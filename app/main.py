import logging
import logging.config
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import get_settings
from app.routers.airtable import router as airtable_router
from app.routers.cors import CORS_HEADERS, SERVER_ERROR
from app.routers.notion import limiter, router as notion_router


def logging_config(level: str) -> Dict[str, Any]:
    """JSON-line logs on stdout; httpx's per-request INFO lines are muted."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json_lines": {
                "format": '{"ts": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "msg": "%(message)s"}',
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "json_lines",
            },
        },
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
        "root": {"level": level, "handlers": ["stdout"]},
    }


logging.config.dictConfig(logging_config(get_settings().log_level))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Storefront Proxy",
    description="Proxies the storefront to Notion (news, portfolio, project content) and Airtable (club vestiaire).",
    version="1.0.0",
)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    logger.warning("Rate limit hit on %s: %s", request.url.path, exc.detail)
    response = _rate_limit_exceeded_handler(request, exc)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"error": SERVER_ERROR, "details": str(exc)},
        headers=CORS_HEADERS,
    )


app.include_router(notion_router)
app.include_router(airtable_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Storefront Proxy"}
