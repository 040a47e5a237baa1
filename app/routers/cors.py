"""Response helpers shared by the proxy endpoints: CORS headers and JSON bodies."""

from typing import Any, Dict, Optional

from fastapi import Response
from fastapi.responses import JSONResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
}

CORS_HEADERS_WITH_METHODS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

SERVER_ERROR = "Erreur serveur"


class InvalidRequest(ValueError):
    """Raised for requests that must be rejected before any upstream call."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details

    def to_content(self) -> Dict[str, str]:
        content = {"error": str(self)}
        if self.details is not None:
            content["details"] = self.details
        return content


def json_response(
    content: Any, status_code: int = 200, headers: Dict[str, str] = CORS_HEADERS
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def preflight_response(headers: Dict[str, str] = CORS_HEADERS) -> Response:
    """Empty 200 answer to an ``OPTIONS`` preflight request."""
    return Response(status_code=200, headers=headers)
