"""
Response-shaping middleware applied to every request.

Both wrappers are unconditional: no per-route configuration, same behavior
for every path. `main.create_app` installs them so that CORS is the outer
layer and the content-type wrapper sits between it and the router.
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

JSON_CONTENT_TYPE = "application/json"


class CORSMiddleware(BaseHTTPMiddleware):
    """
    Allow any origin and answer preflight checks directly.

    An `OPTIONS` request never reaches the router: it gets 200, the CORS
    headers and an empty body. Failures nothing else handled still leave
    here as a JSON 500 carrying the CORS headers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
            return JSONResponse(
                {"detail": "Internal server error."},
                status_code=500,
                headers=CORS_HEADERS,
            )
        response.headers.update(CORS_HEADERS)
        return response


class JSONContentTypeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["Content-Type"] = JSON_CONTENT_TYPE
        return response
