"""HTTP front end: method gate, CORS and status mapping."""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.endpoints import HTTPEndpoint
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from chat_mcp.dispatcher import RequestDispatcher
from chat_mcp.protocol import decode_request

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Attach the permissive CORS headers to every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


class McpEndpoint(HTTPEndpoint):
    """Accepts ``POST`` requests and ``OPTIONS`` preflights only."""

    async def options(self, request: Request) -> Response:
        return Response(status_code=200)

    async def post(self, request: Request) -> Response:
        dispatcher: RequestDispatcher = request.app.state.dispatcher
        body = await request.body()
        try:
            envelope = decode_request(body)
            response = await dispatcher.dispatch(envelope)
        except Exception as exc:
            logger.error("MCP Server request error: %s", exc)
            return JSONResponse(
                {"error": "Internal server error", "message": str(exc)},
                status_code=500,
            )
        return JSONResponse(response.to_dict())

    async def method_not_allowed(self, request: Request) -> Response:
        return JSONResponse({"error": "Method not allowed"}, status_code=405)


def build_app(dispatcher: RequestDispatcher) -> Starlette:
    """Create the ASGI application serving ``dispatcher`` on every path."""
    app = Starlette(
        routes=[Route("/{path:path}", McpEndpoint)],
        middleware=[Middleware(CorsHeadersMiddleware)],
    )
    app.state.dispatcher = dispatcher
    return app
