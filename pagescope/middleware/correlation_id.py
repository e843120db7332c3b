"""Correlation ID middleware for request tracing."""

import uuid
from typing import Callable

import logfire
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

CORRELATION_ID_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a correlation ID.

    The ID is taken from the incoming header when present, otherwise
    generated. It is stored on ``request.state``, attached to a Logfire span
    wrapping the request, and echoed back in the response header, so all
    logs of one scrape invocation can be correlated.
    """

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(self.header_name.lower()) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        with logfire.span("request {path}", path=request.url.path, correlation_id=correlation_id):
            response = await call_next(request)
        response.headers[self.header_name] = correlation_id
        return response
