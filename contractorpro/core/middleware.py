"""CORS, request-id, logging, and principal extraction middleware."""

import uuid
import time
import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from contractorpro.core.config import settings
from contractorpro.core.security import Principal, resolve_principal

logger = logging.getLogger("contractorpro")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Add a unique request ID to every request/response."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        response: Response = await call_next(request)

        duration = round((time.time() - start_time) * 1000, 2)
        response.headers["X-Request-Id"] = request_id
        response.headers["X-Response-Time-Ms"] = str(duration)

        logger.info(
            "%s %s %s %sms",
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response


class AuthExtractorMiddleware(BaseHTTPMiddleware):
    """Decode the bearer token once per request into ``request.state.principal``.

    A missing or invalid token leaves the principal as None; route guards
    decide whether that is acceptable.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.principal = resolve_principal(request.headers.get("authorization"))
        return await call_next(request)


def get_principal(request: Request) -> Optional[Principal]:
    """FastAPI dependency returning the request-scoped principal, if any."""
    return getattr(request.state, "principal", None)


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application."""
    # Principal extraction (innermost, runs after request id is assigned)
    app.add_middleware(AuthExtractorMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID + timing
    app.add_middleware(RequestIdMiddleware)
