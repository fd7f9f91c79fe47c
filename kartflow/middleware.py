"""
HTTP middleware for the console.

Every request gets a request id and, when a session cookie is present,
the operator's username bound to the logging context before any handler
runs. Requests are split into two kinds for logging and slow-request
warnings: ``page`` (a GET that renders HTML) and ``action`` (a form post
that answers with a redirect).
"""

import time
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .auth import get_session
from .logging_config import clear_request_id, get_logger, set_actor, set_request_id

logger = get_logger(__name__)

UNMATCHED_ROUTE = "unmatched"


def request_kind(request: Request) -> str:
    if request.url.path.startswith("/static/"):
        return "asset"
    return "page" if request.method in ("GET", "HEAD") else "action"


def route_template(request: Request) -> str:
    """The matched route path (``/orders/{order_id}``), or ``unmatched``."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds the request id and actor, then logs one line per request.

    Static assets are not logged. Redirect answers to form posts carry
    their ``Location`` so the log shows where an action sent the user.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        kind = request_kind(request)

        session = get_session(request)
        set_actor(session.user.username if session else None)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"{request.method} {request.url.path} raised {type(exc).__name__}",
                extra={
                    "extra_fields": {
                        "kind": kind,
                        "duration_ms": _elapsed_ms(started),
                        "error": str(exc),
                    }
                },
            )
            clear_request_id()
            raise

        response.headers["X-Request-ID"] = request_id
        if kind != "asset":
            fields = {
                "kind": kind,
                "route": route_template(request),
                "status_code": response.status_code,
                "duration_ms": _elapsed_ms(started),
            }
            location: Optional[str] = response.headers.get("location")
            if location:
                fields["redirect_to"] = location
            if request.url.query:
                fields["query"] = request.url.query
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={"extra_fields": fields},
            )

        clear_request_id()
        return response


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Feeds request counts and latencies to ``track_func`` by route template."""

    def __init__(self, app: ASGIApp, track_func: Callable) -> None:
        super().__init__(app)
        self.track_func = track_func

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        self.track_func(
            method=request.method,
            endpoint=route_template(request),
            status_code=response.status_code,
            duration=time.perf_counter() - started,
        )
        return response


class StaticFileCacheMiddleware(BaseHTTPMiddleware):
    """
    Sets ``Cache-Control`` on ``/static`` responses.

    Stylesheets and scripts change with releases and are cached briefly;
    images and fonts are cached for a week. Anything else under
    ``/static`` gets the short lifetime.
    """

    SHORT_MAX_AGE = 3600
    LONG_MAX_AGE = 604800
    LONG_LIVED_SUFFIXES = (".png", ".jpg", ".jpeg", ".svg", ".ico", ".woff", ".woff2")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if path.startswith("/static/") and response.status_code == 200:
            max_age = self.LONG_MAX_AGE if path.endswith(self.LONG_LIVED_SUFFIXES) else self.SHORT_MAX_AGE
            response.headers["Cache-Control"] = f"public, max-age={max_age}"
        return response


class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """
    Warns about slow pages and actions.

    Pages usually fan out to several backend calls, so they are allowed
    the full threshold; actions are a single backend call followed by a
    redirect and are held to half of it.
    """

    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 1000.0) -> None:
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    def threshold_for(self, kind: str) -> float:
        if kind == "action":
            return self.slow_request_threshold_ms / 2
        return self.slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        kind = request_kind(request)
        if kind == "asset":
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = _elapsed_ms(started)

        threshold_ms = self.threshold_for(kind)
        if duration_ms > threshold_ms:
            logger.warning(
                f"Slow {kind}: {request.method} {request.url.path} took {duration_ms}ms",
                extra={
                    "extra_fields": {
                        "kind": kind,
                        "route": route_template(request),
                        "duration_ms": duration_ms,
                        "threshold_ms": threshold_ms,
                    }
                },
            )
        return response
