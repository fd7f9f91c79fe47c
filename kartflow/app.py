"""
KartFlow Console - Main FastAPI Application.

Server-rendered admin console for the e-commerce backend: products,
orders, order creation, inventory and dashboards. Pages are rendered with
Jinja2 from data fetched through the shared backend client.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api_client import api_client
from .auth import get_session
from .config import settings
from .exceptions import AuthenticationRequired, ConsoleException, PermissionDenied
from .logging_config import get_logger, setup_logging
from .metrics import metrics_endpoint, track_request_metrics
from .middleware import (
    PerformanceMonitoringMiddleware,
    PrometheusMiddleware,
    RequestLoggingMiddleware,
    StaticFileCacheMiddleware,
)
from .routers import (
    auth_router,
    create_order_router,
    dashboard_router,
    inventory_router,
    orders_router,
    products_router,
)
from .templating import redirect, render
from .tracing import configure_opentelemetry, instrument_fastapi

SERVICE_NAME = "kartflow-console"
SERVICE_VERSION = "1.0.0"

# Setup logging with structured format
use_json_logging = not settings.DEBUG
setup_logging(
    log_level=settings.LOG_LEVEL,
    service_name=SERVICE_NAME,
    use_json=use_json_logging,
)
logger = get_logger(__name__)

configure_opentelemetry(
    service_name=SERVICE_NAME,
    service_version=SERVICE_VERSION,
    otlp_endpoint=settings.OTLP_ENDPOINT,
    enable_tracing=settings.ENABLE_TRACING,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Logs the configuration, checks that the backend answers, and closes
    the backend connection pool on shutdown.
    """
    logger.info("=" * 80)
    logger.info("Starting KartFlow Console")
    logger.info("=" * 80)

    logger.info(
        "Configuration loaded",
        extra={
            "extra_fields": {
                "app_name": settings.APP_NAME,
                "debug_mode": settings.DEBUG,
                "log_level": settings.LOG_LEVEL,
                "api_base_url": settings.API_BASE_URL,
                "request_timeout": settings.REQUEST_TIMEOUT,
                "live_dashboard_stats": settings.DASHBOARD_LIVE_STATS,
                "host": settings.HOST,
                "port": settings.PORT,
            }
        },
    )

    logger.info("Verifying backend connectivity...")
    if await api_client.health_check():
        logger.info(
            "Backend connectivity verified",
            extra={"extra_fields": {"api_base_url": settings.API_BASE_URL}},
        )
    else:
        logger.error(
            "Backend is not responding",
            extra={
                "extra_fields": {
                    "api_base_url": settings.API_BASE_URL,
                    "impact": "Pages will show fetch errors until the backend is reachable",
                }
            },
        )

    logger.info("KartFlow Console startup complete")
    logger.info("=" * 80)

    yield

    logger.info("=" * 80)
    logger.info("Shutting down KartFlow Console")
    logger.info("=" * 80)

    await api_client.close()
    logger.info("HTTP client closed")


app = FastAPI(
    title="KartFlow Console",
    description="Admin console for the KartFlow e-commerce backend",
    version=SERVICE_VERSION,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Add middleware (order matters - first added is last executed)
app.add_middleware(StaticFileCacheMiddleware)
app.add_middleware(
    PerformanceMonitoringMiddleware,
    slow_request_threshold_ms=settings.SLOW_REQUEST_THRESHOLD_MS,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)

instrument_fastapi(app)

BASE_PATH = Path(__file__).resolve().parent
app.mount(
    "/static",
    StaticFiles(directory=str(BASE_PATH / "static")),
    name="static",
)

app.include_router(auth_router.router)
app.include_router(dashboard_router.router)
app.include_router(products_router.router)
app.include_router(orders_router.router)
app.include_router(create_order_router.router)
app.include_router(inventory_router.router)


@app.get(
    "/health",
    tags=["Health"],
    summary="Health check",
    description="Check console health and the backend dependency",
)
async def health_check() -> Dict[str, Any]:
    """
    Report console health.

    Returns:
        Dictionary with health status information:
        {
            "status": "healthy" | "degraded",
            "service": "kartflow-console",
            "dependencies": {
                "ecommerce_api": "healthy" | "unhealthy"
            }
        }
    """
    backend_healthy = await api_client.health_check()

    return {
        "status": "healthy" if backend_healthy else "degraded",
        "service": SERVICE_NAME,
        "dependencies": {
            "ecommerce_api": "healthy" if backend_healthy else "unhealthy",
        },
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()


@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(
    request: Request, exc: AuthenticationRequired
) -> Response:
    logger.debug(
        "Anonymous request to protected page",
        extra={"extra_fields": {"path": request.url.path}},
    )
    return redirect("/login")


@app.exception_handler(PermissionDenied)
async def permission_denied_handler(request: Request, exc: PermissionDenied) -> Response:
    session = get_session(request)
    logger.warning(
        "Permission denied",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "required_role": exc.required_role,
                "username": session.user.username if session else None,
            }
        },
    )
    return redirect("/dashboard")


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Unknown pages go to the dashboard; static assets and other errors keep their status."""
    if (
        exc.status_code == 404
        and request.method == "GET"
        and not request.url.path.startswith("/static")
    ):
        return redirect("/dashboard")
    return await http_exception_handler(request, exc)


@app.exception_handler(ConsoleException)
async def console_exception_handler(request: Request, exc: ConsoleException) -> HTMLResponse:
    """Render an error page for backend failures no page handled itself."""
    logger.error(
        "Unhandled console error",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "method": request.method,
                "error_type": type(exc).__name__,
                "error_message": exc.message,
                "details": exc.details,
            }
        },
    )
    return render(
        request,
        "error.html",
        {"message": "Something went wrong while talking to the backend. Please try again."},
        session=get_session(request),
        status_code=502,
    )
