import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import redis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware

from proconnect_web import __version__
from proconnect_web.api import auth as auth_api
from proconnect_web.api import contact as contact_api
from proconnect_web.api import professionals as professionals_api
from proconnect_web.api import review as review_api
from proconnect_web.api.proxy import InvalidJSONBody, invalid_json_body_handler
from proconnect_web.core.cache import TTLCache
from proconnect_web.core.config import settings
from proconnect_web.core.errors import GENERIC_ERROR_MESSAGE
from proconnect_web.core.limiter import limiter
from proconnect_web.core.logging_config import CorrelationIdMiddleware, init_application_logging
from proconnect_web.core.security import SecurityHeadersMiddleware, get_or_create_secret_key
from proconnect_web.services.backend_client import BackendClient
from proconnect_web.web import contact as contact_web
from proconnect_web.web import dashboard, home, login
from proconnect_web.web import review as review_web
from proconnect_web.web.guard import RouteGuardMiddleware

PACKAGE_DIR = Path(__file__).parent

# Initialize structured logging
init_application_logging()

logger = logging.getLogger("proconnect_web.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One shared HTTP client per process for all backend calls
    app.state.backend_client = BackendClient(settings.api_url)
    logger.info("Backend client ready for %s", settings.api_url)
    try:
        yield
    finally:
        await app.state.backend_client.aclose()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Customer-facing web frontend of the ProConnect marketplace",
    version=__version__,
    lifespan=lifespan,
)

app.state.categories_cache = TTLCache(settings.categories_cache_ttl)

# Attach limiter to app.state for access in route decorators
# This must be done before applying @limiter.limit() decorators
app.state.limiter = limiter

# Consistent HTTP 429 responses with Retry-After headers
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(InvalidJSONBody, invalid_json_body_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


logger.info(
    "Rate limiting initialized with configuration: auth=%s, contact=%s, read=%s",
    settings.rate_limit_auth_endpoints,
    settings.rate_limit_contact_endpoints,
    settings.rate_limit_read_endpoints,
)

# Middleware runs outermost-last: correlation id, CORS, flow session,
# security headers, then the dashboard guard closest to the routes.
app.add_middleware(RouteGuardMiddleware)

if settings.security_headers_enabled:
    app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    SessionMiddleware,
    secret_key=get_or_create_secret_key(settings.secret_key),
    session_cookie=settings.flow_cookie_name,
    max_age=settings.flow_session_max_age,
    https_only=settings.is_production,
    same_site="lax",
)

# Configure CORS (restrict origins; credentials require explicit origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)

# Mount static files
app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")

# API proxy routers
app.include_router(auth_api.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(contact_api.router, prefix="/api/contact", tags=["Contact"])
app.include_router(professionals_api.router, prefix="/api/professionals", tags=["Professionals"])
app.include_router(professionals_api.skills_router, prefix="/api/skills", tags=["Skills"])
app.include_router(review_api.router, prefix="/api/review", tags=["Review"])

# Web routers
app.include_router(home.router, tags=["Web"])
app.include_router(login.router, tags=["Login Web"])
app.include_router(contact_web.router, tags=["Contact Web"])
app.include_router(dashboard.router, tags=["Dashboard Web"])
app.include_router(review_web.router, tags=["Review Web"])


def _check_storage_health() -> dict:
    """
    Check the health of the rate limiting storage backend.

    Returns dict with storage health status and details.
    """
    if not settings.redis_url:
        return {
            "type": "memory",
            "healthy": True,
            "message": "In-memory storage active",
        }

    try:
        client = redis.from_url(settings.redis_url, socket_timeout=2)
        client.ping()
        return {
            "type": "redis",
            "healthy": True,
            "message": "Redis connection successful",
        }
    except Exception as e:
        logger.warning("Redis health check failed: %s", str(e))
        return {
            "type": "redis",
            "healthy": False,
            "message": f"Redis connection failed: {str(e)}",
        }


# Health check endpoints
@app.get("/health")
def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/health")
def api_health_check():
    """
    Health check with rate limiting status, cache state and version info.

    The backend API is not called; its configured URL is reported so a
    misconfigured deployment is visible.
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "version": __version__,
        "environment": {
            "name": settings.environment,
            "dev_mode": settings.dev_mode,
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        },
        "services": {
            "backend_api": {"url": settings.api_url},
            "categories_cache": {
                "ttl_seconds": app.state.categories_cache.ttl_seconds,
                "entries": len(app.state.categories_cache),
            },
        },
    }

    storage_health = _check_storage_health()
    rate_limit_status = "enabled"
    if not storage_health["healthy"]:
        rate_limit_status = "degraded"
        health_status["status"] = "degraded"

    health_status["services"]["rate_limiting"] = {
        "status": rate_limit_status,
        "storage": storage_health,
        "configuration": {
            "auth_endpoints": settings.rate_limit_auth_endpoints,
            "contact_endpoints": settings.rate_limit_contact_endpoints,
            "read_endpoints": settings.rate_limit_read_endpoints,
        },
    }

    return health_status
