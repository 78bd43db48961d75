import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from taskapp.config import settings
from taskapp.modules.auth import routes as auth_routes
from taskapp.modules.profiles import routes as profiles_routes
from taskapp.modules.tasks import routes as tasks_routes
from taskapp.modules.notifications import routes as notifications_routes
from taskapp.modules.messages import routes as messages_routes
from taskapp.modules.leaderboard import routes as leaderboard_routes
from taskapp.modules.catalog import routes as catalog_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"
ROUTERS = (
    auth_routes.router,
    profiles_routes.router,
    tasks_routes.router,
    notifications_routes.router,
    messages_routes.router,
    leaderboard_routes.router,
    catalog_routes.router,
)
SECURITY_HEADERS = [
    (b"X-Content-Type-Options", b"nosniff"),
    (b"X-Frame-Options", b"DENY"),
    (b"Referrer-Policy", b"same-origin"),
]

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


class SecurityHeadersMiddleware:
    """Adds SECURITY_HEADERS to every HTTP response"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", []).extend(SECURITY_HEADERS)
            await send(message)

        await self.app(scope, receive, send_with_headers)


async def unhandled_exception(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    detail = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"detail": detail})


def create_app() -> FastAPI:
    application = FastAPI(title=settings.app_name, debug=settings.debug, redirect_slashes=False)
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    application.add_exception_handler(Exception, unhandled_exception)

    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for router in ROUTERS:
        application.include_router(router, prefix=API_PREFIX)
    return application


app = create_app()


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup (environment: %s, storage: %s)", settings.environment, settings.storage_backend)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Ready once the Supabase project is configured"""
    if not settings.supabase_url or not settings.supabase_key:
        return JSONResponse(status_code=503, content={"status": "not ready", "detail": "Supabase is not configured"})
    return {"status": "ready"}
