import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.modules.auth import routes as auth_routes
from app.modules.activities import routes as activities_routes
from app.modules.saved import routes as saved_routes
from app.modules.storage import routes as storage_routes
from app.modules.categories import routes as categories_routes
from app.modules.posts import routes as posts_routes
from app.modules.comments import routes as comments_routes
from app.modules.reports import routes as reports_routes
from app.modules.admin_activities import routes as admin_activities_routes
from app.modules.analytics import routes as analytics_routes
from app.modules.users import routes as users_routes
from app.modules.settings import routes as settings_routes
from app.modules.extraction import routes as extraction_routes
from app.modules.generation import routes as generation_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    description="Quiz, quest and lesson creation with an admin back-office",
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Creator-facing routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(activities_routes.router, prefix="/api/v1")
app.include_router(saved_routes.router, prefix="/api/v1")
app.include_router(storage_routes.router, prefix="/api/v1")
app.include_router(extraction_routes.router, prefix="/api/v1")
app.include_router(generation_routes.router, prefix="/api/v1")

# Blog
app.include_router(categories_routes.router, prefix="/api/v1")
app.include_router(posts_routes.router, prefix="/api/v1")
app.include_router(comments_routes.router, prefix="/api/v1")

# Back-office
app.include_router(reports_routes.router, prefix="/api/v1")
app.include_router(admin_activities_routes.router, prefix="/api/v1")
app.include_router(analytics_routes.router, prefix="/api/v1")
app.include_router(users_routes.router, prefix="/api/v1")
app.include_router(settings_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} starting ({settings.environment})")
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; admin reads fall back to the anon key")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; image and video summary extraction are unavailable")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to qzvert-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    return {"status": "ready"}
