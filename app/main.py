from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import ServiceError
from app.core.observability import setup_logging
from app.db.session import init_db

# Import routers
from app.api.revenuecat_webhook import router as revenuecat_router
from app.api.posts import router as posts_router
from app.api.recipes import router as recipes_router
from app.api.premium import router as premium_router

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Local dev gets its tables created; other envs run migrations
    if settings.app_env == "dev":
        init_db()
    yield

def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_format)
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    @app.get("/health")
    def health():
        return {"status" : "ok", "env" : settings.app_env}

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    # RevenueCat entitlement webhook
    app.include_router(revenuecat_router)
    # Likes / saves
    app.include_router(posts_router)
    app.include_router(recipes_router)
    # Packages and entitlement read
    app.include_router(premium_router)

    return app

app = create_app()
