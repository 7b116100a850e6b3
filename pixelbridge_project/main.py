# pixelbridge_project/main.py
import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

# Configuration and Routers
from config.settings import Settings, get_settings
from .apis import webhook_routes, health_routes
from .core.error_handlers import register_exception_handlers
from .core.middleware import register_middleware
from .core.rate_limiter import FixedWindowRateLimiter
from .services.conversions_api_service import ConversionsApiClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Starting up {settings.PROJECT_NAME} {settings.VERSION} on port {settings.PORT}...")
    logger.info(f"Health check: http://localhost:{settings.PORT}/health")
    logger.info(f"Facebook Pixel webhook: http://localhost:{settings.PORT}/webhook/facebook-pixel")
    logger.info(f"Verify token configured: {'yes' if settings.WEBHOOK_VERIFY_TOKEN else 'no'}")
    if settings.TEST_EVENT_CODE:
        logger.info("Test event code configured; events will appear under Test Events")
    yield
    logger.info("Shutting down...")


def create_app(settings: Settings, conversions_client: Optional[ConversionsApiClient] = None) -> FastAPI:
    """Builds the application around an already-loaded, immutable Settings object."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.rate_limiter = FixedWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.conversions_client = conversions_client or ConversionsApiClient(settings)

    register_middleware(app, max_body_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(webhook_routes.router)
    app.include_router(health_routes.router)

    return app


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        logger.error(f"Invalid configuration ({missing}). Set FACEBOOK_PIXEL_ID and FACEBOOK_ACCESS_TOKEN in the environment or .env")
        sys.exit(1)


def run() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = load_settings_or_exit()
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    import uvicorn
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
