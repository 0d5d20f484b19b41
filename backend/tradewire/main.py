import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradewire.config import settings
from tradewire.api.router import api_router
from tradewire.api.health import router as health_router
from tradewire.api.oauth_routes import router as oauth_router
from tradewire.middleware.security import SecurityHeadersMiddleware, RequestLoggingMiddleware
from tradewire.observability.logging_config import setup_logging, get_logger
from tradewire.observability.metrics import setup_metrics
from tradewire.secrets_manager import get_secrets_manager

# Setup structured logging based on environment
setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_format=os.getenv("LOG_FORMAT", "json" if settings.is_production else "text"),
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    secrets = get_secrets_manager()
    valid, missing = secrets.validate_required_secrets(settings.effective_env)
    if not valid:
        logger.error("Missing required secrets", extra={"missing": missing})
        if settings.is_production:
            raise RuntimeError(f"Missing required secrets: {', '.join(missing)}")
    if not secrets.get_secret("ENCRYPTION_KEY"):
        logger.warning("ENCRYPTION_KEY not set; stored client credentials will not survive a restart")

    logger.info(
        "Tradewire backend started",
        extra={
            "environment": settings.effective_env,
            "version": os.getenv("VERSION", "1.0.0"),
            "google_client_id": secrets.mask_secret(settings.google_client_id),
        },
    )
    yield


app = FastAPI(
    title="Tradewire Backend",
    version=os.getenv("VERSION", "1.0.0"),
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    lifespan=lifespan,
)

setup_metrics(app)

# Middleware stack (order matters - last added runs first)
app.add_middleware(SecurityHeadersMiddleware)

if os.getenv("REQUEST_LOGGING_ENABLED", "true").lower() == "true":
    app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(oauth_router)
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Tradewire API", "docs": "/docs"}
