"""
Application entry point for the Vet Niko backend.
"""

import os
from contextlib import asynccontextmanager

import mlflow
import sentry_sdk
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from app.core.errors import (
    AdviceUnavailable,
    ConfigurationError,
    SpeechSynthesisUnavailable,
    ValidationError,
)
from app.vet_service.api.consult_routes import router as consult_router
from app.vet_service.config import get_settings
from app.vet_service.utils.logger import get_logger

logger = get_logger(__name__)
load_dotenv()

# Fails fast with ConfigurationError when the Gemini credential is missing
settings = get_settings()

# =========================================================
# MLflow Setup
# =========================================================
if settings.MLFLOW_TRACKING_URI:
    os.environ["MLFLOW_TRACKING_URI"] = settings.MLFLOW_TRACKING_URI


# =========================================================
# Lifespan
# =========================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application", extra={"env": settings.ENV})

    if settings.MLFLOW_TRACKING_URI:
        try:
            mlflow.set_tracking_uri(settings.MLFLOW_TRACKING_URI)
            mlflow.set_experiment("vetniko")
        except Exception as e:
            logger.error("MLflow setup failed", extra={"error": str(e)})

    yield

    logger.info("Application stopped")


# =========================================================
# App Init
# =========================================================
app = FastAPI(
    lifespan=lifespan,
    title="Vet Niko",
    version="1.0.0",
)

# =========================================================
# CORS
# =========================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# =========================================================
# Error Handling
# =========================================================
@app.exception_handler(AdviceUnavailable)
@app.exception_handler(SpeechSynthesisUnavailable)
async def upstream_error_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=502, content={"detail": exc.user_message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.user_message})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc.user_message)
    return JSONResponse(
        status_code=503,
        content={"detail": "Servis şu anda kullanılamıyor."},
    )


# =========================================================
# Request Logging
# =========================================================
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(
        "Incoming request",
        extra={
            "method": request.method,
            "url": str(request.url),
        },
    )
    return await call_next(request)


# =========================================================
# Routers
# =========================================================
app.include_router(consult_router)

logger.info("API routers registered", extra={"routers": ["consult"]})


# =========================================================
# Health
# =========================================================
@app.get("/health")
def health_check():
    return {"status": "ok"}


# Initialize Sentry
if settings.ENV == "prod" and settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(),
            StarletteIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=settings.ENV,
    )
    logger.info("Sentry initialized for error tracking")
