"""
FastAPI application initialization for Campaign Dispatch.
This file configures all application components: routes, middleware, logging, etc.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core.config import settings
from backend.core.exceptions import DispatchError
from backend.core.logging import setup_logging, get_logger
from backend.api import api_router, healthcheck_router
from backend.models.base import create_tables
from backend.db.session import engine
from backend.utils.error_handling import format_exception_for_client, status_code_for

# Setup logging system
setup_logging()
logger = get_logger(__name__)

# Create and configure FastAPI application
app = FastAPI(
    title="Campaign Dispatch",
    description="Assistant identity resolution and call dispatch for outbound voice campaigns",
    version=settings.VERSION,
    docs_url="/api/docs" if not settings.PRODUCTION else None,
    redoc_url="/api/redoc" if not settings.PRODUCTION else None
)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail}
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"message": "Validation error", "details": exc.errors()}
    )

@app.exception_handler(DispatchError)
async def dispatch_exception_handler(request: Request, exc: DispatchError):
    logger.error(f"Dispatch error on {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"message": str(exc), **format_exception_for_client(exc)}
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"}
    )

# Setup CORS
origins = settings.CORS_ORIGINS.split(",") if isinstance(settings.CORS_ORIGINS, str) else settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

app.include_router(api_router, prefix="/api")
app.include_router(healthcheck_router, tags=["Health"])

@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info(f"Starting {settings.APP_NAME} {settings.VERSION}")
    create_tables(engine)
    logger.info("Database tables ready")

    if not settings.VAPI_API_KEY:
        logger.warning("VAPI_API_KEY is not set - provider lookups will fail and the fallback assistant will be used")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")
