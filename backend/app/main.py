"""
FastAPI entrypoint for the Groupledger backend application.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.errors import ServiceError, ErrorKind, HTTP_STATUS_BY_KIND
from app.core.utils import format_error
from app.api.router import api_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Groupledger API",
    description="Backend API for shared group expenses and balances",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Map service failures to status codes; the reason is machine-readable."""
    if exc.kind == ErrorKind.INTERNAL:
        logger.error(f"{request.method} {request.url.path} failed: {exc.reason}")
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[exc.kind],
        content=format_error(exc.kind.value, exc.reason)
    )


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
