"""
FastAPI Main Application

Entry point for the FinEase API.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from ..errors import FinEaseError, InternalError
from .auth import build_verifier
from .database import RecordStore
from .routes import reports_router, transactions_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting FinEase API...")
    store = RecordStore()
    store.connect()
    app.state.store = store
    app.state.verifier = build_verifier()
    yield
    # Shutdown
    logger.info("Shutting down FinEase API...")
    store.close()


app = FastAPI(
    title="FinEase API",
    description="Personal finance tracking: transactions and reports",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(transactions_router)
app.include_router(reports_router)


@app.exception_handler(FinEaseError)
async def finease_error_handler(request: Request, exc: FinEaseError) -> JSONResponse:
    """Render domain errors as JSON with their status code."""
    if isinstance(exc, InternalError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint."""
    return "Server is running Fine."


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "endpoints": {
            "create": "POST /transactions",
            "mine": "GET /my-transactions?email=",
            "transaction": "GET|PUT|DELETE /transaction/{id}",
            "overview": "GET /totalOverview",
            "reports": "GET /reports?email=",
        },
        "authentication": "Authorization: Bearer <Firebase ID token>",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "finease.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
