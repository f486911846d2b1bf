"""
FastAPI server for knowledge-base constrained generation.

Exposes the retrieval controller and the generate/validate loop over HTTP.
The text-completion provider is configured in config/lexbound.yaml and the
environment.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lexbound.api.handlers.generate import process_context, process_generation
from lexbound.api.handlers.health import check_health
from lexbound.api.middleware.request_logger import RequestLoggerMiddleware
from lexbound.api.models.errors import server_error
from lexbound.core.errors import CompletionTransportError
from lexbound.core.generation_service import GenerationService, build_service
from lexbound.core.llm_connector import CompletionService
from lexbound.lib.config import ConfigLoader
from lexbound.lib.logger import setup_logging
from lexbound.models.generation import GenerationRequest
from lexbound.version import __version__

logger = logging.getLogger(__name__)


class UnavailableCompletionService(CompletionService):
    """Stand-in used when no provider could be configured."""

    def __init__(self, reason: str):
        self.reason = reason

    async def complete(self, prompt: str) -> str:
        raise CompletionTransportError(f"Text completion unavailable: {self.reason}")


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the generation service on startup and close the provider on shutdown."""
    logger.info("Starting constrained generation API server")

    connector = None
    try:
        service, connector = build_service(config)
        logger.info(f"Text completion provider: {connector.provider}/{connector.model_name}")
    except ValueError as e:
        logger.error(f"Text completion provider not configured: {e}")
        service = GenerationService.from_config(config, UnavailableCompletionService(str(e)))

    app.state.service = service
    app.state.connector = connector

    yield

    logger.info("Shutting down API server")
    if connector is not None:
        await connector.close()


app = FastAPI(
    title="Lexbound Constrained Generation API",
    description="Knowledge-base constrained legal reasoning with post-generation validation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Load configuration
config = ConfigLoader()
app.state.config = config

setup_logging(
    log_level=config.get("logging.level", "INFO"),
    log_file=config.get("logging.file"),
    structured=config.get("logging.structured", False),
)

if config.get("cors.enabled", True):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get("cors.allow_origins", ["*"]),
        allow_credentials=True,
        allow_methods=config.get("cors.allow_methods", ["GET", "POST", "OPTIONS"]),
        allow_headers=config.get("cors.allow_headers", ["Content-Type", "Authorization"]),
    )
    logger.info("CORS enabled")

app.add_middleware(RequestLoggerMiddleware)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with the standard error envelope."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=server_error().model_dump(),
    )


# HTTPException handler - unwrap ErrorResponse from detail
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Return ErrorResponse payloads at the top level instead of under "detail"."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": str(exc.detail),
                "type": "api_error",
                "param": None,
                "code": None,
            }
        },
    )


@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Lexbound Constrained Generation API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "generate": "/v1/generate",
            "context": "/v1/context",
            "health": "/health",
        },
    }


@app.post("/v1/generate")
async def generate(request: GenerationRequest):
    """Generate an answer constrained to the supplied knowledge base."""
    return await process_generation(request, app.state.service)


@app.post("/v1/context")
async def context_preview(request: GenerationRequest):
    """Return the authorized context and compiled instructions for a query."""
    return await process_context(request, app.state.service)


@app.get("/health")
async def health(live: bool = False):
    """Health check endpoint."""
    return await check_health(config, getattr(app.state, "connector", None), live_check=live)


if __name__ == "__main__":
    import uvicorn

    server_config = config.get("server", {})

    uvicorn.run(
        app="main:app",
        host=server_config.get("host", "0.0.0.0"),
        port=server_config.get("port", 9000),
        reload=server_config.get("reload", False),
        log_level=config.get("logging.level", "info").lower(),
    )
