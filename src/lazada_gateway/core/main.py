"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from lazada_gateway.core.database import check_connection, engine
from lazada_gateway.core.dependencies import get_settings
from lazada_gateway.core.errors import GatewayError
from lazada_gateway.core.init_db import init_db
from lazada_gateway.plugins.lazada import create_lazada_router

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("api")


# Request tracing middleware
class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Request tracing middleware."""

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        # Query strings are not logged, they may carry authorization codes
        logger.info("Request: %s %s", request.method, request.url.path)

        response = await call_next(request)

        logger.info("Response status: %s", response.status_code)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan for the FastAPI application."""
    logger.info("Initializing database...")
    check_connection(engine)
    init_db(engine)
    logger.info("Database initialized successfully!")
    yield


settings = get_settings()

app = FastAPI(
    title="Lazada Gateway",
    description="Signed proxy for the Lazada Open API",
    version="1.0.0",
    lifespan=lifespan,
)

# Add request tracing middleware
app.add_middleware(RequestTracingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


# Include routers
app.include_router(create_lazada_router())


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Root endpoint."""
    return "Lazada backend OK"


def run() -> None:
    """Console entry point."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
