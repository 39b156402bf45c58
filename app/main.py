"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.exceptions import InfrastructureError
from app.core.security import get_token_issuer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Refuse to start when the JWT signing secret is missing."""
    get_token_issuer()
    yield


app = FastAPI(
    title="Timeshare Management API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(InfrastructureError)
def infrastructure_error_handler(request: Request, exc: InfrastructureError) -> JSONResponse:
    """Store or signing failures become 503 without leaking internals."""
    logger.error(
        "Infrastructure failure: path=%s error=%s message=%s",
        request.url.path,
        type(exc).__name__,
        exc.message,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"is_succeed": False, "message": "Service temporarily unavailable"},
    )


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Timeshare Management API"}


def run() -> None:
    """Serve the API with uvicorn on API_HOST:API_PORT."""
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )
    logger.info("Starting API on %s:%s", settings.API_HOST, settings.API_PORT)
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=False)


if __name__ == "__main__":
    run()
