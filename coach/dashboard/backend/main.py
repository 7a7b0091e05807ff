"""
Coach Digital Backend - FastAPI Application

REST API behind the web app: memory notes, conversation processing and
WhatsApp phone verification.

Usage:
    uvicorn coach.dashboard.backend.main:app --host 127.0.0.1 --port 8080 --reload

    Or run directly:
    python -m coach.dashboard.backend.main
"""

import logging
from contextlib import asynccontextmanager, closing

# Load .env file before anything else
from dotenv import load_dotenv
load_dotenv()

import yaml
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coach import __version__
from coach.dashboard.backend import CONFIG_PATH
from coach.dashboard.backend.models import ErrorResponse, HealthCheck
from coach.dashboard.backend.routes import api_router
from coach.logging_config import setup_logging
from coach.memory import notes
from coach.messaging import inbox
from coach.messaging.whatsapp import is_gateway_configured

setup_logging()
logger = logging.getLogger(__name__)

# Databases probed by /api/health, each opened through its own module
DATABASES = {
    "memory_notes": notes.get_connection,
    "inbox": inbox.get_connection,
}


def load_config() -> dict:
    """Read args/dashboard.yaml; an absent file means built-in defaults."""
    if not CONFIG_PATH.exists():
        return {}
    with open(CONFIG_PATH) as f:
        return yaml.safe_load(f) or {}


config = load_config()
server_config = config.get("server", {})
security_config = config.get("security", {})


def _check_database(name: str) -> str:
    try:
        with closing(DATABASES[name]()) as conn:
            conn.execute("SELECT 1")
        return "healthy"
    except Exception as e:
        logger.error(f"{name} database check failed: {e}")
        return "unhealthy"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the database tables and report gateway status at startup."""
    for name in DATABASES:
        if _check_database(name) == "unhealthy":
            logger.warning(f"Starting with unavailable {name} database")

    if not is_gateway_configured():
        logger.info("Messaging gateway not configured; verification codes will be logged")

    logger.info(f"Coach Digital API {__version__} started")
    yield
    logger.info("Coach Digital API stopped")


app = FastAPI(
    title="Coach Digital API",
    description="Memory notes, conversation processing and phone verification",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=security_config.get(
        "allowed_origins", ["http://localhost:3000", "http://127.0.0.1:3000"]
    ),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health", response_model=HealthCheck, tags=["health"])
async def health_check():
    """Databases reachable and gateway credentials present."""
    services = {name: _check_database(name) for name in DATABASES}
    services["messaging_gateway"] = "configured" if is_gateway_configured() else "not_configured"

    degraded = any(state == "unhealthy" for state in services.values())
    return HealthCheck(
        status="degraded" if degraded else "healthy",
        version=__version__,
        services=services,
    )


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Render HTTP errors as ErrorResponse bodies."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail), code=f"HTTP_{exc.status_code}").model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error").model_dump(),
    )


app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "coach.dashboard.backend.main:app",
        host=server_config.get("host", "127.0.0.1"),
        port=server_config.get("port", 8080),
        reload=True,
        log_level="info",
    )
