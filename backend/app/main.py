"""
ASGI entry point for the finance tracker API.

Serve with any ASGI server, e.g. ``uvicorn app.main:app``.
"""
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

from app.database import engine, Base
from app.routes import api_router
from app.services.errors import DependencyError, ServiceError

logger = logging.getLogger(__name__)


def _env_bool(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _cors_origins() -> list[str]:
    """CORS_ALLOW_ORIGINS (comma separated), else FRONTEND_URL, else the local frontend."""
    raw = os.getenv("CORS_ALLOW_ORIGINS") or os.getenv("FRONTEND_URL") or "http://localhost:8081"
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


DOCS_ENABLED = _env_bool("API_DOCS_ENABLED")

# Dev only; deployed databases are migrated separately
if _env_bool("AUTO_CREATE_TABLES"):
    logger.warning("AUTO_CREATE_TABLES is enabled; creating tables via SQLAlchemy metadata.")
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Finance Tracker API",
    description="Transactions, statistics and cash-flow forecasts for the finance tracker app",
    version="0.1.0",
    docs_url="/docs" if DOCS_ENABLED else None,
    redoc_url=None,
    openapi_url="/openapi.json" if DOCS_ENABLED else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type", "X-Finance-User-Id", "X-Finance-Timestamp", "X-Finance-Signature"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if isinstance(exc, DependencyError):
        logger.error(f"Dependency failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/api/health", tags=["health"])
def health():
    return {"status": "healthy"}
