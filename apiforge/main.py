"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apiforge.api.deps import fail
from apiforge.core.config import settings
from apiforge.core.middleware import setup_middleware
from apiforge.core.exceptions import ApiForgeError
from apiforge.db.session import SessionLocal, engine
from apiforge.db.setup import create_base_tables
from apiforge.services.model_registry import ModelRegistry

from apiforge.api.auth import router as auth_router
from apiforge.api.models import router as models_router
from apiforge.api.data import router as data_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("apiforge")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("🚀 Starting API Forge")
    create_base_tables(engine)
    app.state.registry.load(SessionLocal)

    yield

    logger.info("🔻 Shutting down API Forge")


app = FastAPI(
    title="API Forge",
    description="Define data models, get permission-checked REST APIs",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.registry = ModelRegistry()

# Middleware
setup_middleware(app)


@app.exception_handler(ApiForgeError)
async def apiforge_exception_handler(request: Request, exc: ApiForgeError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content=fail(f"{location}: {message}" if location else message),
    )


# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(models_router, prefix="/api")
app.include_router(data_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok", "models": app.state.registry.names()}
