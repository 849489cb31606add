from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import dispose_engine, init_db
from .errors import ServiceError, StorageError
from .observability import (
    setup_logging,
    init_sentry,
    setup_metrics_middleware,
    metrics_endpoint,
    get_health_check,
)
from .routes import activities as activities_routes
from .routes import complaints as complaints_routes
from .storage import LOCAL_URL_PREFIX, MediaStore, build_media_store

# Setup observability
setup_logging()
init_sentry()

logger = logging.getLogger("seva")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up complaint backend (env=%s)", settings.environment)
    await init_db()
    app.state.media_store = build_media_store(settings)
    mount_local_media(app, app.state.media_store)
    try:
        yield
    finally:
        logger.info("Shutting down complaint backend...")
        await app.state.media_store.close()
        await dispose_engine()


app = FastAPI(title="Seva Complaint API", lifespan=lifespan)

setup_metrics_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(complaints_routes.router)
app.include_router(activities_routes.router)


def mount_local_media(app: FastAPI, store: MediaStore) -> None:
    """Serve locally stored images at `/storage` when the active store is local,
    including an S3 configuration that fell back to local storage."""
    if store.provider != "local":
        return
    if any(getattr(route, "name", None) == "storage" for route in app.routes):
        return
    app.mount(
        LOCAL_URL_PREFIX,
        StaticFiles(directory=str(store.base_dir)),
        name="storage",
    )


def _error_body(detail: str, exc: Exception) -> dict:
    body = {"detail": detail}
    if not settings.is_production:
        body["error"] = str(exc)
    return body


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if isinstance(exc, StorageError):
        logger.error("Media storage failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=_error_body("Media storage error", exc))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database failure on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content=_error_body("Database error", exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404, content={"detail": f"Route {request.url.path} not found"}
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=_error_body("Something went wrong!", exc))


@app.get("/", tags=["Status"])
def root():
    return {
        "message": "Seva complaint backend running",
        "storage": settings.storage_provider,
        "endpoints": {
            "complaints": "/api/complaints",
            "complaints-with-image": "/api/complaints-with-image",
            "complaints-with-images": "/api/complaints-with-images",
            "complaints-stats": "/api/complaints-stats",
            "activities": "/api/activities",
        },
    }


@app.get("/health", tags=["Status"])
def health(request: Request):
    """Health check endpoint."""
    store = getattr(request.app.state, "media_store", None)
    return get_health_check(store.provider if store else "uninitialized")


@app.get("/metrics", tags=["Status"])
def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return metrics_endpoint()
