"""
ClusterGate Backend - FastAPI Application

An administrative gateway to MongoDB clusters with per-user saved connections.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.config import get_settings
from app.core.errors import InvalidInput, Unavailable
from app.core.logging_config import configure_logging
from app.database.connections import get_mongo_client, close_connections
from app.database.indexes import create_indexes
from app.routers import auth, clusters, health, saved_connections

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Configure logging
    - Initialize database connection
    - Create indexes

    Shutdown:
    - Close all database connections
    """
    configure_logging(get_settings().log_level)
    logger.info("Starting up ClusterGate Backend...")

    try:
        client = await get_mongo_client()
        await create_indexes(client)
    except Exception:
        logger.exception("Database initialization failed; continuing without indexes")

    yield

    logger.info("Shutting down ClusterGate Backend...")
    await close_connections()


# Create FastAPI application
app = FastAPI(
    title="ClusterGate API",
    description="""
## MongoDB Cluster Gateway API

Browse and edit documents on any MongoDB cluster you can reach, and keep a
private list of saved connections.

### Features
- **Authentication**: JWT sessions via bearer header or httponly cookie
- **Saved connections**: Per-user registry of cluster URIs, unique per user
- **Clusters**: List databases and collections, page, search, export and edit documents

### Authentication
Obtain a token via `POST /auth/login`. The response also sets a session cookie.
Alternatively send:
```
Authorization: Bearer your_jwt_token
```
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Malformed request bodies are invalid input (400).

    Only the location and reason of each error are returned; submitted values
    can hold connection strings or passwords.
    """
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": InvalidInput.default_message, "errors": errors},
    )


@app.exception_handler(PyMongoError)
async def storage_exception_handler(request: Request, exc: PyMongoError):
    """Gateway storage failures outside the services (auth lookups) are 503."""
    logger.warning("Gateway storage failed on %s: %s", request.url.path, type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": Unavailable().message},
    )


# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(saved_connections.router)
app.include_router(clusters.router)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ClusterGate API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
