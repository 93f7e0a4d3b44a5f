import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from homerecall.app.config import settings
from homerecall.app.exceptions import register_exception_handlers
from homerecall.app.logging_config import setup_logging
from homerecall.app.middleware import register_middleware
from homerecall.api.deps import get_recall_gateway, get_showing_gateway
from homerecall.api.v1.router import api_router, public_router
from homerecall.services.lifecycle import TrashSessions
from homerecall.services.storage.object_store import ObjectStoreGateway, create_s3_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
    yield
    # Shutdown
    logger.info("Shutting down...")


def create_application() -> FastAPI:
    setup_logging()

    application = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version="0.1.0",
        lifespan=lifespan,
    )

    application.state.s3_client = create_s3_client(settings)
    application.state.trash_sessions = TrashSessions(idle_seconds=settings.TRASH_SESSION_IDLE_SECONDS)

    # Middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(GZipMiddleware, minimum_size=1000)
    register_middleware(application)
    register_exception_handlers(application)

    # Routers
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    application.include_router(public_router)

    return application


app = create_application()


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.get("/health/storage")
def storage_health_check(
    recall_gateway: ObjectStoreGateway = Depends(get_recall_gateway),
    showing_gateway: ObjectStoreGateway = Depends(get_showing_gateway),
):
    """Reachability of both photo buckets."""
    return {
        "status": "healthy",
        "buckets": [recall_gateway.check_bucket(), showing_gateway.check_bucket()],
    }
