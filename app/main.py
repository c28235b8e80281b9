import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI

from app.core.config import settings

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)

# Suppress DEBUG logs from external libraries
logging.getLogger("pymongo").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("anthropic").setLevel(logging.WARNING)
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.api import api_router
from app.db.init_db import init_database
from app.db.mongodb import mongodb
from app.services import get_pipeline_service, set_pipeline_service
from app.services.wishlist_notification_service import WishlistNotificationService
from app.services.wishlist_pipeline_service import WishlistPipelineService

logger = logging.getLogger(__name__)


async def run_unsent_sweep(dispatcher: WishlistNotificationService, interval: int) -> None:
    """Periodically re-dispatch matches whose push was never delivered"""
    while True:
        await asyncio.sleep(interval)
        try:
            await dispatcher.retry_unsent_notifications()
        except Exception as e:
            logger.error("Unsent notification sweep failed: %s", e, exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s", settings.PROJECT_NAME)
    await mongodb.connect_to_mongo()
    await init_database()

    pipeline = WishlistPipelineService()
    set_pipeline_service(pipeline)
    logger.info(
        "Wishlist pipeline ready (semantic verification: %s, provider: %s)",
        settings.ENABLE_SEMANTIC_VERIFICATION,
        settings.LLM_PROVIDER,
    )

    sweep_task = None
    if settings.UNSENT_SWEEP_INTERVAL_SECONDS:
        sweep_task = asyncio.create_task(
            run_unsent_sweep(pipeline.notification_dispatcher, settings.UNSENT_SWEEP_INTERVAL_SECONDS)
        )
        logger.info("Unsent notification sweep every %ss", settings.UNSENT_SWEEP_INTERVAL_SECONDS)

    try:
        yield
    finally:
        if sweep_task:
            sweep_task.cancel()
            logger.info("Unsent notification sweep stopped")

        await mongodb.close_mongo_connection()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Matches newly published garage sales against user wishlists and notifies their owners",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)

__all__ = ["app"]


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} is running"}


@app.get("/health")
async def health_check():
    """Database reachability plus the active verifier setup"""
    health_status = {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat(), "components": {}}

    try:
        await mongodb.ping()
        health_status["components"]["mongodb"] = "healthy"
    except Exception as e:
        health_status["components"]["mongodb"] = f"unhealthy: {str(e)}"
        health_status["status"] = "unhealthy"

    verifier = get_pipeline_service().matcher.verifier
    health_status["components"]["semantic_verifier"] = type(verifier).__name__

    return health_status
