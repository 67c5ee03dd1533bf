import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.config import APP_ADDR, APP_PORT, COMMIT_HASH, ENV
from shopfloor_chat.database import AsyncSessionLocal, close_db, get_db, init_db
from shopfloor_chat.logging_config import setup_logging
from shopfloor_chat.realtime.hub import RealtimeHub
from shopfloor_chat.routers.conversations import router as conversations_router
from shopfloor_chat.routers.notifications import router as notifications_router
from shopfloor_chat.routers.realtime import router as realtime_router
from shopfloor_chat.routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown."""
    # Startup
    setup_logging()
    await init_db()
    app.state.hub = RealtimeHub(AsyncSessionLocal)
    logger.info("Chat service started (env=%s, version=%s)", ENV, COMMIT_HASH)
    yield
    # Shutdown
    await app.state.hub.close()
    await close_db()


app = FastAPI(
    title="Shopfloor Chat",
    description="Real-time messaging and notifications for factory operations",
    version=COMMIT_HASH or "dev",
    lifespan=lifespan,
)

# Include routers
app.include_router(
    conversations_router, prefix="/api/chat/conversations", tags=["conversations"]
)
app.include_router(
    notifications_router, prefix="/api/chat/notifications", tags=["notifications"]
)
app.include_router(users_router, prefix="/api/chat/users", tags=["users"])
app.include_router(realtime_router, tags=["realtime"])


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Optional[str]]:
    """Health check endpoint with database connectivity."""
    try:
        # Test database connection
        result = await db.execute(text("SELECT 1"))
        db_status = "connected" if result.scalar() == 1 else "error"
    except (SQLAlchemyError, OSError):
        logger.warning("Health check could not reach the database", exc_info=True)
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": ENV,
        "version": COMMIT_HASH,
    }


# If run directly, start the server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=APP_ADDR, port=APP_PORT)
