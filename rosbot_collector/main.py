from contextlib import asynccontextmanager
from fastapi import FastAPI

from rosbot_collector.settings import configure_logging

# Routers
from rosbot_collector.api.routers.activity import router as activity_router, close_collector


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure the shared Ros-Bot client is closed on shutdown."""
    configure_logging()
    try:
        yield
    finally:
        await close_collector()


app = FastAPI(title="Ros-Bot Collector", version="0.1", lifespan=lifespan)

app.include_router(activity_router)
