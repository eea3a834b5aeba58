import asyncio
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pilgrimpath.core.config import settings
from pilgrimpath.core.database import create_tables
from pilgrimpath.core.events import redis_client, relay_events
from pilgrimpath.core.exceptions import register_exception_handlers
from pilgrimpath.core.logging import setup_logging
from pilgrimpath.core.websocket import manager
from pilgrimpath.routers import (
    analytics,
    auth,
    bookings,
    health,
    incidents,
    notifications,
    realtime,
    rooms,
    transport,
)

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(incidents.router)
app.include_router(analytics.router)
app.include_router(notifications.router)
app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(transport.router)
app.include_router(health.router)
app.include_router(realtime.router)

background_tasks = set()

def on_relay_done(task: asyncio.Task) -> None:
    background_tasks.discard(task)
    if task.cancelled():
        return
    if task.exception() is not None:
        logger.error("Event relay stopped", exc_info=task.exception())

@app.on_event("startup")
async def startup():
    await create_tables()
    if settings.EVENT_BACKEND == "redis":
        task = asyncio.create_task(relay_events(redis_client, settings.EVENT_CHANNEL, manager))
        background_tasks.add(task)
        task.add_done_callback(on_relay_done)
    logger.info("%s started with %s event backend", settings.PROJECT_NAME, settings.EVENT_BACKEND)

@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} is running"}
