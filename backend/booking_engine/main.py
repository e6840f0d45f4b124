import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.exceptions import RedisError

from .config import settings
from .database import init_db
from .redis_client import redis_client
from .routers import bookings, cron, slots
from .services.scheduling.sweeper import sweeper_loop

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()

    task = None
    if settings.sweeper_enabled:
        task = asyncio.create_task(sweeper_loop())

    yield

    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="Booking Engine API", lifespan=lifespan)

app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(cron.router)


@app.get("/health")
def health():
    if redis_client is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis_client.ping()}
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return {"status": "degraded", "redis": False}
