import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from redis import Redis
from redis.exceptions import RedisError

from .config import settings
from .database import init_db
from .dependencies import get_redis
from .routers import bookings, providers, slots
from .services.slots import ConfigurationError, SlotNoLongerAvailable

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="BroBookMe Booking API", lifespan=lifespan)

app.include_router(providers.router)
app.include_router(slots.router)
app.include_router(bookings.router)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(SlotNoLongerAvailable)
async def slot_unavailable_handler(request: Request, exc: SlotNoLongerAvailable):
    return JSONResponse(
        status_code=409,
        content={"detail": {"error": "SlotNoLongerAvailable", "reason": exc.reason}},
    )


@app.get("/health")
def health(redis: Redis = Depends(get_redis)):
    try:
        redis_ok = redis.ping()
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        redis_ok = False
    return {"redis": redis_ok}
