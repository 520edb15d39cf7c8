import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .config import settings
from .redis_client import redis_client
from .routers import availability, holidays, reservations, working_hours
from .services.availability.errors import BookingError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Salon Booking API")

app.include_router(availability.router)
app.include_router(reservations.router)
app.include_router(working_hours.router)
app.include_router(holidays.router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    logger.info(f"{request.method} {request.url.path} → {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health():
    redis_ok = None
    if redis_client is not None:
        try:
            redis_ok = bool(redis_client.ping())
        except RedisError:
            logger.warning("Redis ping failed")
            redis_ok = False
    return {"status": "ok", "redis": redis_ok}
