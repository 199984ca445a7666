import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..migrate import apply_migrations
from .redis_client import redis_client
from .routers import appointments, slots
from .services.errors import BookingError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    apply_migrations()
    logger.info("Salon booking API started")
    yield


app = FastAPI(title="Salon Booking API", lifespan=lifespan)

app.include_router(slots.router)
app.include_router(appointments.router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    logger.info(f"{request.method} {request.url.path} rejected: {exc.code} ({exc.message})")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.get("/health")
def health():
    return {"redis": redis_client.ping() if redis_client is not None else None}
