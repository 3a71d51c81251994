import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from roombooker.routers import auth, rooms, bookings, users
from roombooker.db import init_database
from roombooker.utils.errors import BookingError

LOG_LEVEL = os.getenv("ROOMBOOKER_LOG_LEVEL", "INFO")

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing logging and database"
    configure_logging()
    init_database()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Room booker",
    description="Room booking with approval and double-booking prevention, based on FastAPI.",
    version="0.1.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(users.router)
