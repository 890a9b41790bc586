import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.v1.bookings import router as bookings_router
from app.api.v1.schemas import error_envelope
from app.api.webhooks import router as webhooks_router
from app.application.exceptions import BookingError, InternalError
from app.core.config import settings
from app.wiring.dependencies import get_conversation_sweeper

RETRY_AFTER_SECONDS = "1"


class ContextFormatter(logging.Formatter):
    KEYS = (
        "message_id",
        "booking_id",
        "service",
        "service_id",
        "date",
        "time",
        "context",
        "action",
        "code",
        "count",
        "period",
        "reason",
    )

    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in self.KEYS:
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = get_conversation_sweeper()
    task = asyncio.create_task(sweeper.run_forever(settings.CONVERSATION_SWEEP_INTERVAL_SECONDS))
    logger.info("Conversation sweep started")
    yield
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
    logger.info("Conversation sweep stopped")


app = FastAPI(title="Salon Booking Assistant", version="1.0.0", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error("Booking request failed", extra={"code": exc.code, "reason": exc.message})
    headers = {"Retry-After": RETRY_AFTER_SECONDS} if exc.retryable else None
    details = getattr(exc, "errors", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.code, exc.message, details),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()]
    logger.warning("Validation error", extra={"reason": "; ".join(details)})
    return JSONResponse(status_code=400, content=error_envelope("INVALID_INPUT", "Invalid request", details))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"reason": str(exc)})
    return JSONResponse(
        status_code=InternalError.status_code,
        content=error_envelope(InternalError.code, InternalError.user_message),
    )


app.include_router(bookings_router, prefix="/api", tags=["bookings"])
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "service": settings.BUSINESS_NAME}
