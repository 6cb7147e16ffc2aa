"""
Hospital Notifications API

FastAPI application entry point that wires the notification service,
doctor availability and the reminder scheduler together.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator, Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from app.config import settings
from app.api.routes import appointments, health, notifications
from app.core.notifications import NotificationService, build_notification_service
from app.core.scheduling import (
    AppointmentStore,
    AvailabilityService,
    ReminderLedger,
    ReminderScheduler,
    weekly_schedule,
)
from app.infra.appointments import SqlAppointmentStore
from app.infra.database import init_db, close_db
from app.infra.redis import RedisClient, RedisReminderLedger


def setup_logging() -> None:
    """Configure logging based on environment."""
    log_level = logging.DEBUG if settings.debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )


logger = logging.getLogger(__name__)


async def run_periodic_sweep(
    scheduler: ReminderScheduler,
    service: NotificationService,
    interval: float,
) -> None:
    """Sweep reminders and drain the queue every ``interval`` seconds."""
    while True:
        try:
            await scheduler.sweep()
            await service.process_queue()
        except Exception:
            logger.exception("Periodic reminder sweep failed")
        await asyncio.sleep(interval)


async def _connect_redis() -> None:
    try:
        redis = await RedisClient.get_client()
        if redis:
            logger.info("Redis connection established")
        else:
            logger.warning("Redis unavailable - reminder markers kept in memory")
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}")


def create_app(
    notification_service: Optional[NotificationService] = None,
    appointment_store: Optional[AppointmentStore] = None,
    reminder_ledger: Optional[ReminderLedger] = None,
) -> FastAPI:
    """
    Build the application.

    Components not passed in are created from settings at startup: the
    configured providers, the SQL appointment store and the Redis
    reminder ledger.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # === STARTUP ===
        setup_logging()
        logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")

        health.set_start_time()

        store = appointment_store
        if store is None:
            store = SqlAppointmentStore()
            # Only in development - production schemas are migrated elsewhere
            if settings.is_development:
                try:
                    await init_db()
                    logger.info("Database tables initialized")
                except Exception as e:
                    logger.warning(f"Database init skipped: {e}")

        ledger = reminder_ledger
        if ledger is None:
            await _connect_redis()
            ledger = RedisReminderLedger()

        service = notification_service or build_notification_service(settings)
        scheduler = ReminderScheduler(
            service,
            store,
            ledger=ledger,
            tz=ZoneInfo(settings.clinic_timezone),
            lookahead_days=settings.reminder_lookahead_days,
            template_defaults=settings.template_defaults,
        )

        app.state.notification_service = service
        app.state.appointment_store = store
        app.state.reminder_scheduler = scheduler
        app.state.availability_service = AvailabilityService(
            store,
            schedule=weekly_schedule(settings.default_slot_minutes),
            booking_minutes=settings.assumed_booking_minutes,
            search_start=settings.conflict_search_start,
            search_end=settings.conflict_search_end,
        )

        sweep_task: Optional[asyncio.Task] = None
        if settings.reminder_sweep_interval_seconds > 0:
            sweep_task = asyncio.create_task(
                run_periodic_sweep(scheduler, service, settings.reminder_sweep_interval_seconds)
            )
            logger.info(
                f"Reminder sweep every {settings.reminder_sweep_interval_seconds}s"
            )

        logger.info(f"Application ready at http://{settings.host}:{settings.port}")

        yield

        # === SHUTDOWN ===
        logger.info("Shutting down application...")

        if sweep_task is not None:
            sweep_task.cancel()
            with suppress(asyncio.CancelledError):
                await sweep_task

        if service.pending:
            logger.warning(f"Dropping {service.pending} queued notifications on shutdown")
        await service.close()

        await RedisClient.close()
        await close_db()

        logger.info("Shutdown complete")

    app = FastAPI(
        title="Hospital Notifications API",
        description="""
    Patient notification dispatch and appointment reminders.

    ## Features
    - Templated SMS, email and WhatsApp notifications
    - Pluggable providers (Twilio, MSG91, SMTP, SendGrid, Meta) with mock fallback
    - Doctor slot listings and appointment conflict checks
    - 24h and 1h appointment reminders with duplicate suppression
    """,
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        logger.warning(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "Validation error",
                "detail": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.exception(f"Unhandled exception: {exc}")

        # Don't expose internal errors in production
        detail = str(exc) if settings.is_development else "Internal server error"

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": detail,
            },
        )

    @app.middleware("http")
    async def request_timing_middleware(request: Request, call_next):
        """Log request duration in debug mode."""
        start_time = time.time()
        try:
            return await call_next(request)
        finally:
            if settings.debug:
                duration = time.time() - start_time
                logger.debug(
                    f"{request.method} {request.url.path} "
                    f"completed in {duration:.3f}s"
                )

    app.include_router(health.router)
    app.include_router(notifications.router)
    app.include_router(appointments.router)

    @app.get("/", tags=["Root"])
    async def root() -> dict:
        """
        Root endpoint.

        Returns basic API information.
        """
        return {
            "name": settings.app_name,
            "version": "1.0.0",
            "status": "running",
            "environment": settings.app_env,
            "docs": "/docs" if settings.is_development else None,
        }

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-JSON context (raised ValueErrors) stringified."""
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="debug" if settings.debug else "info",
    )
