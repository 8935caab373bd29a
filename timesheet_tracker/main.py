"""
Application entry point.
Run with:  uvicorn timesheet_tracker.main:app --reload

⚠️  DEVELOPMENT NOTE:
    Sample timesheets are seeded automatically on startup (see
    timesheet_tracker/db/seeder.py). Set SEED_MOCK_DATA=false in production.
"""
import logging

from fastapi import FastAPI

from timesheet_tracker.core.logging_config import configure_logging
from fastapi.middleware.cors import CORSMiddleware

from timesheet_tracker.core.config import settings
from timesheet_tracker.core.exceptions import TimesheetError, timesheet_error_handler
from timesheet_tracker.api.v1.router import api_router
from timesheet_tracker.db.database import get_db, init_db
from timesheet_tracker.db.seeder import seed_timesheets
from timesheet_tracker.repositories.timesheet_repository import (
    InMemoryTimesheetRepository,
    SqliteTimesheetRepository,
)

configure_logging()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    logger = logging.getLogger(__name__)
    logger.info("Starting FastAPI application setup")
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=(
            "Backend API for tracking weekly timesheets and the time "
            "entries logged within them."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Middleware ──────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ──────────────────────────────────────────────────────────────
    app.add_exception_handler(TimesheetError, timesheet_error_handler)

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(api_router)

    # ── Timesheet store ─────────────────────────────────────────────────────
    app.state.timesheet_store = InMemoryTimesheetRepository()

    # ── Startup / shutdown events ───────────────────────────────────────────
    @app.on_event("startup")
    def on_startup() -> None:
        """Prepare the configured store backend and development seed data."""
        logger.info("Initializing %s timesheet store", settings.STORE_BACKEND)
        if settings.STORE_BACKEND == "sqlite":
            init_db()
            if settings.SEED_MOCK_DATA:
                with get_db() as conn:
                    seed_timesheets(SqliteTimesheetRepository(conn))
        elif settings.SEED_MOCK_DATA:
            # ⚠️ DEV ONLY – disable with SEED_MOCK_DATA=false in production
            seed_timesheets(app.state.timesheet_store)

    return app


app = create_app()
