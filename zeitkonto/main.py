# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from zeitkonto import __version__
from zeitkonto.config import settings
from zeitkonto.exceptions import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        f"Starting zeitkonto {__version__} "
        f"(holidays: {settings.holiday_country}/{settings.holiday_region or '-'}, "
        f"unpaid leave: {settings.unpaid_leave_policy.value})"
    )

    yield

    logger.info("Shutting down zeitkonto")


app = FastAPI(
    title="zeitkonto",
    description="Overtime and vacation balance engine",
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app)


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include API router after it's created
from zeitkonto.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
