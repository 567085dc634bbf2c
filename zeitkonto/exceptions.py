# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Domain exceptions and their HTTP mapping."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ZeitkontoError(Exception):
    """Base class for all domain errors."""


class NotFoundError(ZeitkontoError):
    """Raised when an employee, absence or time entry does not exist."""


class ConflictError(ZeitkontoError):
    """Raised when a request collides with existing state.

    Examples are overlapping absences or editing an absence that is no
    longer pending.
    """


class InvalidRequestError(ZeitkontoError, ValueError):
    """Raised for semantically invalid input."""


async def _not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _conflict_handler(_request: Request, exc: ConflictError) -> JSONResponse:
    logger.info(f"Conflict: {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def _invalid_request_handler(
    _request: Request, exc: InvalidRequestError
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach domain exception handlers to the FastAPI app."""
    app.add_exception_handler(NotFoundError, _not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConflictError, _conflict_handler)  # type: ignore[arg-type]
    app.add_exception_handler(InvalidRequestError, _invalid_request_handler)  # type: ignore[arg-type]
