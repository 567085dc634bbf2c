# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from zeitkonto.api.v1 import absences, employees, overtime, time_entries, vacation

api_router = APIRouter()

api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(
    time_entries.router, prefix="/time-entries", tags=["time-entries"]
)
api_router.include_router(overtime.router, prefix="/overtime", tags=["overtime"])
api_router.include_router(vacation.router, prefix="/vacation", tags=["vacation"])
api_router.include_router(absences.router, prefix="/absences", tags=["absences"])
