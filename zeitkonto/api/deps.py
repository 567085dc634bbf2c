# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

from zeitkonto.database import get_db
from zeitkonto.services.holiday_service import HolidayProvider, get_holiday_provider

__all__ = ["get_db", "get_holidays"]


def get_holidays() -> HolidayProvider:
    """Get the holiday provider used for target-hour calculation."""
    return get_holiday_provider()
