# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings

from zeitkonto.models.enums import UnpaidLeavePolicy


class Settings(BaseSettings):
    """Runtime settings.

    Values are read from the environment (case-insensitive) or a local
    ``.env`` file.
    """

    # Database
    database_url: str = "sqlite:///./zeitkonto.db"

    # Logging
    log_level: str = "INFO"

    # Holiday calendar
    holiday_country: str = "DE"
    holiday_region: str | None = None

    # Vacation
    vacation_carryover_cap_days: float = 5.0

    # Overtime
    overtime_max_minus_hours: float = -20.0
    unpaid_leave_policy: UnpaidLeavePolicy = UnpaidLeavePolicy.REDUCE_TARGET
    balance_tolerance_hours: float = 0.01

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
