# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Vacation balance schemas."""

import uuid

from pydantic import BaseModel


class VacationBalanceSummary(BaseModel):
    """Vacation account of one year.

    remaining = entitlement + carryover - taken; may be negative.
    """

    user_id: uuid.UUID
    year: int
    entitlement: float
    carryover: float
    taken: float
    remaining: float
    is_overdrawn: bool = False


class RolloverResult(BaseModel):
    """Outcome of a year-end rollover for one employee."""

    user_id: uuid.UUID
    from_year: int
    to_year: int
    remaining: float
    carryover: float
