# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Compliance check schemas."""

from pydantic import BaseModel, Field


class ComplianceWarning(BaseModel):
    """Schema for compliance warnings (calculated on-the-fly)."""

    level: str  # "info", "warning", "error"
    code: str
    message: str
    law_reference: str | None = None


class ValidationResult(BaseModel):
    """Outcome of a working-time law check.

    Findings are advisory, so ``valid`` is always True and ``errors`` is
    always empty.
    """

    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    details: list[ComplianceWarning] = Field(default_factory=list)
