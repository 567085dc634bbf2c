# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Working-time law compliance checks.

Every finding is advisory. Validation never raises for a rule violation
and never prevents a time entry from being stored.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from zeitkonto.schemas.compliance import ComplianceWarning, ValidationResult
from zeitkonto.services.working_time import calculate_hours

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeRecord:
    """Minimal view of a time entry used by the validators."""

    date: date
    start_time: time
    end_time: time
    break_minutes: int = 0
    hours: float | None = None
    entry_id: uuid.UUID | None = None

    @property
    def net_hours(self) -> float:
        if self.hours is not None:
            return self.hours
        return calculate_hours(self.start_time, self.end_time, self.break_minutes)

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    @classmethod
    def from_entry(cls, entry) -> "TimeRecord":
        """Build a record from a stored entry or a candidate schema."""
        return cls(
            date=entry.date,
            start_time=entry.start_time,
            end_time=entry.end_time,
            break_minutes=entry.break_minutes or 0,
            hours=getattr(entry, "hours", None),
            entry_id=getattr(entry, "entry_id", None) or getattr(entry, "id", None),
        )


class ComplianceValidator(ABC):
    """Base class for country-specific working-time law validation."""

    @abstractmethod
    def check_daily_hours(
        self, record: TimeRecord, same_day: list[TimeRecord]
    ) -> list[ComplianceWarning]:
        """Check daily hour limits."""
        ...

    @abstractmethod
    def check_breaks(self, record: TimeRecord) -> list[ComplianceWarning]:
        """Check break requirements."""
        ...

    @abstractmethod
    def check_rest_period(
        self, record: TimeRecord, previous: TimeRecord | None
    ) -> list[ComplianceWarning]:
        """Check rest between working periods."""
        ...

    @abstractmethod
    def check_weekly_hours(
        self, record: TimeRecord, same_week: list[TimeRecord]
    ) -> list[ComplianceWarning]:
        """Check weekly limits."""
        ...

    def validate(
        self, record: TimeRecord, existing: Iterable[TimeRecord]
    ) -> ValidationResult:
        """Run all checks for a candidate entry.

        Args:
            record: The entry about to be stored.
            existing: The employee's stored entries. An entry with the same
                id as the candidate is ignored, so edits are not counted twice.

        Returns:
            ValidationResult with every finding as a warning.
        """
        others = [
            e
            for e in existing
            if record.entry_id is None or e.entry_id != record.entry_id
        ]
        iso_week = record.date.isocalendar()[:2]
        same_day = [e for e in others if e.date == record.date]
        same_week = [e for e in others if e.date.isocalendar()[:2] == iso_week]

        details: list[ComplianceWarning] = []
        details.extend(self.check_daily_hours(record, same_day))
        details.extend(self.check_breaks(record))
        details.extend(self.check_rest_period(record, find_previous(record, others)))
        details.extend(self.check_weekly_hours(record, same_week))

        for warning in details:
            logger.warning(
                f"Compliance warning {warning.code} on {record.date}: "
                f"{warning.message}"
            )

        return ValidationResult(
            warnings=[w.message for w in details],
            details=details,
        )


def find_previous(
    record: TimeRecord, existing: Iterable[TimeRecord]
) -> TimeRecord | None:
    """Return the entry that ended last strictly before the record starts."""
    earlier = [e for e in existing if e.end_at < record.start_at]
    if not earlier:
        return None
    return max(earlier, key=lambda e: e.end_at)


class GermanComplianceValidator(ComplianceValidator):
    """German working-time act (Arbeitszeitgesetz) validator.

    Key rules:
    - Regular working day of 8 hours, extendable to 10 hours
    - 30 minutes break above 6 hours, 45 minutes above 9 hours
    - Minimum 11 hours rest between working periods
    - 48 hours per week (six 8-hour days)
    """

    DAILY_STANDARD_HOURS = 8.0
    DAILY_MAX_HOURS = 10.0
    DAILY_CEILING_HOURS = 24.0
    BREAK_SHORT_THRESHOLD_HOURS = 6.0
    BREAK_SHORT_MINUTES = 30
    BREAK_LONG_THRESHOLD_HOURS = 9.0
    BREAK_LONG_MINUTES = 45
    MIN_REST_HOURS = 11.0
    WEEKLY_MAX_HOURS = 48.0

    def check_daily_hours(
        self, record: TimeRecord, same_day: list[TimeRecord]
    ) -> list[ComplianceWarning]:
        """Check the day's total against the ArbZG limits.

        Args:
            record: The candidate entry.
            same_day: Other entries on the same date.

        Returns:
            At most one warning, for the highest limit exceeded.
        """
        total = round(sum(e.net_hours for e in same_day) + record.net_hours, 2)

        if total > self.DAILY_CEILING_HOURS:
            return [
                ComplianceWarning(
                    level="error",
                    code="DAILY_CEILING_EXCEEDED",
                    message=(
                        f"{total:.2f}h recorded on {record.date.isoformat()} "
                        f"exceed the technical maximum of "
                        f"{self.DAILY_CEILING_HOURS:.0f}h per day"
                    ),
                    law_reference=None,
                )
            ]
        if total > self.DAILY_MAX_HOURS:
            return [
                ComplianceWarning(
                    level="error",
                    code="DAILY_MAX_EXCEEDED",
                    message=(
                        f"Exceeds the statutory maximum of "
                        f"{self.DAILY_MAX_HOURS:.0f}h/day "
                        f"({total:.2f}h on {record.date.isoformat()})"
                    ),
                    law_reference="ArbZG §3",
                )
            ]
        if total > self.DAILY_STANDARD_HOURS:
            return [
                ComplianceWarning(
                    level="warning",
                    code="DAILY_STANDARD_EXCEEDED",
                    message=(
                        f"Exceeds the regular {self.DAILY_STANDARD_HOURS:.0f}h/day "
                        f"({total:.2f}h on {record.date.isoformat()}); must be "
                        f"balanced within 6 months"
                    ),
                    law_reference="ArbZG §3",
                )
            ]
        return []

    def check_breaks(self, record: TimeRecord) -> list[ComplianceWarning]:
        hours = record.net_hours
        if hours > self.BREAK_LONG_THRESHOLD_HOURS:
            required = self.BREAK_LONG_MINUTES
            threshold = self.BREAK_LONG_THRESHOLD_HOURS
        elif hours > self.BREAK_SHORT_THRESHOLD_HOURS:
            required = self.BREAK_SHORT_MINUTES
            threshold = self.BREAK_SHORT_THRESHOLD_HOURS
        else:
            return []

        if record.break_minutes >= required:
            return []
        return [
            ComplianceWarning(
                level="warning",
                code="BREAK_INSUFFICIENT",
                message=(
                    f"{hours:.2f}h worked require at least {required} minutes "
                    f"break above {threshold:.0f}h "
                    f"({record.break_minutes} minutes recorded)"
                ),
                law_reference="ArbZG §4",
            )
        ]

    def check_rest_period(
        self, record: TimeRecord, previous: TimeRecord | None
    ) -> list[ComplianceWarning]:
        """Check the 11-hour rest requirement.

        Args:
            record: The candidate entry.
            previous: The entry that ended last before the candidate starts.

        Returns:
            A warning with the earliest compliant start time, if violated.
        """
        if previous is None:
            return []

        rest_hours = (record.start_at - previous.end_at).total_seconds() / 3600
        if rest_hours >= self.MIN_REST_HOURS:
            return []

        earliest = previous.end_at + timedelta(hours=self.MIN_REST_HOURS)
        return [
            ComplianceWarning(
                level="warning",
                code="REST_PERIOD_VIOLATION",
                message=(
                    f"Only {rest_hours:.2f}h rest since "
                    f"{previous.end_at:%Y-%m-%d %H:%M} "
                    f"(minimum {self.MIN_REST_HOURS:.0f}h); earliest compliant "
                    f"start is {earliest:%Y-%m-%d %H:%M}"
                ),
                law_reference="ArbZG §5",
            )
        ]

    def check_weekly_hours(
        self, record: TimeRecord, same_week: list[TimeRecord]
    ) -> list[ComplianceWarning]:
        total = round(sum(e.net_hours for e in same_week) + record.net_hours, 2)
        if total <= self.WEEKLY_MAX_HOURS:
            return []

        year, week = record.date.isocalendar()[:2]
        return [
            ComplianceWarning(
                level="warning",
                code="WEEKLY_MAX_EXCEEDED",
                message=(
                    f"Exceeds {self.WEEKLY_MAX_HOURS:.0f}h/week "
                    f"({total:.2f}h in week {week}/{year})"
                ),
                law_reference="ArbZG §3",
            )
        ]


def get_validator(country_code: str = "DE") -> ComplianceValidator:
    """Factory function to get the appropriate validator.

    Args:
        country_code: ISO country code.

    Returns:
        ComplianceValidator for the country.

    Raises:
        ValueError: If no validator exists for the country.
    """
    validators: dict[str, type[ComplianceValidator]] = {
        "DE": GermanComplianceValidator,
    }
    validator_class = validators.get(country_code.upper())
    if validator_class is None:
        raise ValueError(f"No compliance validator for country '{country_code}'")
    return validator_class()


def validate_time_entry(
    candidate,
    existing_entries: Iterable,
    country_code: str = "DE",
) -> ValidationResult:
    """Check a candidate entry against the employee's existing entries.

    Pure function: never touches the database and never raises for rule
    violations.

    Args:
        candidate: Entry about to be stored (schema or model instance).
        existing_entries: The employee's stored entries.
        country_code: Which country's rules to apply.

    Returns:
        ValidationResult with valid=True and the advisory warnings.
    """
    validator = get_validator(country_code)
    record = TimeRecord.from_entry(candidate)
    existing = [TimeRecord.from_entry(e) for e in existing_entries]
    return validator.validate(record, existing)
