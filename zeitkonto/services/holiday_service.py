# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Public holiday lookup."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

import holidays

from zeitkonto.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Holiday:
    """A single non-working day."""

    date: date
    name: str


class HolidayProvider(ABC):
    """Source of public holidays for a year and region."""

    @abstractmethod
    def get_holidays(self, year: int, region: str | None = None) -> list[Holiday]:
        """Return the holidays of one year."""
        ...


class StatutoryHolidayProvider(HolidayProvider):
    """Statutory holidays from the ``holidays`` package.

    Region is the subdivision code of the country, e.g. "BY" for Bavaria.
    Without a region only nationwide holidays are returned.
    """

    def __init__(self, country_code: str = "DE", default_region: str | None = None):
        self.country_code = country_code
        self.default_region = default_region

    def get_holidays(self, year: int, region: str | None = None) -> list[Holiday]:
        return list(self._lookup(year, region or self.default_region))

    @lru_cache(maxsize=128)  # noqa: B019
    def _lookup(self, year: int, region: str | None) -> tuple[Holiday, ...]:
        calendar = holidays.country_holidays(
            self.country_code, subdiv=region, years=year
        )
        logger.debug(
            f"Loaded {len(calendar)} holidays for {self.country_code}/{region} {year}"
        )
        return tuple(
            Holiday(date=day, name=name) for day, name in sorted(calendar.items())
        )


class StaticHolidayProvider(HolidayProvider):
    """Fixed list of holidays, independent of region."""

    def __init__(self, days: Iterable[Holiday | date] = ()):
        self._holidays = [
            day if isinstance(day, Holiday) else Holiday(date=day, name="Holiday")
            for day in days
        ]

    def get_holidays(self, year: int, region: str | None = None) -> list[Holiday]:
        return [h for h in self._holidays if h.date.year == year]


_default_provider: HolidayProvider | None = None


def get_holiday_provider() -> HolidayProvider:
    """Return the configured default holiday provider."""
    global _default_provider
    if _default_provider is None:
        _default_provider = StatutoryHolidayProvider(
            settings.holiday_country, settings.holiday_region
        )
    return _default_provider


def holiday_dates(
    provider: HolidayProvider,
    start: date,
    end: date,
    region: str | None = None,
) -> set[date]:
    """Collect holiday dates for every year touched by a date range.

    Args:
        provider: Holiday source.
        start: First day of the range.
        end: Last day of the range.
        region: Optional subdivision code.

    Returns:
        Set of holiday dates within the range.
    """
    result: set[date] = set()
    for year in range(start.year, end.year + 1):
        for holiday in provider.get_holidays(year, region):
            if start <= holiday.date <= end:
                result.add(holiday.date)
    return result
