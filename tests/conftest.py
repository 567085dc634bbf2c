# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from zeitkonto.api.deps import get_db, get_holidays
from zeitkonto.main import app
from zeitkonto.models import Employee
from zeitkonto.models.base import Base
from zeitkonto.schemas.employee import EmployeeCreate
from zeitkonto.services import employee_service, holiday_service
from zeitkonto.services.holiday_service import StaticHolidayProvider

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def no_holidays(monkeypatch) -> StaticHolidayProvider:
    """Use an empty holiday calendar unless a test passes its own."""
    provider = StaticHolidayProvider()
    monkeypatch.setattr(holiday_service, "_default_provider", provider)
    return provider


@pytest.fixture(scope="function")
def client(db_session, no_holidays):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_holidays] = lambda: no_holidays
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_employee(db_session):
    """Factory creating employees through the profile service."""

    def _make(**overrides) -> Employee:
        data = {
            "name": "Erika Mustermann",
            "weekly_hours": 40.0,
            "hire_date": date(2027, 1, 1),
            "vacation_days_per_year": 30.0,
        }
        data.update(overrides)
        return employee_service.create_employee(db_session, EmployeeCreate(**data))

    return _make


@pytest.fixture
def employee(make_employee) -> Employee:
    """Full-time employee hired on 2027-01-01."""
    return make_employee()
