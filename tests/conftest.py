import pytest
import os
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from hr_attendance.database import Base, get_db
from hr_attendance.main import app
from hr_attendance.schemas.leave import Employee, LeavePolicy, MonthlyLeaveRecord
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Use sessionmaker with the active connection
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def policy():
    """24 paid leaves a year (2 a month), half day costs half a leave."""
    return LeavePolicy(paid_leaves_per_year=24, half_day_deduction=0.5)

@pytest.fixture(scope="function")
def make_employee():
    """Factory for in-memory employee snapshots used by the engine tests."""
    def _make(emp_id=1, location="Mumbai", salary=30000.0, join_date=None, monthly_leaves=None, name=None, **kwargs):
        return Employee(
            id=emp_id,
            employee_code=f"E{emp_id:03d}",
            name=name or f"Employee {emp_id}",
            location=location,
            salary=salary,
            join_date=join_date,
            monthly_leaves=[MonthlyLeaveRecord(**r) for r in (monthly_leaves or [])],
            **kwargs
        )
    return _make

@pytest.fixture(scope="function")
def seed_employee(db_session):
    """Create a stored employee, optionally with monthly leave records."""
    from hr_attendance.services import employee_service

    def _seed(employee_code, location="Mumbai", salary=30000.0, monthly_leaves=None, name=None, **kwargs):
        return employee_service.create_employee(
            db_session,
            employee_code=employee_code,
            name=name or f"Employee {employee_code}",
            location=location,
            salary=salary,
            monthly_leaves=[MonthlyLeaveRecord(**r) for r in (monthly_leaves or [])],
            **kwargs
        )
    return _seed

@pytest.fixture(scope="function")
def june_2025():
    # Monday; June has 30 days
    return date(2025, 6, 2)

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
