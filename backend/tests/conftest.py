"""Shared test fixtures for all test modules."""

import contextlib
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reportpay.core import database as db_module
from reportpay.core.database import Base, get_db
from reportpay.models.tenant import Tenant
from reportpay.repositories.practitioner_repository import PractitionerRepository
from reportpay.repositories.report_price_repository import ReportPriceRepository
from reportpay.repositories.report_repository import ReportRepository
from reportpay.schemas.practitioner import PractitionerCreate
from reportpay.schemas.report import ReportCreate
from reportpay.schemas.report_price import ReportPriceUpsert

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

# Well-known default tenant ID used across all tests
DEFAULT_TENANT_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


def _seed_default_tenant(session: Session) -> None:
    """Insert a default tenant used by all tests."""
    tenant = session.query(Tenant).filter(Tenant.id == DEFAULT_TENANT_ID).first()
    if tenant is None:
        tenant = Tenant(
            id=DEFAULT_TENANT_ID,
            name="Default Test Clinic",
            legal_name="Default Test Clinic Ltda",
            tax_id="12.345.678/0001-90",
        )
        session.add(tenant)
        session.commit()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    session = _TestSessionLocal()
    try:
        _seed_default_tenant(session)
    finally:
        session.close()

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def default_tenant_id():
    """Return the default tenant ID for tests."""
    return DEFAULT_TENANT_ID


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def session_factory():
    """Session factory bound to the test database, for in-process clients."""
    return lambda: db_module.SessionLocal()


@pytest.fixture
def practitioner(db_session):
    """Dr. Ana with prices configured for two exam types."""
    doctor = PractitionerRepository(db_session).create(
        PractitionerCreate(name="Dr. Ana Souza", license_number="CRM-SP 123456"),
        DEFAULT_TENANT_ID,
    )
    prices = ReportPriceRepository(db_session)
    prices.upsert(
        ReportPriceUpsert(practitioner_id=doctor.id, exam_type="ct", value=Decimal("100.00")),
        DEFAULT_TENANT_ID,
    )
    prices.upsert(
        ReportPriceUpsert(practitioner_id=doctor.id, exam_type="mri", value=Decimal("50.00")),
        DEFAULT_TENANT_ID,
    )
    return doctor


@pytest.fixture
def other_practitioner(db_session):
    doctor = PractitionerRepository(db_session).create(
        PractitionerCreate(name="Dr. Bruno Lima"),
        DEFAULT_TENANT_ID,
    )
    ReportPriceRepository(db_session).upsert(
        ReportPriceUpsert(practitioner_id=doctor.id, exam_type="ct", value=Decimal("80.00")),
        DEFAULT_TENANT_ID,
    )
    return doctor


def make_report(
    db: Session,
    practitioner_id: uuid.UUID,
    exam_type: str = "ct",
    minutes_ago: int = 60,
):
    """Create a pending report signed ``minutes_ago`` minutes ago."""
    return ReportRepository(db).create(
        ReportCreate(
            practitioner_id=practitioner_id,
            exam_type=exam_type,
            patient_name="Patient",
            signed_at=datetime.now(UTC) - timedelta(minutes=minutes_ago),
        ),
        DEFAULT_TENANT_ID,
    )
