"""Shared pytest fixtures for feeledger tests."""

import os
import tempfile
from datetime import datetime, UTC

import pytest

from feeledger.config import LedgerSettings
from feeledger.database.factories import create_sqlite_database
from feeledger.domain.attachment import AttachmentLinker
from feeledger.domain.audit import AuditRecorder
from feeledger.domain.category import CategoryRegistry
from feeledger.domain.entities import CategoryKind
from feeledger.domain.membership import MembershipService
from feeledger.domain.propagation import StatusPropagator
from feeledger.domain.recorder import TransactionRecorder
from feeledger.domain.status import PaymentStatusService
from feeledger.domain.summary import SummaryService

PRINCIPAL = "treasurer"


@pytest.fixture
def settings():
    """Settings used by the services under test."""
    return LedgerSettings(busy_timeout=30.0, conflict_retries=3, number_attempts=5)


@pytest.fixture
def temp_db(settings):
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path, settings=settings)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def audit_recorder(temp_db):
    """Create an AuditRecorder with a temporary database."""
    return AuditRecorder(temp_db)


@pytest.fixture
def category_registry(temp_db):
    """Create a CategoryRegistry with a temporary database."""
    return CategoryRegistry(temp_db)


@pytest.fixture
def membership_service(temp_db, audit_recorder):
    """Create a MembershipService with a temporary database."""
    return MembershipService(temp_db, audit_recorder)


@pytest.fixture
def propagator(temp_db, audit_recorder):
    """Create a StatusPropagator with a temporary database."""
    return StatusPropagator(temp_db, audit_recorder)


@pytest.fixture
def recorder(temp_db, audit_recorder, propagator, settings):
    """Create a TransactionRecorder with a temporary database."""
    return TransactionRecorder(temp_db, audit=audit_recorder, propagator=propagator, settings=settings)


@pytest.fixture
def attachment_linker(temp_db, audit_recorder):
    """Create an AttachmentLinker with a temporary database."""
    return AttachmentLinker(temp_db, audit_recorder)


@pytest.fixture
def status_service(temp_db):
    """Create a PaymentStatusService with a temporary database."""
    return PaymentStatusService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def sample_categories(category_registry):
    """Install the default categories and return them keyed by short name."""
    category_registry.install_defaults()
    return {
        "pta": category_registry.get_by_name(CategoryKind.INCOME, "PTA Contribution Fee"),
        "spg": category_registry.get_by_name(CategoryKind.INCOME, "SPG Fee"),
        "field_trip": category_registry.get_by_name(CategoryKind.INCOME, "Field Trip"),
        "utilities": category_registry.get_by_name(CategoryKind.EXPENSE, "Utilities"),
        "maintenance": category_registry.get_by_name(CategoryKind.EXPENSE, "Maintenance"),
    }


@pytest.fixture
def cruz_household(membership_service):
    """Create the Cruz household."""
    return membership_service.register_household(
        first_name="Maria", last_name="Cruz", principal=PRINCIPAL, email="maria.cruz@example.com"
    )


@pytest.fixture
def cruz_members(membership_service, cruz_household):
    """Enroll two members in the Cruz household."""
    return [
        membership_service.enroll_member(
            household_id=cruz_household.id,
            member_code="STU-2024-0001",
            first_name="Juan",
            last_name="Cruz",
            principal=PRINCIPAL,
        ),
        membership_service.enroll_member(
            household_id=cruz_household.id,
            member_code="STU-2024-0002",
            first_name="Ana",
            last_name="Cruz",
            principal=PRINCIPAL,
        ),
    ]


@pytest.fixture
def payment_time():
    """A fixed payment timestamp inside school year 2024-2025."""
    return datetime(2024, 7, 15, 9, 30, tzinfo=UTC)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
