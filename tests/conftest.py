"""Shared pytest fixtures for pointledger tests."""

import tempfile
import os
import pytest

from pointledger.database.factories import create_sqlite_database
from pointledger.domain.category import CategoryService
from pointledger.domain.debts import DebtService
from pointledger.domain.engine import PointsEngine
from pointledger.domain.ledger import LedgerService
from pointledger.domain.mandatory import MandatorySettlementService
from pointledger.domain.reconciliation import ReconciliationService
from pointledger.domain.settlement import SettlementService

ACCOUNT = "student-1"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def reconciliation(temp_db):
    """Reconciliation over ledger sources only."""
    return ReconciliationService(temp_db, alternate_sources=False)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def debt_service(temp_db, reconciliation):
    """Create a DebtService with a temporary database."""
    return DebtService(temp_db, reconciliation)


@pytest.fixture
def settlement_service(temp_db, reconciliation):
    """Create a SettlementService with a temporary database."""
    return SettlementService(temp_db, reconciliation)


@pytest.fixture
def mandatory_service(temp_db, reconciliation):
    """Create a MandatorySettlementService with a temporary database."""
    return MandatorySettlementService(temp_db, reconciliation)


@pytest.fixture
def engine(temp_db):
    """Create a PointsEngine with a temporary database."""
    return PointsEngine(temp_db, alternate_sources=False)


@pytest.fixture
def default_engine(temp_db, monkeypatch):
    """PointsEngine with the strategy list shipped by default."""
    monkeypatch.delenv("POINTLEDGER_ALTERNATE_SOURCES", raising=False)
    return PointsEngine(temp_db)


@pytest.fixture
def optional_category(category_service):
    """An optional category; its entries may be paid partially."""
    category_id = category_service.create_category(name="Behaviour", is_mandatory=False)
    return category_service.get_category(category_id)


@pytest.fixture
def mandatory_category(category_service):
    """A mandatory category."""
    category_id = category_service.create_category(name="Homework", is_mandatory=True)
    return category_service.get_category(category_id)


@pytest.fixture
def funded_account(ledger_service):
    """Account with 100 points credited."""
    ledger_service.credit(ACCOUNT, 100, "Initial points")
    return ACCOUNT


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
