"""Pytest fixtures for testing"""

import random
import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from buro_gateway.api.main import create_app
from buro_gateway.api.dependencies import get_core_client, get_rng
from buro_gateway.infrastructure.database.models import Base
from buro_gateway.infrastructure.database.session import engine_options, get_db
from buro_gateway.domain.exceptions import UpstreamUnavailableError
from buro_gateway.domain.models import (
    SAVINGS_ACCOUNT,
    ExpenseProduct,
    ExpenseRecord,
    IncomeRecord,
    PersonProfile,
    RecordSource,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, **engine_options(TEST_DATABASE_URL))
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2026, 1, 15)


class FakeCoreClient:
    """In-memory stand-in for the core person directory"""

    def __init__(self, persons: List[PersonProfile] | None = None, fail: bool = False):
        self.persons = persons or []
        self.fail = fail
        self.calls = 0

    async def list_by_entity_type(self, entity_type: str) -> List[PersonProfile]:
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailableError("Core directory timeout after 5.0s")
        return [p for p in self.persons if p.entity_type == entity_type]


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def core_persons() -> List[PersonProfile]:
    return [
        PersonProfile("0102030405", "MARIA FERNANDA LOPEZ", "PERSONA"),
        PersonProfile("1712345678", "JUAN CARLOS PEREZ", "PERSONA"),
        PersonProfile("0923456781", "ANA LUCIA TORRES", "PERSONA"),
    ]


@pytest.fixture
def make_core_client() -> Callable[..., FakeCoreClient]:
    """Factory for fake core directories, optionally failing"""
    return FakeCoreClient


@pytest.fixture
def core_client(core_persons: List[PersonProfile]) -> FakeCoreClient:
    return FakeCoreClient(core_persons)


@pytest.fixture
def client(db: Session, core_client: FakeCoreClient) -> TestClient:
    """Create FastAPI test client with test database and fake core directory"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_core_client] = lambda: core_client
    app.dependency_overrides[get_rng] = lambda: random.Random(99)
    return TestClient(app)


@pytest.fixture
def make_income() -> Callable[..., IncomeRecord]:
    """Factory for income records with sensible defaults"""

    def _make(
        balance: str = "1000.00",
        person_id: str = "0102030405",
        source: RecordSource = RecordSource.INTERNAL,
        institution: str = "BANCO BANQUITO",
    ) -> IncomeRecord:
        return IncomeRecord(
            person_id=person_id,
            full_name="MARIA FERNANDA LOPEZ",
            institution_name=institution,
            product_type=SAVINGS_ACCOUNT,
            average_monthly_balance=Decimal(balance),
            account_number="1000000001",
            last_updated=TODAY,
            created_on=date(2025, 10, 1),
            source=source,
        )

    return _make


@pytest.fixture
def make_expense() -> Callable[..., ExpenseRecord]:
    """Factory for expense records with sensible defaults"""

    def _make(
        outstanding: str = "0.00",
        installment: str = "0.00",
        months: int = 0,
        delinquent: bool = False,
        recent: bool = False,
        product: ExpenseProduct = ExpenseProduct.LOAN,
        person_id: str = "0102030405",
        source: RecordSource = RecordSource.INTERNAL,
        institution: str = "BANCO BANQUITO",
    ) -> ExpenseRecord:
        return ExpenseRecord(
            person_id=person_id,
            full_name="MARIA FERNANDA LOPEZ",
            institution_name=institution,
            product_type=product,
            outstanding_balance=Decimal(outstanding),
            months_remaining=months,
            installment_amount=Decimal(installment),
            delinquent=delinquent,
            delinquent_last_three_months=recent,
            last_updated=TODAY,
            created_on=date(2025, 11, 1),
            source=source,
        )

    return _make
