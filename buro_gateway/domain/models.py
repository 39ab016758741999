"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


class RecordSource(str, Enum):
    """Where a record originated: this institution or the external bureau mirror"""

    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"


class ExpenseProduct(str, Enum):
    """Debt products tracked as expenses"""

    LOAN = "LOAN"
    CREDIT_CARD = "CREDIT_CARD"


class RiskGrade(str, Enum):
    """Letter grades, best to worst"""

    A_PLUS = "A+"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D_MINUS = "D-"
    E_PLUS = "E+"
    E_MINUS = "E-"


SAVINGS_ACCOUNT = "SAVINGS_ACCOUNT"


@dataclass
class IncomeRecord:
    """Average monthly balance held in a deposit product"""

    person_id: str
    full_name: str
    institution_name: str
    product_type: str
    average_monthly_balance: Decimal
    account_number: str
    last_updated: date
    created_on: date
    source: RecordSource = RecordSource.INTERNAL
    id: Optional[uuid.UUID] = None
    version: Optional[int] = None

    def copy_to(self, source: RecordSource) -> "IncomeRecord":
        """Detached copy tagged with another source, ready to insert"""
        return replace(self, source=source, id=None, version=None)


@dataclass
class ExpenseRecord:
    """Outstanding debt with its monthly installment and delinquency flags"""

    person_id: str
    full_name: str
    institution_name: str
    product_type: ExpenseProduct
    outstanding_balance: Decimal
    months_remaining: int
    installment_amount: Decimal
    delinquent: bool
    delinquent_last_three_months: bool
    last_updated: date
    created_on: date
    source: RecordSource = RecordSource.INTERNAL
    id: Optional[uuid.UUID] = None
    version: Optional[int] = None

    @property
    def dedup_key(self) -> Tuple[str, ExpenseProduct, Decimal, int, Decimal]:
        """Identity used to decide whether an expense was already mirrored"""
        return (
            self.person_id,
            self.product_type,
            self.outstanding_balance,
            self.months_remaining,
            self.installment_amount,
        )

    def copy_to(self, source: RecordSource) -> "ExpenseRecord":
        """Detached copy tagged with another source, ready to insert"""
        return replace(self, source=source, id=None, version=None)


@dataclass
class PersonProfile:
    """Person as listed by the upstream core directory"""

    person_id: str
    full_name: str
    entity_type: str


@dataclass(frozen=True)
class SourceProbe:
    """One step of the query fallback order"""

    source: RecordSource
    institution: Optional[str] = None

    @classmethod
    def parse(cls, value: str) -> "SourceProbe":
        """
        Parse "internal", "external" or "external:BANCO PICHINCHA".

        Raises:
            ValueError: On unknown source names
        """
        name, _, institution = value.partition(":")
        source = RecordSource(name.strip().upper())
        return cls(source=source, institution=institution.strip() or None)

    def describe(self) -> str:
        if self.institution:
            return f"{self.source.value.lower()}:{self.institution}"
        return self.source.value.lower()


@dataclass
class RiskFactors:
    """Aggregates extracted from a person's records"""

    total_income: Decimal
    total_outstanding: Decimal
    total_installments: Decimal
    max_months_remaining: int
    has_delinquency: bool
    has_recent_delinquency: bool
    income_count: int
    expense_count: int


@dataclass
class RiskClassification:
    """Output of the risk classifier"""

    grade: RiskGrade
    payment_capacity: Decimal
    risk_factors: RiskFactors


@dataclass
class RiskAssessment:
    """Classification plus the records it was computed from"""

    full_name: str
    person_id: str
    risk_grade: RiskGrade
    payment_capacity: Decimal
    matched_source: str
    internal_incomes: List[IncomeRecord] = field(default_factory=list)
    internal_expenses: List[ExpenseRecord] = field(default_factory=list)
    external_incomes: List[IncomeRecord] = field(default_factory=list)
    external_expenses: List[ExpenseRecord] = field(default_factory=list)


@dataclass
class SyncResult:
    """Outcome of a bulk synchronization from the core directory"""

    created: int = 0
    already_present: int = 0
    records_created: int = 0


@dataclass
class ReconciliationResult:
    """Outcome of mirroring internal records into the external store"""

    incomes_created: int = 0
    incomes_skipped: int = 0
    expenses_created: int = 0
    expenses_skipped: int = 0
