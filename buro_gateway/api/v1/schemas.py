"""Pydantic schemas for API responses"""

from pydantic import BaseModel, ConfigDict, field_serializer
from datetime import date
from decimal import Decimal
from typing import List
from buro_gateway.domain.models import ExpenseProduct


def _si_no(value: bool) -> str:
    return "SI" if value else "NO"


class IncomeRecordSchema(BaseModel):
    """Income record as returned by the assessment endpoint"""

    model_config = ConfigDict(from_attributes=True)

    person_id: str
    full_name: str
    institution_name: str
    product_type: str
    average_monthly_balance: Decimal
    account_number: str
    last_updated: date
    created_on: date
    version: int


class ExpenseRecordSchema(BaseModel):
    """Expense record; delinquency flags rendered as SI/NO"""

    model_config = ConfigDict(from_attributes=True)

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
    version: int

    @field_serializer("delinquent", "delinquent_last_three_months")
    def serialize_flag(self, value: bool) -> str:
        return _si_no(value)


class AssessmentResponse(BaseModel):
    """Response for GET /consulta-por-cedula/{person_id}"""

    full_name: str
    person_id: str
    risk_grade: str
    payment_capacity: Decimal
    matched_source: str
    internal_incomes: List[IncomeRecordSchema]
    internal_expenses: List[ExpenseRecordSchema]
    external_incomes: List[IncomeRecordSchema]
    external_expenses: List[ExpenseRecordSchema]


class SyncResponse(BaseModel):
    """Response for POST /sincronizar-core"""

    message: str
    created: int
    already_present: int
    records_created: int


class ReconciliationResponse(BaseModel):
    """Response for POST /sincronizar-externo"""

    incomes_created: int
    incomes_skipped: int
    expenses_created: int
    expenses_skipped: int


class MockPopulationResponse(BaseModel):
    """Response for POST /mock-externo"""

    requested: int
    person_ids: List[str]
