"""Data access layer for income and expense records"""

from typing import List, Optional, Sequence, Tuple
from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session
from buro_gateway.infrastructure.database.models import IncomeRecordRow, ExpenseRecordRow
from buro_gateway.domain.models import (
    ExpenseProduct,
    ExpenseRecord,
    IncomeRecord,
    RecordSource,
)


def _income_from_row(row: IncomeRecordRow) -> IncomeRecord:
    return IncomeRecord(
        person_id=row.person_id,
        full_name=row.full_name,
        institution_name=row.institution_name,
        product_type=row.product_type,
        average_monthly_balance=Decimal(row.average_monthly_balance),
        account_number=row.account_number,
        last_updated=row.last_updated,
        created_on=row.created_on,
        source=RecordSource(row.source),
        id=row.id,
        version=row.version,
    )


def _expense_from_row(row: ExpenseRecordRow) -> ExpenseRecord:
    return ExpenseRecord(
        person_id=row.person_id,
        full_name=row.full_name,
        institution_name=row.institution_name,
        product_type=ExpenseProduct(row.product_type),
        outstanding_balance=Decimal(row.outstanding_balance),
        months_remaining=row.months_remaining,
        installment_amount=Decimal(row.installment_amount),
        delinquent=row.delinquent,
        delinquent_last_three_months=row.delinquent_last_three_months,
        last_updated=row.last_updated,
        created_on=row.created_on,
        source=RecordSource(row.source),
        id=row.id,
        version=row.version,
    )


class RecordRepository:
    """
    Repository for the four record collections (income/expense x internal/external).

    No uniqueness is enforced here; callers check before inserting.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_incomes(
        self,
        person_id: str,
        source: RecordSource,
        institution: Optional[str] = None,
    ) -> List[IncomeRecord]:
        """Incomes of a person in one source, optionally at one institution"""
        query = self.db.query(IncomeRecordRow).filter(
            IncomeRecordRow.source == source.value,
            IncomeRecordRow.person_id == person_id,
        )
        if institution:
            query = query.filter(func.lower(IncomeRecordRow.institution_name) == institution.lower())
        return [_income_from_row(row) for row in query.order_by(IncomeRecordRow.created_on).all()]

    def find_expenses(
        self,
        person_id: str,
        source: RecordSource,
        institution: Optional[str] = None,
    ) -> List[ExpenseRecord]:
        """Expenses of a person in one source, optionally at one institution"""
        query = self.db.query(ExpenseRecordRow).filter(
            ExpenseRecordRow.source == source.value,
            ExpenseRecordRow.person_id == person_id,
        )
        if institution:
            query = query.filter(func.lower(ExpenseRecordRow.institution_name) == institution.lower())
        return [_expense_from_row(row) for row in query.order_by(ExpenseRecordRow.created_on).all()]

    def find_all_incomes(self, source: RecordSource) -> List[IncomeRecord]:
        rows = (
            self.db.query(IncomeRecordRow)
            .filter(IncomeRecordRow.source == source.value)
            .order_by(IncomeRecordRow.person_id, IncomeRecordRow.created_on)
            .all()
        )
        return [_income_from_row(row) for row in rows]

    def find_all_expenses(self, source: RecordSource) -> List[ExpenseRecord]:
        rows = (
            self.db.query(ExpenseRecordRow)
            .filter(ExpenseRecordRow.source == source.value)
            .order_by(ExpenseRecordRow.person_id, ExpenseRecordRow.created_on)
            .all()
        )
        return [_expense_from_row(row) for row in rows]

    def has_incomes(self, person_id: str, source: RecordSource) -> bool:
        return (
            self.db.query(IncomeRecordRow.id)
            .filter(IncomeRecordRow.source == source.value, IncomeRecordRow.person_id == person_id)
            .first()
            is not None
        )

    def has_expenses(self, person_id: str, source: RecordSource) -> bool:
        return (
            self.db.query(ExpenseRecordRow.id)
            .filter(ExpenseRecordRow.source == source.value, ExpenseRecordRow.person_id == person_id)
            .first()
            is not None
        )

    def expense_exists(
        self,
        source: RecordSource,
        key: Tuple[str, ExpenseProduct, Decimal, int, Decimal],
    ) -> bool:
        """Whether an expense matching the dedup tuple is already stored"""
        person_id, product, outstanding, months, installment = key
        return (
            self.db.query(ExpenseRecordRow.id)
            .filter(
                ExpenseRecordRow.source == source.value,
                ExpenseRecordRow.person_id == person_id,
                ExpenseRecordRow.product_type == product.value,
                ExpenseRecordRow.outstanding_balance == outstanding,
                ExpenseRecordRow.months_remaining == months,
                ExpenseRecordRow.installment_amount == installment,
            )
            .first()
            is not None
        )

    def save_incomes(self, records: Sequence[IncomeRecord]) -> List[IncomeRecord]:
        """Insert incomes and return them with ids and versions assigned"""
        rows = [
            IncomeRecordRow(
                source=r.source.value,
                person_id=r.person_id,
                full_name=r.full_name,
                institution_name=r.institution_name,
                product_type=r.product_type,
                average_monthly_balance=r.average_monthly_balance,
                account_number=r.account_number,
                last_updated=r.last_updated,
                created_on=r.created_on,
            )
            for r in records
        ]
        self.db.add_all(rows)
        self.db.flush()  # Get IDs and versions without committing
        return [_income_from_row(row) for row in rows]

    def save_expenses(self, records: Sequence[ExpenseRecord]) -> List[ExpenseRecord]:
        """Insert expenses and return them with ids and versions assigned"""
        rows = [
            ExpenseRecordRow(
                source=r.source.value,
                person_id=r.person_id,
                full_name=r.full_name,
                institution_name=r.institution_name,
                product_type=r.product_type.value,
                outstanding_balance=r.outstanding_balance,
                months_remaining=r.months_remaining,
                installment_amount=r.installment_amount,
                delinquent=r.delinquent,
                delinquent_last_three_months=r.delinquent_last_three_months,
                last_updated=r.last_updated,
                created_on=r.created_on,
            )
            for r in records
        ]
        self.db.add_all(rows)
        self.db.flush()
        return [_expense_from_row(row) for row in rows]
