"""Mirroring of internal records into the external bureau store"""

import logging
from sqlalchemy.orm import Session
from buro_gateway.domain.models import ReconciliationResult, RecordSource
from buro_gateway.infrastructure.database.repositories import RecordRepository
from buro_gateway.infrastructure.locks import PersonLockRegistry, person_locks
from buro_gateway.infrastructure.observability.metrics import record_created
from buro_gateway.services.unit_of_work import unit_of_work


class ReconciliationService:
    """Copies internal incomes and expenses to the external store"""

    def __init__(self, db: Session, locks: PersonLockRegistry = person_locks):
        self.db = db
        self.locks = locks

    def sync_internal_to_external(self) -> ReconciliationResult:
        """
        Mirror internal records in a single transaction.

        - Income: copied only while the person has no external income, so at
          most the first internal income per person is mirrored
        - Expense: copied unless an external expense with the same
          (person, product, balance, months, installment) exists

        Two genuinely identical debts collapse into one external copy.
        """
        repo = RecordRepository(self.db)
        result = ReconciliationResult()

        incomes = repo.find_all_incomes(RecordSource.INTERNAL)
        expenses = repo.find_all_expenses(RecordSource.INTERNAL)
        person_ids = {r.person_id for r in incomes} | {r.person_id for r in expenses}

        with self.locks.hold_many(person_ids), unit_of_work(self.db, "reconcile"):
            for income in incomes:
                if repo.has_incomes(income.person_id, RecordSource.EXTERNAL):
                    result.incomes_skipped += 1
                    continue
                repo.save_incomes([income.copy_to(RecordSource.EXTERNAL)])
                result.incomes_created += 1

            for expense in expenses:
                if repo.expense_exists(RecordSource.EXTERNAL, expense.dedup_key):
                    result.expenses_skipped += 1
                    continue
                repo.save_expenses([expense.copy_to(RecordSource.EXTERNAL)])
                result.expenses_created += 1

        record_created("income", RecordSource.EXTERNAL.value, result.incomes_created)
        record_created("expense", RecordSource.EXTERNAL.value, result.expenses_created)
        logging.info(
            "Reconciliation completed",
            extra={
                "incomes_created": result.incomes_created,
                "incomes_skipped": result.incomes_skipped,
                "expenses_created": result.expenses_created,
                "expenses_skipped": result.expenses_skipped,
            },
        )
        return result
