"""Synthetic income/expense records for persons without real data"""

import random
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from faker import Faker
from buro_gateway.domain.installments import estimate_installment
from buro_gateway.domain.models import (
    SAVINGS_ACCOUNT,
    ExpenseProduct,
    ExpenseRecord,
    IncomeRecord,
    PersonProfile,
    RecordSource,
)
from buro_gateway.utils.date_utils import random_past_date
from buro_gateway.utils.money import ZERO, to_money

INCOME_BALANCE_RANGE = (200, 3000)
REGISTRATION_AGE_DAYS = (14, 200)

# Probability that a generated product carries an active debt
ACTIVE_DEBT_PROBABILITY = 0.7

MONTHS_RANGE = {
    ExpenseProduct.CREDIT_CARD: (1, 36),
    ExpenseProduct.LOAN: (12, 48),
}
BALANCE_RANGE = {
    ExpenseProduct.CREDIT_CARD: (100, 3000),
    ExpenseProduct.LOAN: (1000, 15000),
}
# Flat installment ranges used for internal records
INSTALLMENT_RANGE = {
    ExpenseProduct.CREDIT_CARD: (20, 300),
    ExpenseProduct.LOAN: (80, 600),
}

PRODUCT_MIXES = (
    (ExpenseProduct.CREDIT_CARD,),
    (ExpenseProduct.LOAN,),
    (ExpenseProduct.CREDIT_CARD, ExpenseProduct.LOAN),
)

ACCOUNT_PREFIX = {
    RecordSource.INTERNAL: "100",
    RecordSource.EXTERNAL: "200",
}


class SyntheticRecordGenerator:
    """
    Builds believable records from an injected random source.

    Policy:
    - One savings income per person per institution
    - Card only, loan only or both, chosen uniformly, card generated first
    - Installments accumulate per person and never exceed total income;
      an installment that would is dropped along with its debt
    - Delinquency only on active debt
    """

    def __init__(
        self,
        rng: random.Random,
        today: Optional[date] = None,
        delinquency_rate: float = 0.25,
    ):
        self.rng = rng
        self.today = today or date.today()
        self.delinquency_rate = delinquency_rate

    def income(
        self,
        profile: PersonProfile,
        institution: str,
        source: RecordSource = RecordSource.INTERNAL,
    ) -> IncomeRecord:
        """Single savings account income"""
        return IncomeRecord(
            person_id=profile.person_id,
            full_name=profile.full_name,
            institution_name=institution,
            product_type=SAVINGS_ACCOUNT,
            average_monthly_balance=to_money(self.rng.randint(*INCOME_BALANCE_RANGE)),
            account_number=f"{ACCOUNT_PREFIX[source]}{self.rng.randint(0, 9_999_999):07d}",
            last_updated=self.today,
            created_on=random_past_date(self.rng, self.today, *REGISTRATION_AGE_DAYS),
            source=source,
        )

    def expenses(
        self,
        profile: PersonProfile,
        institution: str,
        total_income: Decimal,
        committed: Decimal = ZERO,
        source: RecordSource = RecordSource.INTERNAL,
    ) -> List[ExpenseRecord]:
        """
        At most one card and one loan at the institution.

        Args:
            total_income: Income the installments are checked against
            committed: Installments already generated for this person
        """
        records = []
        running = committed
        for product in self.rng.choice(PRODUCT_MIXES):
            record = self._expense(profile, institution, product, source)
            if running + record.installment_amount > total_income:
                self._clear_debt(record)
            running += record.installment_amount
            records.append(record)
        return records

    def external_records(
        self,
        profile: PersonProfile,
        institutions: Sequence[str],
    ) -> Tuple[List[IncomeRecord], List[ExpenseRecord]]:
        """Spread the person over 2-3 distinct institutions, each with its own set"""
        count = min(len(institutions), self.rng.randint(2, 3))
        chosen = self.rng.sample(list(institutions), count)

        incomes = [self.income(profile, name, RecordSource.EXTERNAL) for name in chosen]
        total_income = sum((i.average_monthly_balance for i in incomes), ZERO)

        expenses: List[ExpenseRecord] = []
        for name in chosen:
            committed = sum((e.installment_amount for e in expenses), ZERO)
            expenses.extend(
                self.expenses(profile, name, total_income, committed, RecordSource.EXTERNAL)
            )
        return incomes, expenses

    def person(self, fake: Faker) -> PersonProfile:
        """Fictitious person for the external bureau population"""
        person_id = f"{self.rng.randint(1, 24):02d}{self.rng.randint(0, 99_999_999):08d}"
        return PersonProfile(
            person_id=person_id,
            full_name=fake.name().upper(),
            entity_type="PERSONA",
        )

    def _expense(
        self,
        profile: PersonProfile,
        institution: str,
        product: ExpenseProduct,
        source: RecordSource,
    ) -> ExpenseRecord:
        record = ExpenseRecord(
            person_id=profile.person_id,
            full_name=profile.full_name,
            institution_name=institution,
            product_type=product,
            outstanding_balance=ZERO,
            months_remaining=0,
            installment_amount=ZERO,
            delinquent=False,
            delinquent_last_three_months=False,
            last_updated=self.today,
            created_on=random_past_date(self.rng, self.today, *REGISTRATION_AGE_DAYS),
            source=source,
        )
        if self.rng.random() >= ACTIVE_DEBT_PROBABILITY:
            return record

        record.months_remaining = self.rng.randint(*MONTHS_RANGE[product])
        record.outstanding_balance = to_money(self.rng.randint(*BALANCE_RANGE[product]))
        if source == RecordSource.EXTERNAL:
            record.installment_amount = estimate_installment(
                product, record.outstanding_balance, record.months_remaining, self.rng
            )
        else:
            record.installment_amount = to_money(self.rng.randint(*INSTALLMENT_RANGE[product]))

        record.delinquent = self.rng.random() < self.delinquency_rate
        record.delinquent_last_three_months = (
            record.delinquent or self.rng.random() < self.delinquency_rate / 2
        )
        return record

    @staticmethod
    def _clear_debt(record: ExpenseRecord) -> None:
        record.months_remaining = 0
        record.outstanding_balance = ZERO
        record.installment_amount = ZERO
        record.delinquent = False
        record.delinquent_last_three_months = False
