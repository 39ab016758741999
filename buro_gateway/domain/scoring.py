"""Risk classifier - core business logic for risk grades and payment capacity"""

from decimal import Decimal
from typing import Iterable, Sequence
from buro_gateway.domain.models import (
    ExpenseRecord,
    IncomeRecord,
    RiskClassification,
    RiskFactors,
    RiskGrade,
)
from buro_gateway.utils.money import to_money

PAYMENT_CAPACITY_RATIO = Decimal("0.3")


def analyze_records(
    incomes: Sequence[IncomeRecord],
    expenses: Sequence[ExpenseRecord],
) -> RiskFactors:
    """
    Aggregate a person's records into the metrics the rule table reads.

    All sums are order independent; an empty expense list means no debt.
    """
    total_income = sum((r.average_monthly_balance for r in incomes), Decimal("0"))
    total_outstanding = sum((e.outstanding_balance for e in expenses), Decimal("0"))
    total_installments = sum((e.installment_amount for e in expenses), Decimal("0"))
    max_months = max((e.months_remaining for e in expenses), default=0)

    return RiskFactors(
        total_income=total_income,
        total_outstanding=total_outstanding,
        total_installments=total_installments,
        max_months_remaining=max_months,
        has_delinquency=any(e.delinquent for e in expenses),
        has_recent_delinquency=any(e.delinquent_last_three_months for e in expenses),
        income_count=len(incomes),
        expense_count=len(expenses),
    )


def grade_by_income(total_income: Decimal) -> RiskGrade:
    """
    Income tiers for debt-free profiles.

    Tiers: >2000 A+, [1000, 2000] A-, [400, 1000) B, (0, 400) C, 0 C-
    """
    if total_income > 2000:
        return RiskGrade.A_PLUS
    elif total_income >= 1000:
        return RiskGrade.A_MINUS
    elif total_income >= 400:
        return RiskGrade.B
    elif total_income > 0:
        return RiskGrade.C
    else:
        return RiskGrade.C_MINUS


def determine_grade(factors: RiskFactors) -> RiskGrade:
    """
    Map risk factors to a letter grade. Rules are evaluated top to bottom and
    the first match wins.

    Debt ratio bands for current borrowers (outstanding / income):
    - (0, 0.25):   B+
    - [0.25, 0.5): B-
    - [0.5, 1):    C+
    - [1, ...):    C-

    Delinquent borrowers with active debt land in D, E is reserved for
    recent delinquency with debt above income. Anything else falls back to C-.
    """
    income = factors.total_income
    outstanding = factors.total_outstanding
    installments = factors.total_installments
    months = factors.max_months_remaining

    if not factors.has_delinquency:
        if outstanding == 0:
            # Clean profile (no installments, no pending months) and debt-free
            # profiles share the same tiers
            return grade_by_income(income)
        if outstanding < income * Decimal("0.25"):
            return RiskGrade.B_PLUS
        if outstanding < income * Decimal("0.5"):
            return RiskGrade.B_MINUS
        if outstanding < income:
            return RiskGrade.C_PLUS
        return RiskGrade.C_MINUS

    if months > 0:
        if installments <= income:
            return RiskGrade.D_PLUS
        return RiskGrade.D_MINUS

    if factors.has_recent_delinquency:
        if outstanding > income:
            return RiskGrade.E_PLUS
        if outstanding > income * 2 and months > 24:
            return RiskGrade.E_MINUS

    return RiskGrade.C_MINUS


def calculate_payment_capacity(factors: RiskFactors) -> Decimal:
    """30% of income net of current installments, never negative"""
    disposable = max(Decimal("0"), factors.total_income - factors.total_installments)
    return to_money(disposable * PAYMENT_CAPACITY_RATIO)


def classify(
    incomes: Iterable[IncomeRecord],
    expenses: Iterable[ExpenseRecord],
) -> RiskClassification:
    """
    Main entry point: aggregate records, grade them and compute capacity.

    Returns complete RiskClassification with grade, capacity, and factors.
    """
    risk_factors = analyze_records(list(incomes), list(expenses))

    return RiskClassification(
        grade=determine_grade(risk_factors),
        payment_capacity=calculate_payment_capacity(risk_factors),
        risk_factors=risk_factors,
    )
