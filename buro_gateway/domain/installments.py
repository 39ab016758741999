"""Installment estimation for synthetic debt products"""

import random
from decimal import Decimal
from buro_gateway.domain.models import ExpenseProduct
from buro_gateway.utils.money import ZERO, to_money

# Share of the outstanding balance billed each month on a card
CARD_MIN_PAYMENT_RATE = (Decimal("0.03"), Decimal("0.10"))

# Share of the theoretical straight-line payment actually charged on a loan
LOAN_PAYMENT_RATE = (Decimal("0.70"), Decimal("1.00"))


def straight_line_installment(outstanding_balance: Decimal, months_remaining: int) -> Decimal:
    """
    Equal monthly payment that clears the balance with no interest.

    Example:
        1200.00 over 12 months → 100.00
        1000.00 over 3 months  → 333.33
    """
    if months_remaining <= 0 or outstanding_balance <= 0:
        return ZERO
    return to_money(outstanding_balance / months_remaining)


def _draw_rate(rng: random.Random, band: tuple[Decimal, Decimal]) -> Decimal:
    low, high = band
    return Decimal(str(round(rng.uniform(float(low), float(high)), 4)))


def estimate_installment(
    product: ExpenseProduct,
    outstanding_balance: Decimal,
    months_remaining: int,
    rng: random.Random,
) -> Decimal:
    """
    Installment as a percentage band of the balance.

    - Credit card: 3% to 10% of the outstanding balance
    - Loan: 70% to 100% of the straight-line installment
    """
    if months_remaining <= 0 or outstanding_balance <= 0:
        return ZERO

    if product == ExpenseProduct.CREDIT_CARD:
        return to_money(outstanding_balance * _draw_rate(rng, CARD_MIN_PAYMENT_RATE))

    base = straight_line_installment(outstanding_balance, months_remaining)
    return to_money(base * _draw_rate(rng, LOAN_PAYMENT_RATE))
