"""Derive totals and category breakdowns from summaries or transaction lists."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from finsync.models import CategoryTotal, Summary, Transaction, ZERO

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class CategoryShare:
    """A category total with its share of all expenses, in whole percent."""
    category: str
    amount: Decimal
    count: int
    percentage: int


@dataclass(frozen=True)
class Aggregate:
    """Totals for a set of transactions."""
    income: Decimal
    expenses: Decimal
    balance: Decimal
    categories: tuple[CategoryShare, ...]
    expense_ratio: int
    savings_rate: int

    def share(self, category: str) -> CategoryShare | None:
        return next((item for item in self.categories if item.category == category), None)


def percentage(part: Decimal, total: Decimal) -> int:
    """``round(part / total * 100)``, or 0 when ``total`` is zero."""
    if not total:
        return 0
    value = abs(part) / abs(total) * HUNDRED
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _build(income: Decimal, expenses: Decimal, categories: Iterable[CategoryTotal]) -> Aggregate:
    income = abs(income)
    expenses = abs(expenses)
    balance = income - expenses
    return Aggregate(
        income=income,
        expenses=expenses,
        balance=balance,
        categories=tuple(
            CategoryShare(
                category=item.category,
                amount=abs(item.amount),
                count=item.count,
                percentage=percentage(item.amount, expenses),
            )
            for item in categories
        ),
        expense_ratio=percentage(expenses, income),
        savings_rate=percentage(balance, income) if balance >= ZERO else 0,
    )


def aggregate_summary(summary: Summary) -> Aggregate:
    """Aggregate a server computed summary.

    ``balance`` is recomputed from income and expenses rather than trusted.
    """
    return _build(summary.income, summary.expenses, summary.categories)


def aggregate_transactions(transactions: Iterable[Transaction]) -> Aggregate:
    """Aggregate a locally held transaction list; categories cover expenses only."""
    income = ZERO
    expenses = ZERO
    by_category: OrderedDict[str, list] = OrderedDict()
    for transaction in transactions:
        amount = abs(transaction.amount)
        if transaction.type == "income":
            income += amount
        elif transaction.type == "expense":
            expenses += amount
            totals = by_category.setdefault(transaction.category, [ZERO, 0])
            totals[0] += amount
            totals[1] += 1
    categories = [
        CategoryTotal(category=name, amount=amount, count=count)
        for name, (amount, count) in by_category.items()
    ]
    return _build(income, expenses, categories)


def summarize(transactions: Iterable[Transaction]) -> Summary:
    """Build a :class:`Summary` from transactions, e.g. to render offline."""
    result = aggregate_transactions(transactions)
    return Summary(
        income=result.income,
        expenses=result.expenses,
        balance=result.balance,
        categories=tuple(
            CategoryTotal(category=item.category, amount=item.amount, count=item.count)
            for item in result.categories
        ),
    )
