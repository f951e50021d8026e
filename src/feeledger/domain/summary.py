"""Financial and payment status reports."""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.entities import (
    BudgetUsage,
    CategoryKind,
    FinancialSummary,
    FinancialSummaryRow,
    GroupPaymentStatus,
)

ZERO = Decimal("0.00")


class SummaryService:
    """Service for building report models."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def financial_summary(self, school_year: Optional[str] = None) -> FinancialSummary:
        """Total income and expenses per school year and category.

        Args:
            school_year: Optional school year filter

        Returns:
            FinancialSummary with rows ordered by school year, kind
            (income first) and category name
        """
        with self.db.atomic():
            names = {c.id: c.name for c in self.db.list_categories(include_inactive=True)}
            income = self.db.list_income_transactions(school_year=school_year)
            expenses = self.db.list_expense_transactions(school_year=school_year)

        counts: dict[tuple[str, CategoryKind, int], int] = defaultdict(int)
        totals: dict[tuple[str, CategoryKind, int], Decimal] = defaultdict(lambda: ZERO)
        for transaction in [*income, *expenses]:
            key = (transaction.school_year, transaction.kind, transaction.category_id)
            counts[key] += 1
            totals[key] += transaction.amount

        kind_order = {CategoryKind.INCOME: 0, CategoryKind.EXPENSE: 1}
        rows = sorted(
            (
                FinancialSummaryRow(
                    school_year=year,
                    kind=kind,
                    category_id=category_id,
                    category_name=names.get(category_id, f"#{category_id}"),
                    count=counts[(year, kind, category_id)],
                    total=totals[(year, kind, category_id)],
                )
                for year, kind, category_id in counts
            ),
            key=lambda row: (row.school_year, kind_order[row.kind], row.category_name),
        )
        total_income = sum((t.amount for t in income), ZERO)
        total_expenses = sum((t.amount for t in expenses), ZERO)
        return FinancialSummary(
            school_year=school_year,
            rows=tuple(rows),
            total_income=total_income,
            total_expenses=total_expenses,
        )

    def payment_status_summary(self, school_year: Optional[str] = None) -> list[GroupPaymentStatus]:
        """Paid and unpaid member counts per group.

        Members without a group are reported under "Unassigned" when no
        school year filter is given.
        """
        with self.db.atomic():
            groups = self.db.list_groups(school_year=school_year)
            members = self.db.list_members()

        by_group: dict[Optional[int], list] = defaultdict(list)
        for member in members:
            by_group[member.group_id].append(member)

        rows = []
        for group in groups:
            group_members = by_group.get(group.id, [])
            rows.append(
                GroupPaymentStatus(
                    group_id=group.id,
                    group_name=group.name,
                    total_members=len(group_members),
                    paid_members=sum(1 for m in group_members if m.paid),
                )
            )
        unassigned = by_group.get(None, [])
        if school_year is None and unassigned:
            rows.append(
                GroupPaymentStatus(
                    group_id=None,
                    group_name="Unassigned",
                    total_members=len(unassigned),
                    paid_members=sum(1 for m in unassigned if m.paid),
                )
            )
        return rows

    def budget_usage(self, school_year: str) -> list[BudgetUsage]:
        """Spending of every active expense category against its ceiling."""
        with self.db.atomic():
            return [
                BudgetUsage(
                    category_id=category.id,
                    category_name=category.name,
                    school_year=school_year,
                    spent=self.db.total_expenses(category.id, school_year),
                    budget_ceiling=category.budget_ceiling,
                )
                for category in self.db.list_categories(kind=CategoryKind.EXPENSE)
            ]
