from datetime import datetime
from typing import Dict, List, Optional, Union
import logging

from exceptions import ExpenseNotFound, InvalidExpense
from models import (
    ExpenseCreate,
    ExpenseRecord,
    ExpenseUpdate,
    SettlementPlan,
    SplitType,
    Transaction,
    UserSettlements,
)
from settlement_optimizer import SettlementOptimizer
from split_calculator import SplitCalculator

logger = logging.getLogger(__name__)

RECALCULATION_FIELDS = {"amount", "participants", "split_type", "percentage_splits", "shares"}


def _normalize_date(value: Optional[datetime]) -> Optional[datetime]:
    """Store every date as naive local time so they stay comparable"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def _resolve_split_type(requested, fallback, percentage_splits, exact_shares) -> SplitType:
    """Pick the split type from the request, inferring it from the split details when omitted"""
    if percentage_splits and exact_shares:
        raise InvalidExpense("Provide either percentage splits or exact shares, not both")

    if percentage_splits:
        inferred = SplitType.PERCENTAGE
    elif exact_shares:
        inferred = SplitType.EXACT
    else:
        inferred = None

    if requested is None:
        return inferred or fallback
    if inferred is not None and inferred != requested:
        raise InvalidExpense(f'Split details do not match split type "{SplitType(requested).value}"')
    return SplitType(requested)


class ExpenseLedger:
    """
    In-memory expense book that feeds the settlement engine.

    Deleted expenses are kept but flagged, and stop contributing to
    balances. Balances are recomputed from the live expenses on every call.
    """

    def __init__(self):
        self._expenses: Dict[str, ExpenseRecord] = {}

    def create_expense(self, expense: ExpenseCreate) -> ExpenseRecord:
        """Create a new expense with computed shares"""
        split_type = _resolve_split_type(
            expense.split_type if "split_type" in expense.model_fields_set else None,
            SplitType.EQUAL,
            expense.percentage_splits,
            expense.shares,
        )
        shares = self._compute_shares(
            paid_by=expense.paid_by,
            amount=expense.amount,
            participants=expense.participants,
            split_type=split_type,
            percentage_splits=expense.percentage_splits,
            exact_shares=expense.shares,
        )

        now = datetime.now()
        expense_id = str(len(self._expenses) + 1)
        record = ExpenseRecord(
            id=expense_id,
            description=expense.description,
            amount=expense.amount,
            paid_by=expense.paid_by,
            participants=expense.participants,
            split_type=split_type,
            shares=shares,
            date=_normalize_date(expense.date) or now,
            created_at=now,
            updated_at=now,
        )
        self._expenses[expense_id] = record

        logger.info(f"Created expense {expense_id}: {record.amount} paid by {record.paid_by}")
        return record

    def get_expense(self, expense_id: str) -> ExpenseRecord:
        record = self._expenses.get(expense_id)
        if record is None or record.is_deleted:
            raise ExpenseNotFound(expense_id)
        return record

    def list_expenses(
        self,
        user_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[ExpenseRecord]:
        """List live expenses, newest first, optionally filtered by user and date range"""
        start_date = _normalize_date(start_date)
        end_date = _normalize_date(end_date)

        expenses = []
        for record in self._live_expenses():
            if user_id and not self._involves(record, user_id):
                continue
            if start_date and record.date < start_date:
                continue
            if end_date and record.date > end_date:
                continue
            expenses.append(record)

        return sorted(expenses, key=lambda x: x.date, reverse=True)

    def update_expense(self, expense_id: str, update: ExpenseUpdate) -> ExpenseRecord:
        """Update an expense, recomputing shares when the split inputs change"""
        record = self.get_expense(expense_id)
        changes = update.model_dump(exclude_unset=True)

        patch = {"updated_at": datetime.now()}
        if "description" in changes and update.description is not None:
            patch["description"] = update.description
        if "date" in changes and update.date is not None:
            patch["date"] = _normalize_date(update.date)

        if changes.keys() & RECALCULATION_FIELDS:
            amount = update.amount if update.amount is not None else record.amount
            participants = update.participants if update.participants is not None else record.participants
            split_type = _resolve_split_type(
                update.split_type, record.split_type, update.percentage_splits, update.shares
            )

            patch["shares"] = self._compute_shares(
                paid_by=record.paid_by,
                amount=amount,
                participants=participants,
                split_type=split_type,
                percentage_splits=update.percentage_splits,
                exact_shares=update.shares,
            )
            patch["amount"] = amount
            patch["participants"] = participants
            patch["split_type"] = split_type

        record = record.model_copy(update=patch)
        self._expenses[expense_id] = record
        return record

    def delete_expense(self, expense_id: str) -> Dict[str, str]:
        """Soft delete an expense"""
        record = self.get_expense(expense_id)
        self._expenses[expense_id] = record.model_copy(
            update={"is_deleted": True, "updated_at": datetime.now()}
        )

        logger.info(f"Deleted expense {expense_id}")
        return {"message": "Expense deleted successfully"}

    def transactions(self) -> List[Transaction]:
        return [record.to_transaction() for record in self._live_expenses()]

    def get_balances(self, user_id: Optional[str] = None) -> Union[SettlementPlan, UserSettlements]:
        """Settlement plan for everyone, or one user's slice of that same plan"""
        transactions = self.transactions()

        if user_id:
            return SettlementOptimizer.user_settlements(transactions, user_id)
        return SettlementOptimizer.optimize_settlements(transactions)

    def _live_expenses(self):
        return (record for record in self._expenses.values() if not record.is_deleted)

    @staticmethod
    def _involves(record: ExpenseRecord, user_id: str) -> bool:
        return record.paid_by == user_id or user_id in record.participants

    @staticmethod
    def _compute_shares(paid_by, amount, participants, split_type, percentage_splits, exact_shares):
        if paid_by not in participants:
            raise InvalidExpense("Payer must be included in participants")

        shares = SplitCalculator.calculate_shares(
            split_type,
            amount,
            participants=participants,
            percentage_splits=percentage_splits,
            exact_shares=exact_shares,
        )

        if split_type != SplitType.EQUAL:
            share_users = {share.participant for share in shares}
            if not share_users.issubset(participants):
                raise InvalidExpense("All users in split details must be participants")
            if not share_users.issuperset(participants):
                raise InvalidExpense("All participants must have split details")

        return shares
