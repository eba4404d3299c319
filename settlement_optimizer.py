from decimal import Decimal
from typing import Dict, Iterable, List, Mapping
import logging

from models import Settlement, SettlementPlan, Transaction, UserSettlements
from money import TOLERANCE, ZERO, Numeric, money, to_decimal

logger = logging.getLogger(__name__)


def _largest_first(entry):
    participant, amount = entry
    return (-amount, participant)


class SettlementOptimizer:
    @staticmethod
    def calculate_balances(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
        """Calculate net balance for each participant (positive = is owed)"""
        balances = {}

        for transaction in transactions:
            payer = transaction.paid_by

            # Payer is credited the full amount
            balances[payer] = balances.get(payer, ZERO) + to_decimal(transaction.amount)

            # Every participant, payer included, is debited their share
            for share in transaction.shares:
                participant = share.participant
                balances[participant] = balances.get(participant, ZERO) - to_decimal(share.amount)

        return {participant: money(balance) for participant, balance in balances.items()}

    @staticmethod
    def minimize_transactions(balances: Mapping[str, Numeric]) -> List[Settlement]:
        """Match the largest debtor with the largest creditor until one side runs out"""
        debts = []

        creditors = []
        debtors = []

        # Balances within one minor unit of zero are already settled
        for user_id, balance in balances.items():
            rounded = money(balance)
            if rounded < -TOLERANCE:
                debtors.append((user_id, -rounded))
            elif rounded > TOLERANCE:
                creditors.append((user_id, rounded))

        # Ties between equal amounts go to the lower participant ID
        creditors.sort(key=_largest_first)
        debtors.sort(key=_largest_first)

        logger.debug(f"Matching {len(debtors)} debtors against {len(creditors)} creditors")

        i = j = 0
        while i < len(creditors) and j < len(debtors):
            creditor, cred_amt = creditors[i]
            debtor, deb_amt = debtors[j]

            settlement_amt = min(cred_amt, deb_amt)
            rounded_amt = money(settlement_amt)
            if rounded_amt > TOLERANCE:
                debts.append(Settlement(debtor=debtor, creditor=creditor, amount=rounded_amt))

            creditors[i] = (creditor, money(cred_amt - settlement_amt))
            debtors[j] = (debtor, money(deb_amt - settlement_amt))

            if creditors[i][1] < TOLERANCE:
                i += 1
            if debtors[j][1] < TOLERANCE:
                j += 1

        return debts

    @staticmethod
    def optimize_settlements(transactions: Iterable[Transaction]) -> SettlementPlan:
        """Main method to calculate optimal settlements"""
        transactions = list(transactions)
        if not transactions:
            return SettlementPlan(balances={}, settlements=[])

        balances = SettlementOptimizer.calculate_balances(transactions)
        settlements = SettlementOptimizer.minimize_transactions(balances)
        logger.debug(
            f"Settled {len(balances)} participants across {len(transactions)} transactions "
            f"with {len(settlements)} payments"
        )

        return SettlementPlan(balances=balances, settlements=settlements)

    @staticmethod
    def user_settlements(transactions: Iterable[Transaction], user_id: str) -> UserSettlements:
        """Filter the full plan down to one participant's payments"""
        plan = SettlementOptimizer.optimize_settlements(transactions)

        return UserSettlements(
            net_balance=money(plan.balances.get(user_id, ZERO)),
            owes=[s for s in plan.settlements if s.debtor == user_id],
            owed_by=[s for s in plan.settlements if s.creditor == user_id],
        )
