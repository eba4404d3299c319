from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import List, Optional, Sequence
import logging

from exceptions import (
    InvalidAmount,
    InvalidParticipants,
    InvalidSplitType,
    InvalidWeight,
    SplitMismatch,
    WeightSumMismatch,
)
from models import Share, SplitType, WeightedParticipant
from money import ZERO, Numeric, from_minor_units, money, to_decimal, within_tolerance

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


class SplitCalculator:
    @staticmethod
    def equal_split(total: Numeric, participants: Sequence[str]) -> List[Share]:
        """
        Split a total equally, handing leftover cents to the first participants.

        Every occurrence of a participant gets its own share, the shares keep
        the input order, and their sum is exactly the total.
        """
        if not participants:
            raise InvalidParticipants()

        total = to_decimal(total)
        if total <= 0:
            raise InvalidAmount()

        count = len(participants)
        total_cents = total * 100
        base_cents = int((total_cents / count).to_integral_value(rounding=ROUND_FLOOR))
        remainder = int((total_cents - base_cents * count).to_integral_value(rounding=ROUND_HALF_UP))

        shares = []
        for participant in participants:
            cents = base_cents
            # Distribute remainder cents one at a time
            if remainder > 0:
                cents += 1
                remainder -= 1
            shares.append(Share(participant=participant, amount=from_minor_units(cents)))

        return shares

    @staticmethod
    def weighted_split(total: Numeric, weighted_participants: Sequence[WeightedParticipant]) -> List[Share]:
        """
        Split a total by percentage weights.

        The last entry takes whatever the rounded earlier entries left over,
        so the shares always sum to the total.
        """
        if not weighted_participants:
            raise InvalidParticipants("At least one percentage split is required")

        total = to_decimal(total)
        if total <= 0:
            raise InvalidAmount()

        weights = [to_decimal(entry.weight) for entry in weighted_participants]
        for weight in weights:
            if weight < 0 or weight > HUNDRED:
                raise InvalidWeight()

        weight_sum = sum(weights, Decimal(0))
        if not within_tolerance(weight_sum, HUNDRED):
            raise WeightSumMismatch(weight_sum)

        shares = []
        allocated = ZERO
        last_index = len(weighted_participants) - 1
        for index, (entry, weight) in enumerate(zip(weighted_participants, weights)):
            if index == last_index:
                amount = money(total - allocated)
                # Weights inside the sum tolerance can over-allocate the earlier entries
                if amount < 0:
                    raise InvalidAmount("Split amount cannot be negative")
            else:
                amount = money(total * weight / HUNDRED)
                allocated += amount
            shares.append(Share(participant=entry.participant, amount=amount))

        return shares

    @staticmethod
    def validate_shares(shares: Sequence[Share], total: Numeric) -> bool:
        """Check that shares add up to the total within one minor unit"""
        if not shares:
            raise InvalidParticipants("Split details cannot be empty")

        actual = sum((to_decimal(share.amount) for share in shares), Decimal(0))
        expected = to_decimal(total)
        if not within_tolerance(actual, expected):
            raise SplitMismatch(money(actual), money(expected))

        return True

    @staticmethod
    def calculate_shares(
        split_type: SplitType,
        total: Numeric,
        participants: Optional[Sequence[str]] = None,
        percentage_splits: Optional[Sequence[WeightedParticipant]] = None,
        exact_shares: Optional[Sequence[Share]] = None,
    ) -> List[Share]:
        """Compute and validate the shares for one expense"""
        try:
            split_type = SplitType(split_type)
        except ValueError:
            raise InvalidSplitType() from None

        if split_type == SplitType.EQUAL:
            shares = SplitCalculator.equal_split(total, participants or [])
        elif split_type == SplitType.PERCENTAGE:
            shares = SplitCalculator.weighted_split(total, percentage_splits or [])
        else:
            if to_decimal(total) <= 0:
                raise InvalidAmount()
            shares = [Share(participant=s.participant, amount=money(s.amount)) for s in exact_shares or []]
            if any(share.amount < 0 for share in shares):
                raise InvalidAmount("Split amount cannot be negative")

        SplitCalculator.validate_shares(shares, total)
        logger.debug(f"Computed {len(shares)} {split_type.value} shares for {total}")
        return shares
