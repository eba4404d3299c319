from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional, Dict
from datetime import datetime
from decimal import Decimal
from enum import Enum


class SplitType(str, Enum):
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    EXACT = "exact"


# ===== CORE RECORDS =====
class Share(BaseModel):
    model_config = ConfigDict(frozen=True)

    participant: str
    amount: Decimal


class WeightedParticipant(BaseModel):
    model_config = ConfigDict(frozen=True)

    participant: str
    weight: Decimal


class Transaction(BaseModel):
    """A snapshot of one expense as the settlement engine sees it."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    paid_by: str
    shares: List[Share] = Field(..., min_length=1)


class Settlement(BaseModel):
    """A single payment instruction, serialized as {"from", "to", "amount"}."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    debtor: str = Field(..., alias="from")
    creditor: str = Field(..., alias="to")
    amount: Decimal = Field(..., gt=0)

    @model_validator(mode="after")
    def check_distinct_parties(self):
        if self.debtor == self.creditor:
            raise ValueError("A participant cannot settle with themselves")
        return self


class SettlementPlan(BaseModel):
    balances: Dict[str, Decimal] = {}
    settlements: List[Settlement] = []


class UserSettlements(BaseModel):
    net_balance: Decimal
    owes: List[Settlement] = []
    owed_by: List[Settlement] = []


# ===== API SCHEMAS =====
class SplitRequest(BaseModel):
    amount: Decimal = Field(..., description="Total amount to split")
    split_type: SplitType = Field(SplitType.EQUAL, description="equal, percentage or exact")
    participants: List[str] = Field([], description="Participant IDs, used by equal splits")
    percentage_splits: Optional[List[WeightedParticipant]] = None
    shares: Optional[List[Share]] = None


class ExpenseCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=3, max_length=200, description="Description of the expense")
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount of the expense")
    paid_by: str = Field(..., description="ID of the participant who paid")
    participants: List[str] = Field(..., min_length=1, description="IDs of everyone sharing the expense")
    split_type: SplitType = Field(SplitType.EQUAL, description="equal, percentage or exact")
    percentage_splits: Optional[List[WeightedParticipant]] = Field(None, description="Required for percentage splits")
    shares: Optional[List[Share]] = Field(None, description="Required for exact splits")
    date: Optional[datetime] = None


class ExpenseUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = Field(None, min_length=3, max_length=200)
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    participants: Optional[List[str]] = Field(None, min_length=1)
    split_type: Optional[SplitType] = None
    percentage_splits: Optional[List[WeightedParticipant]] = None
    shares: Optional[List[Share]] = None
    date: Optional[datetime] = None


class ExpenseRecord(BaseModel):
    id: str
    description: str
    amount: Decimal
    paid_by: str
    participants: List[str]
    split_type: SplitType
    shares: List[Share]
    date: datetime
    is_deleted: bool = False
    created_at: datetime
    updated_at: datetime

    def to_transaction(self) -> Transaction:
        return Transaction(amount=self.amount, paid_by=self.paid_by, shares=self.shares)


class ExpenseResponse(BaseModel):
    id: str
    description: str
    amount: Decimal
    paid_by: str
    participants: List[str]
    split_type: SplitType
    shares: List[Share]
    date: datetime
    created_at: datetime
    updated_at: datetime
