"""
Domain models and value objects.

Contains fundamental domain entities like Member, ExpenseRecord, RateTable,
Balance and SettlementTransaction.
"""

from splitledger.core.domain.balance import Balance
from splitledger.core.domain.expense import ExpenseRecord, Participant, SplitType
from splitledger.core.domain.member import Member
from splitledger.core.domain.rates import (
    DEFAULT_BASE_CURRENCY,
    DEFAULT_RATES,
    RateTable,
)
from splitledger.core.domain.settlement import SettlementTransaction
from splitledger.core.domain.splits import split_equally

__all__ = [
    # Roster
    "Member",
    # Expenses
    "ExpenseRecord",
    "Participant",
    "SplitType",
    "split_equally",
    # Rates
    "DEFAULT_BASE_CURRENCY",
    "DEFAULT_RATES",
    "RateTable",
    # Derived
    "Balance",
    "SettlementTransaction",
]
