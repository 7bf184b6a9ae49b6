"""
Contract Validation Module

JSON Schema контракты на границе движка с внешним слоем: разбор входных
payload-ов в доменные модели и проверка выходного settlement plan.
"""

from .validators import (
    EXPENSE_RECORD,
    RATE_TABLE,
    SETTLEMENT_PLAN,
    Contract,
    SchemaLoader,
    parse_expense_record,
    parse_rate_table,
    validate_settlement_plan,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "Contract",
    # Contracts
    "EXPENSE_RECORD",
    "RATE_TABLE",
    "SETTLEMENT_PLAN",
    # Functions
    "parse_expense_record",
    "parse_rate_table",
    "validate_settlement_plan",
]
