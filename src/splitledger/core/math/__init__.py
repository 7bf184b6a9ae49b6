"""
Core math modules для splitledger

Денежные примитивы на Decimal с явными epsilon-допусками.
"""

from splitledger.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_MONEY,
    MONEY_DECIMALS,
    ZERO,
    # Coercion
    to_decimal,
    # Finite checks
    is_valid_amount,
    # Epsilon comparisons
    is_close,
    is_negative,
    is_positive,
    is_zero,
    # Quantization
    floor_money,
    quantize_money,
    # Validation
    validate_non_negative,
    validate_positive,
)

__all__ = [
    # Epsilon constants
    "EPS_MONEY",
    "MONEY_DECIMALS",
    "ZERO",
    # Coercion
    "to_decimal",
    # Finite checks
    "is_valid_amount",
    # Epsilon comparisons
    "is_close",
    "is_negative",
    "is_positive",
    "is_zero",
    # Quantization
    "floor_money",
    "quantize_money",
    # Validation
    "validate_non_negative",
    "validate_positive",
]
