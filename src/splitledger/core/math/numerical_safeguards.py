"""
Numerical Safeguards — безопасные денежные примитивы на Decimal

Модуль обеспечивает детерминированную денежную арифметику:
- Приведение входных значений (int/str/float/Decimal) к Decimal без потерь
  двоичного представления float
- Проверка finite (NaN/Inf никогда не попадают в расчёты)
- Epsilon-сравнения с явным допуском (ε = 0.01 minor unit)
- Квантование до minor unit с округлением half away from zero

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Внутри движка деньги — только Decimal, никогда float
2. NaN/Inf отклоняются через InvalidAmount, а не заменяются fallback-значением
3. Сравнения с нулём всегда идут через явный epsilon
4. Все операции детерминированы и воспроизводимы
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

from splitledger.core.errors import InvalidAmount

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Допуск, ниже которого баланс или перевод считается нулевым
EPS_MONEY: Final[Decimal] = Decimal("0.01")

# Количество знаков minor unit по умолчанию (центы)
MONEY_DECIMALS: Final[int] = 2

ZERO: Final[Decimal] = Decimal("0")


# =============================================================================
# ПРИВЕДЕНИЕ ТИПОВ
# =============================================================================


def to_decimal(value: Decimal | int | float | str, name: str = "amount") -> Decimal:
    """
    Приведение значения к Decimal.

    float переводится через str(), чтобы 0.1 стало Decimal("0.1"),
    а не двоичным хвостом 0.1000000000000000055511151231257827.

    Args:
        value: Исходное значение
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        Decimal значение

    Raises:
        InvalidAmount: Если значение нельзя интерпретировать как число

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal("10.00")
        Decimal('10.00')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidAmount(f"{name} must be a number, got {value!r}", name, value)
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"{name} must be a number, got {value!r}", name, value) from None


# =============================================================================
# FINITE ПРОВЕРКИ
# =============================================================================


def is_valid_amount(value: Decimal) -> bool:
    """
    Проверка, является ли Decimal валидной денежной величиной (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение finite
    """
    return value.is_finite()


# =============================================================================
# EPSILON-СРАВНЕНИЯ
# =============================================================================


def is_zero(value: Decimal, eps: Decimal = EPS_MONEY) -> bool:
    """
    Проверка, считается ли величина нулевой: abs(value) < eps.

    Граница строгая: ровно eps (один цент) — это уже долг.

    Examples:
        >>> is_zero(Decimal("0.009"))
        True
        >>> is_zero(Decimal("0.01"))
        False
    """
    return abs(value) < eps


def is_positive(value: Decimal, eps: Decimal = EPS_MONEY) -> bool:
    """True если value >= eps."""
    return value >= eps


def is_negative(value: Decimal, eps: Decimal = EPS_MONEY) -> bool:
    """True если value <= -eps."""
    return value <= -eps


def is_close(a: Decimal, b: Decimal, eps: Decimal = EPS_MONEY) -> bool:
    """
    Сравнение двух денежных величин с допуском.

    Args:
        a: Первое значение
        b: Второе значение
        eps: Абсолютный допуск

    Returns:
        True если abs(a - b) <= eps
    """
    return abs(a - b) <= eps


# =============================================================================
# КВАНТОВАНИЕ
# =============================================================================


def quantize_money(value: Decimal, decimals: int = MONEY_DECIMALS) -> Decimal:
    """
    Округление до minor unit, round half away from zero.

    Decimal.ROUND_HALF_UP округляет половину от нуля для обоих знаков,
    что совпадает с бухгалтерским округлением.

    Args:
        value: Значение для округления
        decimals: Количество знаков после запятой

    Returns:
        Округлённое значение

    Raises:
        ValueError: Если decimals отрицательный

    Examples:
        >>> quantize_money(Decimal("2.345"))
        Decimal('2.35')
        >>> quantize_money(Decimal("-2.345"))
        Decimal('-2.35')
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def floor_money(value: Decimal, decimals: int = MONEY_DECIMALS) -> Decimal:
    """Усечение до minor unit в сторону нуля (для распределения остатков)."""
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_positive(value: Decimal, name: str) -> None:
    """
    Валидация, что денежная величина положительная.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Raises:
        InvalidAmount: Если value <= 0 или NaN/Inf
    """
    if not is_valid_amount(value):
        raise InvalidAmount(f"{name} must be finite (not NaN/Inf), got {value}", name, value)

    if value <= 0:
        raise InvalidAmount(f"{name} must be positive, got {value}", name, value)


def validate_non_negative(value: Decimal, name: str) -> None:
    """
    Валидация, что денежная величина неотрицательная.

    Raises:
        InvalidAmount: Если value < 0 или NaN/Inf
    """
    if not is_valid_amount(value):
        raise InvalidAmount(f"{name} must be finite (not NaN/Inf), got {value}", name, value)

    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative, got {value}", name, value)
