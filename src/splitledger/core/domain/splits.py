"""
Splits — вычисление долей для равного деления расхода

Равное деление округляет каждую долю вниз до minor unit, а оставшиеся
minor units раздаёт по одному первым участникам в порядке списка.
Сумма долей всегда в точности равна сумме расхода:

    split_equally(10.00, [a, b, c]) -> 3.34, 3.33, 3.33
"""

from decimal import Decimal

from splitledger.core.domain.expense import Participant
from splitledger.core.errors import InvalidAmount
from splitledger.core.math.numerical_safeguards import (
    MONEY_DECIMALS,
    floor_money,
    to_decimal,
    validate_positive,
)


def split_equally(
    amount: Decimal | int | float | str,
    member_ids: list[str],
    decimals: int = MONEY_DECIMALS,
) -> list[Participant]:
    """
    Равное деление суммы между участниками.

    Args:
        amount: Сумма расхода (положительная)
        member_ids: Участники в порядке распределения остатка
        decimals: Количество знаков minor unit

    Returns:
        Список Participant в порядке member_ids

    Raises:
        ValueError: Если member_ids пуст или содержит дубликаты
        InvalidAmount: Если amount не положительный или не finite
    """
    if not member_ids:
        raise ValueError("member_ids cannot be empty")
    if len(set(member_ids)) != len(member_ids):
        raise ValueError(f"member_ids contains duplicates: {member_ids}")

    total = to_decimal(amount)
    validate_positive(total, "amount")
    if floor_money(total, decimals) != total:
        raise InvalidAmount(
            f"amount {total} has more than {decimals} decimal places", "amount", total
        )

    unit = Decimal(1).scaleb(-decimals)
    base_share = floor_money(total / len(member_ids), decimals)
    # Остаток в minor units, всегда < len(member_ids)
    remainder_units = int((total - base_share * len(member_ids)) / unit)

    participants = []
    for index, member_id in enumerate(member_ids):
        share = base_share + unit if index < remainder_units else base_share
        participants.append(Participant(member=member_id, share=share))
    return participants
