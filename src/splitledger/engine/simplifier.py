"""Settlement Simplifier — greedy сведение балансов к переводам

Детерминированная, проверяемая процедура:
1. Участники делятся на должников (net <= -ε, сумма = |net|) и кредиторов
   (net >= ε). |net| < ε — уже рассчитались, исключаются.
2. Должники и кредиторы сортируются по убыванию суммы. Ties: стабильно,
   в порядке входа (порядок roster), поэтому вывод воспроизводим.
3. Берутся текущие крупнейший должник и крупнейший кредитор, между ними
   закрывается min(debt, credit), перевод выпускается если сумма > ε,
   обе стороны уменьшаются, сторона с остатком < ε выбывает. Цикл идёт,
   пока не исчерпан один из списков: не более #debtors + #creditors итераций.
4. Суммы переводов округляются до 2 знаков (half away from zero).
   Накопленная ошибка округления ограничена ε * min(#debtors, #creditors).

ОГРАНИЧЕНИЕ: это greedy эвристика, а не решатель минимального числа
переводов. Для типичного случая она оптимальна, но существуют группы, где
перебор подмножеств даёт меньше переводов.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

from splitledger.core.domain.member import Member
from splitledger.core.domain.settlement import SettlementTransaction
from splitledger.core.errors import UnknownMember
from splitledger.core.math.numerical_safeguards import (
    EPS_MONEY,
    MONEY_DECIMALS,
    is_negative,
    is_positive,
    is_zero,
    quantize_money,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class SimplifierConfig:
    """Конфигурация Settlement Simplifier.

    epsilon — порог, ниже которого баланс или перевод считается нулевым
    decimals — точность сумм в выпущенных переводах

    epsilon не может быть меньше одного minor unit: иначе перевод больше ε
    округлялся бы до нуля.
    """

    epsilon: Decimal = EPS_MONEY
    decimals: int = MONEY_DECIMALS

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {self.decimals}")
        minor_unit = Decimal(1).scaleb(-self.decimals)
        if self.epsilon < minor_unit:
            raise ValueError(
                f"epsilon must be at least one minor unit ({minor_unit}), got {self.epsilon}"
            )


# =============================================================================
# SIMPLIFIER
# =============================================================================


class SettlementSimplifier:
    """Settlement Simplifier: чистые балансы → упорядоченный список переводов."""

    def __init__(self, config: SimplifierConfig | None = None):
        """
        Args:
            config: конфигурация (опционально, используется default)
        """
        self.config = config or SimplifierConfig()

    def simplify(
        self,
        balances: Mapping[str, Decimal],
        currency: str,
        members: Sequence[Member] | None = None,
    ) -> list[SettlementTransaction]:
        """Сведение чистых балансов к переводам.

        Args:
            balances: member_id → net (> 0: должны ему, < 0: должен он)
            currency: валюта балансов и переводов
            members: roster для display metadata (опционально; без него
                Member строится только из id)

        Returns:
            Упорядоченный список SettlementTransaction; пустой, если все рассчитались

        Raises:
            UnknownMember: Если members передан и в нём нет участника с балансом
        """
        eps = self.config.epsilon
        roster = {member.id: member for member in members} if members is not None else None

        debtors: list[list] = []
        creditors: list[list] = []
        for member_id, net in balances.items():
            if is_negative(net, eps):
                debtors.append([member_id, -net])
            elif is_positive(net, eps):
                creditors.append([member_id, net])

        # sorted() стабилен: равные суммы остаются в порядке roster
        debtors = sorted(debtors, key=lambda entry: entry[1], reverse=True)
        creditors = sorted(creditors, key=lambda entry: entry[1], reverse=True)

        settlements: list[SettlementTransaction] = []
        i = j = 0
        while i < len(debtors) and j < len(creditors):
            debtor = debtors[i]
            creditor = creditors[j]

            amount = min(debtor[1], creditor[1])
            if amount > eps:
                settlements.append(
                    SettlementTransaction(
                        from_member=_member(roster, debtor[0]),
                        to_member=_member(roster, creditor[0]),
                        amount=quantize_money(amount, self.config.decimals),
                        currency=currency,
                    )
                )

            debtor[1] -= amount
            creditor[1] -= amount

            if is_zero(debtor[1], eps):
                i += 1
            if is_zero(creditor[1], eps):
                j += 1

        logger.debug(
            "Simplified %d debtors / %d creditors into %d settlements",
            len(debtors),
            len(creditors),
            len(settlements),
        )
        return settlements


def _member(roster: dict[str, Member] | None, member_id: str) -> Member:
    if roster is None:
        return Member(id=member_id)
    try:
        return roster[member_id]
    except KeyError:
        raise UnknownMember(member_id) from None


def simplify(
    balances: Mapping[str, Decimal],
    currency: str,
    members: Sequence[Member] | None = None,
    config: SimplifierConfig | None = None,
) -> list[SettlementTransaction]:
    """Сведение балансов к переводам (convenience wrapper)."""
    return SettlementSimplifier(config).simplify(balances, currency, members)
