"""Balance Aggregator — чистые балансы участников

Чисто арифметический слой без решений:
- net_balances: Balance → net = lent - owed
- net_pairwise: схлопывание двунаправленных парных долгов в одно направление
- net_from_pairwise: чистый баланс участника из матрицы парных долгов
  (входящие - исходящие)

Для одного и того же ledger net_balances и net_from_pairwise дают
одинаковые значения: это две проекции одних и тех же долей.
"""

from decimal import Decimal
from typing import Iterable, Mapping

from splitledger.core.domain.balance import Balance
from splitledger.core.errors import UnknownMember
from splitledger.core.math.numerical_safeguards import ZERO

PairKey = tuple[str, str]


def net_balances(balances: Mapping[str, Balance]) -> dict[str, Decimal]:
    """Чистый баланс по участнику.

    Args:
        balances: Balance по участнику

    Returns:
        member_id → lent - owed (порядок входа сохраняется)
    """
    return {member_id: balance.lent - balance.owed for member_id, balance in balances.items()}


def net_pairwise(pairwise: Mapping[PairKey, Decimal]) -> dict[PairKey, Decimal]:
    """Схлопывание парных долгов в одно направление на пару.

    Если заполнены и debt[a][b], и debt[b][a], остаётся только разница
    в направлении большего долга. Матрица знаковая: отрицательная запись
    (a, b) означает долг b → a. Пары, сошедшиеся ровно в ноль, и записи
    участника самому себе отбрасываются.

    Args:
        pairwise: (должник, кредитор) → сумма

    Returns:
        Новая матрица, порядок по первому появлению пары
    """
    netted: dict[PairKey, Decimal] = {}
    seen: set[frozenset[str]] = set()

    for (debtor, creditor), amount in pairwise.items():
        pair = frozenset((debtor, creditor))
        if pair in seen or debtor == creditor:
            continue
        seen.add(pair)

        diff = amount - pairwise.get((creditor, debtor), ZERO)
        if diff > 0:
            netted[(debtor, creditor)] = diff
        elif diff < 0:
            netted[(creditor, debtor)] = -diff

    return netted


def net_from_pairwise(
    pairwise: Mapping[PairKey, Decimal], member_ids: Iterable[str]
) -> dict[str, Decimal]:
    """Чистый баланс участника из матрицы парных долгов.

    Args:
        pairwise: (должник, кредитор) → сумма
        member_ids: порядок участников в результате

    Returns:
        member_id → Σ входящих долгов - Σ исходящих

    Raises:
        UnknownMember: Если матрица ссылается на участника вне member_ids
    """
    net = {member_id: ZERO for member_id in member_ids}
    for (debtor, creditor), amount in pairwise.items():
        for member_id in (debtor, creditor):
            if member_id not in net:
                raise UnknownMember(member_id)
        net[debtor] -= amount
        net[creditor] += amount
    return net
