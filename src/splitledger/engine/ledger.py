"""Expense Ledger — балансы участников и матрица парных долгов

Алгоритм:
1. Все участники roster стартуют с paid = owed = lent = 0
2. Каждый расход валидируется до любой арифметики (InvalidAmount, UnknownMember,
   UnknownCurrency, ShareMismatch)
3. amount и каждая share конвертируются в валюту группы по умолчанию
4. amount → paid[payer]
5. Для каждого участника кроме плательщика: share → owed[participant],
   lent[payer] и парный долг debt[(participant, payer)]; встречный долг
   debt[(payer, participant)] сначала гасится, так что пара всегда хранит
   одно направление
6. Доля самого плательщика не является долгом

Доли суммируются как заданы: движок не перераспределяет и не «чинит» доли.
Проверку Σ share == amount задаёт LedgerConfig.share_check.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from splitledger.core.domain.balance import Balance
from splitledger.core.domain.expense import ExpenseRecord
from splitledger.core.domain.member import Member
from splitledger.core.domain.rates import RateTable
from splitledger.core.errors import ShareMismatch, UnknownMember
from splitledger.core.math.numerical_safeguards import (
    EPS_MONEY,
    ZERO,
    is_close,
    validate_non_negative,
    validate_positive,
)
from splitledger.engine.currency import CurrencyNormalizer

logger = logging.getLogger(__name__)

PairKey = tuple[str, str]


# =============================================================================
# CONFIG
# =============================================================================


class ShareCheckMode(str, Enum):
    """Политика проверки Σ share == amount"""

    LENIENT = "lenient"  # Принять, WARNING о расхождении
    STRICT = "strict"  # Отклонить через ShareMismatch


@dataclass(frozen=True)
class LedgerConfig:
    """Конфигурация Expense Ledger."""

    share_check: ShareCheckMode = ShareCheckMode.LENIENT
    share_tolerance: Decimal = EPS_MONEY


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class Ledger:
    """Результат построения ledger.

    balances — по участнику, в порядке roster
    pairwise — (должник, кредитор) → сумма, только положительное направление
    """

    currency: str
    balances: dict[str, Balance] = field(default_factory=dict)
    pairwise: dict[PairKey, Decimal] = field(default_factory=dict)


# =============================================================================
# LEDGER
# =============================================================================


class ExpenseLedger:
    """Expense Ledger: расходы + курсы → балансы и парные долги.

    Не хранит состояния между вызовами build().
    """

    def __init__(
        self,
        config: LedgerConfig | None = None,
        normalizer: CurrencyNormalizer | None = None,
    ):
        """
        Args:
            config: конфигурация ledger (опционально)
            normalizer: конвертер валют (опционально, strict по умолчанию)
        """
        self.config = config or LedgerConfig()
        self.normalizer = normalizer or CurrencyNormalizer()

    def build(
        self,
        expenses: Iterable[ExpenseRecord],
        rates: RateTable,
        default_currency: str,
        roster: Sequence[Member],
    ) -> Ledger:
        """Построение ledger по снапшоту расходов и курсов.

        Args:
            expenses: записи о расходах группы
            rates: снапшот курсов
            default_currency: валюта группы по умолчанию
            roster: участники группы (порядок определяет порядок вывода)

        Returns:
            Ledger с балансами и парными долгами в default_currency

        Raises:
            UnknownMember: плательщик или участник вне roster
            UnknownCurrency: нет курса (strict режим normalizer)
            InvalidAmount: невалидная сумма или доля
            ShareMismatch: Σ share != amount (strict share check)
        """
        currency = default_currency.strip().upper()
        member_ids = _roster_ids(roster)
        expenses = list(expenses)

        # 1. Валидация всех записей до арифметики
        self.normalizer.check_currency(currency, rates)
        for expense in expenses:
            self._validate_expense(expense, member_ids, rates)

        # 2. Накопление
        paid = {member_id: ZERO for member_id in member_ids}
        owed = dict(paid)
        lent = dict(paid)
        pairwise: dict[PairKey, Decimal] = {}

        for expense in expenses:
            payer = expense.paid_by
            paid[payer] += self._to_default(expense.amount, expense.currency, currency, rates)

            for participant in expense.participants:
                if participant.member == payer:
                    continue
                share = self._to_default(participant.share, expense.currency, currency, rates)
                owed[participant.member] += share
                lent[payer] += share
                _add_debt(pairwise, participant.member, payer, share)

        balances = {
            member_id: Balance(
                paid=paid[member_id],
                owed=owed[member_id],
                lent=lent[member_id],
                net=lent[member_id] - owed[member_id],
            )
            for member_id in member_ids
        }

        logger.debug(
            "Ledger built: %d expenses, %d members, %d pairwise debts in %s",
            len(expenses),
            len(member_ids),
            len(pairwise),
            currency,
        )
        return Ledger(currency=currency, balances=balances, pairwise=pairwise)

    def _to_default(
        self, amount: Decimal, from_currency: str, to_currency: str, rates: RateTable
    ) -> Decimal:
        converted = self.normalizer.convert(amount, from_currency, to_currency, rates)
        return converted if converted is not None else ZERO

    def _validate_expense(
        self, expense: ExpenseRecord, member_ids: list[str], rates: RateTable
    ) -> None:
        """Проверка расхода до любой арифметики."""
        known = set(member_ids)
        for member_id in expense.member_ids():
            if member_id not in known:
                raise UnknownMember(member_id, expense.id)

        validate_positive(expense.amount, f"expense {expense.id} amount")
        for participant in expense.participants:
            validate_non_negative(
                participant.share, f"expense {expense.id} share of {participant.member}"
            )

        self.normalizer.check_currency(expense.currency, rates)

        if is_close(expense.share_total(), expense.amount, self.config.share_tolerance):
            return

        drift = expense.share_drift()

        message = (
            f"Shares of expense {expense.id} sum to {expense.share_total()} "
            f"but amount is {expense.amount} (drift {drift})"
        )
        if self.config.share_check == ShareCheckMode.STRICT:
            raise ShareMismatch(message, f"expense {expense.id} participants", drift)
        logger.warning("%s; shares are used as given", message)


# =============================================================================
# HELPERS
# =============================================================================


def _roster_ids(roster: Sequence[Member]) -> list[str]:
    member_ids = [member.id for member in roster]
    if len(set(member_ids)) != len(member_ids):
        raise ValueError(f"Roster contains duplicate member ids: {member_ids}")
    return member_ids


def _add_debt(pairwise: dict[PairKey, Decimal], debtor: str, creditor: str, amount: Decimal) -> None:
    """debtor должен creditor amount; встречный долг гасится первым."""
    if amount <= 0:
        return

    reverse = pairwise.get((creditor, debtor), ZERO)
    if reverse > 0:
        offset = min(reverse, amount)
        reverse -= offset
        amount -= offset
        if reverse > 0:
            pairwise[(creditor, debtor)] = reverse
        else:
            del pairwise[(creditor, debtor)]

    if amount > 0:
        pairwise[(debtor, creditor)] = pairwise.get((debtor, creditor), ZERO) + amount


def build_ledger(
    expenses: Iterable[ExpenseRecord],
    rates: RateTable,
    default_currency: str,
    roster: Sequence[Member],
    config: LedgerConfig | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> Ledger:
    """Построение ledger (convenience wrapper над ExpenseLedger)."""
    return ExpenseLedger(config, normalizer).build(expenses, rates, default_currency, roster)
