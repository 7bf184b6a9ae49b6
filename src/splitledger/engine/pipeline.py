"""Settlement Engine — полный pipeline расчёта переводов для группы

Стадии:
    расходы + курсы → Currency Normalizer → Expense Ledger
    → Balance Aggregator → Settlement Simplifier → список переводов

Режимы (EngineConfig.mode):
- PAIRWISE (по умолчанию, канонический): чистые балансы выводятся из
  неттированной матрицы парных долгов, сохраняя детализацию «кто кому»
  до схлопывания
- TOTALS (упрощённый): чистые балансы из итогов paid/owed по участнику

Оба режима дают одинаковые балансы для одного снапшота.

Ошибки стадий (LedgerError) пробрасываются из функций стадий, а здесь
превращаются в SettlementResult с ok=False и машинным error_code, чтобы
вызывающий слой сам решил: отклонить запрос или показать предупреждение.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from splitledger.core.contracts import (
    parse_expense_record,
    parse_rate_table,
    validate_settlement_plan,
)
from splitledger.core.domain.balance import Balance
from splitledger.core.domain.expense import ExpenseRecord
from splitledger.core.domain.member import Member
from splitledger.core.domain.rates import RateTable
from splitledger.core.domain.settlement import SettlementTransaction
from splitledger.core.errors import LedgerError
from splitledger.core.math.numerical_safeguards import quantize_money
from splitledger.engine.balances import net_balances, net_from_pairwise, net_pairwise
from splitledger.engine.currency import CurrencyNormalizer, NormalizerConfig
from splitledger.engine.ledger import ExpenseLedger, LedgerConfig, PairKey
from splitledger.engine.simplifier import SettlementSimplifier, SimplifierConfig

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


class SettlementMode(str, Enum):
    """Источник чистых балансов для simplifier"""

    PAIRWISE = "pairwise"  # Из неттированной матрицы парных долгов
    TOTALS = "totals"  # Из итогов paid/owed


@dataclass(frozen=True)
class EngineConfig:
    """Конфигурация Settlement Engine (по одной секции на стадию)."""

    mode: SettlementMode = SettlementMode.PAIRWISE
    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    simplifier: SimplifierConfig = field(default_factory=SimplifierConfig)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class SettlementResult:
    """Результат расчёта для группы."""

    ok: bool
    error_code: str
    currency: str

    balances: dict[str, Balance]
    pairwise: dict[PairKey, Decimal]
    net: dict[str, Decimal]
    settlements: list[SettlementTransaction]

    # Детали
    details: str

    def to_plan(self) -> dict[str, Any]:
        """Payload по контракту settlement_plan.json.

        Returns:
            {"currency", "balances": {id: {paid, owed, lent, net}}, "settlements": [...]}

        Raises:
            ContractViolation: Payload не проходит контракт (ошибка движка)
        """
        plan = {
            "currency": self.currency,
            "balances": {
                member_id: {
                    "paid": float(quantize_money(balance.paid)),
                    "owed": float(quantize_money(balance.owed)),
                    "lent": float(quantize_money(balance.lent)),
                    "net": float(quantize_money(balance.net)),
                }
                for member_id, balance in self.balances.items()
            },
            "settlements": [settlement.as_payload() for settlement in self.settlements],
        }
        validate_settlement_plan(plan)
        return plan


# =============================================================================
# ENGINE
# =============================================================================


class SettlementEngine:
    """Settlement Engine: расходы группы → балансы и переводы.

    Каждый вызов evaluate() — независимое вычисление по снапшоту расходов
    и курсов; между вызовами ничего не хранится, поэтому вызовы для разных
    групп можно выполнять параллельно.
    """

    def __init__(self, config: EngineConfig | None = None):
        """
        Args:
            config: конфигурация engine (опционально, используется default)
        """
        self.config = config or EngineConfig()
        self.normalizer = CurrencyNormalizer(self.config.normalizer)
        self.ledger = ExpenseLedger(self.config.ledger, self.normalizer)
        self.simplifier = SettlementSimplifier(self.config.simplifier)

    def evaluate(
        self,
        expenses: Iterable[ExpenseRecord],
        rates: RateTable,
        default_currency: str,
        roster: Sequence[Member],
    ) -> SettlementResult:
        """Полный расчёт для группы.

        Args:
            expenses: записи о расходах группы
            rates: снапшот курсов
            default_currency: валюта группы по умолчанию
            roster: участники группы

        Returns:
            SettlementResult; при ошибке валидации ok=False и error_code
        """
        currency = default_currency.strip().upper()

        try:
            ledger = self.ledger.build(expenses, rates, currency, roster)
        except LedgerError as e:
            logger.warning("Settlement calculation rejected (%s): %s", e.code, e)
            return self._failed_result(currency, e)

        pairwise = net_pairwise(ledger.pairwise)
        if self.config.mode == SettlementMode.PAIRWISE:
            net = net_from_pairwise(pairwise, ledger.balances.keys())
        else:
            net = net_balances(ledger.balances)

        settlements = self.simplifier.simplify(net, currency, roster)

        return SettlementResult(
            ok=True,
            error_code="",
            currency=currency,
            balances=ledger.balances,
            pairwise=pairwise,
            net=net,
            settlements=settlements,
            details=(
                f"{self.config.mode.value}: {len(ledger.balances)} members, "
                f"{len(pairwise)} pairwise debts, {len(settlements)} settlements"
            ),
        )

    def evaluate_payload(
        self,
        expenses: Iterable[Mapping[str, Any]],
        rates: Mapping[str, Any],
        default_currency: str,
        roster: Sequence[Member],
    ) -> SettlementResult:
        """Полный расчёт по сырым JSON payload-ам (граница с CRUD/API слоем).

        Каждый payload проверяется по контракту (expense_record.json,
        rate_table.json) до построения моделей. Нарушение контракта даёт
        ok=False с error_code INVALID_AMOUNT или CONTRACT_VIOLATION.
        """
        currency = default_currency.strip().upper()

        try:
            records = [parse_expense_record(payload) for payload in expenses]
            table = parse_rate_table(rates)
        except LedgerError as e:
            logger.warning("Settlement payload rejected (%s): %s", e.code, e)
            return self._failed_result(currency, e)

        return self.evaluate(records, table, currency, roster)

    def _failed_result(self, currency: str, error: LedgerError) -> SettlementResult:
        """Результат для отклонённого расчёта.

        Args:
            currency: валюта группы
            error: ошибка стадии

        Returns:
            SettlementResult с ok=False
        """
        return SettlementResult(
            ok=False,
            error_code=error.code,
            currency=currency,
            balances={},
            pairwise={},
            net={},
            settlements=[],
            details=str(error),
        )


def settle_group(
    expenses: Iterable[ExpenseRecord],
    rates: RateTable,
    default_currency: str,
    roster: Sequence[Member],
    config: EngineConfig | None = None,
) -> SettlementResult:
    """Расчёт переводов для группы (convenience wrapper над SettlementEngine)."""
    return SettlementEngine(config).evaluate(expenses, rates, default_currency, roster)


def settle_payload(
    expenses: Iterable[Mapping[str, Any]],
    rates: Mapping[str, Any],
    default_currency: str,
    roster: Sequence[Member],
    config: EngineConfig | None = None,
) -> SettlementResult:
    """Расчёт по сырым JSON payload-ам (convenience wrapper над SettlementEngine)."""
    return SettlementEngine(config).evaluate_payload(expenses, rates, default_currency, roster)
