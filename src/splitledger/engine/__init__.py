"""Engine — стадии Ledger & Settlement Engine.

- Currency Normalizer: конвертация через базовую валюту RateTable
- Expense Ledger: paid / owed / lent по участнику + парные долги
- Balance Aggregator: чистые балансы, неттинг парных долгов
- Settlement Simplifier: greedy сведение балансов к переводам
- Settlement Engine: pipeline всех стадий с типизированным результатом
"""

from .balances import net_balances, net_from_pairwise, net_pairwise
from .currency import CurrencyNormalizer, NormalizerConfig, convert
from .ledger import (
    ExpenseLedger,
    Ledger,
    LedgerConfig,
    ShareCheckMode,
    build_ledger,
)
from .pipeline import (
    EngineConfig,
    SettlementEngine,
    SettlementMode,
    SettlementResult,
    settle_group,
    settle_payload,
)
from .simplifier import SettlementSimplifier, SimplifierConfig, simplify

__all__ = [
    # Currency Normalizer
    "CurrencyNormalizer",
    "NormalizerConfig",
    "convert",
    # Expense Ledger
    "ExpenseLedger",
    "Ledger",
    "LedgerConfig",
    "ShareCheckMode",
    "build_ledger",
    # Balance Aggregator
    "net_balances",
    "net_from_pairwise",
    "net_pairwise",
    # Settlement Simplifier
    "SettlementSimplifier",
    "SimplifierConfig",
    "simplify",
    # Pipeline
    "EngineConfig",
    "SettlementEngine",
    "SettlementMode",
    "SettlementResult",
    "settle_group",
    "settle_payload",
]
