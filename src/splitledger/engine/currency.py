"""Currency Normalizer — конвертация сумм между валютами через базовую валюту

Конвертация идёт через базовую валюту RateTable:
    amount_in_base = amount / rate[from]
    result = amount_in_base                  если to == base
    result = amount_in_base * rate[to]       иначе

Режимы при отсутствии курса:
- strict (по умолчанию): UnknownCurrency пробрасывается вызывающему
- lenient: WARNING в лог и возврат исходной суммы без конвертации.
  Lenient режим портит cross-currency итоги и включается только явно.

Чистая функция: таблица курсов не кэшируется и не изменяется.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from splitledger.core.domain.rates import RateTable
from splitledger.core.errors import UnknownCurrency

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class NormalizerConfig:
    """Конфигурация Currency Normalizer.

    strict=True: неизвестная валюта → UnknownCurrency
    strict=False: неизвестная валюта → WARNING + исходная сумма
    """

    strict: bool = True


# =============================================================================
# CONVERT
# =============================================================================


def convert(
    amount: Decimal | None,
    from_currency: str,
    to_currency: str,
    rates: RateTable,
    strict: bool = True,
) -> Decimal | None:
    """Конвертация суммы из одной валюты в другую.

    Коды валют приводятся к верхнему регистру, как в RateTable.
    Identity fast path: from == to или amount нулевой/None → amount без изменений.

    Args:
        amount: Сумма в from_currency
        from_currency: Исходная валюта
        to_currency: Целевая валюта
        rates: Снапшот курсов
        strict: Режим обработки неизвестной валюты

    Returns:
        Сумма в to_currency (без округления)

    Raises:
        UnknownCurrency: Если курса нет и strict=True
    """
    from_currency = from_currency.strip().upper()
    to_currency = to_currency.strip().upper()
    if not amount or from_currency == to_currency:
        return amount

    try:
        from_rate = rates.rate(from_currency)
        to_rate = rates.rate(to_currency)
    except UnknownCurrency as e:
        if strict:
            raise
        logger.warning(
            "Currency rate not found for %s (converting %s -> %s), amount left unconverted",
            e.currency,
            from_currency,
            to_currency,
        )
        return amount

    amount_in_base = amount / from_rate
    if to_currency == rates.base_currency:
        return amount_in_base
    return amount_in_base * to_rate


# =============================================================================
# NORMALIZER
# =============================================================================


class CurrencyNormalizer:
    """Currency Normalizer: `convert` с режимом из конфигурации.

    Не хранит состояния между вызовами; RateTable передаётся в каждый вызов.
    """

    def __init__(self, config: NormalizerConfig | None = None):
        """Инициализация normalizer.

        Args:
            config: конфигурация (опционально, используется default)
        """
        self.config = config or NormalizerConfig()

    def convert(
        self,
        amount: Decimal | None,
        from_currency: str,
        to_currency: str,
        rates: RateTable,
    ) -> Decimal | None:
        """Конвертация с режимом strict/lenient из конфигурации."""
        return convert(amount, from_currency, to_currency, rates, strict=self.config.strict)

    def check_currency(self, currency: str, rates: RateTable) -> None:
        """Ранняя проверка наличия курса (только strict режим).

        Raises:
            UnknownCurrency: Если курса нет и режим strict
        """
        currency = currency.strip().upper()
        if self.config.strict and not rates.has(currency):
            raise UnknownCurrency(currency)
