"""
RateTable — Снапшот таблицы курсов валют

Курсы заданы относительно одной базовой валюты (rate[base] = 1):
rate[X] — сколько единиц X стоит одна единица базовой валюты.

Таблица поставляется извне и рассматривается как неизменяемый снапшот:
движок её не кэширует, не обновляет и не «шевелит» курсы. Периодическое
обновление курсов — ответственность внешнего планировщика.
"""

from decimal import Decimal
from typing import Final

from pydantic import BaseModel, Field, field_validator, model_validator

from splitledger.core.errors import UnknownCurrency


# =============================================================================
# DEFAULTS
# =============================================================================

# Фиксированная таблица курсов продукта (база USD)
DEFAULT_BASE_CURRENCY: Final[str] = "USD"

DEFAULT_RATES: Final[dict[str, Decimal]] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.93"),
    "GBP": Decimal("0.79"),
    "JPY": Decimal("150.14"),
    "CAD": Decimal("1.37"),
    "AUD": Decimal("1.53"),
    "INR": Decimal("83.11"),
    "CNY": Decimal("7.23"),
    "BRL": Decimal("5.05"),
    "RUB": Decimal("93.21"),
}


# =============================================================================
# RATE TABLE
# =============================================================================


class RateTable(BaseModel):
    """
    Таблица курсов относительно base_currency.

    Инварианты:
    - все коды в верхнем регистре
    - все курсы положительные и finite
    - rates[base_currency] == 1 (добавляется автоматически, если не задан)
    """

    base_currency: str = Field(
        DEFAULT_BASE_CURRENCY, min_length=3, max_length=3, description="Базовая валюта"
    )
    rates: dict[str, Decimal] = Field(..., description="Курс валюты к базовой")

    model_config = {"frozen": True}  # Immutable

    @model_validator(mode="before")
    @classmethod
    def normalize_codes(cls, data):
        """Нормализация кодов и добавление базовой валюты"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        base = str(data.get("base_currency", DEFAULT_BASE_CURRENCY)).strip().upper()
        rates = {str(code).strip().upper(): rate for code, rate in dict(data.get("rates", {})).items()}
        rates.setdefault(base, Decimal("1"))
        data["base_currency"] = base
        data["rates"] = rates
        return data

    @field_validator("rates")
    @classmethod
    def validate_rates(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        """Каждый курс положительный и finite"""
        for code, rate in v.items():
            if not rate.is_finite() or rate <= 0:
                raise ValueError(f"Rate for {code} must be positive and finite, got {rate}")
        return v

    @model_validator(mode="after")
    def validate_base_rate(self) -> "RateTable":
        """Курс базовой валюты строго равен 1"""
        if self.rates[self.base_currency] != 1:
            raise ValueError(
                f"Base currency {self.base_currency} must have rate 1, "
                f"got {self.rates[self.base_currency]}"
            )
        return self

    @classmethod
    def default(cls) -> "RateTable":
        """Фиксированная таблица продукта (база USD)."""
        return cls(base_currency=DEFAULT_BASE_CURRENCY, rates=DEFAULT_RATES)

    def has(self, currency: str) -> bool:
        """Есть ли курс для валюты"""
        return currency in self.rates

    def rate(self, currency: str) -> Decimal:
        """
        Курс валюты относительно базовой.

        Raises:
            UnknownCurrency: Если валюты нет в таблице
        """
        try:
            return self.rates[currency]
        except KeyError:
            raise UnknownCurrency(currency) from None

    def supported_currencies(self) -> list[str]:
        """Коды валют в порядке таблицы."""
        return list(self.rates)
