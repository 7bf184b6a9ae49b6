"""
SettlementTransaction — рекомендованный перевод между участниками

Output-only модель. Движок не отслеживает, был ли перевод выполнен:
жизненный цикл (напоминание, флаг settled) принадлежит внешнему слою
хранения, который может сохранить список переводов и отмечать их
независимо от пересчёта.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .member import Member


class SettlementTransaction(BaseModel):
    """
    Перевод `from_member` → `to_member` на сумму `amount` в валюте `currency`.

    Сериализуется с ключами "from" / "to" (by_alias=True).
    """

    from_member: Member = Field(..., alias="from", description="Должник")
    to_member: Member = Field(..., alias="to", description="Кредитор")
    amount: Decimal = Field(..., gt=0, description="Сумма перевода (2 знака)")
    currency: str = Field(..., min_length=3, max_length=3, description="Валюта перевода")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def as_payload(self) -> dict[str, Any]:
        """
        Представление для settlement_plan контракта.

        Returns:
            {"from": id, "to": id, "amount": float, "currency": code}
        """
        return {
            "from": self.from_member.id,
            "to": self.to_member.id,
            "amount": float(self.amount),
            "currency": self.currency,
        }

    def __str__(self) -> str:
        return f"{self.from_member.id} -> {self.to_member.id}: {self.amount} {self.currency}"
