"""
Balance — баланс участника в валюте группы по умолчанию

Derived, ephemeral: пересчитывается при каждом запросе, не сохраняется.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from splitledger.core.math.numerical_safeguards import EPS_MONEY, ZERO


class Balance(BaseModel):
    """
    Баланс участника.

    paid — сумма расходов, оплаченных участником
    owed — сумма долей участника в расходах, оплаченных другими
    lent — сумма долей других участников в расходах, оплаченных участником
    net  — lent - owed (> 0: участнику должны, < 0: участник должен)

    Собственная доля плательщика не является долгом и не входит ни в owed,
    ни в lent, поэтому paid >= lent, а Σ net по группе равна нулю.
    """

    paid: Decimal = Field(ZERO, description="Всего оплачено")
    owed: Decimal = Field(ZERO, description="Всего должен другим")
    lent: Decimal = Field(ZERO, description="Всего должны ему")
    net: Decimal = Field(ZERO, description="Чистый баланс")

    model_config = {"frozen": True}  # Immutable

    def is_settled(self, eps: Decimal = EPS_MONEY) -> bool:
        """
        Проверка, что участник никому не должен и ему никто не должен.

        Args:
            eps: Допуск для сравнения с нулём

        Returns:
            True если |net| < eps
        """
        return abs(self.net) < eps
