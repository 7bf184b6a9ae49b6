"""
ExpenseRecord — Модель записи о расходе

Immutable Pydantic модель расхода группы: кто заплатил, сколько, в какой
валюте и как сумма делится между участниками.

Знак и finite-ность amount/share моделью НЕ проверяются: это делает Expense
Ledger и сообщает об ошибке как InvalidAmount, чтобы вызывающий слой получал
одну и ту же типизированную ошибку независимо от источника записи.
Поэтому Decimal поля объявлены с allow_inf_nan=True: NaN/Inf доходят до ledger.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class SplitType(str, Enum):
    """Способ деления расхода"""

    EQUAL = "equal"  # Поровну между участниками
    CUSTOM = "custom"  # Произвольные доли


# =============================================================================
# MODELS
# =============================================================================


class Participant(BaseModel):
    """Доля участника в расходе (в валюте расхода)."""

    member: str = Field(..., min_length=1, description="Идентификатор участника")
    share: Decimal = Field(
        ..., allow_inf_nan=True, description="Доля участника в валюте расхода"
    )

    model_config = {"frozen": True}


class ExpenseRecord(BaseModel):
    """
    Запись о расходе группы.

    Создаётся внешним expense-entry workflow. Движок никогда не изменяет запись.
    Порядок participants сохраняется и определяет порядок обработки долей.

    split_type — только метаданные для UI: движок всегда суммирует
    participants[].share как заданы и не пересчитывает доли по split_type.
    Для равного деления доли строит split_equally().
    """

    id: str = Field(..., min_length=1, description="Идентификатор расхода")
    group_id: str = Field(..., min_length=1, description="Идентификатор группы")
    description: str = Field("", description="Описание расхода")
    amount: Decimal = Field(
        ..., allow_inf_nan=True, description="Сумма расхода в валюте расхода"
    )
    currency: str = Field(..., min_length=3, max_length=3, description="Код валюты (ISO-style)")
    paid_by: str = Field(..., min_length=1, description="Идентификатор плательщика")
    split_type: SplitType = Field(
        SplitType.EQUAL, description="Способ деления (метаданные, доли задаются явно)"
    )
    participants: tuple[Participant, ...] = Field(
        ..., min_length=1, description="Участники расхода и их доли"
    )

    model_config = {"frozen": True}  # Immutable

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v):
        """Коды валют храним в верхнем регистре"""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def share_total(self) -> Decimal:
        """
        Сумма долей участников в валюте расхода (без перераспределения).

        Returns:
            Σ participants[].share
        """
        return sum((p.share for p in self.participants), Decimal("0"))

    def share_drift(self) -> Decimal:
        """
        Расхождение суммы долей с суммой расхода.

        Returns:
            Σ share - amount (положительное: доли перекрывают сумму)
        """
        return self.share_total() - self.amount

    def member_ids(self) -> list[str]:
        """Все идентификаторы, на которые ссылается расход (плательщик первым)."""
        return [self.paid_by] + [p.member for p in self.participants]
