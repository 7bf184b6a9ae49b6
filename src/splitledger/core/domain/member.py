"""
Member — участник группы

Immutable Pydantic модель. Roster группы принадлежит внешнему слою,
движок только читает его на время одного вычисления.
"""

from pydantic import BaseModel, Field


class Member(BaseModel):
    """
    Участник группы расходов.

    `id` непрозрачен для движка и уникален в пределах группы.
    name / email / avatar — display metadata, переносится в SettlementTransaction.
    """

    id: str = Field(..., min_length=1, description="Идентификатор участника")
    name: str = Field("", description="Отображаемое имя")
    email: str | None = Field(None, description="Email (display metadata)")
    avatar: str | None = Field(None, description="URL аватара (display metadata)")

    model_config = {"frozen": True}  # Immutable
