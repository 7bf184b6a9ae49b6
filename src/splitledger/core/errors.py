"""
Errors — таксономия ошибок Ledger & Settlement Engine

Все ошибки — локальные ошибки валидации входных данных:
- UnknownCurrency: в RateTable нет курса для валюты
- UnknownMember: расход ссылается на участника, которого нет в roster группы
- InvalidAmount: отрицательная / нулевая / не-finite сумма или доля
- ShareMismatch: сумма долей не совпадает с суммой расхода (strict режим)
- ContractViolation: входной payload не проходит JSON Schema контракт

Ошибки не ретраятся (в чистом вычислении нечего ретраить) и не глотаются:
решение о видимом пользователю поведении принимает вызывающий слой.
"""

from typing import Any


# =============================================================================
# BASE
# =============================================================================


class LedgerError(Exception):
    """Базовая ошибка движка. `code` — стабильный машинный код ошибки."""

    code: str = "LEDGER_ERROR"


# =============================================================================
# ERRORS
# =============================================================================


class UnknownCurrency(LedgerError, KeyError):
    """Валюта отсутствует в таблице курсов."""

    code = "UNKNOWN_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Currency rate not found for {currency!r}")

    def __str__(self) -> str:
        # KeyError.__str__ оборачивает сообщение в кавычки
        return str(self.args[0])


class UnknownMember(LedgerError, LookupError):
    """Плательщик или участник расхода не входит в roster группы."""

    code = "UNKNOWN_MEMBER"

    def __init__(self, member_id: str, expense_id: str | None = None):
        self.member_id = member_id
        self.expense_id = expense_id
        where = f" (expense {expense_id!r})" if expense_id is not None else ""
        super().__init__(f"Member {member_id!r} is not in the group roster{where}")


class InvalidAmount(LedgerError, ValueError):
    """Невалидная денежная величина (отрицательная, не-finite, нулевая сумма)."""

    code = "INVALID_AMOUNT"

    def __init__(self, message: str, field: str = "", value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)


class ShareMismatch(InvalidAmount):
    """Сумма долей участников не покрывает сумму расхода (strict share check)."""

    code = "SHARE_MISMATCH"


class ContractViolation(LedgerError, ValueError):
    """Payload на границе не соответствует JSON Schema контракту."""

    code = "CONTRACT_VIOLATION"

    def __init__(self, message: str, contract: str, path: str = "$"):
        self.contract = contract
        self.path = path
        super().__init__(message)
