"""
JSON Schema Contract Validators

Граница движка с внешним слоем (CRUD/API): сырые JSON payload-ы проверяются
по формальным JSON Schema контрактам и только потом превращаются в доменные
модели. Нарушение контракта сообщается в таксономии движка:
- денежное поле (amount, share, курс, сумма баланса) → InvalidAmount
- всё остальное (нет поля, лишнее поле, формат кода валюты) → ContractViolation

Схемы (лежат рядом с модулем, в schema/):
- expense_record.json — запись о расходе (вход)
- rate_table.json — снапшот курсов валют (вход)
- settlement_plan.json — результат: балансы + переводы (выход)
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match
from pydantic import ValidationError

from splitledger.core.domain.expense import ExpenseRecord
from splitledger.core.domain.rates import RateTable
from splitledger.core.errors import ContractViolation, InvalidAmount
from splitledger.core.math.numerical_safeguards import to_decimal

# Поля, нарушение в которых — ошибка денежной величины
_AMOUNT_FIELDS = frozenset({"amount", "share", "paid", "owed", "lent", "net"})


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются внутри пакета (splitledger/core/contracts/schema/).
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'expense_record')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема не проходит meta-validation
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT
# =============================================================================


class Contract:
    """
    Один JSON Schema контракт.

    validate() сообщает о самой релевантной ошибке (jsonschema best_match)
    как LedgerError, чтобы вызывающий слой обрабатывал вход из JSON так же,
    как уже построенные доменные модели.
    """

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self._validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Проверка payload.

        Raises:
            InvalidAmount: Нарушение в денежном поле
            ContractViolation: Любое другое нарушение контракта
        """
        error = best_match(self._validator.iter_errors(data))
        if error is None:
            return

        path = error.json_path
        message = f"{self.schema_name} contract violated at {path}: {error.message}"
        if _is_amount_path(list(error.path)):
            raise InvalidAmount(message, path, error.instance) from error
        raise ContractViolation(message, self.schema_name, path) from error


def _is_amount_path(path: list) -> bool:
    if not path:
        return False
    if path[-1] in _AMOUNT_FIELDS:
        return True
    # rates.<CODE>
    return len(path) >= 2 and path[-2] == "rates"


EXPENSE_RECORD = Contract("expense_record")
RATE_TABLE = Contract("rate_table")
SETTLEMENT_PLAN = Contract("settlement_plan")


# =============================================================================
# PARSING
# =============================================================================


def parse_expense_record(data: Dict[str, Any]) -> ExpenseRecord:
    """
    Сырой expense_record payload → ExpenseRecord.

    Числа из JSON переводятся в Decimal через to_decimal (0.1 → Decimal("0.1")).

    Raises:
        InvalidAmount: Невалидная сумма или доля
        ContractViolation: Payload не соответствует контракту
    """
    EXPENSE_RECORD.validate(data)
    payload = dict(data)
    payload["amount"] = to_decimal(data["amount"], "amount")
    payload["participants"] = [
        {"member": p["member"], "share": to_decimal(p["share"], "share")}
        for p in data["participants"]
    ]
    return _build(ExpenseRecord, payload, EXPENSE_RECORD)


def parse_rate_table(data: Dict[str, Any]) -> RateTable:
    """
    Сырой rate_table payload → RateTable.

    Raises:
        InvalidAmount: Невалидный курс
        ContractViolation: Payload не соответствует контракту или нарушен
            инвариант таблицы (курс базовой валюты != 1)
    """
    RATE_TABLE.validate(data)
    payload = dict(data)
    payload["rates"] = {code: to_decimal(rate, code) for code, rate in data["rates"].items()}
    return _build(RateTable, payload, RATE_TABLE)


def _build(model, payload: Dict[str, Any], contract: Contract):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ContractViolation(
            f"{contract.schema_name} rejected by model: {e.errors()[0]['msg']}",
            contract.schema_name,
        ) from e


def validate_settlement_plan(data: Dict[str, Any]) -> None:
    """
    Проверка выходного settlement_plan payload.

    Raises:
        InvalidAmount: Нарушение в денежном поле
        ContractViolation: Payload не соответствует контракту
    """
    SETTLEMENT_PLAN.validate(data)

