"""Тесты для Settlement Engine (pipeline всех стадий)

Покрытие:
- Сценарии 1-4 end-to-end
- PAIRWISE и TOTALS режимы дают одинаковый результат
- Ошибки стадий → SettlementResult с error_code
- settlement_plan payload проходит JSON Schema контракт
- Расчёт по сырым JSON payload-ам (evaluate_payload)
- Идемпотентность на одном снапшоте
"""

import logging
from decimal import Decimal

import pytest

from splitledger.core.contracts import validate_settlement_plan
from splitledger.core.domain import ExpenseRecord, Member, RateTable, split_equally
from splitledger.engine import (
    EngineConfig,
    LedgerConfig,
    NormalizerConfig,
    SettlementEngine,
    SettlementMode,
    ShareCheckMode,
    settle_group,
    settle_payload,
)


D = Decimal


# =============================================================================
# FIXTURES
# =============================================================================


def expense(expense_id, paid_by, amount, participants, currency="USD", split_type="custom"):
    return ExpenseRecord(
        id=expense_id,
        group_id="trip",
        amount=D(str(amount)),
        currency=currency,
        paid_by=paid_by,
        split_type=split_type,
        participants=participants,
    )


def shares(**kwargs) -> list[dict]:
    return [{"member": member, "share": D(str(share))} for member, share in kwargs.items()]


@pytest.fixture
def rates() -> RateTable:
    return RateTable.default()


@pytest.fixture
def roster() -> list[Member]:
    return [
        Member(id="a", name="Alice"),
        Member(id="b", name="Bob"),
        Member(id="c", name="Carol"),
    ]


@pytest.fixture
def trip(roster: list[Member]) -> list[ExpenseRecord]:
    """Поездка: расходы в трёх валютах"""
    return [
        expense("hotel", "a", "300.00", split_equally("300.00", ["a", "b", "c"]), split_type="equal"),
        expense("dinner", "b", "93.00", shares(a="31", b="31", c="31"), currency="EUR"),
        expense("taxi", "c", "15.80", shares(a="7.90", c="7.90"), currency="GBP"),
        expense("museum", "a", "45.00", shares(b="22.50", c="22.50")),
    ]


# =============================================================================
# SCENARIOS
# =============================================================================


class TestScenarios:
    """Сценарии end-to-end"""

    def test_two_members(self, rates: RateTable) -> None:
        roster = [Member(id="a", name="Alice"), Member(id="b", name="Bob")]
        result = settle_group(
            [expense("e1", "a", 100, shares(a=50, b=50))], rates, "USD", roster
        )

        assert result.ok
        assert result.error_code == ""
        assert result.balances["a"].net == D("50")
        assert result.balances["b"].net == D("-50")
        assert len(result.settlements) == 1
        settlement = result.settlements[0]
        assert (settlement.from_member.name, settlement.to_member.name) == ("Bob", "Alice")
        assert (settlement.amount, settlement.currency) == (D("50.00"), "USD")

    def test_three_members(self, rates: RateTable, roster: list[Member]) -> None:
        expenses = [
            expense("e1", "a", 90, shares(a=30, b=30, c=30)),
            expense("e2", "b", 30, shares(a=10, b=10, c=10)),
        ]
        result = settle_group(expenses, rates, "USD", roster)

        assert result.net == {"a": D("50"), "b": D("-10"), "c": D("-40")}
        assert result.pairwise == {
            ("b", "a"): D("20"),
            ("c", "a"): D("30"),
            ("c", "b"): D("10"),
        }
        assert [(s.from_member.id, s.to_member.id, s.amount) for s in result.settlements] == [
            ("c", "a", D("40.00")),
            ("b", "a", D("10.00")),
        ]

    def test_no_expenses_all_settled(self, rates: RateTable, roster: list[Member]) -> None:
        result = settle_group([], rates, "USD", roster)

        assert result.ok
        assert result.settlements == []
        assert all(balance.is_settled() for balance in result.balances.values())

    def test_uneven_shares(self, rates: RateTable, roster: list[Member]) -> None:
        result = settle_group(
            [expense("e1", "a", "10.00", shares(a="3.33", b="3.33", c="3.34"))],
            rates,
            "USD",
            roster,
        )
        assert [(s.from_member.id, s.amount) for s in result.settlements] == [
            ("c", D("3.34")),
            ("b", D("3.33")),
        ]

    def test_cross_currency(self, rates: RateTable, roster: list[Member]) -> None:
        result = settle_group(
            [expense("e1", "a", 93, shares(a="46.50", b="46.50"), currency="EUR")],
            rates,
            "usd",
            roster,
        )
        assert result.currency == "USD"
        assert [(s.from_member.id, s.amount, s.currency) for s in result.settlements] == [
            ("b", D("50.00"), "USD")
        ]


# =============================================================================
# MODES
# =============================================================================


class TestModes:
    """PAIRWISE (канонический) и TOTALS (упрощённый)"""

    def test_default_mode_pairwise(self) -> None:
        assert SettlementEngine().config.mode == SettlementMode.PAIRWISE

    def test_modes_agree(self, rates: RateTable, roster: list[Member], trip) -> None:
        pairwise = SettlementEngine(EngineConfig(mode=SettlementMode.PAIRWISE))
        totals = SettlementEngine(EngineConfig(mode=SettlementMode.TOTALS))

        by_pairs = pairwise.evaluate(trip, rates, "USD", roster)
        by_totals = totals.evaluate(trip, rates, "USD", roster)

        assert by_pairs.ok and by_totals.ok
        assert by_pairs.settlements == by_totals.settlements
        for member_id in by_pairs.net:
            assert abs(by_pairs.net[member_id] - by_totals.net[member_id]) < D("1e-20")

    def test_trip_settles_everyone(self, rates: RateTable, roster: list[Member], trip) -> None:
        result = settle_group(trip, rates, "USD", roster)

        remaining = dict(result.net)
        for settlement in result.settlements:
            remaining[settlement.from_member.id] += settlement.amount
            remaining[settlement.to_member.id] -= settlement.amount
        assert all(abs(value) <= D("0.01") for value in remaining.values())

    def test_idempotent(self, rates: RateTable, roster: list[Member], trip) -> None:
        engine = SettlementEngine()
        first = engine.evaluate(trip, rates, "EUR", roster)
        second = engine.evaluate(trip, rates, "EUR", roster)

        assert first == second
        assert first.to_plan() == second.to_plan()


# =============================================================================
# FAILURES
# =============================================================================


class TestFailures:
    """Ошибки стадий превращаются в типизированный результат"""

    def test_unknown_member(
        self, rates: RateTable, roster: list[Member], caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="splitledger.engine.pipeline"):
            result = settle_group(
                [expense("e1", "zed", 10, shares(a=10))], rates, "USD", roster
            )

        assert not result.ok
        assert result.error_code == "UNKNOWN_MEMBER"
        assert "zed" in result.details
        assert result.settlements == [] and result.balances == {}
        assert "UNKNOWN_MEMBER" in caplog.text

    def test_unknown_currency(self, rates: RateTable, roster: list[Member]) -> None:
        result = settle_group(
            [expense("e1", "a", 10, shares(a=5, b=5), currency="XYZ")], rates, "USD", roster
        )
        assert result.error_code == "UNKNOWN_CURRENCY"

    def test_unknown_currency_lenient(self, rates: RateTable, roster: list[Member]) -> None:
        config = EngineConfig(normalizer=NormalizerConfig(strict=False))
        result = settle_group(
            [expense("e1", "a", 10, shares(a=5, b=5), currency="XYZ")],
            rates,
            "USD",
            roster,
            config=config,
        )
        assert result.ok
        assert result.settlements[0].amount == D("5.00")

    def test_invalid_amount(self, rates: RateTable, roster: list[Member]) -> None:
        result = settle_group(
            [expense("e1", "a", 0, shares(a=0, b=0))], rates, "USD", roster
        )
        assert result.error_code == "INVALID_AMOUNT"

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_amount(self, rates: RateTable, roster: list[Member], amount: str) -> None:
        result = settle_group(
            [expense("e1", "a", amount, shares(a=5, b=5))], rates, "USD", roster
        )
        assert result.error_code == "INVALID_AMOUNT"
        assert "finite" in result.details

    def test_non_finite_share(self, rates: RateTable, roster: list[Member]) -> None:
        result = settle_group(
            [expense("e1", "a", 10, shares(a=5, b="NaN"))], rates, "USD", roster
        )
        assert result.error_code == "INVALID_AMOUNT"
        assert "share of b" in result.details

    def test_share_mismatch_strict(self, rates: RateTable, roster: list[Member]) -> None:
        config = EngineConfig(ledger=LedgerConfig(share_check=ShareCheckMode.STRICT))
        result = settle_group(
            [expense("e1", "a", 10, shares(a=2, b=2))], rates, "USD", roster, config=config
        )
        assert result.error_code == "SHARE_MISMATCH"


# =============================================================================
# CONTRACT
# =============================================================================


class TestPlanContract:
    """to_plan() соответствует settlement_plan.json"""

    def test_plan_valid(self, rates: RateTable, roster: list[Member], trip) -> None:
        plan = settle_group(trip, rates, "USD", roster).to_plan()

        validate_settlement_plan(plan)
        assert plan["currency"] == "USD"
        assert set(plan["balances"]) == {"a", "b", "c"}
        assert all(isinstance(s["amount"], float) for s in plan["settlements"])

    def test_plan_two_members(self, rates: RateTable) -> None:
        roster = [Member(id="a"), Member(id="b")]
        plan = settle_group(
            [expense("e1", "a", 100, shares(a=50, b=50))], rates, "USD", roster
        ).to_plan()

        assert plan == {
            "currency": "USD",
            "balances": {
                "a": {"paid": 100.0, "owed": 0.0, "lent": 50.0, "net": 50.0},
                "b": {"paid": 0.0, "owed": 50.0, "lent": 0.0, "net": -50.0},
            },
            "settlements": [{"from": "b", "to": "a", "amount": 50.0, "currency": "USD"}],
        }


# =============================================================================
# PAYLOAD
# =============================================================================


class TestPayload:
    """Расчёт по сырым JSON payload-ам через контракты"""

    @pytest.fixture
    def rate_payload(self) -> dict:
        return {"base_currency": "USD", "rates": {"EUR": 0.93, "GBP": 0.79}}

    @pytest.fixture
    def expense_payloads(self) -> list[dict]:
        return [
            {
                "id": "e1",
                "group_id": "trip",
                "amount": 90,
                "currency": "USD",
                "paid_by": "a",
                "participants": [
                    {"member": "a", "share": 30},
                    {"member": "b", "share": 30},
                    {"member": "c", "share": 30},
                ],
            },
            {
                "id": "e2",
                "group_id": "trip",
                "amount": 27.9,
                "currency": "EUR",
                "paid_by": "b",
                "split_type": "equal",
                "participants": [
                    {"member": "a", "share": 9.3},
                    {"member": "b", "share": 9.3},
                    {"member": "c", "share": 9.3},
                ],
            },
        ]

    def test_scenario_from_payloads(
        self, roster: list[Member], rate_payload, expense_payloads
    ) -> None:
        from_payload = settle_payload(expense_payloads, rate_payload, "USD", roster)

        assert from_payload.ok
        assert from_payload.net == {"a": D("50"), "b": D("-10"), "c": D("-40")}
        assert [(s.from_member.id, s.amount) for s in from_payload.settlements] == [
            ("c", D("40.00")),
            ("b", D("10.00")),
        ]

    def test_negative_amount_is_invalid_amount(
        self, roster: list[Member], rate_payload, expense_payloads
    ) -> None:
        expense_payloads[1]["amount"] = -27.9
        result = SettlementEngine().evaluate_payload(expense_payloads, rate_payload, "USD", roster)

        assert result.error_code == "INVALID_AMOUNT"
        assert "$.amount" in result.details

    def test_malformed_expense_is_contract_violation(
        self, roster: list[Member], rate_payload, expense_payloads, caplog: pytest.LogCaptureFixture
    ) -> None:
        del expense_payloads[0]["paid_by"]
        with caplog.at_level(logging.WARNING, logger="splitledger.engine.pipeline"):
            result = settle_payload(expense_payloads, rate_payload, "USD", roster)

        assert not result.ok
        assert result.error_code == "CONTRACT_VIOLATION"
        assert "paid_by" in result.details
        assert "CONTRACT_VIOLATION" in caplog.text

    def test_bad_rate_is_invalid_amount(
        self, roster: list[Member], rate_payload, expense_payloads
    ) -> None:
        rate_payload["rates"]["EUR"] = 0
        result = settle_payload(expense_payloads, rate_payload, "USD", roster)
        assert result.error_code == "INVALID_AMOUNT"

    def test_ledger_errors_still_reported(
        self, rate_payload, expense_payloads
    ) -> None:
        result = settle_payload(expense_payloads, rate_payload, "USD", [Member(id="a")])
        assert result.error_code == "UNKNOWN_MEMBER"

    def test_failed_result_plan_is_empty(
        self, roster: list[Member], rate_payload, expense_payloads
    ) -> None:
        del expense_payloads[0]["id"]
        plan = settle_payload(expense_payloads, rate_payload, "usd", roster).to_plan()
        assert plan == {"currency": "USD", "balances": {}, "settlements": []}
