from __future__ import annotations

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from piecework.core.calculator import compute_payroll_line, quantize_amount, total_operation, worked_days_total
from piecework.core.catalog import TaskCatalog
from piecework.core.schema import (
    ContributionSplit,
    DailyLogEntry,
    ManualDeductions,
    PayrollConfig,
    TaskDefinition,
    WorkedDaysEntry,
    Worker,
)

MILK = 37
MEAL = 47


@pytest.fixture()
def catalog() -> TaskCatalog:
    return TaskCatalog(
        [
            TaskDefinition(id=1, description="Réception", category="Réception", unit="par quintal", price=Decimal("10.00")),
            TaskDefinition(id=12, description="Débardage", category="Débardage", unit="par quintal", price=Decimal("1.65")),
            TaskDefinition(id=MILK, description="Indemnité de lait", category="Diverses", unit="par jour", price=Decimal("7.00")),
            TaskDefinition(id=MEAL, description="Indemnité de panier", category="Diverses", unit="par jour", price=Decimal("10.00")),
        ]
    )


@pytest.fixture()
def config() -> PayrollConfig:
    return PayrollConfig(contribution_rate=Decimal("0.0674"), milk_task_id=MILK, meal_task_id=MEAL)


def _log(task_id: int, quantity: str, day: int = 3, worker_id: int = 1) -> DailyLogEntry:
    return DailyLogEntry(worker_id=worker_id, task_id=task_id, date=date(2025, 3, day), quantity=Decimal(quantity))


def _days(days: int, period: str = "first", worker_id: int = 1) -> WorkedDaysEntry:
    return WorkedDaysEntry(worker_id=worker_id, year=2025, month=3, period=period, days=days)


def test_reference_scenario(catalog, config):
    worker = Worker(id=1, name="Ahmed", seniority_percentage=Decimal("10"))
    line = compute_payroll_line(worker, [_log(1, "100")], [_days(10)], catalog, config)

    assert line.total_operation == Decimal("1000")
    assert line.seniority_bonus == Decimal("100")
    assert line.gross_total == Decimal("1100")
    assert line.social_deduction == Decimal("74.14")
    assert line.milk_allowance == Decimal("70")
    assert line.meal_allowance == Decimal("100")
    assert line.net_pay == Decimal("1195.86")
    assert line.worked_days == 10


def test_additivity_over_split_ranges(catalog, config):
    logs = [_log(12, "12.5", day=2), _log(1, "3.3", day=9), _log(12, "7.25", day=20), _log(1, "1", day=28)]
    first = [log for log in logs if log.date.day <= 15]
    second = [log for log in logs if log.date.day > 15]

    whole = total_operation(logs, catalog, config)
    assert total_operation(first, catalog, config) + total_operation(second, catalog, config) == whole


def test_allowance_tasks_do_not_count_as_piece_work(catalog, config):
    worker = Worker(id=1, name="Ahmed")
    line = compute_payroll_line(worker, [_log(MILK, "5"), _log(MEAL, "2")], [], catalog, config)

    assert line.total_operation == 0
    assert line.milk_allowance == 0
    assert line.task_lines == []
    assert not line.has_activity


def test_seniority_is_linear(catalog, config):
    logs = [_log(12, "40")]
    flat = compute_payroll_line(Worker(id=1, name="A"), logs, [], catalog, config)
    assert flat.gross_total == flat.total_operation

    senior = compute_payroll_line(Worker(id=1, name="A", seniority_percentage=Decimal("15")), logs, [], catalog, config)
    assert senior.seniority_bonus == senior.total_operation * Decimal("15") / Decimal("100")


def test_recomputation_is_identical(catalog, config):
    worker = Worker(id=1, name="Ahmed", seniority_percentage=Decimal("5"))
    logs = [_log(1, "3.333"), _log(12, "10")]
    first = compute_payroll_line(worker, logs, [_days(4)], catalog, config)
    second = compute_payroll_line(worker, logs, [_days(4)], catalog, config)
    assert first.model_dump_json() == second.model_dump_json()


def test_unknown_task_prices_to_zero(catalog, config):
    worker = Worker(id=1, name="Ahmed")
    line = compute_payroll_line(worker, [_log(1, "2"), _log(999, "50")], [], catalog, config)

    assert line.total_operation == Decimal("20")
    assert [item.task_id for item in line.task_lines] == [1]


def test_task_lines_sum_quantities_per_task(catalog, config):
    worker = Worker(id=1, name="Ahmed")
    logs = [_log(12, "10"), _log(12, "5.5", day=4), _log(1, "1")]
    line = compute_payroll_line(worker, logs, [], catalog, config)

    assert [(item.task_id, item.quantity) for item in line.task_lines] == [(1, Decimal("1")), (12, Decimal("15.5"))]
    assert sum(item.amount for item in line.task_lines) == line.total_operation


def test_split_contribution_and_manual_deductions(catalog):
    config = PayrollConfig(
        contribution_rate=ContributionSplit(cnss_rate=Decimal("0.0448"), amo_rate=Decimal("0.0226")),
        milk_task_id=MILK,
        meal_task_id=MEAL,
        manual_deductions=ManualDeductions(advance=Decimal("50"), income_tax=Decimal("12.5")),
    )
    worker = Worker(id=1, name="Ahmed")
    line = compute_payroll_line(worker, [_log(1, "100")], [_days(2)], catalog, config)

    assert line.cnss_deduction == Decimal("44.8")
    assert line.amo_deduction == Decimal("22.6")
    assert line.social_deduction == Decimal("67.4")
    assert line.net_pay == Decimal("1000") - Decimal("67.4") + Decimal("34") - Decimal("50") - Decimal("12.5")


def test_worked_days_are_summed_across_periods():
    assert worked_days_total([_days(7), _days(9, period="second")]) == 16
    assert worked_days_total([]) == 0


def test_full_precision_until_presentation(catalog, config):
    worker = Worker(id=1, name="Ahmed", seniority_percentage=Decimal("3"))
    line = compute_payroll_line(worker, [_log(12, "0.333")], [], catalog, config)

    assert line.total_operation == Decimal("0.54945")
    assert quantize_amount(line.total_operation) == Decimal("0.55")
    assert quantize_amount(Decimal("2.675")) == Decimal("2.68")
