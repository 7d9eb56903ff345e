from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from piecework.core.catalog import KnownTask, TaskCatalog
from piecework.core.schema import (
    ContributionSplit,
    DailyLogEntry,
    PayrollConfig,
    PayrollLineItem,
    TaskLine,
    WorkedDaysEntry,
    Worker,
)

HUNDRED = Decimal("100")


@dataclass
class AggregatedLogs:
    total_operation: Decimal = Decimal("0")
    quantities: dict[int, Decimal] = field(default_factory=dict)


def quantize_amount(value: Decimal) -> Decimal:
    """Round to centimes for display. Never used inside the calculation."""

    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _aggregate_logs(logs: Iterable[DailyLogEntry], catalog: TaskCatalog, config: PayrollConfig) -> AggregatedLogs:
    agg = AggregatedLogs()
    excluded = config.allowance_task_ids
    for log in logs:
        if log.task_id in excluded:
            continue
        ref = catalog.resolve(log.task_id)
        if not isinstance(ref, KnownTask):
            continue
        agg.total_operation += log.quantity * ref.price
        agg.quantities[log.task_id] = agg.quantities.get(log.task_id, Decimal("0")) + log.quantity
    return agg


def total_operation(logs: Iterable[DailyLogEntry], catalog: TaskCatalog, config: PayrollConfig) -> Decimal:
    """Piece-rate earnings: sum of quantity x price, allowance tasks excluded."""

    return _aggregate_logs(logs, catalog, config).total_operation


def worked_days_total(entries: Iterable[WorkedDaysEntry]) -> int:
    return sum(entry.days for entry in entries)


def _task_lines(quantities: dict[int, Decimal], catalog: TaskCatalog) -> list[TaskLine]:
    lines: list[TaskLine] = []
    for task_id in sorted(quantities):
        task = catalog.get(task_id)
        if task is None:
            continue
        quantity = quantities[task_id]
        lines.append(
            TaskLine(
                task_id=task_id,
                description=task.description,
                unit=task.unit,
                quantity=quantity,
                price=task.price,
                amount=quantity * task.price,
            )
        )
    return lines


def compute_payroll_line(
    worker: Worker,
    logs: Iterable[DailyLogEntry],
    worked_days: Iterable[WorkedDaysEntry],
    catalog: TaskCatalog,
    config: PayrollConfig,
) -> PayrollLineItem:
    """Turn one worker's logs and worked days into payroll figures.

    ``logs`` and ``worked_days`` must already be restricted to the worker and
    the reporting window. Unknown task ids are priced at zero; nothing here
    raises on missing reference data.
    """

    agg = _aggregate_logs(logs, catalog, config)
    days = worked_days_total(worked_days)

    seniority_bonus = agg.total_operation * (worker.seniority_percentage / HUNDRED)
    gross = agg.total_operation + seniority_bonus

    cnss: Decimal | None = None
    amo: Decimal | None = None
    if isinstance(config.contribution_rate, ContributionSplit):
        cnss = gross * config.contribution_rate.cnss_rate
        amo = gross * config.contribution_rate.amo_rate
        social = cnss + amo
    else:
        social = gross * config.contribution_rate

    milk = days * catalog.price_of(config.milk_task_id)
    meal = days * catalog.price_of(config.meal_task_id)

    deductions = config.manual_deductions
    advance = deductions.advance if deductions else Decimal("0")
    income_tax = deductions.income_tax if deductions else Decimal("0")

    net = gross - social + milk + meal - advance - income_tax

    return PayrollLineItem(
        worker_id=worker.id,
        worker_name=worker.name,
        task_lines=_task_lines(agg.quantities, catalog),
        total_operation=agg.total_operation,
        seniority_rate=worker.seniority_percentage,
        seniority_bonus=seniority_bonus,
        gross_total=gross,
        social_deduction=social,
        cnss_deduction=cnss,
        amo_deduction=amo,
        worked_days=days,
        milk_allowance=milk,
        meal_allowance=meal,
        advance=advance,
        income_tax=income_tax,
        net_pay=net,
    )
