"""Report assemblers: thin compositions over the payroll calculator.

Every assembler receives the explicit set of worker ids to report on, the
raw logs and worked-day records, the worker directory and a catalog
snapshot. Rows are ordered by worker name and paired with a column-wise
totals mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from piecework.core import settings
from piecework.core.calculator import compute_payroll_line, quantize_amount
from piecework.core.catalog import TaskCatalog, UnresolvedTask
from piecework.core.logging_config import get_logger
from piecework.core.name_normalize import sort_key
from piecework.core.periods import period_bounds, periods_in_range
from piecework.core.schema import (
    DailyLogEntry,
    ManualDeductions,
    PayrollConfig,
    PayrollLineItem,
    Period,
    Report,
    SummaryRow,
    TransferRow,
    WorkedDaysEntry,
    Worker,
)
from piecework.core.words import to_french_words

logger = get_logger("reports")

PAYROLL_TOTAL_FIELDS = [
    "total_operation",
    "seniority_bonus",
    "gross_total",
    "social_deduction",
    "worked_days",
    "milk_allowance",
    "meal_allowance",
    "advance",
    "net_pay",
]
DETAILED_TOTAL_FIELDS = [
    "total_operation",
    "seniority_bonus",
    "gross_total",
    "milk_allowance",
    "meal_allowance",
    "cnss_deduction",
    "amo_deduction",
    "advance",
    "income_tax",
    "net_pay",
    "worked_days",
]
ANNUAL_TOTAL_FIELDS = [
    "total_operation",
    "seniority_bonus",
    "gross_total",
    "social_deduction",
    "worked_days",
    "allowances",
    "net_pay",
]


@dataclass(frozen=True)
class ReportSources:
    """Materialised inputs fetched from the collaborators before assembling."""

    workers: Sequence[Worker]
    logs: Sequence[DailyLogEntry]
    worked_days: Sequence[WorkedDaysEntry]
    catalog: TaskCatalog

    def workers_by_id(self) -> dict[int, Worker]:
        return {worker.id: worker for worker in self.workers}


def _select_workers(worker_ids: Iterable[int], sources: ReportSources) -> list[Worker]:
    directory = sources.workers_by_id()
    selected: list[Worker] = []
    for worker_id in dict.fromkeys(worker_ids):
        worker = directory.get(worker_id)
        if worker is None:
            logger.debug("skipping unknown worker", extra={"worker_id": worker_id})
            continue
        selected.append(worker)
    return selected


def _logs_in_range(logs: Iterable[DailyLogEntry], worker_id: int, start: date, end: date) -> list[DailyLogEntry]:
    return [log for log in logs if log.worker_id == worker_id and start <= log.date <= end]


def _days_in_periods(
    entries: Iterable[WorkedDaysEntry], worker_id: int, periods: Iterable[tuple[int, int, Period]]
) -> list[WorkedDaysEntry]:
    wanted = set(periods)
    return [
        entry
        for entry in entries
        if entry.worker_id == worker_id and (entry.year, entry.month, entry.period) in wanted
    ]


def _line_value(row: PayrollLineItem, name: str) -> Decimal:
    if name == "allowances":
        return row.milk_allowance + row.meal_allowance
    value = getattr(row, name)
    return Decimal(value) if value is not None else Decimal("0")


def column_totals(rows: Iterable[PayrollLineItem], fields: Sequence[str]) -> dict[str, Decimal]:
    totals = {name: Decimal("0") for name in fields}
    for row in rows:
        for name in fields:
            totals[name] += _line_value(row, name)
    return totals


def _sorted(rows: list, name_attr: str = "worker_name") -> list:
    return sorted(rows, key=lambda row: (sort_key(getattr(row, name_attr)), row.worker_id))


def _with_deductions(config: PayrollConfig, deductions: ManualDeductions | None) -> PayrollConfig:
    if deductions is None:
        return config
    return config.model_copy(update={"manual_deductions": deductions})


def _deductions_params(deductions: Mapping[int, ManualDeductions]) -> dict[str, dict[str, str]]:
    return {
        str(worker_id): {"advance": str(item.advance), "income_tax": str(item.income_tax)}
        for worker_id, item in deductions.items()
    }


# ----------------------------------------------------------------------
# quantity statements (bi-monthly and season)
# ----------------------------------------------------------------------
def _quantity_matrix(
    start: date,
    end: date,
    periods: Iterable[tuple[int, int, Period]],
    worker_ids: Sequence[int],
    sources: ReportSources,
) -> tuple[list[SummaryRow], list[int], dict[str, Decimal]]:
    """Per-worker task quantities and worked days; idle workers are left out."""

    periods = list(periods)
    rows: list[SummaryRow] = []
    task_ids: set[int] = set()
    for worker in _select_workers(worker_ids, sources):
        quantities: dict[int, Decimal] = {}
        for log in _logs_in_range(sources.logs, worker.id, start, end):
            quantities[log.task_id] = quantities.get(log.task_id, Decimal("0")) + log.quantity
        days = sum(entry.days for entry in _days_in_periods(sources.worked_days, worker.id, periods))
        if not quantities and days == 0:
            continue
        task_ids.update(quantities)
        rows.append(SummaryRow(worker_id=worker.id, worker_name=worker.name, quantities=quantities, worked_days=days))

    ordered_task_ids = sorted(task_ids)
    totals: dict[str, Decimal] = {}
    for task_id in ordered_task_ids:
        totals[f"quantity_{task_id}"] = sum((row.quantities.get(task_id, Decimal("0")) for row in rows), Decimal("0"))
    totals["worked_days"] = Decimal(sum(row.worked_days for row in rows))
    return _sorted(rows), ordered_task_ids, totals


def _unresolved_tasks(task_ids: Iterable[int], catalog: TaskCatalog) -> list[dict]:
    return [
        ref.placeholder().model_dump(mode="json")
        for ref in (catalog.resolve(task_id) for task_id in task_ids)
        if isinstance(ref, UnresolvedTask)
    ]


def bimonthly_summary(
    year: int,
    month: int,
    period: Period,
    worker_ids: Iterable[int],
    sources: ReportSources,
) -> Report:
    start, end = period_bounds(year, month, period)
    worker_ids = list(worker_ids)
    rows, task_ids, totals = _quantity_matrix(start, end, [(year, month, period)], worker_ids, sources)

    return Report(
        kind="bimonthly",
        params={
            "year": year,
            "month": month,
            "period": period,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "worker_ids": worker_ids,
            "task_ids": task_ids,
            "unresolved_tasks": _unresolved_tasks(task_ids, sources.catalog),
        },
        rows=rows,
        totals=totals,
        catalog_version=sources.catalog.version,
    )


def season_summary(
    start: date,
    end: date,
    worker_ids: Iterable[int],
    sources: ReportSources,
) -> Report:
    """Quantity statement over an arbitrary range, typically a May to April season."""

    worker_ids = list(worker_ids)
    rows, task_ids, totals = _quantity_matrix(start, end, periods_in_range(start, end), worker_ids, sources)

    return Report(
        kind="season",
        params={
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "worker_ids": worker_ids,
            "task_ids": task_ids,
            "unresolved_tasks": _unresolved_tasks(task_ids, sources.catalog),
        },
        rows=rows,
        totals=totals,
        catalog_version=sources.catalog.version,
    )


# ----------------------------------------------------------------------
# payroll statement over an arbitrary date range
# ----------------------------------------------------------------------
def payroll_report(
    start: date,
    end: date,
    worker_ids: Iterable[int],
    sources: ReportSources,
    *,
    advances: Mapping[int, Decimal] | None = None,
    config: PayrollConfig | None = None,
) -> Report:
    config = config or settings.combined_config()
    advances = advances or {}
    worker_ids = list(worker_ids)
    periods = periods_in_range(start, end)

    rows: list[PayrollLineItem] = []
    for worker in _select_workers(worker_ids, sources):
        advance = advances.get(worker.id)
        line = compute_payroll_line(
            worker,
            _logs_in_range(sources.logs, worker.id, start, end),
            _days_in_periods(sources.worked_days, worker.id, periods),
            sources.catalog,
            _with_deductions(config, ManualDeductions(advance=advance) if advance else None),
        )
        if not line.has_activity:
            continue
        rows.append(line)

    deductions = {worker_id: ManualDeductions(advance=value) for worker_id, value in advances.items()}
    return Report(
        kind="payroll",
        params={
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "worker_ids": worker_ids,
            "deductions": _deductions_params(deductions),
        },
        rows=_sorted(rows),
        totals=column_totals(rows, PAYROLL_TOTAL_FIELDS),
        catalog_version=sources.catalog.version,
    )


# ----------------------------------------------------------------------
# detailed payroll (CNSS and AMO listed separately)
# ----------------------------------------------------------------------
def detailed_payroll(
    year: int,
    month: int,
    period: Period,
    worker_ids: Iterable[int],
    sources: ReportSources,
    *,
    deductions: Mapping[int, ManualDeductions] | None = None,
    config: PayrollConfig | None = None,
) -> Report:
    config = config or settings.split_config()
    deductions = deductions or {}
    worker_ids = list(worker_ids)
    start, end = period_bounds(year, month, period)

    # explicitly selected workers are always listed, even without activity
    rows = [
        compute_payroll_line(
            worker,
            _logs_in_range(sources.logs, worker.id, start, end),
            _days_in_periods(sources.worked_days, worker.id, [(year, month, period)]),
            sources.catalog,
            _with_deductions(config, deductions.get(worker.id)),
        )
        for worker in _select_workers(worker_ids, sources)
    ]

    return Report(
        kind="detailed",
        params={
            "year": year,
            "month": month,
            "period": period,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "worker_ids": worker_ids,
            "deductions": _deductions_params(deductions),
        },
        rows=_sorted(rows),
        totals=column_totals(rows, DETAILED_TOTAL_FIELDS),
        catalog_version=sources.catalog.version,
    )


# ----------------------------------------------------------------------
# bank transfer order
# ----------------------------------------------------------------------
def transfer_order(
    start: date,
    end: date,
    worker_ids: Iterable[int],
    sources: ReportSources,
    *,
    config: PayrollConfig | None = None,
) -> Report:
    config = config or settings.combined_config()
    worker_ids = list(worker_ids)
    periods = periods_in_range(start, end)

    rows: list[TransferRow] = []
    for worker in _select_workers(worker_ids, sources):
        line = compute_payroll_line(
            worker,
            _logs_in_range(sources.logs, worker.id, start, end),
            _days_in_periods(sources.worked_days, worker.id, periods),
            sources.catalog,
            config,
        )
        if line.net_pay <= 0:
            continue
        rows.append(
            TransferRow(
                worker_id=worker.id,
                worker_name=worker.name,
                rib=worker.rib,
                bank_code=worker.bank_code,
                net_pay=line.net_pay,
                net_pay_words=to_french_words(quantize_amount(line.net_pay)),
            )
        )

    total = sum((row.net_pay for row in rows), Decimal("0"))
    return Report(
        kind="transfer",
        params={
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "worker_ids": worker_ids,
            "total_words": to_french_words(quantize_amount(total)),
        },
        rows=_sorted(rows),
        totals={"net_pay": total},
        catalog_version=sources.catalog.version,
    )


# ----------------------------------------------------------------------
# annual summary
# ----------------------------------------------------------------------
def annual_summary(
    year: int,
    worker_ids: Iterable[int],
    sources: ReportSources,
    *,
    config: PayrollConfig | None = None,
) -> Report:
    config = config or settings.combined_config()
    worker_ids = list(worker_ids)
    start, end = date(year, 1, 1), date(year, 12, 31)

    rows: list[PayrollLineItem] = []
    for worker in _select_workers(worker_ids, sources):
        line = compute_payroll_line(
            worker,
            _logs_in_range(sources.logs, worker.id, start, end),
            [entry for entry in sources.worked_days if entry.worker_id == worker.id and entry.year == year],
            sources.catalog,
            config,
        )
        if line.net_pay <= 0:
            continue
        rows.append(line)

    return Report(
        kind="annual",
        params={"year": year, "worker_ids": worker_ids},
        rows=_sorted(rows),
        totals=column_totals(rows, ANNUAL_TOTAL_FIELDS),
        catalog_version=sources.catalog.version,
    )
