"""Infrastructure layer for payroll data access."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol

from piecework.core.catalog import TaskCatalog, load_default_catalog
from piecework.core.schema import DailyLogEntry, Period, SavedReport, WorkedDaysEntry, Worker
from piecework.domain import PayrollState


class PayrollRepository(Protocol):
    """Collaborator contract the payroll core reads from."""

    def get_logs(self, worker_ids: Iterable[int] | None, start: date, end: date) -> list[DailyLogEntry]: ...

    def get_worked_days(
        self, worker_ids: Iterable[int] | None, year: int, month: int, period: Period
    ) -> list[WorkedDaysEntry]: ...

    def get_catalog(self) -> TaskCatalog: ...

    def get_workers(self, ids: Iterable[int] | None = None) -> list[Worker]: ...

    def set_catalog(self, catalog: TaskCatalog) -> None: ...

    def add_worker(self, worker: Worker) -> None: ...

    def add_log(self, entry: DailyLogEntry) -> DailyLogEntry: ...

    def delete_log(self, log_id: str) -> bool: ...

    def upsert_worked_days(self, entry: WorkedDaysEntry) -> None: ...

    def save_report(self, report: SavedReport) -> None: ...

    def get_report(self, report_id: str) -> SavedReport | None: ...

    def list_reports(self) -> list[SavedReport]: ...

    def next_report_id(self) -> str: ...

    def reset(self) -> None: ...


class InMemoryPayrollRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self, catalog: TaskCatalog | None = None) -> None:
        self._initial_catalog = catalog
        self._state = PayrollState(catalog=catalog or load_default_catalog())
        self._log_counter = 0
        self._report_counter = 0

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def get_logs(self, worker_ids: Iterable[int] | None, start: date, end: date) -> list[DailyLogEntry]:
        wanted = set(worker_ids) if worker_ids is not None else None
        return [
            log
            for log in self._state.logs.values()
            if start <= log.date <= end and (wanted is None or log.worker_id in wanted)
        ]

    def get_worked_days(
        self, worker_ids: Iterable[int] | None, year: int, month: int, period: Period
    ) -> list[WorkedDaysEntry]:
        wanted = set(worker_ids) if worker_ids is not None else None
        return [
            entry
            for (worker_id, entry_year, entry_month, entry_period), entry in self._state.worked_days.items()
            if (entry_year, entry_month, entry_period) == (year, month, period)
            and (wanted is None or worker_id in wanted)
        ]

    def get_catalog(self) -> TaskCatalog:
        return self._state.catalog

    def get_workers(self, ids: Iterable[int] | None = None) -> list[Worker]:
        if ids is None:
            return list(self._state.workers.values())
        return [self._state.workers[worker_id] for worker_id in ids if worker_id in self._state.workers]

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------
    def set_catalog(self, catalog: TaskCatalog) -> None:
        self._state.catalog = catalog

    def add_worker(self, worker: Worker) -> None:
        self._state.workers[worker.id] = worker

    def add_log(self, entry: DailyLogEntry) -> DailyLogEntry:
        self._log_counter += 1
        stored = entry.model_copy(update={"id": f"log-{self._log_counter:05d}"})
        self._state.logs[stored.id] = stored
        return stored

    def delete_log(self, log_id: str) -> bool:
        return self._state.logs.pop(log_id, None) is not None

    def upsert_worked_days(self, entry: WorkedDaysEntry) -> None:
        key = (entry.worker_id, entry.year, entry.month, entry.period)
        if entry.days == 0:
            self._state.worked_days.pop(key, None)
        else:
            self._state.worked_days[key] = entry

    # ------------------------------------------------------------------
    # saved reports
    # ------------------------------------------------------------------
    def save_report(self, report: SavedReport) -> None:
        self._state.reports[report.id] = report

    def get_report(self, report_id: str) -> SavedReport | None:
        return self._state.reports.get(report_id)

    def list_reports(self) -> list[SavedReport]:
        return sorted(self._state.reports.values(), key=lambda item: item.created_at, reverse=True)

    def next_report_id(self) -> str:
        self._report_counter += 1
        return f"report-{self._report_counter:05d}"

    def reset(self) -> None:
        self._state = PayrollState(catalog=self._initial_catalog or load_default_catalog())
        self._log_counter = 0
        self._report_counter = 0
