"""Application service layer: fetches collaborator data and runs the assemblers."""
from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Sequence

from piecework.core import reports
from piecework.core.catalog import TaskCatalog
from piecework.core.entries import Correction, correct_stale_entries, shared_entries, stale_entries
from piecework.core.logging_config import get_logger
from piecework.core.periods import period_bounds, periods_in_range, season_bounds
from piecework.core.schema import (
    DailyLogEntry,
    ManualDeductions,
    Period,
    Report,
    ReportKind,
    SavedReport,
    TaskDefinition,
    WorkedDaysEntry,
    Worker,
)
from piecework.core.validation import ValidationError, validate_log, validate_worked_days
from piecework.infrastructure import InMemoryPayrollRepository, PayrollRepository

logger = get_logger("application")


def _parse_date(value: Any, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be an ISO date") from exc


def _parse_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} is required") from exc


def _parse_period(value: Any) -> Period:
    if value not in ("first", "second"):
        raise ValidationError("period must be 'first' or 'second'")
    return value


def _parse_worker_ids(raw: Any) -> list[int]:
    if not raw:
        return []
    if not isinstance(raw, list):
        raise ValidationError("worker_ids must be a list of worker ids")
    try:
        return [int(item) for item in raw]
    except (TypeError, ValueError) as exc:
        raise ValidationError("worker_ids must be a list of worker ids") from exc


def _parse_amount(value: Any, field: str) -> Decimal:
    try:
        amount = Decimal(str(value or "0"))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a number") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    return amount


def _parse_deductions(raw: Any) -> dict[int, ManualDeductions]:
    if not isinstance(raw, dict):
        return {}
    parsed: dict[int, ManualDeductions] = {}
    for worker_id, values in raw.items():
        if not isinstance(values, dict):
            continue
        try:
            key = int(worker_id)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"deductions key {worker_id!r} is not a worker id") from exc
        parsed[key] = ManualDeductions(
            advance=_parse_amount(values.get("advance"), "advance"),
            income_tax=_parse_amount(values.get("income_tax"), "income_tax"),
        )
    return parsed


class PayrollService:
    """Coordinates catalog administration, data entry and report generation."""

    def __init__(self, repository: PayrollRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    # catalog
    # ------------------------------------------------------------------
    def get_catalog(self) -> TaskCatalog:
        return self._repository.get_catalog()

    def set_task_price(self, task_id: int, price: Decimal) -> TaskCatalog:
        catalog = self._repository.get_catalog().set_price(task_id, price)
        self._repository.set_catalog(catalog)
        return catalog

    def add_task(self, category: str, description: str, unit: str, price: Decimal) -> TaskDefinition:
        catalog, task = self._repository.get_catalog().add_task(category, description, unit, price)
        self._repository.set_catalog(catalog)
        return task

    # ------------------------------------------------------------------
    # workers, logs and worked days
    # ------------------------------------------------------------------
    def add_worker(self, worker: Worker) -> None:
        self._repository.add_worker(worker)

    def list_workers(self) -> list[Worker]:
        return self._repository.get_workers()

    def record_shared_log(
        self,
        worker_ids: Sequence[int],
        task_id: int,
        day: date,
        quantity: Decimal,
        observation: str = "",
    ) -> list[DailyLogEntry]:
        """Store one entry per co-worker, the quantity divided evenly between them."""

        stored: list[DailyLogEntry] = []
        for entry in shared_entries(worker_ids, task_id, day, quantity, observation):
            validate_log(entry)
            stored.append(self._repository.add_log(entry))
        return stored

    def list_logs(self, start: date, end: date, worker_ids: Iterable[int] | None = None) -> list[DailyLogEntry]:
        return self._repository.get_logs(worker_ids, start, end)

    def stale_logs(self, start: date, end: date) -> list[DailyLogEntry]:
        return stale_entries(self._repository.get_logs(None, start, end), self._repository.get_catalog())

    def correct_stale_logs(self, start: date, end: date, stale_task_id: int, new_task_id: int) -> Correction:
        logs = self._repository.get_logs(None, start, end)
        correction = correct_stale_entries(logs, stale_task_id, new_task_id, self._repository.get_catalog())
        for log in correction.removed:
            if log.id:
                self._repository.delete_log(log.id)
        stored = [self._repository.add_log(entry) for entry in correction.replacements]
        logger.info(
            "stale task entries corrected",
            extra={"stale_task_id": stale_task_id, "new_task_id": new_task_id, "removed": len(correction.removed)},
        )
        return Correction(removed=correction.removed, replacements=stored)

    def set_worked_days(self, entry: WorkedDaysEntry) -> None:
        validate_worked_days(entry)
        self._repository.upsert_worked_days(entry)

    # ------------------------------------------------------------------
    # report generation
    # ------------------------------------------------------------------
    def _worked_days_for(self, worker_ids: Iterable[int] | None, periods: Iterable[tuple[int, int, Period]]) -> list[WorkedDaysEntry]:
        ids = list(worker_ids) if worker_ids is not None else None
        entries: list[WorkedDaysEntry] = []
        for year, month, period in periods:
            entries.extend(self._repository.get_worked_days(ids, year, month, period))
        return entries

    def _sources(
        self,
        worker_ids: list[int],
        start: date,
        end: date,
        periods: list[tuple[int, int, Period]],
        *,
        include_archived: bool = False,
    ) -> tuple[list[int], reports.ReportSources]:
        """Fetch inputs for the window.

        With no explicit ids, every worker with activity in the window is
        reported on; archived workers are left out unless ``include_archived``.
        """

        scope = worker_ids or None
        logs = self._repository.get_logs(scope, start, end)
        worked_days = self._worked_days_for(scope, periods)
        if not worker_ids:
            active = {log.worker_id for log in logs}
            active.update(entry.worker_id for entry in worked_days if entry.days > 0)
            if not include_archived:
                archived = {worker.id for worker in self._repository.get_workers(active) if worker.is_archived}
                active -= archived
            worker_ids = sorted(active)
        sources = reports.ReportSources(
            workers=self._repository.get_workers(worker_ids),
            logs=logs,
            worked_days=worked_days,
            catalog=self._repository.get_catalog(),
        )
        return worker_ids, sources

    def build_report(self, kind: ReportKind, params: dict[str, Any]) -> Report:
        worker_ids = _parse_worker_ids(params.get("worker_ids"))

        if kind in ("bimonthly", "detailed"):
            year = _parse_int(params.get("year"), "year")
            month = _parse_int(params.get("month"), "month")
            period = _parse_period(params.get("period"))
            if not 1 <= month <= 12:
                raise ValidationError("month must be between 1 and 12")
            if kind == "detailed" and not worker_ids:
                raise ValidationError("the detailed payroll needs at least one selected worker")
            start, end = period_bounds(year, month, period)
            worker_ids, sources = self._sources(worker_ids, start, end, [(year, month, period)])
            if kind == "bimonthly":
                return reports.bimonthly_summary(year, month, period, worker_ids, sources)
            return reports.detailed_payroll(
                year, month, period, worker_ids, sources, deductions=_parse_deductions(params.get("deductions"))
            )

        if kind == "season":
            if params.get("start_date") is None and params.get("end_date") is None:
                try:
                    start, end = season_bounds(_parse_int(params.get("season"), "season"))
                except (ValueError, OverflowError) as exc:
                    raise ValidationError("season must be a calendar year") from exc
            else:
                start = _parse_date(params.get("start_date"), "start_date")
                end = _parse_date(params.get("end_date"), "end_date")
            if end < start:
                raise ValidationError("end_date must not precede start_date")
            worker_ids, sources = self._sources(worker_ids, start, end, periods_in_range(start, end))
            return reports.season_summary(start, end, worker_ids, sources)

        if kind in ("payroll", "transfer"):
            start = _parse_date(params.get("start_date"), "start_date")
            end = _parse_date(params.get("end_date"), "end_date")
            if end < start:
                raise ValidationError("end_date must not precede start_date")
            worker_ids, sources = self._sources(worker_ids, start, end, periods_in_range(start, end))
            if kind == "transfer":
                return reports.transfer_order(start, end, worker_ids, sources)
            advances = {
                worker_id: item.advance for worker_id, item in _parse_deductions(params.get("deductions")).items()
            }
            return reports.payroll_report(start, end, worker_ids, sources, advances=advances)

        if kind == "annual":
            year = _parse_int(params.get("year"), "year")
            start, end = date(year, 1, 1), date(year, 12, 31)
            worker_ids, sources = self._sources(
                worker_ids, start, end, periods_in_range(start, end), include_archived=True
            )
            return reports.annual_summary(year, worker_ids, sources)

        raise ValidationError(f"unknown report kind {kind!r}")

    # ------------------------------------------------------------------
    # saved report snapshots
    # ------------------------------------------------------------------
    def save_report(self, report: Report) -> SavedReport:
        now = datetime.now(timezone.utc)
        saved = SavedReport(
            id=self._repository.next_report_id(),
            kind=report.kind,
            params=dict(report.params),
            snapshot=report,
            created_at=now,
            updated_at=now,
        )
        self._repository.save_report(saved)
        logger.info("report saved", extra={"report_id": saved.id, "kind": saved.kind, "rows": len(report.rows)})
        return saved

    def get_report(self, report_id: str) -> SavedReport | None:
        """Return the stored snapshot exactly as it was computed."""

        return self._repository.get_report(report_id)

    def list_reports(self) -> list[SavedReport]:
        return self._repository.list_reports()

    def recompute_report(self, report_id: str) -> SavedReport | None:
        """Rebuild a saved report from its parameters against the current catalog."""

        saved = self._repository.get_report(report_id)
        if saved is None:
            return None
        report = self.build_report(saved.kind, saved.params)
        updated = saved.model_copy(
            update={
                "snapshot": report,
                "revision": saved.revision + 1,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._repository.save_report(updated)
        logger.info(
            "report recomputed",
            extra={"report_id": report_id, "revision": updated.revision, "catalog_version": report.catalog_version},
        )
        return updated

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.reset()


_repository = InMemoryPayrollRepository()
_service = PayrollService(_repository)


def get_payroll_service() -> PayrollService:
    """Return the singleton payroll service for the process."""

    return _service


def reset_payroll_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
