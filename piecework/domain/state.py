"""In-memory state held by the payroll repository."""
from __future__ import annotations

from dataclasses import dataclass, field

from piecework.core.catalog import TaskCatalog
from piecework.core.schema import DailyLogEntry, SavedReport, WorkedDaysEntry, Worker

WorkedDaysKey = tuple[int, int, int, str]


@dataclass(slots=True)
class PayrollState:
    """Everything the payroll engine reads, for a single organisation."""

    catalog: TaskCatalog
    workers: dict[int, Worker] = field(default_factory=dict)
    logs: dict[str, DailyLogEntry] = field(default_factory=dict)
    worked_days: dict[WorkedDaysKey, WorkedDaysEntry] = field(default_factory=dict)
    reports: dict[str, SavedReport] = field(default_factory=dict)
