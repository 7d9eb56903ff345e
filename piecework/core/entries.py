"""Helpers applied to daily log entries before they reach the calculator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from piecework.core.catalog import TaskCatalog, UnresolvedTask
from piecework.core.schema import DailyLogEntry
from piecework.core.validation import CatalogError, ValidationError


def split_quantity(quantity: Decimal, worker_count: int) -> Decimal:
    """Share of a multi-worker entry credited to each co-worker."""

    if worker_count < 1:
        raise ValidationError("at least one worker is required")
    return quantity / worker_count


def shared_entries(
    worker_ids: Sequence[int],
    task_id: int,
    day: date,
    quantity: Decimal,
    observation: str = "",
) -> list[DailyLogEntry]:
    share = split_quantity(quantity, len(worker_ids))
    return [
        DailyLogEntry(worker_id=worker_id, task_id=task_id, date=day, quantity=share, observation=observation)
        for worker_id in worker_ids
    ]


def stale_entries(logs: Iterable[DailyLogEntry], catalog: TaskCatalog) -> list[DailyLogEntry]:
    return [log for log in logs if isinstance(catalog.resolve(log.task_id), UnresolvedTask)]


@dataclass(frozen=True)
class Correction:
    removed: list[DailyLogEntry]
    replacements: list[DailyLogEntry]


def correct_stale_entries(
    logs: Iterable[DailyLogEntry],
    stale_task_id: int,
    new_task_id: int,
    catalog: TaskCatalog,
) -> Correction:
    """Re-file entries of a retired task under ``new_task_id``.

    Produces one replacement per (worker, date) carrying the summed quantity
    and the observations joined by ``", "``. The caller deletes ``removed``
    and stores ``replacements``.
    """

    if new_task_id not in catalog:
        raise CatalogError(f"unknown task id {new_task_id}")

    removed: list[DailyLogEntry] = []
    grouped: dict[tuple[int, date], list[DailyLogEntry]] = {}
    for log in logs:
        if log.task_id != stale_task_id:
            continue
        removed.append(log)
        grouped.setdefault((log.worker_id, log.date), []).append(log)

    replacements: list[DailyLogEntry] = []
    for (worker_id, day), items in grouped.items():
        observations = [item.observation for item in items if item.observation]
        replacements.append(
            DailyLogEntry(
                worker_id=worker_id,
                task_id=new_task_id,
                date=day,
                quantity=sum((item.quantity for item in items), Decimal("0")),
                observation=", ".join(observations),
            )
        )
    return Correction(removed=removed, replacements=replacements)
