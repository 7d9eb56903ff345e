"""Versioned, immutable snapshots of the task price table."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping

from piecework.core import settings
from piecework.core.logging_config import get_logger
from piecework.core.schema import TaskDefinition, TaskGroup
from piecework.core.validation import CatalogError, validate_price

logger = get_logger("catalog")


@dataclass(frozen=True, slots=True)
class KnownTask:
    task: TaskDefinition

    @property
    def task_id(self) -> int:
        return self.task.id

    @property
    def price(self) -> Decimal:
        return self.task.price


@dataclass(frozen=True, slots=True)
class UnresolvedTask:
    """A task id that a log references but the catalog no longer knows."""

    task_id: int

    @property
    def price(self) -> Decimal:
        return Decimal("0")

    def placeholder(self) -> TaskDefinition:
        return TaskDefinition(
            id=self.task_id,
            description=f"Tâche obsolète (ID: {self.task_id})",
            category=settings.unresolved_category(),
            unit="N/A",
            price=Decimal("0"),
        )


TaskRef = KnownTask | UnresolvedTask


class TaskCatalog:
    """Read-only price table. Mutations return a new snapshot with a bumped version."""

    __slots__ = ("_tasks", "_version")

    def __init__(self, tasks: Iterable[TaskDefinition] = (), *, version: int = 1) -> None:
        ordered: dict[int, TaskDefinition] = {}
        for task in tasks:
            if task.id in ordered:
                raise CatalogError(f"duplicate task id {task.id}")
            ordered[task.id] = task
        self._tasks: Mapping[int, TaskDefinition] = ordered
        self._version = version

    @property
    def version(self) -> int:
        return self._version

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> TaskDefinition | None:
        return self._tasks.get(task_id)

    def resolve(self, task_id: int) -> TaskRef:
        task = self._tasks.get(task_id)
        if task is None:
            return UnresolvedTask(task_id)
        return KnownTask(task)

    def price_of(self, task_id: int) -> Decimal:
        return self.resolve(task_id).price

    def all_tasks(self) -> list[TaskGroup]:
        groups: dict[str, TaskGroup] = {}
        for task in self._tasks.values():
            group = groups.get(task.category)
            if group is None:
                group = groups[task.category] = TaskGroup(category=task.category)
            group.tasks.append(task)
        return list(groups.values())

    def set_price(self, task_id: int, new_price: Decimal) -> TaskCatalog:
        task = self._tasks.get(task_id)
        if task is None:
            raise CatalogError(f"unknown task id {task_id}")
        validate_price(new_price)
        updated = task.model_copy(update={"price": new_price})
        tasks = [updated if item.id == task_id else item for item in self._tasks.values()]
        logger.info(
            "task price updated",
            extra={"task_id": task_id, "old_price": task.price, "new_price": new_price, "version": self._version + 1},
        )
        return TaskCatalog(tasks, version=self._version + 1)

    def add_task(self, category: str, description: str, unit: str, price: Decimal) -> tuple[TaskCatalog, TaskDefinition]:
        validate_price(price)
        new_id = max(self._tasks, default=0) + 1
        task = TaskDefinition(id=new_id, description=description, category=category, unit=unit, price=price)

        # keep the new task next to the rest of its category
        tasks = list(self._tasks.values())
        insert_at = len(tasks)
        for index, item in enumerate(tasks):
            if item.category == category:
                insert_at = index + 1
        tasks.insert(insert_at, task)
        logger.info("task added", extra={"task_id": new_id, "category": category, "version": self._version + 1})
        return TaskCatalog(tasks, version=self._version + 1), task


def catalog_from_groups(groups: Iterable[dict], *, version: int = 1) -> TaskCatalog:
    tasks: list[TaskDefinition] = []
    for group in groups:
        category = str(group.get("category") or "")
        for item in group.get("tasks") or []:
            tasks.append(
                TaskDefinition(
                    id=int(item["id"]),
                    description=str(item.get("description") or ""),
                    category=category,
                    unit=str(item.get("unit") or ""),
                    price=Decimal(str(item.get("price", 0))),
                )
            )
    return TaskCatalog(tasks, version=version)


def load_default_catalog() -> TaskCatalog:
    return catalog_from_groups(settings.load_settings().get("task_groups") or [])
