from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError as SchemaError

from piecework.application import get_payroll_service
from piecework.core.catalog import UnresolvedTask
from piecework.core.schema import WorkedDaysEntry, Worker
from piecework.core.validation import ValidationError

router = APIRouter(tags=["entries"])


@router.get("/workers")
async def list_workers() -> dict:
    service = get_payroll_service()
    workers = sorted(service.list_workers(), key=lambda item: item.id)
    return {"items": [worker.model_dump(mode="json") for worker in workers]}


@router.post("/workers")
async def add_worker(payload: dict) -> dict:
    try:
        worker = Worker(**payload)
    except SchemaError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    get_payroll_service().add_worker(worker)
    return worker.model_dump(mode="json")


@router.post("/logs")
async def record_log(payload: dict) -> dict:
    """Record a task done on a date; the quantity is shared among ``worker_ids``."""

    worker_ids = payload.get("worker_ids") or []
    if not isinstance(worker_ids, list) or not worker_ids:
        raise HTTPException(status_code=400, detail="at least one worker is required")
    try:
        ids = [int(item) for item in worker_ids]
        task_id = int(payload["task_id"])
        day = date.fromisoformat(str(payload["date"]))
        quantity = Decimal(str(payload["quantity"]))
    except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
        raise HTTPException(status_code=400, detail="worker_ids, task_id, date and quantity are required") from exc

    service = get_payroll_service()
    try:
        stored = service.record_shared_log(
            ids,
            task_id,
            day,
            quantity,
            str(payload.get("observation") or ""),
        )
    except (ValidationError, SchemaError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"items": [entry.model_dump(mode="json") for entry in stored]}


@router.get("/logs")
async def list_logs(
    start_date: date = Query(...),
    end_date: date = Query(...),
    worker_id: int | None = Query(default=None),
) -> dict:
    service = get_payroll_service()
    logs = service.list_logs(start_date, end_date, [worker_id] if worker_id is not None else None)
    return {"items": [entry.model_dump(mode="json") for entry in logs]}


@router.get("/logs/stale")
async def list_stale_logs(start_date: date = Query(...), end_date: date = Query(...)) -> dict:
    """Entries whose task id the catalog no longer knows, each with its placeholder task."""

    service = get_payroll_service()
    items = []
    for entry in service.stale_logs(start_date, end_date):
        item = entry.model_dump(mode="json")
        item["task"] = UnresolvedTask(entry.task_id).placeholder().model_dump(mode="json")
        items.append(item)
    return {"items": items}


@router.post("/logs/corrections")
async def correct_logs(payload: dict) -> dict:
    try:
        start = date.fromisoformat(str(payload["start_date"]))
        end = date.fromisoformat(str(payload["end_date"]))
        stale_task_id = int(payload["stale_task_id"])
        new_task_id = int(payload["new_task_id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=400, detail="start_date, end_date, stale_task_id and new_task_id are required"
        ) from exc

    service = get_payroll_service()
    try:
        correction = service.correct_stale_logs(start, end, stale_task_id, new_task_id)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "removed": [entry.id for entry in correction.removed],
        "items": [entry.model_dump(mode="json") for entry in correction.replacements],
    }


@router.put("/worked-days")
async def set_worked_days(payload: dict) -> dict:
    try:
        entry = WorkedDaysEntry(**payload)
    except SchemaError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        get_payroll_service().set_worked_days(entry)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return entry.model_dump(mode="json")
