from __future__ import annotations

from decimal import Decimal, InvalidOperation

from fastapi import APIRouter, HTTPException

from piecework.application import get_payroll_service
from piecework.core.catalog import TaskCatalog
from piecework.core.validation import CatalogError

router = APIRouter(prefix="/catalog", tags=["catalog"])


def _serialise_catalog(catalog: TaskCatalog) -> dict:
    return {
        "version": catalog.version,
        "items": [group.model_dump(mode="json") for group in catalog.all_tasks()],
    }


def _parse_price(value: object) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError) as exc:
        raise HTTPException(status_code=400, detail="price must be a number") from exc
    return price


@router.get("")
async def get_catalog() -> dict:
    service = get_payroll_service()
    return _serialise_catalog(service.get_catalog())


@router.put("/tasks/{task_id}/price")
async def update_task_price(task_id: int, payload: dict) -> dict:
    if "price" not in payload:
        raise HTTPException(status_code=400, detail="price is required")
    service = get_payroll_service()
    if task_id not in service.get_catalog():
        raise HTTPException(status_code=404, detail="task not found")
    try:
        catalog = service.set_task_price(task_id, _parse_price(payload["price"]))
    except CatalogError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    task = catalog.get(task_id)
    return {"version": catalog.version, "task": task.model_dump(mode="json") if task else None}


@router.post("/tasks")
async def add_task(payload: dict) -> dict:
    category = str(payload.get("category") or "").strip()
    description = str(payload.get("description") or "").strip()
    if not category or not description:
        raise HTTPException(status_code=400, detail="category and description are required")
    service = get_payroll_service()
    try:
        task = service.add_task(category, description, str(payload.get("unit") or ""), _parse_price(payload.get("price", 0)))
    except CatalogError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"version": service.get_catalog().version, "task": task.model_dump(mode="json")}
