from __future__ import annotations

from typing import get_args

from fastapi import APIRouter, HTTPException, Query

from piecework.application import get_payroll_service
from piecework.core.schema import ReportKind
from piecework.core.validation import ValidationError
from piecework.core.words import to_french_words

router = APIRouter(tags=["reports"])

REPORT_KINDS = set(get_args(ReportKind))


@router.post("/reports/{kind}")
async def generate_report(kind: str, payload: dict) -> dict:
    """Assemble a report; ``save`` stores the computed snapshot as well."""

    if kind not in REPORT_KINDS:
        raise HTTPException(status_code=404, detail="unknown report kind")
    service = get_payroll_service()
    try:
        report = service.build_report(kind, payload)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    result = report.model_dump(mode="json")
    if payload.get("save"):
        saved = service.save_report(report)
        result["report_id"] = saved.id
    return result


@router.get("/reports")
async def list_saved_reports() -> dict:
    service = get_payroll_service()
    items = [
        {
            "id": item.id,
            "kind": item.kind,
            "revision": item.revision,
            "created_at": item.created_at.isoformat(),
            "updated_at": item.updated_at.isoformat(),
        }
        for item in service.list_reports()
    ]
    return {"items": items}


@router.get("/reports/saved/{report_id}")
async def get_saved_report(report_id: str) -> dict:
    saved = get_payroll_service().get_report(report_id)
    if saved is None:
        raise HTTPException(status_code=404, detail="report not found")
    return saved.model_dump(mode="json")


@router.post("/reports/saved/{report_id}/recompute")
async def recompute_saved_report(report_id: str) -> dict:
    try:
        saved = get_payroll_service().recompute_report(report_id)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if saved is None:
        raise HTTPException(status_code=404, detail="report not found")
    return saved.model_dump(mode="json")


@router.get("/words")
async def amount_in_words(amount: str = Query(...)) -> dict:
    return {"amount": amount, "words": to_french_words(amount)}
