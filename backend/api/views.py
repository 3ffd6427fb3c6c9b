from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from auth.utils import get_current_user_id
from db.database import get_db
from services.check_index import CheckIndex
from services.plan_store import load_snapshot
from services.results import PlanNotFound, ValidationIssue
from services.view_service import (
    all_plans_view,
    calendar_month,
    classify_plan_cell,
    date_view,
    today_view,
)
from utils.datetime_utils import is_date_key, today

router = APIRouter(prefix="/views", tags=["views"])


def _require_day(value: str) -> str:
    if not is_date_key(value):
        raise HTTPException(status_code=422, detail="date must be a YYYY-MM-DD date")
    return value


def _load(db: Session, user_id: str):
    snapshot, issues = load_snapshot(db, user_id)
    return snapshot, CheckIndex(snapshot.checks), issues


@router.get("/today")
def get_today_view(
    day: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    target_day = _require_day(day or today())
    snapshot, index, issues = _load(db, user_id)
    payload = today_view(snapshot, index, target_day)
    payload["skipped"] = [issue.to_dict() for issue in issues]
    return payload


@router.get("/date/{day}")
def get_date_view(
    day: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    snapshot, index, _ = _load(db, user_id)
    return date_view(snapshot, index, _require_day(day))


@router.get("/all")
def get_all_plans_view(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    snapshot, _, _ = _load(db, user_id)
    return all_plans_view(snapshot)


@router.get("/calendar/{plan_id}")
def get_calendar_month(
    plan_id: str,
    year: int = Query(ge=1, le=9999),
    month: int = Query(ge=1, le=12),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    snapshot, index, _ = _load(db, user_id)
    result = calendar_month(snapshot, index, plan_id, year, month)
    if isinstance(result, PlanNotFound):
        raise HTTPException(status_code=404, detail="Plan not found")
    if isinstance(result, ValidationIssue):
        raise HTTPException(status_code=422, detail=[result.to_dict()])
    return result


@router.get("/calendar/{plan_id}/{day}")
def get_calendar_cell(
    plan_id: str,
    day: str,
    view: str = "month",
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    target_day = _require_day(day)
    snapshot, index, _ = _load(db, user_id)
    result = classify_plan_cell(snapshot, index, plan_id, target_day, view)
    if isinstance(result, PlanNotFound):
        raise HTTPException(status_code=404, detail="Plan not found")
    if isinstance(result, ValidationIssue):
        raise HTTPException(status_code=422, detail=[result.to_dict()])
    return {"plan_id": plan_id, "date": target_day, "view": view, "status": result}
