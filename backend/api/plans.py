from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.utils import get_current_user_id
from db.database import get_db
from services.check_index import CheckIndex
from services.plan_records import RepeatDetail
from services.plan_store import create_plan, list_plans, load_snapshot
from services.results import PlanNotFound, ValidationIssue
from services.view_service import plan_progress
from utils.datetime_utils import is_date_key, today

router = APIRouter(prefix="/plans", tags=["plans"])


class RepeatDetailPayload(BaseModel):
    interval: int = Field(ge=1)
    unit: Literal["day", "week", "month"]


class PlanCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    category_id: str = Field(min_length=1)
    repeat_type: Literal["daily", "weekly", "monthly", "custom"] = "daily"
    repeat_detail: Optional[RepeatDetailPayload] = None
    target_count: int = Field(default=1, ge=1)
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@router.get("")
def get_plans(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return [p.to_dict() for p in list_plans(db, user_id)]


@router.post("", status_code=201)
def add_plan(
    req: PlanCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    detail = None
    if req.repeat_detail is not None:
        detail = RepeatDetail(interval=req.repeat_detail.interval, unit=req.repeat_detail.unit)
    result = create_plan(
        db,
        user_id,
        title=req.title,
        category_id=req.category_id,
        repeat_type=req.repeat_type,
        target_count=req.target_count,
        start_date=req.start_date or None,
        end_date=req.end_date or None,
        repeat_detail=detail,
    )
    if isinstance(result, list):
        raise HTTPException(status_code=422, detail=[issue.to_dict() for issue in result])
    return result.to_dict()


@router.get("/{plan_id}/progress")
def get_plan_progress(
    plan_id: str,
    day: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    target_day = day or today()
    if not is_date_key(target_day):
        raise HTTPException(status_code=422, detail="day must be a YYYY-MM-DD date")
    snapshot, _ = load_snapshot(db, user_id)
    result = plan_progress(snapshot, CheckIndex(snapshot.checks), plan_id, target_day)
    if isinstance(result, PlanNotFound):
        raise HTTPException(status_code=404, detail="Plan not found")
    if isinstance(result, ValidationIssue):
        raise HTTPException(status_code=422, detail=[result.to_dict()])
    return {"plan_id": plan_id, "date": target_day, **result.to_dict(), "is_completed": result.is_completed}
