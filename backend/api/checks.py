from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.utils import get_current_user_id
from db.database import get_db
from services.plan_store import toggle_check
from services.results import PlanNotFound, ValidationIssue

router = APIRouter(prefix="/checks", tags=["checks"])


class CheckToggleRequest(BaseModel):
    plan_id: str = Field(min_length=1)
    check_index: int = Field(ge=0)
    checked: bool
    date: Optional[str] = None  # YYYY-MM-DD, defaults to today


@router.put("")
def put_check(
    req: CheckToggleRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    result = toggle_check(
        db,
        user_id,
        plan_id=req.plan_id,
        check_index=req.check_index,
        checked=req.checked,
        day=req.date or None,
    )
    if isinstance(result, PlanNotFound):
        raise HTTPException(status_code=404, detail="Plan not found")
    if isinstance(result, ValidationIssue):
        raise HTTPException(status_code=422, detail=[result.to_dict()])
    if result is None:
        return {"status": "cleared", "plan_id": req.plan_id, "check_index": req.check_index}
    return {"status": "checked", "check": result.to_dict()}
