from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.utils import get_current_user_id
from db.database import get_db
from services.plan_store import create_category, list_categories
from services.results import ValidationIssue

router = APIRouter(prefix="/categories", tags=["categories"], dependencies=[Depends(get_current_user_id)])


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


@router.get("")
def get_categories(db: Session = Depends(get_db)):
    return [c.to_dict() for c in list_categories(db)]


@router.post("", status_code=201)
def add_category(req: CategoryCreateRequest, db: Session = Depends(get_db)):
    result = create_category(db, req.name)
    if isinstance(result, ValidationIssue):
        raise HTTPException(status_code=422, detail=[result.to_dict()])
    return result.to_dict()
