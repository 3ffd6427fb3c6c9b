from __future__ import annotations

import json
import logging
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.models import Category, Check, Plan
from services.plan_records import (
    CategoryRecord,
    CheckRecord,
    PlanRecord,
    RepeatDetail,
    Snapshot,
    build_snapshot,
    validate_plan,
)
from services.results import PlanNotFound, ValidationIssue
from utils.datetime_utils import is_date_key, today
from utils.slug_utils import category_slug

logger = logging.getLogger(__name__)


def _safe_json_loads(raw: str | None) -> dict | None:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def _plan_record(row: Plan) -> PlanRecord:
    detail_raw = _safe_json_loads(row.repeat_detail_json)
    detail = None
    if detail_raw is not None:
        detail = RepeatDetail(interval=detail_raw.get("interval"), unit=detail_raw.get("unit"))
    return PlanRecord(
        id=row.id,
        user_id=row.user_id,
        category_id=row.category_id,
        title=row.title,
        repeat_type=row.repeat_type,
        target_count=row.target_count,
        start_date=row.start_date,
        end_date=row.end_date or None,
        created_at=row.created_at,
        repeat_detail=detail,
    )


def _check_record(row: Check) -> CheckRecord:
    return CheckRecord(
        id=row.id,
        plan_id=row.plan_id,
        date=row.date,
        check_index=int(row.check_index),
        checked=bool(row.checked),
        user_id=row.user_id,
        checked_at=row.checked_at,
    )


def _next_position(db: Session, model) -> int:
    current = db.query(func.max(model.position)).scalar()
    return int(current or 0) + 1


def _find_check(db: Session, user_id: str, plan_id: str, day: str, check_index: int) -> Check | None:
    return (
        db.query(Check)
        .filter(
            Check.plan_id == plan_id,
            Check.date == day,
            Check.check_index == check_index,
            Check.user_id == user_id,
        )
        .first()
    )


def _add_check(db: Session, user_id: str, plan_id: str, day: str, check_index: int) -> Check:
    row = Check(id=uuid.uuid4().hex, plan_id=plan_id, date=day, check_index=check_index, user_id=user_id)
    db.add(row)
    return row


def list_categories(db: Session) -> list[CategoryRecord]:
    rows = db.query(Category).order_by(Category.position.asc(), Category.id.asc()).all()
    return [CategoryRecord(id=row.id, name=row.name) for row in rows]


def list_plans(db: Session, user_id: str) -> list[PlanRecord]:
    rows = db.query(Plan).filter(Plan.user_id == user_id).order_by(Plan.position.asc(), Plan.id.asc()).all()
    return [_plan_record(row) for row in rows]


def load_snapshot(db: Session, user_id: str) -> tuple[Snapshot, list[ValidationIssue]]:
    """Full read of one user's data; invalid rows are dropped and reported."""
    checks = db.query(Check).filter(Check.user_id == user_id).all()
    snapshot, issues = build_snapshot(
        list_plans(db, user_id),
        [_check_record(row) for row in checks],
        list_categories(db),
    )
    for issue in issues:
        logger.warning("Skipping invalid row for plan %s: %s (%s)", issue.plan_id, issue.message, issue.field)
    return snapshot, issues


def create_category(db: Session, name: str) -> CategoryRecord | ValidationIssue:
    display_name = (name or "").strip()
    if not display_name:
        return ValidationIssue(field="name", message="name is required")
    slug = category_slug(display_name)
    if not slug:
        return ValidationIssue(field="name", message="name must contain at least one of [a-z0-9_]")

    row = db.query(Category).filter(Category.id == slug).first()
    if row is None:
        row = Category(id=slug, name=display_name, position=_next_position(db, Category))
        db.add(row)
    else:
        row.name = display_name
    db.commit()
    logger.info("Saved category %s", slug)
    return CategoryRecord(id=row.id, name=row.name)


def create_plan(
    db: Session,
    user_id: str,
    *,
    title: str,
    category_id: str,
    repeat_type: str = "daily",
    target_count: int = 1,
    start_date: str | None = None,
    end_date: str | None = None,
    repeat_detail: RepeatDetail | None = None,
) -> PlanRecord | list[ValidationIssue]:
    created = today()
    record = PlanRecord(
        id=uuid.uuid4().hex[:12],
        user_id=user_id,
        category_id=(category_id or "").strip(),
        title=(title or "").strip(),
        repeat_type=repeat_type,
        target_count=target_count,
        start_date=start_date or created,
        end_date=end_date or None,
        created_at=created,
        repeat_detail=repeat_detail,
    )
    issues = validate_plan(record)
    if issues:
        return issues

    db.add(
        Plan(
            id=record.id,
            user_id=record.user_id,
            category_id=record.category_id,
            title=record.title,
            repeat_type=record.repeat_type,
            repeat_detail_json=json.dumps(repeat_detail.to_dict()) if repeat_detail else None,
            target_count=record.target_count,
            start_date=record.start_date,
            end_date=record.end_date,
            created_at=record.created_at,
            position=_next_position(db, Plan),
        )
    )
    db.commit()
    logger.info("Created plan %s (%s, target=%d)", record.id, record.repeat_type, record.target_count)
    return record


def toggle_check(
    db: Session,
    user_id: str,
    *,
    plan_id: str,
    check_index: int,
    checked: bool,
    day: str | None = None,
) -> CheckRecord | None | PlanNotFound | ValidationIssue:
    """
    Record or clear one repetition slot.

    Checking upserts the row for (plan, date, slot, user); unchecking deletes
    it. ``day`` defaults to today and may be in the past for backfills.
    """
    plan_row = db.query(Plan).filter(Plan.id == plan_id, Plan.user_id == user_id).first()
    if plan_row is None:
        return PlanNotFound(plan_id=plan_id)
    target_day = day or today()
    if not is_date_key(target_day):
        return ValidationIssue(field="date", message="date must be a YYYY-MM-DD date", plan_id=plan_id)
    if check_index < 0 or check_index >= int(plan_row.target_count):
        return ValidationIssue(
            field="check_index",
            message=f"check_index must be in [0, {int(plan_row.target_count)})",
            plan_id=plan_id,
        )

    row = _find_check(db, user_id, plan_id, target_day, check_index)
    if not checked:
        if row is not None:
            db.delete(row)
            db.commit()
            logger.info("Cleared check %s/%s/%d", plan_id, target_day, check_index)
        return None

    if row is None:
        row = _add_check(db, user_id, plan_id, target_day, check_index)
    row.checked = True
    row.checked_at = today()
    try:
        db.commit()
    except IntegrityError:
        # A concurrent toggle inserted the same key first; overwrite it instead.
        db.rollback()
        row = _find_check(db, user_id, plan_id, target_day, check_index)
        if row is None:
            row = _add_check(db, user_id, plan_id, target_day, check_index)
        row.checked = True
        row.checked_at = today()
        db.commit()
    logger.info("Checked %s/%s/%d", plan_id, target_day, check_index)
    return _check_record(row)
