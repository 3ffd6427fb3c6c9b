from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable

from services.results import ValidationIssue
from utils.datetime_utils import is_date_key


REPEAT_TYPES = ("daily", "weekly", "monthly", "custom")
REPEAT_UNITS = {"day", "week", "month"}


@dataclass(frozen=True)
class RepeatDetail:
    interval: int
    unit: str

    def to_dict(self) -> dict:
        return {"interval": self.interval, "unit": self.unit}


@dataclass(frozen=True)
class PlanRecord:
    id: str
    user_id: str
    category_id: str
    title: str
    repeat_type: str
    target_count: int
    start_date: str
    end_date: str | None = None
    created_at: str | None = None
    repeat_detail: RepeatDetail | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "category_id": self.category_id,
            "title": self.title,
            "repeat_type": self.repeat_type,
            "repeat_detail": self.repeat_detail.to_dict() if self.repeat_detail else None,
            "target_count": self.target_count,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class CheckRecord:
    id: str
    plan_id: str
    date: str
    check_index: int
    checked: bool
    user_id: str
    checked_at: str | None = None

    @property
    def natural_key(self) -> tuple[str, str, int, str]:
        return (self.plan_id, self.date, self.check_index, self.user_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "date": self.date,
            "check_index": self.check_index,
            "checked": self.checked,
            "user_id": self.user_id,
            "checked_at": self.checked_at,
        }


@dataclass(frozen=True)
class CategoryRecord:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of one user's plans, checks and categories."""

    plans: tuple[PlanRecord, ...] = ()
    checks: tuple[CheckRecord, ...] = ()
    categories: tuple[CategoryRecord, ...] = ()
    _plans_by_id: dict[str, PlanRecord] = field(default_factory=dict, init=False, repr=False, compare=False)
    _categories_by_id: dict[str, CategoryRecord] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._plans_by_id.update({p.id: p for p in self.plans})
        self._categories_by_id.update({c.id: c for c in self.categories})

    def plan(self, plan_id: str) -> PlanRecord | None:
        return self._plans_by_id.get(plan_id)

    def category(self, category_id: str) -> CategoryRecord | None:
        return self._categories_by_id.get(category_id)


def validate_plan(plan: PlanRecord) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    def _issue(field_name: str, message: str) -> None:
        issues.append(ValidationIssue(field=field_name, message=message, plan_id=plan.id))

    if not (plan.title or "").strip():
        _issue("title", "title is required")
    if not (plan.category_id or "").strip():
        _issue("category_id", "category_id is required")
    if plan.repeat_type not in REPEAT_TYPES:
        _issue("repeat_type", f"repeat_type must be one of {list(REPEAT_TYPES)}")
    if not isinstance(plan.target_count, int) or isinstance(plan.target_count, bool) or plan.target_count < 1:
        _issue("target_count", "target_count must be a positive integer")

    start_ok = is_date_key(plan.start_date)
    if not start_ok:
        _issue("start_date", "start_date must be a YYYY-MM-DD date")
    if plan.end_date is not None:
        if not is_date_key(plan.end_date):
            _issue("end_date", "end_date must be a YYYY-MM-DD date")
        elif start_ok and plan.end_date < plan.start_date:
            _issue("end_date", "end_date must not be before start_date")

    detail = plan.repeat_detail
    if plan.repeat_type == "custom":
        if detail is None:
            _issue("repeat_detail", "custom plans require repeat_detail")
        else:
            if not isinstance(detail.interval, int) or isinstance(detail.interval, bool) or detail.interval < 1:
                _issue("repeat_detail.interval", "interval must be a positive integer")
            if detail.unit not in REPEAT_UNITS:
                _issue("repeat_detail.unit", f"unit must be one of {sorted(REPEAT_UNITS)}")
    elif detail is not None:
        _issue("repeat_detail", "repeat_detail is only allowed for custom plans")
    return issues


def build_snapshot(
    plans: Iterable[PlanRecord],
    checks: Iterable[CheckRecord],
    categories: Iterable[CategoryRecord],
) -> tuple[Snapshot, list[ValidationIssue]]:
    """Validate raw rows and keep only the ones the calculators can trust."""
    issues: list[ValidationIssue] = []
    valid_plans: list[PlanRecord] = []
    for plan in plans:
        plan_issues = validate_plan(plan)
        if plan_issues:
            issues.extend(plan_issues)
            continue
        valid_plans.append(plan)

    valid_checks: list[CheckRecord] = []
    for check in checks:
        if check.check_index < 0:
            issues.append(
                ValidationIssue(field="check_index", message="check_index must not be negative", plan_id=check.plan_id)
            )
            continue
        if not is_date_key(check.date):
            issues.append(
                ValidationIssue(field="date", message="check date must be a YYYY-MM-DD date", plan_id=check.plan_id)
            )
            continue
        valid_checks.append(check)

    snapshot = Snapshot(plans=tuple(valid_plans), checks=tuple(valid_checks), categories=tuple(categories))
    return snapshot, issues


def apply_toggle(
    checks: Iterable[CheckRecord],
    *,
    plan_id: str,
    day: str,
    check_index: int,
    checked: bool,
    user_id: str,
    checked_at: str | None = None,
    check_id: str | None = None,
) -> tuple[CheckRecord, ...]:
    """
    Upsert-by-natural-key over a check collection.

    ``checked=True`` overwrites an existing row for the key (keeping its id) or
    appends a new one; ``checked=False`` removes the row. No tombstones.
    """
    key = (plan_id, day, check_index, user_id)
    out: list[CheckRecord] = []
    found = False
    for row in checks:
        if row.natural_key != key:
            out.append(row)
            continue
        if checked and not found:
            out.append(replace(row, checked=True, checked_at=checked_at))
        found = True
    if checked and not found:
        out.append(
            CheckRecord(
                id=check_id or uuid.uuid4().hex,
                plan_id=plan_id,
                date=day,
                check_index=check_index,
                checked=True,
                user_id=user_id,
                checked_at=checked_at,
            )
        )
    return tuple(out)
