from __future__ import annotations

from datetime import date

from services.check_index import CheckIndex
from services.plan_records import PlanRecord
from services.results import ValidationIssue
from utils.datetime_utils import cell_key, month_key, week_start


SUCCESS = "success"
FAIL = "fail"
NONE = "none"
CLASSIFIED_VIEWS = {"month"}


def _classify_daily(plan: PlanRecord, index: CheckIndex, day: str) -> str:
    # Order matters: any checked slot wins, then an explicitly stored false row.
    slots = index.by_plan_and_date(plan.id, day)
    if any(slots.values()):
        return SUCCESS
    if slots:
        return FAIL
    return NONE


def _classify_by_prefix(plan: PlanRecord, index: CheckIndex, prefix: str) -> str:
    if any(check.checked for check in index.for_plan_with_prefix(plan.id, prefix)):
        return SUCCESS
    return FAIL


def classify_cell(
    plan: PlanRecord,
    index: CheckIndex,
    cell_date: date | str,
    view: str = "month",
) -> str | None | ValidationIssue:
    """
    Heat-map state of one calendar cell for the selected plan.

    Weekly plans are matched on the month of the cell's week start (Sunday),
    so a week spanning two months only looks at the earlier month. Returns
    None when nothing is defined: custom plans or a non-month view. Datetimes
    are read as wall-clock dates; an unparseable cell date comes back as a
    ValidationIssue.
    """
    if view not in CLASSIFIED_VIEWS:
        return None
    try:
        day = cell_key(cell_date)
    except ValueError as exc:
        return ValidationIssue(field="date", message=str(exc), plan_id=plan.id)
    if plan.repeat_type == "daily":
        return _classify_daily(plan, index, day)
    if plan.repeat_type == "weekly":
        return _classify_by_prefix(plan, index, month_key(week_start(day)))
    if plan.repeat_type == "monthly":
        return _classify_by_prefix(plan, index, month_key(day))
    return None
