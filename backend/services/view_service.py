from __future__ import annotations

from typing import Any

from services.calendar_service import classify_cell
from services.check_index import CheckIndex
from services.plan_filter import active_on, by_cadence, group_by_category, split_by_cadence
from services.plan_records import PlanRecord, Snapshot
from services.progress_service import Progress, progress, today_vector
from services.results import PlanNotFound, ValidationIssue
from utils.datetime_utils import days_in_month


TODAY_SECTIONS = ("daily", "weekly", "monthly")


def _plan_entry(plan: PlanRecord, slots: dict[int, bool]) -> dict[str, Any]:
    # Snapshot plans are pre-validated, so these never return an issue.
    result = progress(plan.id, plan.target_count, slots)
    return {
        "plan": plan.to_dict(),
        "slots": today_vector(plan.id, plan.target_count, slots),
        "progress": result.to_dict(),
        "completed": result.is_completed,
    }


def _category_groups(
    snapshot: Snapshot,
    plans: list[PlanRecord],
    day_checks: dict[str, dict[int, bool]],
    *,
    include_empty: bool,
) -> list[dict[str, Any]]:
    return [
        {
            "category": category.to_dict(),
            "plans": [_plan_entry(plan, day_checks.get(plan.id, {})) for plan in members],
        }
        for category, members in group_by_category(plans, snapshot.categories, include_empty=include_empty)
    ]


def today_view(snapshot: Snapshot, index: CheckIndex, today: str) -> dict[str, Any]:
    """Daily/weekly/monthly sections of today's plans, every category header kept."""
    plans = active_on(snapshot.plans, today)
    day_checks = index.for_date(today)
    return {
        "date": today,
        "sections": [
            {
                "repeat_type": repeat_type,
                "categories": _category_groups(
                    snapshot, by_cadence(plans, repeat_type), day_checks, include_empty=True
                ),
            }
            for repeat_type in TODAY_SECTIONS
        ],
    }


def date_view(snapshot: Snapshot, index: CheckIndex, day: str) -> dict[str, Any]:
    """Plans due on ``day`` with that day's checks; categories with no plans are skipped."""
    plans = active_on(snapshot.plans, day)
    return {
        "date": day,
        "categories": _category_groups(snapshot, plans, index.for_date(day), include_empty=False),
    }


def all_plans_view(snapshot: Snapshot) -> dict[str, list[dict[str, Any]]]:
    out: dict[str, list[dict[str, Any]]] = {}
    for repeat_type, plans in split_by_cadence(snapshot.plans).items():
        rows = []
        for plan in plans:
            category = snapshot.category(plan.category_id)
            rows.append({**plan.to_dict(), "category_name": category.name if category else None})
        out[repeat_type] = rows
    return out


def plan_progress(
    snapshot: Snapshot,
    index: CheckIndex,
    plan_id: str,
    day: str,
) -> Progress | PlanNotFound | ValidationIssue:
    plan = snapshot.plan(plan_id)
    if plan is None:
        return PlanNotFound(plan_id=plan_id)
    return progress(plan.id, plan.target_count, index.by_plan_and_date(plan.id, day))


def classify_plan_cell(
    snapshot: Snapshot,
    index: CheckIndex,
    plan_id: str,
    cell_date: str,
    view: str = "month",
) -> str | None | PlanNotFound | ValidationIssue:
    plan = snapshot.plan(plan_id)
    if plan is None:
        return PlanNotFound(plan_id=plan_id)
    return classify_cell(plan, index, cell_date, view)


def calendar_month(
    snapshot: Snapshot,
    index: CheckIndex,
    plan_id: str,
    year: int,
    month: int,
) -> dict[str, Any] | PlanNotFound | ValidationIssue:
    plan = snapshot.plan(plan_id)
    if plan is None:
        return PlanNotFound(plan_id=plan_id)
    try:
        days = days_in_month(year, month)
    except ValueError as exc:
        return ValidationIssue(field="month", message=str(exc), plan_id=plan.id)
    return {
        "plan_id": plan.id,
        "repeat_type": plan.repeat_type,
        "cells": {day: classify_cell(plan, index, day) for day in days},
    }
