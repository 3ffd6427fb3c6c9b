from __future__ import annotations

from typing import Iterable, Sequence

from services.plan_records import REPEAT_TYPES, CategoryRecord, PlanRecord


def is_active_on(plan: PlanRecord, day: str) -> bool:
    if plan.start_date > day:
        return False
    if plan.end_date and plan.end_date < day:
        return False
    return True


def active_on(plans: Iterable[PlanRecord], day: str) -> list[PlanRecord]:
    """Plans whose inclusive ``[start_date, end_date]`` range covers ``day``, input order kept."""
    return [plan for plan in plans if is_active_on(plan, day)]


def by_cadence(plans: Iterable[PlanRecord], repeat_type: str) -> list[PlanRecord]:
    return [plan for plan in plans if plan.repeat_type == repeat_type]


def split_by_cadence(plans: Sequence[PlanRecord]) -> dict[str, list[PlanRecord]]:
    return {repeat_type: by_cadence(plans, repeat_type) for repeat_type in REPEAT_TYPES}


def group_by_category(
    plans: Sequence[PlanRecord],
    categories: Iterable[CategoryRecord],
    *,
    include_empty: bool = True,
) -> list[tuple[CategoryRecord, list[PlanRecord]]]:
    """
    Walk categories in their given order and collect each one's plans.

    Plans pointing at a category that is not in ``categories`` appear in no
    group.
    """
    groups: list[tuple[CategoryRecord, list[PlanRecord]]] = []
    for category in categories:
        members = [plan for plan in plans if plan.category_id == category.id]
        if members or include_empty:
            groups.append((category, members))
    return groups
