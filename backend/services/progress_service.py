from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from services.results import ValidationIssue


@dataclass(frozen=True)
class Progress:
    completed: int
    total: int

    @property
    def is_completed(self) -> bool:
        return self.completed >= self.total

    def to_dict(self) -> dict:
        return {"completed": self.completed, "total": self.total}


def _check_target(plan_id: str, target_count) -> ValidationIssue | None:
    if not isinstance(target_count, int) or isinstance(target_count, bool) or target_count < 1:
        return ValidationIssue(field="target_count", message="target_count must be a positive integer", plan_id=plan_id)
    return None


def progress(plan_id: str, target_count: int, slots: Mapping[int, bool]) -> Progress | ValidationIssue:
    """
    Count checked slots against the plan's target.

    ``total`` is always ``target_count``; slots past the target still count
    toward ``completed`` (over-completion is not clamped).
    """
    issue = _check_target(plan_id, target_count)
    if issue:
        return issue
    completed = sum(1 for value in slots.values() if value)
    return Progress(completed=completed, total=target_count)


def is_completed(plan_id: str, target_count: int, slots: Mapping[int, bool]) -> bool | ValidationIssue:
    result = progress(plan_id, target_count, slots)
    if isinstance(result, ValidationIssue):
        return result
    return result.is_completed


def today_vector(plan_id: str, target_count: int, slots: Mapping[int, bool]) -> list[bool] | ValidationIssue:
    """Checkbox state per slot, ``target_count`` long; unrecorded slots are False."""
    issue = _check_target(plan_id, target_count)
    if issue:
        return issue
    return [bool(slots.get(i, False)) for i in range(target_count)]
