from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationIssue:
    """An input that breaks a plan/check invariant. Returned, never raised."""

    field: str
    message: str
    plan_id: str | None = None

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "plan_id": self.plan_id}


@dataclass(frozen=True)
class PlanNotFound:
    plan_id: str

    def to_dict(self) -> dict:
        return {"plan_id": self.plan_id, "message": "Plan not found"}
