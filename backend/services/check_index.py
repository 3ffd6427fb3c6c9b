from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from services.plan_records import CheckRecord


class CheckIndex:
    """
    Read-only grouping of one snapshot's check rows.

    Built once per refresh and shared by every view. Rows repeating a natural
    key collapse to the last one seen. There are no mutation methods; rebuild
    from the new snapshot after a write.
    """

    def __init__(self, checks: Iterable[CheckRecord]) -> None:
        rows: dict[tuple[str, str, int, str], CheckRecord] = {}
        for check in checks:
            rows[check.natural_key] = check

        self._slots: dict[tuple[str, str], dict[int, bool]] = defaultdict(dict)
        self._by_date: dict[str, dict[str, dict[int, bool]]] = defaultdict(dict)
        self._by_plan: dict[str, list[CheckRecord]] = defaultdict(list)
        for check in rows.values():
            slots = self._slots[(check.plan_id, check.date)]
            slots[check.check_index] = bool(check.checked)
            self._by_date[check.date][check.plan_id] = slots
            self._by_plan[check.plan_id].append(check)
        self._size = len(rows)

    def __len__(self) -> int:
        return self._size

    def by_plan_and_date(self, plan_id: str, day: str) -> dict[int, bool]:
        return dict(self._slots.get((plan_id, day), {}))

    def for_date(self, day: str) -> dict[str, dict[int, bool]]:
        return {plan_id: dict(slots) for plan_id, slots in self._by_date.get(day, {}).items()}

    def all_for_plan(self, plan_id: str) -> tuple[CheckRecord, ...]:
        return tuple(self._by_plan.get(plan_id, ()))

    def for_plan_with_prefix(self, plan_id: str, prefix: str) -> list[CheckRecord]:
        return [c for c in self._by_plan.get(plan_id, ()) if c.date.startswith(prefix)]
