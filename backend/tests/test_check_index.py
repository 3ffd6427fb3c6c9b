from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.check_index import CheckIndex  # noqa: E402
from services.plan_records import CheckRecord, apply_toggle  # noqa: E402


def _check(plan_id: str, day: str, idx: int, checked: bool = True, check_id: str | None = None) -> CheckRecord:
    return CheckRecord(
        id=check_id or f"{plan_id}-{day}-{idx}",
        plan_id=plan_id,
        date=day,
        check_index=idx,
        checked=checked,
        user_id="testuser",
        checked_at=day,
    )


def test_point_and_date_lookups():
    index = CheckIndex(
        [
            _check("p1", "2024-03-01", 0),
            _check("p1", "2024-03-01", 1, checked=False),
            _check("p2", "2024-03-01", 0),
            _check("p1", "2024-03-02", 0),
        ]
    )
    assert len(index) == 4
    assert index.by_plan_and_date("p1", "2024-03-01") == {0: True, 1: False}
    assert index.by_plan_and_date("p1", "2024-03-05") == {}
    assert index.for_date("2024-03-01") == {"p1": {0: True, 1: False}, "p2": {0: True}}
    assert index.for_date("1999-01-01") == {}
    assert {c.date for c in index.all_for_plan("p1")} == {"2024-03-01", "2024-03-02"}
    assert index.all_for_plan("missing") == ()


def test_lookups_return_copies():
    index = CheckIndex([_check("p1", "2024-03-01", 0)])
    slots = index.by_plan_and_date("p1", "2024-03-01")
    slots[5] = True
    assert index.by_plan_and_date("p1", "2024-03-01") == {0: True}


def test_prefix_scan():
    index = CheckIndex(
        [
            _check("p1", "2024-02-28", 0),
            _check("p1", "2024-03-03", 0),
            _check("p1", "2024-03-01", 1),
            _check("p1", "2024-04-01", 0),
        ]
    )
    assert len(index.for_plan_with_prefix("p1", "2024-03")) == 2


def test_repeated_natural_key_keeps_last_row():
    index = CheckIndex(
        [
            _check("p1", "2024-03-01", 0, checked=False, check_id="a"),
            _check("p1", "2024-03-01", 0, checked=True, check_id="b"),
        ]
    )
    assert len(index) == 1
    assert index.by_plan_and_date("p1", "2024-03-01") == {0: True}
    assert [c.id for c in index.all_for_plan("p1")] == ["b"]


def test_toggle_true_twice_matches_toggling_once():
    toggle = dict(plan_id="p1", day="2024-03-01", check_index=2, checked=True, user_id="testuser", checked_at="2024-03-01")
    once = apply_toggle([], check_id="c1", **toggle)
    twice = apply_toggle(once, check_id="c2", **toggle)

    assert once == twice
    assert CheckIndex(twice).by_plan_and_date("p1", "2024-03-01") == {2: True}


def test_toggle_false_removes_row_without_tombstone():
    rows = apply_toggle(
        [_check("p1", "2024-03-01", 0)],
        plan_id="p1",
        day="2024-03-01",
        check_index=0,
        checked=False,
        user_id="testuser",
    )
    assert rows == ()
    assert CheckIndex(rows).by_plan_and_date("p1", "2024-03-01") == {}


def test_toggle_overwrite_keeps_row_id():
    existing = _check("p1", "2024-03-01", 0, checked=False, check_id="keep-me")
    rows = apply_toggle(
        [existing],
        plan_id="p1",
        day="2024-03-01",
        check_index=0,
        checked=True,
        user_id="testuser",
        checked_at="2024-03-04",
    )
    assert len(rows) == 1
    assert rows[0].id == "keep-me"
    assert rows[0].checked is True
    assert rows[0].checked_at == "2024-03-04"
