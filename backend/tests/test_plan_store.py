from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from db.database import Base  # noqa: E402
from db.models import Category, Check, Plan  # noqa: E402
from services.check_index import CheckIndex  # noqa: E402
from services.plan_records import RepeatDetail  # noqa: E402
from services.plan_store import (  # noqa: E402
    create_category,
    create_plan,
    list_categories,
    list_plans,
    load_snapshot,
    toggle_check,
)
from services.results import PlanNotFound, ValidationIssue  # noqa: E402


def _new_db():
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


@pytest.fixture(autouse=True)
def _fixed_today(monkeypatch):
    monkeypatch.setattr("services.plan_store.today", lambda: "2024-03-05")


def _seed_plan(db, user_id: str = "testuser", **overrides):
    fields = dict(title="Stretch", category_id="health", repeat_type="daily", target_count=3)
    fields.update(overrides)
    plan = create_plan(db, user_id, **fields)
    assert not isinstance(plan, list), plan
    return plan


def test_create_category_uses_slug_and_overwrites_by_id():
    db = _new_db()
    first = create_category(db, "  Morning Routine ")
    assert first.id == "morning_routine"
    assert first.name == "Morning Routine"

    second = create_category(db, "morning   routine")
    assert second.id == "morning_routine"
    assert db.query(Category).count() == 1
    assert list_categories(db)[0].name == "morning   routine"


def test_create_category_rejects_blank_and_unsluggable_names():
    db = _new_db()
    assert isinstance(create_category(db, "   "), ValidationIssue)
    issue = create_category(db, "운동")
    assert isinstance(issue, ValidationIssue)
    assert issue.field == "name"
    assert db.query(Category).count() == 0


def test_categories_keep_insertion_order():
    db = _new_db()
    for name in ("Work", "Health", "Art"):
        create_category(db, name)
    assert [c.id for c in list_categories(db)] == ["work", "health", "art"]


def test_create_plan_defaults_and_validation():
    db = _new_db()
    plan = _seed_plan(db, end_date="")
    assert plan.start_date == "2024-03-05"
    assert plan.created_at == "2024-03-05"
    assert plan.end_date is None

    issues = create_plan(db, "testuser", title="", category_id="", target_count=0)
    assert isinstance(issues, list)
    assert {i.field for i in issues} == {"title", "category_id", "target_count"}

    backwards = create_plan(
        db, "testuser", title="Trip", category_id="fun", start_date="2024-05-02", end_date="2024-05-01"
    )
    assert [i.field for i in backwards] == ["end_date"]
    assert db.query(Plan).count() == 1


def test_custom_plan_stores_repeat_detail():
    db = _new_db()
    plan = _seed_plan(db, repeat_type="custom", repeat_detail=RepeatDetail(interval=2, unit="week"))
    row = db.query(Plan).filter(Plan.id == plan.id).first()
    assert json.loads(row.repeat_detail_json) == {"interval": 2, "unit": "week"}
    assert list_plans(db, "testuser")[0].repeat_detail == RepeatDetail(interval=2, unit="week")


def test_toggle_check_upserts_and_deletes_by_natural_key():
    db = _new_db()
    plan = _seed_plan(db)

    first = toggle_check(db, "testuser", plan_id=plan.id, check_index=2, checked=True)
    second = toggle_check(db, "testuser", plan_id=plan.id, check_index=2, checked=True)
    assert first.id == second.id
    assert first.date == "2024-03-05"
    assert db.query(Check).count() == 1

    cleared = toggle_check(db, "testuser", plan_id=plan.id, check_index=2, checked=False)
    assert cleared is None
    assert db.query(Check).count() == 0

    # Clearing an absent row is a no-op.
    assert toggle_check(db, "testuser", plan_id=plan.id, check_index=2, checked=False) is None


def test_toggle_check_backfill_records_action_day():
    db = _new_db()
    plan = _seed_plan(db)
    check = toggle_check(db, "testuser", plan_id=plan.id, check_index=0, checked=True, day="2024-03-01")
    assert check.date == "2024-03-01"
    assert check.checked_at == "2024-03-05"


def test_toggle_check_rejects_unknown_plan_and_bad_slot():
    db = _new_db()
    plan = _seed_plan(db, target_count=2)

    assert toggle_check(db, "testuser", plan_id="ghost", check_index=0, checked=True) == PlanNotFound(plan_id="ghost")
    assert isinstance(toggle_check(db, "otheruser", plan_id=plan.id, check_index=0, checked=True), PlanNotFound)

    out_of_range = toggle_check(db, "testuser", plan_id=plan.id, check_index=2, checked=True)
    assert isinstance(out_of_range, ValidationIssue)
    assert out_of_range.field == "check_index"

    bad_day = toggle_check(db, "testuser", plan_id=plan.id, check_index=0, checked=True, day="03/01/2024")
    assert isinstance(bad_day, ValidationIssue)
    assert db.query(Check).count() == 0


def test_load_snapshot_is_scoped_to_user_and_skips_invalid_rows():
    db = _new_db()
    create_category(db, "Health")
    mine = _seed_plan(db)
    _seed_plan(db, user_id="someone_else", title="Not mine")
    toggle_check(db, "testuser", plan_id=mine.id, check_index=1, checked=True)
    db.add(
        Plan(
            id="broken",
            user_id="testuser",
            category_id="health",
            title="Broken",
            repeat_type="daily",
            target_count=0,
            start_date="2024-01-01",
            created_at="2024-01-01",
        )
    )
    db.commit()

    snapshot, issues = load_snapshot(db, "testuser")
    assert [p.id for p in snapshot.plans] == [mine.id]
    assert [c.id for c in snapshot.categories] == ["health"]
    assert [i.plan_id for i in issues] == ["broken"]
    assert CheckIndex(snapshot.checks).by_plan_and_date(mine.id, "2024-03-05") == {1: True}


def test_toggle_check_overwrites_row_inserted_concurrently(monkeypatch):
    db = _new_db()
    plan = _seed_plan(db)
    # Another writer already stored the same key.
    db.add(Check(id="first-writer", plan_id=plan.id, date="2024-03-05", check_index=0, checked=True, user_id="testuser", checked_at="2024-03-04"))
    db.commit()

    import services.plan_store as plan_store

    real_find = plan_store._find_check
    calls = {"n": 0}

    def _stale_find(*args):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find(*args)

    monkeypatch.setattr(plan_store, "_find_check", _stale_find)

    check = toggle_check(db, "testuser", plan_id=plan.id, check_index=0, checked=True)
    assert check.id == "first-writer"
    assert check.checked_at == "2024-03-05"
    assert db.query(Check).count() == 1
