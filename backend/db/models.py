from sqlalchemy import (
    Column, Integer, Text, Boolean, Index, UniqueConstraint,
)
from db.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Text, primary_key=True)  # slug of name
    name = Column(Text, nullable=False)
    position = Column(Integer, nullable=False, default=0)


class Plan(Base):
    __tablename__ = "plans"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    # No foreign key: deleting a category must not touch its plans.
    category_id = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    repeat_type = Column(Text, nullable=False, default="daily")  # daily | weekly | monthly | custom
    repeat_detail_json = Column(Text)  # {"interval": n, "unit": "day|week|month"} for custom only
    target_count = Column(Integer, nullable=False, default=1)
    start_date = Column(Text, nullable=False)  # YYYY-MM-DD
    end_date = Column(Text)  # inclusive, NULL = open-ended
    created_at = Column(Text, nullable=False)
    position = Column(Integer, nullable=False, default=0)


class Check(Base):
    __tablename__ = "checks"

    id = Column(Text, primary_key=True)
    plan_id = Column(Text, nullable=False)
    date = Column(Text, nullable=False)  # day the check counts toward
    check_index = Column(Integer, nullable=False)
    checked = Column(Boolean, nullable=False, default=True)
    user_id = Column(Text, nullable=False)
    checked_at = Column(Text)  # day the toggle happened

    __table_args__ = (
        UniqueConstraint("plan_id", "date", "check_index", "user_id", name="uq_checks_natural_key"),
        Index("ix_checks_user_date", "user_id", "date"),
    )
