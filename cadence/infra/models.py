from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from .db import Base


def utcnow() -> datetime:
    return datetime.utcnow()


def new_id() -> str:
    return uuid4().hex


class TemplateModel(Base):
    __tablename__ = "task_templates"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="todo", index=True)
    priority = Column(Integer, nullable=False, default=5)
    assignee_ids = Column(JSON, nullable=False, default=list)
    project_id = Column(String(64), nullable=True, index=True)
    owner_id = Column(String(64), nullable=True, index=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    frequency = Column(String(20), nullable=True)
    interval = Column(Integer, nullable=False, default=1)
    start_date = Column(Date, nullable=True)
    end_condition = Column(String(20), nullable=False, default="never")
    end_count = Column(Integer, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class OverrideModel(Base):
    __tablename__ = "recurrence_overrides"
    __table_args__ = (
        UniqueConstraint("template_id", "occurrence_date", name="uq_override_occurrence"),
    )

    id = Column(String(64), primary_key=True)
    template_id = Column(
        String(36),
        ForeignKey("task_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    occurrence_date = Column(Date, nullable=False, index=True)
    fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
