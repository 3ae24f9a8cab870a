from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text

from .db import Base


class TaskModel(Base):
    __tablename__ = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    task_type = Column(String(20), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    letter_value = Column(String(1), nullable=True)
    subjective_content = Column(Text, nullable=True)
    is_daily = Column(Boolean, nullable=False, default=False, index=True)
    daily_position = Column(Integer, nullable=True)
    scheduled_date = Column(Date, nullable=True, index=True)
    scheduled_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    has_time_required = Column(Boolean, nullable=False, default=True)
    duration = Column(Integer, nullable=True)
    notification_time = Column(Integer, nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_type = Column(String(20), nullable=True)
    recurring_days = Column(Text, nullable=True)
    recurring_end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class NoteModel(Base):
    __tablename__ = "notes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    associated_date = Column(Date, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class NotificationModel(Base):
    __tablename__ = "notifications"
    __table_args__ = {"sqlite_autoincrement": True}

    # No foreign key: a reminder may outlive its task.
    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, nullable=False, index=True)
    notification_time = Column(DateTime(timezone=True), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class SettingModel(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    key = Column(String(200), nullable=False, unique=True)
    value = Column(Text, nullable=False)
