from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Teacher:
    teacher_id: str
    name: str
    phone: Optional[str] = None


@dataclass(frozen=True)
class ClassConfig:
    class_id: str
    name: str
    batch_size: int


@dataclass(frozen=True)
class TeacherAssignment:
    """Rate a teacher earns for one full cycle (batch_size lectures) of a class."""

    teacher_id: str
    class_id: str
    rate: Decimal
    subject: Optional[str] = None
    active_from: Optional[date] = None
