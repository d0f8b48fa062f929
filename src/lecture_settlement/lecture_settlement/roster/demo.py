from __future__ import annotations

from .memory_roster_repository import InMemoryRosterRepository

# Same rows as database/seed.sql.
DEMO_TEACHERS = (
    ("t-anita", "Anita Rao", "9800000001"),
    ("t-vikram", "Vikram Shah", "9800000002"),
)
DEMO_CLASSES = (
    ("c-physics-11", "Physics XI", 12),
    ("c-maths-12", "Maths XII", 10),
)
DEMO_ASSIGNMENTS = (
    ("t-anita", "c-physics-11", "Physics", "24000"),
    ("t-anita", "c-maths-12", "Maths", "20000"),
    ("t-vikram", "c-maths-12", "Maths", "18000"),
)


def seed_demo_roster(roster: InMemoryRosterRepository) -> None:
    for teacher_id, name, phone in DEMO_TEACHERS:
        roster.add_teacher(teacher_id, name, phone)
    for class_id, name, batch_size in DEMO_CLASSES:
        roster.add_class(class_id, name, batch_size)
    for teacher_id, class_id, subject, rate in DEMO_ASSIGNMENTS:
        roster.assign(teacher_id, class_id, rate, subject=subject)
