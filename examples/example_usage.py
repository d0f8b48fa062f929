"""Example: drive the settlement engine directly (no Flask, memory backing).

Controllers are a thin layer; everything below is what they call.
"""

from datetime import date

from src.lecture_settlement.lecture_settlement.common.logger import log
from src.lecture_settlement.lecture_settlement.container import build_container
from src.lecture_settlement.lecture_settlement.core.actor import Actor
from src.lecture_settlement.lecture_settlement.core.enums import Role
from src.lecture_settlement.lecture_settlement.roster.demo import seed_demo_roster


def main():
    container = build_container(backend="memory")
    seed_demo_roster(container.roster_repo)
    engine = container.engine

    admin = Actor("admin", Role.ADMIN)
    teacher = Actor("t-anita", Role.TEACHER)

    # Teacher submits, admin verifies.
    for day in range(1, 13):
        record = engine.toggle_attendance(teacher, "t-anita", "c-physics-11", date(2025, 3, day))
        engine.verify_attendance(admin, record.attendance_id)

    engine.grant_advance(admin, "t-anita", 5000)

    proposal = engine.propose_settlement("t-anita")
    log.info("gross=%s advance=%s net=%s", proposal.gross_total, proposal.applicable_advance, proposal.net_total)

    requests = [
        {"class_id": c.class_id, "lecture_count": c.suggested_lecture_count, "amount": c.suggested_amount}
        for c in proposal.candidates
        if c.suggested_lecture_count > 0
    ]
    result = engine.commit_settlement(admin, "t-anita", requests, advance_deduction_total=proposal.applicable_advance)
    log.info("paid net=%s, advance left=%s", result.net_total, engine.get_advance_balance("t-anita"))


if __name__ == "__main__":
    main()
