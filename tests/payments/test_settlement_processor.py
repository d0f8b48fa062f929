from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal

import pytest

from src.lecture_settlement.lecture_settlement.container import build_container
from src.lecture_settlement.lecture_settlement.core.enums import AttendanceStatus, EventType
from src.lecture_settlement.lecture_settlement.core.exceptions import (
    AuthorizationError,
    ConcurrencyConflict,
    InsufficientVerifiedRecords,
    ValidationError,
)
from src.lecture_settlement.lecture_settlement.payments.model import PaymentRequest


def _pending(container, teacher_id="t1", class_id="c-phy"):
    return container.attendance_service.payable(teacher_id, class_id)


def test_settlement_nets_advance_against_gross(container, engine, admin, mark_verified):
    records = mark_verified("t1", "c-phy", 5)
    engine.grant_advance(admin, "t1", 2000)

    result = engine.commit_settlement(
        admin,
        "t1",
        [{"class_id": "c-phy", "lecture_count": 5, "amount": 5000}],
        advance_deduction_total=2000,
    )

    (payment,) = result.payments
    assert payment.gross_amount == Decimal("5000")
    assert payment.advance_deduction == Decimal("2000")
    assert payment.net_disbursement == Decimal("3000")
    assert payment.lecture_count == 5
    assert payment.start_date_covered == date(2025, 3, 1)
    assert payment.end_date_covered == date(2025, 3, 5)
    assert result.advance_applied == Decimal("2000")
    assert result.net_total == Decimal("3000")
    assert result.overflow_entry is None

    assert engine.get_advance_balance("t1") == Decimal("0")
    for r in records:
        stored = container.attendance_repo.get(r.attendance_id)
        assert stored.status == AttendanceStatus.PAID
        assert stored.payment_id == payment.payment_id
    assert engine.list_payments(teacher_id="t1") == [payment]


def test_settlement_pays_oldest_lectures_and_leaves_the_rest(container, engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 7)
    before = len(_pending(container))

    result = engine.commit_settlement(admin, "t1", [PaymentRequest("c-phy", 4, Decimal("4000"))])

    payment = result.payments[0]
    remaining = _pending(container)
    assert len(remaining) == before - 4
    assert [r.lecture_date for r in remaining] == [date(2025, 3, 5), date(2025, 3, 6), date(2025, 3, 7)]
    paid = [r for r in engine.list_attendance("t1") if r.payment_id == payment.payment_id]
    assert len(paid) == 4


def test_rounding_overflow_is_banked_as_new_advance(container, engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 3)

    result = engine.commit_settlement(
        admin,
        "t1",
        [{"class_id": "c-phy", "lecture_count": 3, "amount": 3000}],
        advance_deduction_total=0,
        cash_payout_override=3500,
    )

    entry = result.overflow_entry
    assert entry is not None
    assert entry.amount == Decimal("500")
    assert entry.remaining_amount == Decimal("500")
    assert engine.get_advance_balance("t1") == Decimal("500")

    events = engine.recent_activity()
    assert events[0].event_type == EventType.ADVANCE_GRANTED
    assert events[0].description == "Banked rounding overflow of ₹500"
    assert events[1].event_type == EventType.PAYMENT_PROCESSED
    assert events[1].description == "Settled ₹3,000 for 3 lectures."


def test_cash_equal_to_net_creates_no_overflow(engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 3)

    result = engine.commit_settlement(
        admin,
        "t1",
        [{"class_id": "c-phy", "lecture_count": 3, "amount": 3000}],
        cash_payout_override=3000,
    )

    assert result.overflow_entry is None
    assert engine.list_advances("t1") == []


def test_overflow_alone_is_a_valid_commit(engine, admin):
    result = engine.commit_settlement(admin, "t1", [], cash_payout_override=250)

    assert result.payments == []
    assert result.overflow_entry.amount == Decimal("250")


def test_deduction_pool_drains_in_request_order(engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 2)
    mark_verified("t1", "c-chem", 3)
    engine.grant_advance(admin, "t1", 1000)
    engine.grant_advance(admin, "t1", 3000)

    result = engine.commit_settlement(
        admin,
        "t1",
        [
            {"class_id": "c-chem", "lecture_count": 3, "amount": 3600},
            {"class_id": "c-phy", "lecture_count": 2, "amount": 2000},
        ],
        advance_deduction_total=5000,
    )

    chem, phy = result.payments
    assert (chem.class_id, chem.advance_deduction, chem.net_disbursement) == ("c-chem", Decimal("3600"), Decimal("0"))
    assert (phy.class_id, phy.advance_deduction, phy.net_disbursement) == ("c-phy", Decimal("400"), Decimal("1600"))
    # min(requested deduction, balance before commit)
    assert sum(p.advance_deduction for p in result.payments) == Decimal("4000")
    assert engine.get_advance_balance("t1") == Decimal("0")


def test_deduction_is_capped_at_gross_total(engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 1)
    engine.grant_advance(admin, "t1", 5000)

    result = engine.commit_settlement(
        admin, "t1", [{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}], advance_deduction_total=5000
    )

    assert result.advance_applied == Decimal("1000")
    assert result.payments[0].net_disbursement == Decimal("0")
    assert engine.get_advance_balance("t1") == Decimal("4000")


def test_requesting_more_than_verified_aborts_everything(container, engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 5)
    mark_verified("t1", "c-chem", 2)
    engine.grant_advance(admin, "t1", 1000)

    with pytest.raises(InsufficientVerifiedRecords):
        engine.commit_settlement(
            admin,
            "t1",
            [
                {"class_id": "c-phy", "lecture_count": 5, "amount": 5000},
                {"class_id": "c-chem", "lecture_count": 3, "amount": 3600},
            ],
            advance_deduction_total=1000,
        )

    assert len(_pending(container)) == 5
    assert len(_pending(container, class_id="c-chem")) == 2
    assert engine.get_advance_balance("t1") == Decimal("1000")
    assert engine.list_payments() == []


def test_submitted_lectures_are_not_payable(engine, teacher, admin):
    engine.toggle_attendance(teacher, "t1", "c-phy", date(2025, 3, 1))

    with pytest.raises(InsufficientVerifiedRecords):
        engine.commit_settlement(admin, "t1", [{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}])


def test_concurrent_commits_do_not_double_pay(engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 3)
    barrier = threading.Barrier(2)
    outcomes: list[object] = []
    lock = threading.Lock()

    def settle():
        barrier.wait()
        try:
            result = engine.commit_settlement(admin, "t1", [{"class_id": "c-phy", "lecture_count": 3, "amount": 3000}])
            outcome: object = result
        except InsufficientVerifiedRecords as e:
            outcome = e
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=settle) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    failures = [o for o in outcomes if isinstance(o, InsufficientVerifiedRecords)]
    assert len(outcomes) == 2
    assert len(failures) == 1
    assert len(engine.list_payments(teacher_id="t1")) == 1


def test_stale_flip_inside_batch_rolls_back_whole_commit(container, engine, admin, mark_verified):
    records = mark_verified("t1", "c-phy", 2)
    engine.grant_advance(admin, "t1", 500)
    attendance = container.attendance_service
    real_payable = attendance.payable

    def stale_payable(teacher_id, class_id):
        rows = real_payable(teacher_id, class_id)
        # Someone retracts a lecture after our read.
        container.attendance_repo.delete(records[0].attendance_id, expected={"status": AttendanceStatus.VERIFIED})
        return rows

    attendance.payable = stale_payable
    with pytest.raises(ConcurrencyConflict):
        engine.commit_settlement(
            admin, "t1", [{"class_id": "c-phy", "lecture_count": 2, "amount": 2000}], advance_deduction_total=500
        )

    assert engine.get_advance_balance("t1") == Decimal("500")
    assert engine.list_payments() == []
    assert container.attendance_repo.get(records[1].attendance_id).status == AttendanceStatus.VERIFIED


def test_audit_failure_does_not_undo_settlement(clock, admin):
    class BrokenSink:
        def log_event(self, event_type, actor_label, description, amount=None):
            raise RuntimeError("activity log is down")

        def recent(self, limit):
            return []

    container = build_container(backend="memory", audit_sink=BrokenSink(), clock=clock)
    container.roster_repo.add_teacher("t1", "Asha Iyer")
    container.roster_repo.add_class("c-phy", "Physics XI", 28)
    container.roster_repo.assign("t1", "c-phy", "28000")
    engine = container.engine
    engine.toggle_attendance(admin, "t1", "c-phy", date(2025, 3, 1))

    result = engine.commit_settlement(admin, "t1", [{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}])

    assert engine.list_payments() == result.payments
    assert container.attendance_service.payable("t1", "c-phy") == []


@pytest.mark.parametrize(
    "requests, extra",
    [
        ([], {}),
        ([{"class_id": "c-phy", "lecture_count": 0, "amount": 1000}], {}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": 0}], {}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": -10}], {}),
        ([{"class_id": "c-club", "lecture_count": 1, "amount": 1000}], {}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}], {"advance_deduction_total": -1}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}], {"cash_payout_override": -1}),
        (
            [
                {"class_id": "c-phy", "lecture_count": 1, "amount": 1000},
                {"class_id": "c-phy", "lecture_count": 1, "amount": 1000},
            ],
            {},
        ),
        (["c-phy"], {}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": "NaN"}], {}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": "Infinity"}], {}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": "10.005"}], {}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}], {"advance_deduction_total": "Infinity"}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}], {"advance_deduction_total": "NaN"}),
        ([{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}], {"cash_payout_override": "0.001"}),
        ([{"class_id": "c-phy", "lecture_count": 2.9, "amount": 1000}], {}),
        ([{"class_id": "c-phy", "lecture_count": True, "amount": 1000}], {}),
        ([{"class_id": "c-phy", "lecture_count": "1.5", "amount": 1000}], {}),
    ],
)
def test_commit_rejects_invalid_requests(engine, admin, mark_verified, requests, extra):
    mark_verified("t1", "c-phy", 3)
    with pytest.raises(ValidationError):
        engine.commit_settlement(admin, "t1", requests, **extra)


def test_commit_rejects_unknown_teacher(engine, admin):
    with pytest.raises(ValidationError):
        engine.commit_settlement(admin, "nobody", [{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}])


def test_commit_requires_admin(engine, teacher, mark_verified):
    mark_verified("t1", "c-phy", 1)
    with pytest.raises(AuthorizationError):
        engine.commit_settlement(teacher, "t1", [{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}])


def test_proposal_defaults_to_one_billing_cycle(engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 30)
    mark_verified("t1", "c-chem", 4)
    engine.grant_advance(admin, "t1", 5000)

    proposal = engine.propose_settlement("t1")

    by_class = {c.class_id: c for c in proposal.candidates}
    phy = by_class["c-phy"]
    assert phy.pending_count == 30
    assert phy.suggested_lecture_count == 28
    assert phy.suggested_amount == Decimal("28000")
    assert phy.rate_per_lecture == Decimal("1000")
    assert phy.start_date == date(2025, 3, 1)
    assert phy.end_date == date(2025, 3, 28)

    chem = by_class["c-chem"]
    assert chem.suggested_lecture_count == 4
    assert chem.suggested_amount == Decimal("4800")

    assert proposal.gross_total == Decimal("32800")
    assert proposal.advance_balance == Decimal("5000")
    assert proposal.applicable_advance == Decimal("5000")
    assert proposal.net_total == Decimal("27800")


def test_proposal_pay_all_pending(engine, mark_verified):
    mark_verified("t1", "c-phy", 30)

    phy = next(c for c in engine.propose_settlement("t1", pay_all_pending=True).candidates if c.class_id == "c-phy")

    assert phy.suggested_lecture_count == 30
    assert phy.suggested_amount == Decimal("30000")


def test_proposal_for_class_without_pending_lectures(engine):
    chem = next(c for c in engine.propose_settlement("t1").candidates if c.class_id == "c-chem")

    assert chem.pending_count == 0
    assert chem.suggested_lecture_count == 0
    assert chem.suggested_amount == Decimal("0")
    assert chem.start_date is None


def test_quote_clamps_to_pending(engine, mark_verified):
    mark_verified("t1", "c-chem", 5)

    assert engine.quote_settlement("t1", "c-chem", 99).suggested_lecture_count == 5
    assert engine.quote_settlement("t1", "c-chem", -3).suggested_amount == Decimal("0")
    # 12000 / 10 * 3
    assert engine.quote_settlement("t1", "c-chem", "3").suggested_amount == Decimal("3600")


def test_quote_rejects_unassigned_class(engine):
    with pytest.raises(ValidationError):
        engine.quote_settlement("t1", "c-club", 1)


def test_payment_history_newest_first(engine, admin, mark_verified):
    mark_verified("t1", "c-phy", 2)
    mark_verified("t2", "c-phy", 1)

    first = engine.commit_settlement(admin, "t1", [{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}]).payments[0]
    second = engine.commit_settlement(admin, "t2", [{"class_id": "c-phy", "lecture_count": 1, "amount": 1000}]).payments[0]

    assert engine.list_payments() == [second, first]
    assert engine.list_payments(teacher_id="t1") == [first]
