from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_actor, int_arg, json_body, login_required, ok, scoped_teacher_id
from ..core.constants import DEFAULT_ACTIVITY_LIMIT, DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from ..container import Container


def _flag(name: str) -> bool:
    return str(request.args.get(name, "")).strip().lower() in {"1", "true", "yes", "on"}


def register(app: Flask, container: Container) -> None:
    engine = container.engine

    # Settlement
    @app.route("/api/settlements/<teacher_id>/proposal", methods=["GET"], endpoint="api_settlement_proposal")
    @admin_required
    def api_settlement_proposal(teacher_id: str):
        return ok(engine.propose_settlement(teacher_id, pay_all_pending=_flag("pay_all")))

    @app.route("/api/settlements/<teacher_id>/quote", methods=["GET"], endpoint="api_settlement_quote")
    @admin_required
    def api_settlement_quote(teacher_id: str):
        return ok(
            engine.quote_settlement(
                teacher_id,
                request.args.get("class_id", ""),
                request.args.get("lecture_count", "0"),
            )
        )

    @app.route("/api/settlements/<teacher_id>", methods=["POST"], endpoint="api_settlement_commit")
    @admin_required
    def api_settlement_commit(teacher_id: str):
        data = json_body()
        requests = data.get("requests") or []
        if not isinstance(requests, list):
            raise ValidationError("requests must be a list")
        result = engine.commit_settlement(
            current_actor(),
            teacher_id,
            requests,
            advance_deduction_total=data.get("advance_deduction_total", 0),
            cash_payout_override=data.get("cash_payout"),
        )
        return ok(result, 201)

    @app.route("/api/payments", methods=["GET"], endpoint="api_payments")
    @login_required
    def api_payments():
        actor = current_actor()
        requested = request.args.get("teacher_id")
        # Admins see every teacher's payments unless they filter.
        teacher_id = requested if actor.is_admin else scoped_teacher_id(actor, requested)
        return ok(engine.list_payments(teacher_id=teacher_id or None, limit=int_arg("limit", DEFAULT_HISTORY_LIMIT)))

    # Advances
    @app.route("/api/advances/<teacher_id>", methods=["GET"], endpoint="api_advances")
    @login_required
    def api_advances(teacher_id: str):
        teacher_id = scoped_teacher_id(current_actor(), teacher_id)
        return ok(
            {
                "teacher_id": teacher_id,
                "balance": engine.get_advance_balance(teacher_id),
                "entries": engine.list_advances(teacher_id, limit=int_arg("limit", DEFAULT_HISTORY_LIMIT)),
            }
        )

    @app.route("/api/advances/<teacher_id>", methods=["POST"], endpoint="api_advance_grant")
    @admin_required
    def api_advance_grant(teacher_id: str):
        data = json_body()
        entry = engine.grant_advance(current_actor(), teacher_id, data.get("amount"), data.get("notes"))
        return ok(entry, 201)

    # Activity
    @app.route("/api/activity", methods=["GET"], endpoint="api_activity")
    @admin_required
    def api_activity():
        return ok(engine.recent_activity(int_arg("limit", DEFAULT_ACTIVITY_LIMIT)))
