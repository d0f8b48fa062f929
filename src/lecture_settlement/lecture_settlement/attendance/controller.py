from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_actor, int_arg, json_body, login_required, ok, scoped_teacher_id
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..container import Container


def register(app: Flask, container: Container) -> None:
    engine = container.engine

    @app.route("/api/attendance/toggle", methods=["POST"], endpoint="api_attendance_toggle")
    @login_required
    def api_attendance_toggle():
        actor = current_actor()
        data = json_body()
        record = engine.toggle_attendance(
            actor,
            teacher_id=str(data.get("teacher_id") or actor.actor_id),
            class_id=data.get("class_id"),
            lecture_date=data.get("lecture_date"),
        )
        if record is None:
            return ok({"action": "removed", "record": None})
        return ok({"action": "marked", "record": record}, 201)

    @app.route("/api/attendance/<attendance_id>/verify", methods=["POST"], endpoint="api_attendance_verify")
    @admin_required
    def api_attendance_verify(attendance_id: str):
        return ok(engine.verify_attendance(current_actor(), attendance_id))

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    @login_required
    def api_attendance_list():
        teacher_id = scoped_teacher_id(current_actor(), request.args.get("teacher_id"))
        records = engine.list_attendance(
            teacher_id,
            class_id=request.args.get("class_id") or None,
            limit=int_arg("limit", DEFAULT_HISTORY_LIMIT),
        )
        return ok(records)
