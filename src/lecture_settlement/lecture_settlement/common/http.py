from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session

from ..core.actor import Actor
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConcurrencyConflict,
    DomainError,
    InsufficientVerifiedRecords,
    PaidRecordLocked,
    RecordNotFound,
    StorageError,
    ValidationError,
    VerifiedRecordImmutable,
)
from .logger import log

# Most specific first; the first match wins.
_STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (RecordNotFound, 404),
    (AuthorizationError, 403),
    (VerifiedRecordImmutable, 403),
    (PaidRecordLocked, 409),
    (InsufficientVerifiedRecords, 409),
    (ConcurrencyConflict, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 400


def to_json(value: Any) -> Any:
    """Make domain objects jsonify-safe. Money goes out as strings."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
        # Derived totals on read models
        for name in ("gross_total", "applicable_advance", "net_total"):
            if hasattr(type(value), name) and isinstance(getattr(type(value), name), property):
                data[name] = to_json(getattr(value, name))
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": to_json(data)}), status


def int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a whole number")
    if value <= 0:
        raise ValidationError(f"{name} must be positive")
    return value


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def current_actor() -> Actor:
    try:
        role = Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role in session")
    return Actor(actor_id=str(session["user_id"]), role=role)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Unauthenticated", "message": "Please log in"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Unauthenticated", "message": "Please log in"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "error": "AuthorizationError", "message": "Admins only"}), 403
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        log.info("request rejected (%d %s): %s", status, type(e).__name__, e)
        return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), status

    @app.errorhandler(StorageError)
    def handle_storage_error(e: StorageError):
        log.error("storage unavailable: %s", e)
        return jsonify({"success": False, "error": "StorageError", "message": "Storage is unavailable, try again"}), 503


def scoped_teacher_id(actor: Actor, requested: Any) -> str:
    """Admins may read any teacher; teachers only themselves."""
    teacher_id = str(requested).strip() if requested else actor.actor_id
    if not actor.is_admin and teacher_id != actor.actor_id:
        raise AuthorizationError("Teachers can only view their own records")
    return teacher_id
