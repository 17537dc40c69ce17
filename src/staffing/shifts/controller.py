from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from flask import Flask, jsonify, request

from ..common.datetime_utils import add_days
from ..common.http import actor_required, bool_arg, date_arg, int_arg, json_body, text_arg
from ..common.validators import coerce_enum
from ..core.constants import DEFAULT_BREAK_MINUTES
from ..core.enums import Permission, ShiftStatus, ShiftType
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ShiftDraft


def register(app: Flask, container: Container) -> None:
    workers = container.worker_service

    def _rate(value):
        if value in (None, ""):
            return None
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValidationError.single("hourly_rate", "malformed_rate", "hourly_rate must be a number")

    def _draft(body: dict) -> ShiftDraft:
        break_minutes = body.get("break_duration_minutes")
        return ShiftDraft(
            worker_id=str(body.get("worker_id") or ""),
            location_id=str(body.get("location_id") or ""),
            shift_date=date_arg(body.get("shift_date"), "shift_date"),
            scheduled_start=body.get("scheduled_start"),
            scheduled_end=body.get("scheduled_end"),
            position=str(body.get("position") or ""),
            shift_type=body.get("shift_type") or ShiftType.REGULAR,
            is_supervisor_shift=bool_arg(body.get("is_supervisor_shift")),
            requires_supervisor_present=bool_arg(body.get("requires_supervisor_present")),
            break_duration_minutes=(
                DEFAULT_BREAK_MINUTES if break_minutes is None else int_arg(break_minutes, "break_duration_minutes")
            ),
            hourly_rate=_rate(body.get("hourly_rate")),
            notes=text_arg(body.get("notes"), "notes"),
        )

    @app.route("/api/shifts", methods=["POST"], endpoint="api_shifts_create")
    @actor_required(workers, Permission.SCHEDULE_SHIFTS)
    def api_shifts_create():
        result = container.shift_scheduler.schedule(_draft(json_body()))
        return (
            jsonify({"shift": result.shift.to_dict(), "warnings": [w.to_dict() for w in result.warnings]}),
            201,
        )

    @app.route("/api/shifts", methods=["GET"], endpoint="api_shifts_list")
    @actor_required(workers)
    def api_shifts_list():
        today = date.today()
        start = date_arg(request.args.get("start"), "start", default=today)
        end = date_arg(request.args.get("end"), "end", default=add_days(start, 6))

        status = None
        if request.args.get("status"):
            status = coerce_enum(ShiftStatus, request.args["status"])
            if status is None:
                raise ValidationError.single("status", "invalid_choice", f"Unknown shift status {request.args['status']!r}")
        shift_type = None
        if request.args.get("shift_type"):
            shift_type = coerce_enum(ShiftType, request.args["shift_type"])
            if shift_type is None:
                raise ValidationError.single(
                    "shift_type", "invalid_choice", f"Unknown shift type {request.args['shift_type']!r}"
                )

        shifts = container.shift_scheduler.list_shifts(
            start=start,
            end=end,
            location_id=request.args.get("location_id") or None,
            worker_id=request.args.get("worker_id") or None,
            status=status,
            shift_type=shift_type,
            supervisor_only=bool_arg(request.args.get("supervisor")),
        )
        return jsonify({"shifts": [s.to_dict() for s in shifts]})

    @app.route("/api/shifts/<int:shift_id>/transition", methods=["POST"], endpoint="api_shifts_transition")
    @actor_required(workers, Permission.MANAGE_SHIFTS)
    def api_shifts_transition(shift_id: int):
        body = json_body()
        shift = container.shift_scheduler.transition(shift_id, body.get("status") or "")
        return jsonify({"shift": shift.to_dict()})
