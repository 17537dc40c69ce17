from __future__ import annotations

from datetime import datetime, time

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import now_local
from ..common.http import (
    actor_required,
    bool_arg,
    date_arg,
    datetime_arg,
    int_arg,
    json_body,
    require_self_or,
    text_arg,
)
from ..core.enums import ClockMethod, Permission
from ..core.exceptions import AuthorizationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    workers = container.worker_service
    engine = container.time_clock

    @app.route("/api/timeclock", methods=["POST"], endpoint="api_timeclock_record")
    @actor_required(workers, Permission.USE_TIME_CLOCK)
    def api_timeclock_record():
        body = json_body()
        actor = g.actor
        worker_id = str(body.get("worker_id") or actor.worker_id)
        require_self_or(actor, worker_id, Permission.MANAGE_TIME_CLOCK)

        # Overrides and adjustments are always signed by the caller.
        override_by = None
        if bool_arg(body.get("override")):
            if not actor.has_permission(Permission.OVERRIDE_COVERAGE):
                raise AuthorizationError(Permission.OVERRIDE_COVERAGE)
            override_by = actor.worker_id
        adjusted_by = actor.worker_id if actor.has_permission(Permission.MANAGE_TIME_CLOCK) else None

        entry = engine.record(
            worker_id,
            body.get("clock_type") or "",
            location_id=text_arg(body.get("location_id"), "location_id"),
            clock_time=datetime_arg(body.get("clock_time"), "clock_time"),
            clock_method=body.get("clock_method") or ClockMethod.MANUAL,
            shift_id=int_arg(body.get("shift_id"), "shift_id"),
            notes=text_arg(body.get("notes"), "notes"),
            override_by=override_by,
            adjusted_by=adjusted_by,
            adjustment_reason=text_arg(body.get("adjustment_reason"), "adjustment_reason"),
        )
        return (
            jsonify({"entry": entry.to_dict(), "status": engine.current_status(worker_id).value}),
            201,
        )

    @app.route("/api/timeclock", methods=["GET"], endpoint="api_timeclock_entries")
    @actor_required(workers)
    def api_timeclock_entries():
        worker_id = request.args.get("worker_id") or None
        # Only a worker's own log is visible without MANAGE_TIME_CLOCK.
        require_self_or(g.actor, worker_id or "", Permission.MANAGE_TIME_CLOCK)

        entries = engine.list_entries(
            worker_id=worker_id,
            location_id=request.args.get("location_id") or None,
            day=date_arg(request.args.get("date"), "date"),
            clock_type=request.args.get("clock_type") or None,
        )
        newest_first = sorted(entries, key=lambda e: e.sort_key, reverse=True)
        return jsonify({"entries": [e.to_dict() for e in newest_first], "count": len(newest_first)})

    @app.route("/api/timeclock/<worker_id>/status", methods=["GET"], endpoint="api_timeclock_status")
    @actor_required(workers)
    def api_timeclock_status(worker_id: str):
        require_self_or(g.actor, worker_id, Permission.MANAGE_TIME_CLOCK)
        workers.get(worker_id)
        return jsonify(
            {
                "worker_id": worker_id,
                "status": engine.current_status(worker_id).value,
                "available_actions": [a.value for a in engine.available_actions(worker_id)],
            }
        )

    @app.route("/api/timeclock/<worker_id>/sessions", methods=["GET"], endpoint="api_timeclock_sessions")
    @actor_required(workers)
    def api_timeclock_sessions(worker_id: str):
        require_self_or(g.actor, worker_id, Permission.MANAGE_TIME_CLOCK)
        workers.get(worker_id)
        start = date_arg(request.args.get("start"), "start")
        end = date_arg(request.args.get("end"), "end")

        as_of = now_local()
        sessions = engine.sessions(
            worker_id,
            start=datetime.combine(start, time.min) if start else None,
            end=datetime.combine(end, time.max) if end else None,
        )
        return jsonify(
            {
                "worker_id": worker_id,
                "sessions": [s.to_dict(as_of) for s in sessions],
                "worked_minutes": sum(s.worked_minutes(as_of) for s in sessions),
            }
        )

    @app.route("/api/locations/<location_id>/status", methods=["GET"], endpoint="api_location_status")
    @actor_required(workers, Permission.MANAGE_TIME_CLOCK)
    def api_location_status(location_id: str):
        return jsonify(engine.location_status(location_id).to_dict())
