from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.http import actor_required, bool_arg, date_arg
from ..common.validators import coerce_enum
from ..core.enums import AnalysisMode, Permission
from ..core.exceptions import ValidationError
from ..container import Container
from .model import DateRange


def register(app: Flask, container: Container) -> None:
    @app.route("/api/coverage", methods=["GET"], endpoint="api_coverage")
    @actor_required(container.worker_service, Permission.VIEW_REPORTS)
    def api_coverage():
        location_id = request.args.get("location_id")
        if not location_id:
            raise ValidationError.single("location_id", "required", "location_id is required")

        mode = coerce_enum(AnalysisMode, request.args.get("mode") or AnalysisMode.EFFECTIVE)
        if mode is None:
            raise ValidationError.single("mode", "invalid_choice", f"Unknown mode {request.args.get('mode')!r}")

        start = date_arg(request.args.get("start"), "start")
        end = date_arg(request.args.get("end"), "end")
        if start and end:
            date_range = DateRange(start, end)
        else:
            # Without an explicit range, report the Sunday-started week.
            week_of = date_arg(request.args.get("week_of"), "week_of", default=start or date.today())
            date_range = DateRange.week_of(week_of)

        summary = container.coverage_service.analyze_location(
            location_id,
            date_range,
            mode,
            include_actuals=bool_arg(request.args.get("actuals")),
        )
        return jsonify(summary.to_dict())
