from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request

from ..core.enums import Permission
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..workers.model import Worker
from ..workers.service import WorkerService
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)

ACTOR_HEADER = "X-Worker-Id"

_STATUS_BY_KIND = {
    "validation": 422,
    "invalid_transition": 409,
    "coverage_violation": 409,
    "overlap": 409,
    "not_found": 404,
    "forbidden": 403,
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"error": e.to_dict()}), _STATUS_BY_KIND.get(e.kind, 400)


def actor_required(workers: WorkerService, *permissions: Permission):
    """Resolve the acting worker from the request header and check permissions.

    The view receives the actor as ``g.actor``. With no permissions given, any active
    worker passes.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor_id = (request.headers.get(ACTOR_HEADER) or "").strip()
            try:
                actor = workers.get(actor_id)
            except NotFoundError:
                return _unauthorized()
            if not actor.is_active:
                return _unauthorized()

            missing = [p for p in permissions if not actor.has_permission(p)]
            if missing:
                logger.warning("forbidden actor=%s path=%s missing=%s", actor_id, request.path, missing[0].value)
                raise AuthorizationError(missing[0])

            g.actor = actor
            return view(*args, **kwargs)

        return wrapper

    return decorator


def require_self_or(actor: Worker, worker_id: str, permission: Permission) -> None:
    if actor.worker_id != worker_id and not actor.has_permission(permission):
        raise AuthorizationError(permission, f"Acting on worker {worker_id} requires {permission.value}")


def _unauthorized():
    return jsonify({"error": {"kind": "unauthorized", "message": f"{ACTOR_HEADER} header must name an active worker"}}), 401


def json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError.single("body", "malformed", "Request body must be a JSON object")
    return body


def date_arg(value: Any, field: str, *, default: Optional[date] = None) -> Optional[date]:
    if value in (None, ""):
        return default
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError.single(field, "malformed_date", f"{field} must be YYYY-MM-DD")


def datetime_arg(value: Any, field: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except (ValueError, OverflowError):
        raise ValidationError.single(field, "malformed_datetime", f"{field} must be an ISO-8601 timestamp")


def int_arg(value: Any, field: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError.single(field, "malformed_int", f"{field} must be an integer")


def text_arg(value: Any, field: str) -> Optional[str]:
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise ValidationError.single(field, "malformed", f"{field} must be a string")
    return value


def bool_arg(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}
