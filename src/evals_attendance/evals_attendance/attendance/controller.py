from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request

from ..auth.gate import current_user, eboard_only, evals_only, member_only
from ..common.validators import parse_event_id
from ..container import Container
from ..core.enums import EventKind, StatusPredicate
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    StoreError,
    ValidationError,
)

PREFIX = "/api/attendance"
KIND = "<any(house, seminar, committee):kind>"


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def json_errors(view):
        """Map domain errors to JSON responses; nothing is swallowed silently."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except AuthenticationError as e:
                return _error(str(e), 401)
            except AuthorizationError as e:
                return _error(str(e), 403)
            except NotFoundError as e:
                return _error(str(e), 404)
            except ValidationError as e:
                app.logger.warning("%s %s rejected: %s", request.method, request.path, e)
                return _error(str(e), 400)
            except StoreError as e:
                app.logger.error("%s %s failed: %s", request.method, request.path, e)
                return _error(str(e), 500)
            except Exception:
                app.logger.exception("Unhandled error on %s %s", request.method, request.path)
                return _error("Internal server error", 500)

        return wrapper

    def _error(message: str, status: int):
        return jsonify({"success": False, "message": message}), status

    def _dates(values):
        return jsonify([v.isoformat() for v in values])

    @app.route(f"{PREFIX}/{KIND}", methods=["POST"], endpoint="attendance_submit")
    @json_errors
    @member_only
    def submit(kind: str):
        app.logger.info("POST %s/%s", PREFIX, kind)
        body = request.get_json(silent=True)
        if body is None:
            raise ValidationError("Request body must be JSON")
        event_id = service.submit(EventKind(kind), body, auto_approve=current_user().is_eboard)
        return jsonify({"success": True, "id": event_id}), 201

    @app.route(f"{PREFIX}/{KIND}", methods=["GET"], endpoint="attendance_list")
    @json_errors
    @member_only
    def list_events(kind: str):
        app.logger.info("GET %s/%s", PREFIX, kind)
        events = service.list_events(EventKind(kind))
        return jsonify([e.to_dict() for e in events])

    @app.route(f"{PREFIX}/{KIND}/<identifier>", methods=["GET"], endpoint="attendance_absences")
    @json_errors
    @member_only
    def absences(kind: str, identifier: str):
        app.logger.info("GET %s/%s/%s", PREFIX, kind, identifier)
        return _dates(service.dates_for(EventKind(kind), identifier, StatusPredicate.ABSENT))

    @app.route(f"{PREFIX}/{KIND}/evals/<identifier>", methods=["GET"], endpoint="attendance_evals")
    @json_errors
    @evals_only
    def evals(kind: str, identifier: str):
        app.logger.info("GET %s/%s/evals/%s", PREFIX, kind, identifier)
        return _dates(service.dates_for(EventKind(kind), identifier, StatusPredicate.NOT_ATTENDED))

    @app.route(f"{PREFIX}/{KIND}/attended/<identifier>", methods=["GET"], endpoint="attendance_attended")
    @json_errors
    @member_only
    def attended(kind: str, identifier: str):
        app.logger.info("GET %s/%s/attended/%s", PREFIX, kind, identifier)
        dates = service.dates_for(EventKind(kind), identifier, StatusPredicate.ATTENDED, approved_only=True)
        return _dates(dates)

    @app.route(f"{PREFIX}/{KIND}/<identifier>", methods=["PUT"], endpoint="attendance_edit")
    @json_errors
    @eboard_only
    def edit(kind: str, identifier: str):
        app.logger.info("PUT %s/%s/%s", PREFIX, kind, identifier)
        event_id = parse_event_id(identifier)
        body = request.get_json(silent=True)
        if body is None:
            raise ValidationError("Request body must be JSON")
        service.edit(EventKind(kind), event_id, body)
        return jsonify({"success": True})

    @app.route(f"{PREFIX}/{KIND}/<identifier>", methods=["DELETE"], endpoint="attendance_delete")
    @json_errors
    @eboard_only
    def delete(kind: str, identifier: str):
        app.logger.info("DELETE %s/%s/%s", PREFIX, kind, identifier)
        service.delete(EventKind(kind), parse_event_id(identifier))
        return jsonify({"success": True})

    @app.route(f"{PREFIX}/{KIND}/<identifier>/approve", methods=["POST"], endpoint="attendance_approve")
    @json_errors
    @eboard_only
    def approve(kind: str, identifier: str):
        app.logger.info("POST %s/%s/%s/approve", PREFIX, kind, identifier)
        body = request.get_json(silent=True) or {}
        approved = body.get("approved", True) if isinstance(body, dict) else True
        if not isinstance(approved, bool):
            raise ValidationError("'approved' must be a boolean")
        service.approve(EventKind(kind), parse_event_id(identifier), approved=approved)
        return jsonify({"success": True})
