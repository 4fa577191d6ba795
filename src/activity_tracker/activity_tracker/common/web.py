"""Flask glue shared by the controllers: session identity, role gate, JSON errors."""
from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, current_app, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from ..users.model import Requester, User


EXTENSION_KEY = "activity_tracker"


def login_session(user: User) -> None:
    """Only the user id is kept; role and organization are reloaded per request."""
    session.clear()
    session["user_id"] = user.user_id


def current_requester() -> Optional[Requester]:
    """Requester built from the live directory row of the session user.

    A session whose user no longer exists is cleared.
    """
    user_id = session.get("user_id")
    if user_id is None:
        return None
    users = current_app.extensions[EXTENSION_KEY].users_repo
    user = users.get_by_id(int(user_id))
    if user is None:
        session.clear()
        return None
    return Requester.from_user(user)


def json_ok(data=None, *, status: int = 200, **extra):
    body = {"success": True, **extra}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def json_error(message: str, status: int, **extra):
    return jsonify({"success": False, "message": message, **extra}), status


def request_payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def roles_required(*roles: Role):
    """Reject anonymous requests (401) and requests from other roles (403).

    The authenticated requester is exposed as `flask.g.requester`.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            requester = current_requester()
            if requester is None:
                return json_error("Not authorized, please log in", 401)
            if roles and requester.role not in roles:
                return json_error(f"User role {requester.role.value} is not authorized to access this route", 403)
            g.requester = requester
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        extra = {"field": e.field} if e.field else {}
        return json_error(str(e), 400, **extra)

    @app.errorhandler(AuthenticationError)
    def _authentication(e: AuthenticationError):
        return json_error(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return json_error(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return json_error(str(e), 404)

    @app.errorhandler(StoreError)
    def _store(e: StoreError):
        current_app.logger.exception("Store failure on %s %s", request.method, request.path)
        return json_error("Server Error", 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return json_error(e.description or e.name, e.code or 500)
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_error("Server Error", 500)
