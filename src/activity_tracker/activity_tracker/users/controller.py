from __future__ import annotations

from flask import Flask, g, session

from ..common.web import json_error, json_ok, login_session, request_payload, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        payload = request_payload()
        user = container.auth_service.register(
            name=payload.get("name", ""),
            email=payload.get("email", ""),
            password=payload.get("password", ""),
            role=payload.get("role") or Role.STUDENT.value,
            department=payload.get("department"),
            class_name=payload.get("class"),
            semester=payload.get("semester"),
            roll_number=payload.get("rollNumber"),
        )
        login_session(user)
        return json_ok(user.to_public_dict(), status=201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        payload = request_payload()
        user = container.auth_service.authenticate(payload.get("email", ""), payload.get("password", ""))
        login_session(user)
        return json_ok(user.to_public_dict())

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return json_ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @roles_required()
    def auth_me():
        user = container.auth_service.get_profile(g.requester.user_id)
        return json_ok(user.to_public_dict())

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @roles_required(Role.SUPERADMIN)
    def list_users():
        users = container.user_service.list_users(g.requester)
        return json_ok([u.to_public_dict() for u in users], count=len(users))

    @app.route("/api/users/role/<role>", methods=["GET"], endpoint="list_users_by_role")
    @roles_required(Role.SUPERADMIN, Role.TEACHER)
    def list_users_by_role(role: str):
        users = container.user_service.list_users_by_role(g.requester, role)
        return json_ok([u.to_public_dict() for u in users], count=len(users))

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    @roles_required(Role.SUPERADMIN, Role.TEACHER)
    def get_user(user_id: int):
        try:
            user = container.user_service.get_user(g.requester, user_id)
        except (NotFoundError, AuthorizationError):
            return json_error("User not found", 404)
        return json_ok(user.to_public_dict())

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @roles_required(Role.SUPERADMIN)
    def update_user(user_id: int):
        user = container.user_service.update_user(g.requester, user_id, request_payload())
        return json_ok(user.to_public_dict())

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @roles_required(Role.SUPERADMIN)
    def delete_user(user_id: int):
        container.user_service.delete_user(g.requester, user_id)
        return json_ok({})
