from __future__ import annotations

from flask import Flask, g, session

from ..common.web import json_body, login_required, respond
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    async def login():
        body = json_body()
        user = await container.auth_service.authenticate(body.get("username"), body.get("password"))

        session.clear()
        session["user_id"] = user.user_id
        session["business_id"] = user.business_id
        session["role"] = user.role.value
        session["name"] = user.display_name
        return respond(user)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return respond({"ok": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    async def me():
        return respond(
            {
                "userId": g.actor.user_id,
                "businessId": g.business_id,
                "role": g.actor.role,
                "name": session.get("name"),
            }
        )
