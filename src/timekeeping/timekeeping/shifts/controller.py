from __future__ import annotations

from flask import Flask, g

from ..common.sentinels import UNSET
from ..common.web import json_body, login_required, query_flag, query_value, respond
from ..container import Container
from .model import ShiftPatch


def register(app: Flask, container: Container) -> None:
    service = container.shift_service

    @app.route("/api/shifts", methods=["GET"], endpoint="shifts_list")
    @login_required
    async def list_shifts():
        shifts = await service.list_shifts(
            business_id=g.business_id,
            actor=g.actor,
            date_from=query_value("from"),
            date_to=query_value("to"),
            user_id=query_value("userId"),
            status=query_value("status"),
            mine=query_flag("mine"),
            include_open=query_flag("includeOpen", default=True),
        )
        return respond(shifts)

    @app.route("/api/shifts", methods=["POST"], endpoint="shifts_create")
    @login_required
    async def create_shift():
        body = json_body()
        shift = await service.create_shift(
            business_id=g.business_id,
            actor=g.actor,
            start_at=body.get("startAt"),
            end_at=body.get("endAt"),
            user_id=body.get("userId"),
            location_id=body.get("locationId"),
            role_tag=body.get("roleTag"),
            notes=body.get("notes"),
        )
        return respond(shift, 201)

    @app.route("/api/shifts/<int:shift_id>", methods=["GET"], endpoint="shifts_get")
    @login_required
    async def get_shift(shift_id: int):
        return respond(await service.get_shift(business_id=g.business_id, actor=g.actor, shift_id=shift_id))

    @app.route("/api/shifts/<int:shift_id>", methods=["PATCH"], endpoint="shifts_update")
    @login_required
    async def update_shift(shift_id: int):
        body = json_body()
        patch = ShiftPatch(
            start_at=body.get("startAt"),
            end_at=body.get("endAt"),
            user_id=body["userId"] if "userId" in body else UNSET,
            location_id=body["locationId"] if "locationId" in body else UNSET,
            role_tag=body["roleTag"] if "roleTag" in body else UNSET,
            notes=body["notes"] if "notes" in body else UNSET,
        )
        shift = await service.update_shift(business_id=g.business_id, actor=g.actor, shift_id=shift_id, patch=patch)
        return respond(shift)

    @app.route("/api/shifts/<int:shift_id>/publish", methods=["POST"], endpoint="shifts_publish")
    @login_required
    async def publish(shift_id: int):
        return respond(await service.publish_shift(business_id=g.business_id, actor=g.actor, shift_id=shift_id))

    @app.route("/api/shifts/<int:shift_id>/cancel", methods=["POST"], endpoint="shifts_cancel")
    @login_required
    async def cancel(shift_id: int):
        return respond(await service.cancel_shift(business_id=g.business_id, actor=g.actor, shift_id=shift_id))

    @app.route("/api/shifts/<int:shift_id>/assign", methods=["POST"], endpoint="shifts_assign")
    @login_required
    async def assign(shift_id: int):
        body = json_body()
        shift = await service.assign_shift(
            business_id=g.business_id, actor=g.actor, shift_id=shift_id, user_id=body.get("userId")
        )
        return respond(shift)

    @app.route("/api/shifts/<int:shift_id>/unassign", methods=["POST"], endpoint="shifts_unassign")
    @login_required
    async def unassign(shift_id: int):
        return respond(await service.unassign_shift(business_id=g.business_id, actor=g.actor, shift_id=shift_id))
