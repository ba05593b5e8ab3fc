from __future__ import annotations

from flask import Flask, g

from ..common.sentinels import UNSET
from ..common.web import json_body, login_required, query_flag, query_value, respond
from ..container import Container
from .model import TimeEntryPatch


def register(app: Flask, container: Container) -> None:
    service = container.time_entry_service

    @app.route("/api/time-entries/pending", methods=["GET"], endpoint="time_entries_pending")
    @login_required
    async def pending():
        entries = await service.list_pending(
            business_id=g.business_id,
            actor=g.actor,
            date_from=query_value("from"),
            date_to=query_value("to"),
            user_id=query_value("userId"),
        )
        return respond(entries)

    @app.route("/api/time-entries/summary", methods=["GET"], endpoint="time_entries_summary")
    @login_required
    async def summary():
        data = await service.get_summary(
            business_id=g.business_id,
            actor=g.actor,
            mine=query_flag("mine"),
            user_id=query_value("userId"),
            date_from=query_value("from"),
            date_to=query_value("to"),
        )
        return respond(data)

    @app.route("/api/time-entries/bulk/approve", methods=["POST"], endpoint="time_entries_bulk_approve")
    @login_required
    async def bulk_approve():
        body = json_body()
        result = await service.bulk_approve(business_id=g.business_id, actor=g.actor, entry_ids=body.get("entryIds"))
        return respond(result)

    @app.route("/api/time-entries/bulk/reject", methods=["POST"], endpoint="time_entries_bulk_reject")
    @login_required
    async def bulk_reject():
        body = json_body()
        result = await service.bulk_reject(
            business_id=g.business_id,
            actor=g.actor,
            entry_ids=body.get("entryIds"),
            reason=body.get("reason"),
        )
        return respond(result)

    @app.route("/api/time-entries", methods=["GET"], endpoint="time_entries_list")
    @login_required
    async def list_entries():
        entries = await service.list_entries(
            business_id=g.business_id,
            actor=g.actor,
            user_id=query_value("userId"),
            date_from=query_value("from"),
            date_to=query_value("to"),
            status=query_value("status"),
            mine=query_flag("mine"),
        )
        return respond(entries)

    @app.route("/api/time-entries", methods=["POST"], endpoint="time_entries_create")
    @login_required
    async def create_entry():
        body = json_body()
        entry = await service.create_entry(
            business_id=g.business_id,
            actor=g.actor,
            target_user_id=body.get("targetUserId"),
            work_date=body.get("workDate"),
            start_time=body.get("startTime"),
            end_time=body.get("endTime"),
            break_minutes=body.get("breakMinutes"),
            notes=body.get("notes"),
            location_id=body.get("locationId"),
        )
        return respond(entry, 201)

    @app.route("/api/time-entries/<int:entry_id>/submit", methods=["POST"], endpoint="time_entries_submit")
    @login_required
    async def submit(entry_id: int):
        return respond(await service.submit_entry(business_id=g.business_id, actor=g.actor, entry_id=entry_id))

    @app.route("/api/time-entries/<int:entry_id>/approve", methods=["POST"], endpoint="time_entries_approve")
    @login_required
    async def approve(entry_id: int):
        return respond(await service.approve_entry(business_id=g.business_id, actor=g.actor, entry_id=entry_id))

    @app.route("/api/time-entries/<int:entry_id>/reject", methods=["POST"], endpoint="time_entries_reject")
    @login_required
    async def reject(entry_id: int):
        body = json_body()
        entry = await service.reject_entry(
            business_id=g.business_id, actor=g.actor, entry_id=entry_id, reason=body.get("reason")
        )
        return respond(entry)

    @app.route("/api/time-entries/<int:entry_id>/void", methods=["POST"], endpoint="time_entries_void")
    @login_required
    async def void(entry_id: int):
        return respond(await service.void_entry(business_id=g.business_id, actor=g.actor, entry_id=entry_id))

    @app.route("/api/time-entries/<int:entry_id>", methods=["PATCH"], endpoint="time_entries_update")
    @login_required
    async def update(entry_id: int):
        body = json_body()
        patch = TimeEntryPatch(
            work_date=body.get("workDate"),
            start_time=body.get("startTime"),
            end_time=body.get("endTime"),
            break_minutes=body.get("breakMinutes"),
            notes=body["notes"] if "notes" in body else UNSET,
            location_id=body["locationId"] if "locationId" in body else UNSET,
        )
        entry = await service.update_entry(business_id=g.business_id, actor=g.actor, entry_id=entry_id, patch=patch)
        return respond(entry)

    @app.route("/api/time-entries/<int:entry_id>", methods=["GET"], endpoint="time_entries_get")
    @login_required
    async def get_entry(entry_id: int):
        return respond(await service.get_entry(business_id=g.business_id, actor=g.actor, entry_id=entry_id))
