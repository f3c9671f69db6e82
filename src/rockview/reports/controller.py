from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import arg_date, arg_enum, arg_id, auth_guard, current_user, json_body, page_request
from ..common.serialization import page_dict, to_jsonable
from ..common.validators import parse_enum, require_non_empty
from ..container import Container
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.enums import EventType, ReportStatus, Role
from .model import ReportTotals, WeeklyReport
from .service import ReportQuery


def report_dict(report: WeeklyReport) -> dict:
    out = to_jsonable(report)
    out["data"]["total_attendance"] = report.data.total_attendance
    return out


def totals_dict(totals: ReportTotals) -> dict:
    out = to_jsonable(totals)
    out["total_attendance"] = totals.total_attendance
    return out


def register(app: Flask, container: Container) -> None:
    roles_required = auth_guard(container.users_repo)
    service = container.report_service

    @app.route("/api/reports", methods=["POST"], endpoint="reports_submit")
    @roles_required(Role.CITH_CENTRE)
    def submit_report():
        body = json_body()
        week = parse_iso_date(require_non_empty(body.get("week"), "Week"))
        report = service.submit(current_user(), body, week=week)
        return jsonify(report_dict(report)), 201

    @app.route("/api/reports", methods=["GET"], endpoint="reports_list")
    @roles_required()
    def list_reports():
        query = ReportQuery(
            status=arg_enum(ReportStatus, "status"),
            week=arg_date("week"),
            event_type=arg_enum(EventType, "event_type"),
            cith_centre_id=arg_id("cith_centre_id"),
            start_date=arg_date("start_date"),
            end_date=arg_date("end_date"),
        )
        page = service.list(current_user(), query, page_request())
        return jsonify(page_dict(page, "reports", report_dict))

    @app.route("/api/reports/summary", methods=["GET"], endpoint="reports_summary")
    @roles_required()
    def report_summary():
        totals = service.summary(current_user(), start_date=arg_date("start_date"), end_date=arg_date("end_date"))
        return jsonify(totals_dict(totals))

    @app.route("/api/reports/stats", methods=["GET"], endpoint="reports_stats")
    @roles_required()
    def report_stats():
        query = ReportQuery(start_date=arg_date("start_date"), end_date=arg_date("end_date"))
        return jsonify(service.stats(current_user(), query))

    @app.route("/api/reports/recent", methods=["GET"], endpoint="reports_recent")
    @roles_required()
    def recent_reports():
        limit = page_request(DEFAULT_RECENT_LIMIT).limit
        return jsonify([report_dict(r) for r in service.recent(current_user(), limit)])

    @app.route("/api/reports/<int:report_id>", methods=["GET"], endpoint="reports_get")
    @roles_required()
    def get_report(report_id: int):
        return jsonify(report_dict(service.get(current_user(), report_id)))

    @app.route("/api/reports/<int:report_id>", methods=["PUT"], endpoint="reports_update")
    @roles_required()
    def update_report(report_id: int):
        body = json_body()
        week = parse_iso_date(body["week"]) if body.get("week") else None
        return jsonify(report_dict(service.update(current_user(), report_id, body, week=week)))

    @app.route("/api/reports/<int:report_id>", methods=["DELETE"], endpoint="reports_delete")
    @roles_required()
    def delete_report(report_id: int):
        service.delete(current_user(), report_id)
        return jsonify({"message": "Report deleted successfully"})

    @app.route("/api/reports/<int:report_id>/approve", methods=["PUT"], endpoint="reports_approve")
    @roles_required(Role.AREA_SUPERVISOR, Role.ZONAL_SUPERVISOR, Role.DISTRICT_PASTOR, Role.ADMIN)
    def approve_report(report_id: int):
        body = json_body()
        raw = body.get("target_status")
        target = parse_enum(ReportStatus, raw, "target_status") if raw else None
        return jsonify(report_dict(service.approve(current_user(), report_id, target=target)))

    @app.route("/api/reports/<int:report_id>/reject", methods=["PUT"], endpoint="reports_reject")
    @roles_required(Role.AREA_SUPERVISOR, Role.ZONAL_SUPERVISOR, Role.DISTRICT_PASTOR, Role.ADMIN)
    def reject_report(report_id: int):
        body = json_body()
        return jsonify(report_dict(service.reject(current_user(), report_id, body.get("reason"))))

    @app.route("/api/reports/<int:report_id>/admin-edit", methods=["PUT"], endpoint="reports_admin_edit")
    @app.route("/api/reports/<int:report_id>/admin-comprehensive-edit", methods=["PUT"], endpoint="reports_admin_edit_legacy")
    @roles_required(Role.ADMIN)
    def admin_edit_report(report_id: int):
        return jsonify(report_dict(service.admin_edit(current_user(), report_id, json_body())))
