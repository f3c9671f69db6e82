from __future__ import annotations

from flask import Flask, send_file

from ..common.http import arg_date, auth_guard, current_user
from ..container import Container
from .service import XLSX_MIMETYPE, export_filename


def register(app: Flask, container: Container) -> None:
    roles_required = auth_guard(container.users_repo)
    service = container.export_service

    @app.route("/api/export/excel", methods=["GET"], endpoint="export_excel")
    @roles_required()
    def export_excel():
        start_date = arg_date("start_date")
        end_date = arg_date("end_date")
        buf = service.export_excel(current_user(), start_date=start_date, end_date=end_date)
        return send_file(
            buf,
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=export_filename(start_date, end_date),
        )
