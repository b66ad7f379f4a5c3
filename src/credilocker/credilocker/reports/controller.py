from __future__ import annotations

from flask import Flask, abort, flash, redirect, request, send_file, url_for

from ..container import Container
from ..core.exceptions import DomainError
from ..web import flash_unexpected, teacher_required
from .excel import XLSX_MIMETYPE, to_xlsx


def register(app: Flask, container: Container) -> None:
    builders = {
        "field-project": container.report_service.field_project_report,
        "cep": container.report_service.cep_report,
        "attendance": container.report_service.attendance_report,
    }

    @app.route("/reports/<kind>.xlsx", endpoint="report_export")
    @teacher_required
    def report_export(kind: str):
        build = builders.get(kind)
        if build is None:
            abort(404)

        try:
            table = build(request.args.get("class", ""))
            return send_file(
                to_xlsx(table),
                mimetype=XLSX_MIMETYPE,
                as_attachment=True,
                download_name=table.filename,
            )
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "exporting the report")

        return redirect(url_for("dashboard"))
