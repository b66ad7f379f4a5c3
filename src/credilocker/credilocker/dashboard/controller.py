from __future__ import annotations

from flask import Flask, jsonify, render_template, request

from ..container import Container
from ..core.constants import CLASS_OPTIONS
from ..core.enums import DocumentType, Role
from ..web import current_user, page_required, teacher_required


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard", endpoint="dashboard")
    @page_required("landing")
    def dashboard():
        user = current_user()
        if user.role == Role.STUDENT:
            data = container.dashboard_service.for_student(user)
            return render_template(
                "dashboard_student.html",
                data=data,
                document_types=list(DocumentType),
                active_page="landing",
            )

        activity_s = request.args.get("activity", "")
        selected = int(activity_s) if activity_s.isdigit() else None
        data = container.dashboard_service.for_teacher(selected_activity_id=selected)
        return render_template(
            "dashboard_teacher.html",
            data=data,
            class_options=CLASS_OPTIONS,
            active_page="landing",
        )

    @app.route("/api/dashboard/activity/<int:activity_id>", endpoint="api_activity_tally")
    @teacher_required
    def api_activity_tally(activity_id: int):
        counts = container.cocurricular_service.activity_tally(activity_id)
        return jsonify({"activity_id": activity_id, "present": counts.present, "absent": counts.absent})
