from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.constants import CLASS_OPTIONS
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import DomainError
from ..web import (
    current_user,
    flash_unexpected,
    form_date,
    form_int,
    form_time,
    page_required,
    teacher_required,
)

_STATUS_FIELD_PREFIX = "status_"


def register(app: Flask, container: Container) -> None:
    @app.route("/co-curricular", endpoint="co_curricular")
    @page_required("co-curricular")
    def co_curricular():
        user = current_user()
        activities = container.cocurricular_service.list_for_user(user)

        editing = None
        edit_id = request.args.get("edit", "")
        if user.role == Role.TEACHER and edit_id:
            editing = next((a for a in activities if str(a.activity_id) == edit_id), None)

        return render_template(
            "cocurricular.html",
            activities=activities,
            editing=editing,
            class_options=CLASS_OPTIONS,
            active_page="co-curricular",
        )

    @app.route("/co-curricular/activities", methods=["POST"], endpoint="activity_save")
    @teacher_required
    def activity_save():
        try:
            container.cocurricular_service.save_activity(
                current_user(),
                activity_name=request.form.get("activity_name", ""),
                activity_date=form_date(request.form.get("date"), "Date"),
                activity_time=form_time(request.form.get("time"), "Time"),
                venue=request.form.get("venue", ""),
                classes=request.form.getlist("assigned_class"),
                comments=request.form.get("comments"),
                cc_points=form_int(request.form.get("cc_points"), "CC points") or 0,
                activity_id=form_int(request.form.get("activity_id"), "Activity"),
            )
            flash("Activity saved.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "saving the activity")

        return redirect(url_for("co_curricular"))

    @app.route("/co-curricular/activities/<int:activity_id>/delete", methods=["POST"], endpoint="activity_delete")
    @teacher_required
    def activity_delete(activity_id: int):
        try:
            container.cocurricular_service.delete_activity(current_user(), activity_id)
            flash("Activity deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "deleting the activity")

        return redirect(url_for("co_curricular"))

    @app.route("/attendance", endpoint="attendance")
    @page_required("attendance")
    def attendance():
        activities = container.cocurricular_service.list_for_user(current_user())
        activity_s = request.args.get("activity", "")

        activity = None
        entries = []
        counts = None
        if activity_s.isdigit():
            try:
                activity, entries = container.cocurricular_service.roster(int(activity_s))
                counts = container.cocurricular_service.activity_tally(activity.activity_id)
            except DomainError as e:
                flash(str(e), "danger")

        return render_template(
            "attendance.html",
            activities=activities,
            activity=activity,
            entries=entries,
            tally=counts,
            statuses=list(AttendanceStatus),
            active_page="attendance",
        )

    @app.route("/attendance/<int:activity_id>", methods=["POST"], endpoint="attendance_mark")
    @page_required("attendance")
    def attendance_mark(activity_id: int):
        marks = {
            key[len(_STATUS_FIELD_PREFIX):]: value
            for key, value in request.form.items()
            if key.startswith(_STATUS_FIELD_PREFIX)
        }
        try:
            written = container.cocurricular_service.mark_attendance(
                current_user(), activity_id=activity_id, marks=marks
            )
            flash(f"Attendance saved for {written} student(s).", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "saving attendance")

        return redirect(url_for("attendance", activity=activity_id))
