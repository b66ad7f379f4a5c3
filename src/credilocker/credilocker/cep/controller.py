from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.constants import CLASS_OPTIONS
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..web import current_user, flash_unexpected, form_date, form_float, form_int, page_required, teacher_required
from .service import CepFilters, parse_credit_tiers


def _file_pair(field_name: str):
    file = request.files.get(field_name)
    if not file or not file.filename:
        return None
    return file.filename, file.stream


def register(app: Flask, container: Container) -> None:
    @app.route("/community-engagement", endpoint="community_engagement")
    @page_required("community-engagement")
    def community_engagement():
        user = current_user()
        if user.role == Role.STUDENT:
            progress = container.cep_service.student_progress(user)
            return render_template("cep_student.html", progress=progress, active_page="community-engagement")

        requirements = container.cep_service.list_requirements()
        edit_id = request.args.get("edit", "")
        editing = next((r for r in requirements if str(r.requirement_id) == edit_id), None)

        filters = CepFilters(
            class_name=request.args.get("class", ""),
            uid=request.args.get("uid", ""),
            name=request.args.get("name", ""),
        )
        return render_template(
            "cep_teacher.html",
            requirements=requirements,
            editing=editing,
            groups=container.cep_service.teacher_view(filters),
            filters=filters,
            class_options=CLASS_OPTIONS,
            active_page="community-engagement",
        )

    @app.route("/community-engagement/requirements", methods=["POST"], endpoint="cep_requirement_save")
    @teacher_required
    def cep_requirement_save():
        try:
            container.cep_service.save_requirement(
                current_user(),
                assigned_class=request.form.get("assigned_class", ""),
                minimum_hours=form_float(request.form.get("minimum_hours"), "Minimum hours"),
                deadline=form_date(request.form.get("deadline"), "Deadline"),
                credits_config=parse_credit_tiers(request.form.get("credits_config", "")),
                requirement_id=form_int(request.form.get("requirement_id"), "Requirement"),
            )
            flash("Requirement saved.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "saving the requirement")

        return redirect(url_for("community_engagement"))

    @app.route(
        "/community-engagement/requirements/<int:requirement_id>/delete",
        methods=["POST"],
        endpoint="cep_requirement_delete",
    )
    @teacher_required
    def cep_requirement_delete(requirement_id: int):
        try:
            container.cep_service.delete_requirement(current_user(), requirement_id)
            flash("Requirement deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "deleting the requirement")

        return redirect(url_for("community_engagement"))

    @app.route("/community-engagement/submissions", methods=["POST"], endpoint="cep_submit")
    @page_required("community-engagement")
    def cep_submit():
        try:
            container.cep_service.submit_activity(
                current_user(),
                activity_name=request.form.get("activity_name", ""),
                hours=form_float(request.form.get("hours"), "Hours"),
                activity_date=form_date(request.form.get("activity_date"), "Activity date"),
                location=request.form.get("location", ""),
                certificate=_file_pair("certificate"),
                picture=_file_pair("picture"),
                geolocation=request.form.get("geolocation"),
            )
            flash("Activity submitted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "submitting the activity")

        return redirect(url_for("community_engagement"))

    @app.route(
        "/community-engagement/submissions/<int:submission_id>/<which>",
        endpoint="cep_preview",
    )
    @page_required("community-engagement")
    def cep_preview(submission_id: int, which: str):
        try:
            preview = container.cep_service.preview(current_user(), submission_id, which=which)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("community_engagement"))
        return render_template("preview.html", preview=preview, back_url=url_for("community_engagement"))
