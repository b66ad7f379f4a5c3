from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.constants import CLASS_OPTIONS
from ..core.enums import ApprovalStatus, DocumentType, Role
from ..core.exceptions import DomainError
from ..web import current_user, flash_unexpected, form_float, page_required, teacher_required
from .service import SubmissionFilters, is_complete


def register(app: Flask, container: Container) -> None:
    @app.route("/field-project", endpoint="field_project")
    @page_required("field-project")
    def field_project():
        user = current_user()
        if user.role == Role.STUDENT:
            documents = container.field_project_service.for_student(user.user_id)
            return render_template(
                "field_project_student.html",
                documents=documents,
                document_types=list(DocumentType),
                active_page="field-project",
            )

        filters = SubmissionFilters(
            class_name=request.args.get("class", ""),
            uid=request.args.get("uid", ""),
            name=request.args.get("name", ""),
        )
        groups = container.field_project_service.teacher_view(filters)
        return render_template(
            "field_project_teacher.html",
            groups=groups,
            filters=filters,
            is_complete=is_complete,
            class_options=CLASS_OPTIONS,
            document_types=list(DocumentType),
            approval_statuses=list(ApprovalStatus),
            active_page="field-project",
        )

    @app.route("/field-project/upload", methods=["POST"], endpoint="field_project_upload")
    @page_required("field-project")
    def field_project_upload():
        try:
            file = request.files.get("file")
            container.field_project_service.upload(
                current_user(),
                document_type=request.form.get("document_type", ""),
                filename=file.filename if file else "",
                stream=file.stream if file else None,
            )
            flash("File uploaded successfully.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "uploading the file")

        return redirect(url_for("field_project"))

    @app.route("/field-project/<int:submission_id>/delete", methods=["POST"], endpoint="field_project_delete")
    @page_required("field-project")
    def field_project_delete(submission_id: int):
        try:
            container.field_project_service.delete_submission(current_user(), submission_id)
            flash("Submission deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "deleting the submission")

        return redirect(url_for("field_project", **request.args))

    @app.route("/field-project/<int:submission_id>/preview", endpoint="field_project_preview")
    @page_required("field-project")
    def field_project_preview(submission_id: int):
        try:
            preview = container.field_project_service.preview(current_user(), submission_id)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("field_project"))
        return render_template("preview.html", preview=preview, back_url=url_for("field_project"))

    @app.route("/field-project/approval", methods=["POST"], endpoint="field_project_approval")
    @teacher_required
    def field_project_approval():
        try:
            container.field_project_service.set_approval(
                current_user(),
                student_uid=request.form.get("student_uid", ""),
                class_name=request.form.get("class_name", ""),
                status=request.form.get("status", ApprovalStatus.PENDING.value),
                marks=form_float(request.form.get("marks"), "Marks"),
                credits=form_float(request.form.get("credits"), "Credits"),
            )
            flash("Approval saved.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "saving the approval")

        return redirect(url_for("field_project", **request.args))
