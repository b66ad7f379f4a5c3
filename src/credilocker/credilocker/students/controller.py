from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.constants import CLASS_OPTIONS
from ..core.exceptions import DomainError, ValidationError
from ..web import current_user, flash_unexpected, form_int, page_required


def register(app: Flask, container: Container) -> None:
    def _back():
        return redirect(
            url_for("manage_classes", **{"class": request.args.get("class", ""), "q": request.args.get("q", "")})
        )

    @app.route("/manage-classes", endpoint="manage_classes")
    @page_required("manage-classes")
    def manage_classes():
        class_filter = request.args.get("class", "")
        search = request.args.get("q", "")
        students = container.student_service.list_students(class_filter=class_filter, search=search)

        edit_uid = request.args.get("edit", "")
        editing = next((s for s in students if s.uid == edit_uid), None)

        return render_template(
            "manage_classes.html",
            students=students,
            editing=editing,
            class_filter=class_filter,
            search=search,
            class_options=CLASS_OPTIONS,
            active_page="manage-classes",
        )

    @app.route("/manage-classes/<uid>/edit", methods=["POST"], endpoint="student_update")
    @page_required("manage-classes")
    def student_update(uid: str):
        try:
            container.student_service.update_student(
                current_role=current_user().role,
                uid=uid,
                name=request.form.get("name", ""),
                email=request.form.get("email", ""),
                class_name=request.form.get("class_name", ""),
                semester=form_int(request.form.get("semester"), "Semester"),
                phone_number=request.form.get("phone_number"),
            )
            flash("Student updated.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "updating the student")

        return _back()

    @app.route("/manage-classes/import", methods=["POST"], endpoint="students_import")
    @page_required("manage-classes")
    def students_import():
        try:
            file = request.files.get("file")
            if not file or not file.filename:
                raise ValidationError("Please choose a CSV file")
            try:
                text = file.read().decode("utf-8-sig")
            except UnicodeDecodeError:
                raise ValidationError("CSV file must be UTF-8 encoded")

            count = container.student_service.import_csv(current_role=current_user().role, text=text)
            flash(f"Imported {count} student(s).", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "importing the CSV")

        return _back()

    @app.route("/manage-classes/bulk-delete", methods=["POST"], endpoint="students_bulk_delete")
    @page_required("manage-classes")
    def students_bulk_delete():
        try:
            deleted = container.student_service.bulk_delete_class(
                current_role=current_user().role,
                class_name=request.form.get("class_name", ""),
            )
            flash(f"Deleted {deleted} student(s).", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "deleting the class")

        return _back()

    @app.route("/manage-classes/bulk-semester", methods=["POST"], endpoint="students_bulk_semester")
    @page_required("manage-classes")
    def students_bulk_semester():
        try:
            updated = container.student_service.bulk_update_semester(
                current_role=current_user().role,
                class_name=request.form.get("class_name", ""),
                semester=form_int(request.form.get("semester"), "Semester"),
            )
            flash(f"Semester updated for {updated} student(s).", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            flash_unexpected(e, "updating the semester")

        return _back()
