from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from ..web import current_user, flash_unexpected, login_required
from .access import navigation_for
from .model import SessionUser


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_user():
        user = current_user()
        return {
            "current_user": user,
            "nav_pages": navigation_for(user.role) if user else [],
        }

    @app.route("/", methods=["GET", "POST"], endpoint="login")
    def login():
        if current_user() is not None:
            return redirect(url_for("dashboard"))

        selected_role = request.form.get("role", Role.STUDENT.value)
        if request.method == "POST":
            identifier = request.form.get("identifier", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                try:
                    role = Role(selected_role)
                except ValueError:
                    raise ValidationError("Please choose Student or Teacher")

                s_user = container.auth_service.authenticate(role, identifier, password)

                session.clear()
                session.permanent = bool(remember)
                session.update(s_user.to_session())

                if s_user.must_change_password:
                    flash("You are using your initial password. Please change it.", "warning")
                    return redirect(url_for("change_password"))

                flash(f"Welcome, {s_user.name}!", "success")
                return redirect(url_for("dashboard"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception as e:
                flash_unexpected(e, "signing in")

        return render_template("login.html", selected_role=selected_role, roles=list(Role))

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/account/password", methods=["GET", "POST"], endpoint="change_password")
    @login_required
    def change_password():
        user = current_user()
        if request.method == "POST":
            try:
                new_password = request.form.get("new_password", "")
                if new_password != request.form.get("confirm_password", ""):
                    raise ValidationError("Passwords do not match")

                container.auth_service.change_password(
                    user,
                    current_password=request.form.get("current_password", ""),
                    new_password=new_password,
                )
                session.update(
                    SessionUser(
                        user_id=user.user_id,
                        name=user.name,
                        role=user.role,
                        class_name=user.class_name,
                    ).to_session()
                )
                flash("Password updated.", "success")
                return redirect(url_for("dashboard"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception as e:
                flash_unexpected(e, "changing the password")

        return render_template("password.html", active_page="password")
