"""Session helpers and access decorators shared by the controllers."""

from __future__ import annotations

import logging
import math
from datetime import date, time
from functools import wraps
from typing import Optional

from flask import current_app, flash, redirect, render_template, session, url_for

from .common.datetime_utils import parse_hhmm, parse_iso_date
from .core.enums import Role
from .core.exceptions import ValidationError
from .users.access import can_access
from .users.model import SessionUser

logger = logging.getLogger(__name__)


def current_user() -> Optional[SessionUser]:
    return SessionUser.from_session(session)


def forbidden():
    return render_template("403.html"), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def _password_change_pending():
    flash("Please change your initial password before continuing.", "warning")
    return redirect(url_for("change_password"))


def page_required(page_id: str):
    """Signed-in users whose role may open `page_id`; others get 403.

    Users still on their initial password are held on the change-password page.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                flash("Please sign in to continue.", "warning")
                return redirect(url_for("login"))
            if user.must_change_password:
                return _password_change_pending()
            if not can_access(user.role, page_id):
                return forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator


def teacher_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            return redirect(url_for("login"))
        if user.must_change_password:
            return _password_change_pending()
        if user.role != Role.TEACHER:
            return forbidden()
        return view(*args, **kwargs)

    return wrapper


def flash_unexpected(e: Exception, action: str) -> None:
    logger.exception("Unexpected error while %s", action)
    if current_app.config.get("DEBUG", False):
        flash(f"System error while {action}: {e}", "danger")
    else:
        flash(f"System error while {action}", "danger")


def form_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def form_time(value: Optional[str], field_name: str) -> Optional[time]:
    if not value:
        return None
    try:
        return parse_hhmm(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a time (HH:MM)")


def form_float(value: Optional[str], field_name: str, default: float = 0.0) -> float:
    if value is None or not value.strip():
        return default
    try:
        number = float(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number")
    return number


def form_int(value: Optional[str], field_name: str) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a whole number")
