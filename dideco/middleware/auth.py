# SPDX-License-Identifier: Apache-2.0

"""
Session middleware for the login gate.

The logged-in user's rut lives in Flask's signed session cookie. There is no
token and no expiry beyond the browser session.
"""

from functools import wraps
from flask import current_app, g, session
from typing import Callable, Optional
import logging

from ..domain.exceptions import AuthenticationError
from ..models.entities import SystemUser

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_rut"


def login_user(user: SystemUser) -> None:
    session.clear()
    session[SESSION_USER_KEY] = user.rut


def logout_user() -> None:
    session.clear()


def current_user() -> Optional[SystemUser]:
    """Session user, if logged in and still an active system user."""
    rut = session.get(SESSION_USER_KEY)
    if not rut:
        return None

    user = current_app.store.system_users.get(rut)
    if user is None or not user.is_active():
        return None
    return user


def require_login(f: Callable) -> Callable:
    """
    Decorator requiring a logged-in system user.

    The user is made available as ``g.current_user``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = current_user()
        if user is None:
            raise AuthenticationError("Debe iniciar sesión")

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function
