# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication endpoints for login, logout and the session user.
"""

from flask import Blueprint, current_app, g
from opentelemetry import trace
import logging

from ..middleware.auth import login_user, logout_user, require_login
from ..middleware.validation import validate_json
from ..models.requests import LoginRequest

# Set up logging and tracing
logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.post('/login')
@validate_json(LoginRequest)
def login(credentials: LoginRequest):
    """
    Authenticate a system user and open a session.

    Responds with the user's profile (name, position, permissions).
    """
    with tracer.start_as_current_span("auth.login", attributes={"auth.username": credentials.username}):
        user = current_app.store.authenticate(credentials.username, credentials.password)
        login_user(user)
        return user.public_profile()


@auth_bp.post('/logout')
def logout():
    logout_user()
    return '', 204


@auth_bp.get('/me')
@require_login
def me():
    return g.current_user.public_profile()
