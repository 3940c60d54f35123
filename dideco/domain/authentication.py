# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Login gate.

Credentials are compared in plain text against the system user table, exactly
as the municipal application does. There is no hashing, rate limiting or
lockout here.
"""

import logging
from typing import Iterable

from ..models.entities import SystemUser
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def authenticate(users: Iterable[SystemUser], username: str, password: str) -> SystemUser:
    """
    Active system user with this username and password.

    Raises:
        AuthenticationError: no active user matches both credentials
    """
    for user in users:
        if user.username == username and user.password == password and user.is_active():
            logger.info("User authenticated", extra={"user_rut": user.rut})
            return user

    logger.warning("Authentication failed", extra={"username": username})
    raise AuthenticationError()
