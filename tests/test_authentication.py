# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the login gate.
"""

import pytest

from dideco.domain.authentication import authenticate
from dideco.domain.exceptions import AuthenticationError
from dideco.models.entities import SystemUser
from dideco.models.enums import Status
from dideco.services.store import seed_admin


@pytest.fixture
def users():
    return [
        seed_admin(),
        SystemUser(rut="2-7", username="ana", password="clave"),
        SystemUser(rut="3-5", username="luis", password="clave", status=Status.INACTIVE)
    ]


class TestAuthenticate:
    """Test credential checks."""

    def test_seed_admin(self, users):
        """Test the default administrator can log in."""
        user = authenticate(users, "admin", "123")

        assert user.rut == "11111111-1"
        assert user.permissions.create and user.permissions.delete

    def test_regular_user(self, users):
        """Test an active user with matching credentials."""
        assert authenticate(users, "ana", "clave").rut == "2-7"

    def test_wrong_password(self, users):
        """Test a wrong password fails."""
        with pytest.raises(AuthenticationError) as exc_info:
            authenticate(users, "admin", "1234")
        assert exc_info.value.status_code == 401

    def test_unknown_user(self, users):
        """Test an unknown username fails."""
        with pytest.raises(AuthenticationError):
            authenticate(users, "nadie", "123")

    def test_inactive_user(self, users):
        """Test inactive users cannot log in even with the right password."""
        with pytest.raises(AuthenticationError):
            authenticate(users, "luis", "clave")

    def test_username_is_case_sensitive(self, users):
        """Test usernames are compared exactly."""
        with pytest.raises(AuthenticationError):
            authenticate(users, "Admin", "123")
