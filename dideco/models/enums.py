# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the DIDECO aid ledger.
"""

from enum import Enum


class Status(str, Enum):
    """Account/record status for professionals and system users."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"

