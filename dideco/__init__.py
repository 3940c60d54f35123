# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
DIDECO social-aid ledger.

Beneficiary registry, inventory of aid goods, benefit catalog and the
aid-delivery ledger behind the municipal social development office.
"""

__version__ = "1.0.0"
