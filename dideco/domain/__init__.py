# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the DIDECO aid ledger.

Entity tables, the benefit catalog, the aid ledger, the login gate and the
report views. Nothing here touches storage or HTTP; persistence is driven by
the change callbacks the tables expose.
"""
