# SPDX-License-Identifier: Apache-2.0
"""
HTTP routes (Flask blueprints) for the DIDECO aid ledger.
"""
