# SPDX-License-Identifier: Apache-2.0
"""
Middleware package for request validation, sessions and error handling.
"""
