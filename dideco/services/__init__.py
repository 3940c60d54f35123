# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - State ownership and persistence side effects.
"""

from .snapshot import (
    SnapshotService,
    FileSnapshotService,
    RedisSnapshotService,
    SnapshotConnectionError,
    SnapshotCorruptError,
    create_snapshot_service
)
from .store import AppStore, seed_admin

__all__ = [
    "SnapshotService",
    "FileSnapshotService",
    "RedisSnapshotService",
    "SnapshotConnectionError",
    "SnapshotCorruptError",
    "create_snapshot_service",
    "AppStore",
    "seed_admin"
]
