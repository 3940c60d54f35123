# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Snapshot persistence for the application state document.

The whole state (all tables plus the folio counter) is one JSON document
stored under a fixed identifier.

``load`` tells three outcomes apart: nothing stored yet (``None``), the
backend could not be read (``SnapshotConnectionError``) and the stored value
is not a valid document (``SnapshotCorruptError``). Saves are fire-and-forget:
a failed save is logged and reported as ``False``, never raised.
"""

import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

import redis
from opentelemetry import trace

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "dideco-storage"


class SnapshotConnectionError(Exception):
    """Raised when the snapshot backend cannot be reached or read."""
    pass


class SnapshotCorruptError(Exception):
    """Raised when the stored snapshot is not a valid state document."""
    pass


def _decode_document(raw: Any, source: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise SnapshotCorruptError(f"Snapshot in {source} is not a JSON object")
    return raw


class SnapshotService:
    """Interface for loading and saving the state document."""

    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY):
        self.storage_key = storage_key

    def is_available(self) -> bool:
        raise NotImplementedError

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Stored document, or None when nothing has been saved yet.

        Raises:
            SnapshotConnectionError: the backend could not be read
            SnapshotCorruptError: the stored value is not a state document
        """
        raise NotImplementedError

    def save(self, document: Dict[str, Any]) -> bool:
        """Store ``document``. Returns False on failure."""
        raise NotImplementedError


class FileSnapshotService(SnapshotService):
    """
    State documents kept in a local JSON file.

    The file holds an envelope ``{storage_key: document}``; several storage
    keys can share one file and a save only replaces its own entry.
    """

    def __init__(self, path: str, storage_key: str = DEFAULT_STORAGE_KEY):
        super().__init__(storage_key)
        self.path = path

    def is_available(self) -> bool:
        directory = os.path.dirname(os.path.abspath(self.path))
        return os.path.isdir(directory) and os.access(directory, os.W_OK)

    def _read_envelope(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise SnapshotConnectionError(f"Cannot read snapshot file {self.path}: {str(e)}")
        except ValueError as e:
            raise SnapshotCorruptError(f"Snapshot file {self.path} is not valid JSON: {str(e)}")

        return _decode_document(raw, self.path)

    def load(self) -> Optional[Dict[str, Any]]:
        with tracer.start_as_current_span("snapshot.file.load") as span:
            span.set_attribute("snapshot.path", self.path)

            try:
                envelope = self._read_envelope()
            except (SnapshotConnectionError, SnapshotCorruptError):
                span.set_attribute("snapshot.result", "error")
                raise

            if envelope is None or self.storage_key not in envelope:
                span.set_attribute("snapshot.result", "not_found")
                return None

            span.set_attribute("snapshot.result", "success")
            return _decode_document(envelope[self.storage_key], f"{self.path}[{self.storage_key}]")

    def save(self, document: Dict[str, Any]) -> bool:
        with tracer.start_as_current_span("snapshot.file.save") as span:
            span.set_attribute("snapshot.path", self.path)
            directory = os.path.dirname(os.path.abspath(self.path))

            try:
                envelope = self._read_envelope() or {}
            except (SnapshotConnectionError, SnapshotCorruptError) as e:
                # Never overwrite a file we could not understand
                span.set_attribute("snapshot.result", "error")
                logger.error(f"Snapshot save refused for {self.path}: {str(e)}")
                return False

            envelope[self.storage_key] = document

            try:
                # Write to a sibling temp file first so a crash never leaves half a document
                fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(envelope, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)

                span.set_attribute("snapshot.result", "success")
                return True

            except OSError as e:
                span.set_attribute("snapshot.result", "error")
                logger.error(f"Snapshot save failed for {self.path}: {str(e)}")
                return False


class RedisSnapshotService(SnapshotService):
    """State document kept as a JSON string in Redis."""

    def __init__(self, redis_url: Optional[str] = None, storage_key: str = DEFAULT_STORAGE_KEY):
        """
        Initialize the Redis snapshot service.

        Args:
            redis_url: Redis connection URL (redis://host:port)
            storage_key: Key holding the state document
        """
        super().__init__(storage_key)
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")

        try:
            self.client = redis.from_url(self.redis_url, decode_responses=True)
            self._test_connection()
            logger.info(f"Redis snapshot service initialized at {self.redis_url}")

        except Exception as e:
            logger.error(f"Failed to initialize Redis snapshot service: {str(e)}")
            self.client = None

    def _test_connection(self) -> None:
        try:
            if not self.client.ping():
                raise SnapshotConnectionError("Redis ping failed")
        except redis.RedisError as e:
            logger.error(f"Redis connection test failed: {str(e)}")
            raise SnapshotConnectionError(f"Redis connection failed: {str(e)}")

    def is_available(self) -> bool:
        return self.client is not None

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.client:
            raise SnapshotConnectionError(f"Redis client not available at {self.redis_url}")

        with tracer.start_as_current_span("snapshot.redis.load") as span:
            span.set_attribute("redis.key", self.storage_key)

            try:
                value = self.client.get(self.storage_key)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis get failed for key {self.storage_key}: {str(e)}")
                raise SnapshotConnectionError(f"Redis get failed for key {self.storage_key}: {str(e)}")

            if value is None:
                span.set_attribute("redis.result", "not_found")
                return None

            try:
                raw = json.loads(value)
            except ValueError as e:
                span.set_attribute("redis.result", "corrupt")
                raise SnapshotCorruptError(f"Redis key {self.storage_key} is not valid JSON: {str(e)}")

            span.set_attribute("redis.result", "success")
            return _decode_document(raw, f"redis key {self.storage_key}")

    def save(self, document: Dict[str, Any]) -> bool:
        if not self.client:
            logger.warning("Redis client not available, skipping save")
            return False

        with tracer.start_as_current_span("snapshot.redis.save") as span:
            span.set_attribute("redis.key", self.storage_key)

            try:
                result = self.client.set(self.storage_key, json.dumps(document, ensure_ascii=False))
                span.set_attribute("redis.result", "success")
                return bool(result)

            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis set failed for key {self.storage_key}: {str(e)}")
                return False


def create_snapshot_service(config: Dict[str, Any]) -> SnapshotService:
    """
    Factory for the configured snapshot backend.

    Args:
        config: mapping with STORAGE_BACKEND, STORAGE_KEY, DATA_FILE, REDIS_URL

    Returns:
        SnapshotService instance
    """
    backend = config.get("STORAGE_BACKEND", "file")
    storage_key = config.get("STORAGE_KEY", DEFAULT_STORAGE_KEY)

    if backend == "redis":
        return RedisSnapshotService(config.get("REDIS_URL"), storage_key)
    if backend == "file":
        return FileSnapshotService(config.get("DATA_FILE", "dideco-storage.json"), storage_key)

    raise ValueError(f"Unknown storage backend: {backend}")
