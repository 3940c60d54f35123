# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Keyed entity tables.

One ``EntityTable`` per entity type. Rows keep insertion order, lookups are
linear scans (tables hold hundreds to low thousands of rows), and every
mutation is reported to the registered listeners so the owner can persist a
snapshot. Reads hand out copies; stored rows change only through
``create``, ``update`` and ``delete``.
"""

import logging
from typing import (
    Any, Callable, Dict, Generic, Iterable, Iterator, List,
    Mapping, Optional, Type, TypeVar, Union
)
from pydantic import ValidationError as PydanticValidationError

from ..models.base import BaseEntity, BasePatch
from .exceptions import DuplicateKeyError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEntity)

ChangeListener = Callable[[str, str], None]


def format_validation_errors(error: PydanticValidationError, include_input: bool = False) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into ``{field, message, type}`` dicts, optionally with the rejected input."""
    errors = []
    for item in error.errors():
        formatted = {
            "field": ".".join(str(loc) for loc in item["loc"]),
            "message": item["msg"],
            "type": item["type"]
        }
        if include_input:
            formatted["input"] = item.get("input")
        errors.append(formatted)
    return errors


class EntityTable(Generic[E]):
    """Ordered collection of entities with a unique key field."""

    def __init__(
        self,
        name: str,
        entity_type: Type[E],
        key_field: str,
        rows: Optional[Iterable[E]] = None
    ):
        self.name = name
        self.entity_type = entity_type
        self.key_field = key_field
        self._rows: List[E] = []
        self._listeners: List[ChangeListener] = []

        for row in rows or []:
            entity = self._coerce(row)
            if self._index_of(self.key_of(entity)) >= 0:
                raise DuplicateKeyError(self.name, self.key_of(entity))
            self._rows.append(entity)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[E]:
        return iter(self.list())

    def __contains__(self, key: Any) -> bool:
        return self._index_of(key) >= 0

    def subscribe(self, listener: ChangeListener) -> None:
        """Register ``listener(table_name, action)``, called after every mutation."""
        self._listeners.append(listener)

    def _notify(self, action: str) -> None:
        for listener in self._listeners:
            listener(self.name, action)

    def key_of(self, entity: E) -> Any:
        return getattr(entity, self.key_field)

    def _index_of(self, key: Any) -> int:
        for index, row in enumerate(self._rows):
            if self.key_of(row) == key:
                return index
        return -1

    def _coerce(self, entity: Union[E, Mapping[str, Any]]) -> E:
        if isinstance(entity, self.entity_type):
            return entity.model_copy(deep=True)
        if isinstance(entity, BaseEntity):
            raise ValidationError(
                f"{self.name} expects {self.entity_type.__name__}, got {type(entity).__name__}"
            )
        try:
            return self.entity_type.model_validate(entity)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {self.entity_type.__name__}",
                format_validation_errors(e)
            ) from e

    def create(self, entity: Union[E, Mapping[str, Any]]) -> E:
        """Append a new entity. Raises ``DuplicateKeyError`` if the key exists."""
        entity = self._coerce(entity)
        key = self.key_of(entity)
        if self._index_of(key) >= 0:
            raise DuplicateKeyError(self.name, key)

        self._rows.append(entity)
        logger.debug(f"Created {self.name} row", extra={"table": self.name, "key": key})
        self._notify("create")
        return entity.model_copy(deep=True)

    def get(self, key: Any) -> Optional[E]:
        """Copy of the row with the given key, or None."""
        index = self._index_of(key)
        return self._rows[index].model_copy(deep=True) if index >= 0 else None

    def require(self, key: Any) -> E:
        """Row with the given key. Raises ``NotFoundError`` if absent."""
        entity = self.get(key)
        if entity is None:
            raise NotFoundError(self.name, key)
        return entity

    def find(self, predicate: Callable[[E], bool]) -> Optional[E]:
        """Copy of the first row matching ``predicate``, or None."""
        for row in self._rows:
            if predicate(row):
                return row.model_copy(deep=True)
        return None

    def filter(self, predicate: Callable[[E], bool]) -> List[E]:
        return [row.model_copy(deep=True) for row in self._rows if predicate(row)]

    def update(self, key: Any, patch: Union[BasePatch, Mapping[str, Any]]) -> E:
        """
        Merge the present fields of ``patch`` into the row with ``key``.

        Omitted fields keep their value. The merged row is validated as a
        whole; on failure the table is left untouched.

        Raises:
            NotFoundError: no row with ``key``
            ValidationError: unknown field, key change, or invalid result
        """
        index = self._index_of(key)
        if index < 0:
            raise NotFoundError(self.name, key)

        changes = patch.present_fields() if isinstance(patch, BasePatch) else dict(patch)
        if self.key_field in changes and changes[self.key_field] != key:
            raise ValidationError(f"{self.name} key '{self.key_field}' cannot be changed")

        merged = self._rows[index].model_dump()
        for field, value in changes.items():
            if field not in self.entity_type.model_fields:
                raise ValidationError(f"Unknown {self.entity_type.__name__} field: {field}")
            merged[field] = value

        updated = self._coerce(merged)
        self._rows[index] = updated
        logger.debug(
            f"Updated {self.name} row",
            extra={"table": self.name, "key": key, "fields": sorted(changes)}
        )
        self._notify("update")
        return updated.model_copy(deep=True)

    def delete(self, key: Any) -> E:
        """Remove the row with ``key``. No cascading. Raises ``NotFoundError`` if absent."""
        index = self._index_of(key)
        if index < 0:
            raise NotFoundError(self.name, key)

        removed = self._rows.pop(index)
        logger.debug(f"Deleted {self.name} row", extra={"table": self.name, "key": key})
        self._notify("delete")
        return removed

    def list(self) -> List[E]:
        """Copies of all rows in insertion order."""
        return [row.model_copy(deep=True) for row in self._rows]

    def to_documents(self) -> List[Dict[str, Any]]:
        return [row.to_document() for row in self._rows]
