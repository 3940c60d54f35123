# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base models with the shared serialization conventions.

Entities are stored in the state document with the camelCase field names
used by the municipal front-end (``firstName``, ``purchasePrice``...), while
Python code works with snake_case attributes.
"""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseEntity(BaseModel):
    """Base entity for every table row."""

    model_config = ConfigDict(
        # Document keys are camelCase, attributes snake_case
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True
    )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape of the state document."""
        return self.model_dump(mode="json", by_alias=True)


class BasePatch(BaseModel):
    """
    Base model for partial updates.

    Every field of a subclass is optional. A field is "present" only when the
    caller set it explicitly; ``present_fields`` exposes exactly those, so a
    merge never touches omitted fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="forbid"
    )

    def present_fields(self) -> Dict[str, Any]:
        """Fields explicitly provided by the caller, keyed by attribute name."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
        }
