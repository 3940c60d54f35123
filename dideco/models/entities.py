# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the DIDECO aid ledger.
"""

import uuid
from datetime import date
from typing import List, Union
from pydantic import Field, field_validator
from .base import BaseEntity
from .enums import Status


def generate_id() -> str:
    """Generate a new opaque identifier."""
    return str(uuid.uuid4())


def today_iso() -> str:
    """Current date as ``YYYY-MM-DD``."""
    return date.today().isoformat()


def _require_text(value: str, label: str) -> str:
    if not value or not value.strip():
        raise ValueError(f'{label} cannot be empty')
    return value.strip()


def _require_non_negative(value, label: str):
    if value < 0:
        raise ValueError(f'{label} cannot be negative')
    return value


class InventoryItem(BaseEntity):
    """Goods purchased by the municipality and handed out as aid."""

    id: str = Field(default_factory=generate_id, description="Unique identifier")
    code: str = Field(..., description="Product code")
    year: int = Field(default_factory=lambda: date.today().year, description="Purchase year")
    process: str = Field(default="", description="Procurement process")
    description: str = Field(..., description="Line description (Obs_Linea)")
    address: str = Field(default="", description="Storage address")
    department: str = Field(default="", description="Owning department")
    section: str = Field(default="", description="Owning section")
    purchase_price: Union[int, float] = Field(default=0, description="Unit purchase price")
    internal_oc: str = Field(default="", alias="internalOC", description="Internal purchase order")
    public_market_oc: str = Field(default="", alias="publicMarketOC", description="Public market purchase order")
    upload_date: str = Field(default_factory=today_iso, description="Upload date (ISO)")
    quantity_purchased: int = Field(default=0, ge=0, description="Units purchased")
    stock: int = Field(default=0, description="Units on hand")

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        return _require_text(v, 'Code')

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return _require_text(v, 'Description')

    @field_validator('purchase_price')
    @classmethod
    def validate_purchase_price(cls, v):
        return _require_non_negative(v, 'Purchase price')


class Professional(BaseEntity):
    """Social worker or staff member who authorizes aid."""

    rut: str = Field(..., description="National ID")
    first_name: str = Field(..., description="First name(s)")
    last_name: str = Field(..., description="Last name(s)")
    position: str = Field(default="", description="Job position")
    status: Status = Field(default=Status.ACTIVE, description="Active or Inactive")
    email: str = Field(default="", description="Contact email")

    @field_validator('rut', 'first_name', 'last_name')
    @classmethod
    def validate_required(cls, v, info):
        return _require_text(v, info.field_name)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class SystemUserPermissions(BaseEntity):
    """CRUD permission flags of a system user."""

    create: bool = False
    read: bool = True
    update: bool = False
    delete: bool = False


class SystemUser(BaseEntity):
    """
    Account allowed to log into the application.

    The password is stored and compared in plain text, as the municipal
    system does. This model is not a reference for credential storage.
    """

    rut: str = Field(..., description="National ID")
    first_name: str = Field(default="", description="First name(s)")
    last_name: str = Field(default="", description="Last name(s)")
    position: str = Field(default="", description="Job position")
    status: Status = Field(default=Status.ACTIVE, description="Active or Inactive")
    username: str = Field(..., description="Login name")
    password: str = Field(..., description="Login password (plain text)")
    permissions: SystemUserPermissions = Field(default_factory=SystemUserPermissions)

    @field_validator('rut', 'username')
    @classmethod
    def validate_required(cls, v, info):
        return _require_text(v, info.field_name)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not v:
            raise ValueError('password cannot be empty')
        return v

    def is_active(self) -> bool:
        return self.status == Status.ACTIVE

    def public_profile(self) -> dict:
        """Session-facing view of the user, without credentials."""
        document = self.to_document()
        document.pop('password', None)
        return document


class Beneficiary(BaseEntity):
    """Person receiving social aid."""

    rut: str = Field(..., description="National ID")
    first_name: str = Field(..., description="First name(s)")
    paternal_last_name: str = Field(..., description="Paternal last name")
    maternal_last_name: str = Field(default="", description="Maternal last name")
    address: str = Field(default="", description="Home address")
    phone: str = Field(default="", description="Phone number")
    email: str = Field(default="", description="Contact email")

    @field_validator('rut', 'first_name', 'paternal_last_name')
    @classmethod
    def validate_required(cls, v, info):
        return _require_text(v, info.field_name)

    @property
    def full_name(self) -> str:
        """Name as printed on aid records; keeps the trailing space when there is no maternal name."""
        return f"{self.first_name} {self.paternal_last_name} {self.maternal_last_name}"

    @property
    def short_name(self) -> str:
        """Default name of the person picking up the aid."""
        return f"{self.first_name} {self.paternal_last_name}"


class BenefitItem(BaseEntity):
    """Concrete benefit inside a category."""

    id: str = Field(..., description="Item identifier, unique within its category")
    name: str = Field(..., description="Benefit name")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _require_text(v, 'Benefit name')


class BenefitCategory(BaseEntity):
    """Aid type grouping a list of benefit items."""

    id: str = Field(..., description="Category identifier")
    name: str = Field(..., description="Category name")
    items: List[BenefitItem] = Field(default_factory=list, description="Items in insertion order")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _require_text(v, 'Category name')

    @field_validator('items')
    @classmethod
    def validate_unique_items(cls, v):
        ids = [item.id for item in v]
        if len(ids) != len(set(ids)):
            raise ValueError('Benefit item ids must be unique within a category')
        return v


class AidRecord(BaseEntity):
    """
    One aid delivery.

    ``beneficiary_name`` and ``aid_type`` are copies taken at delivery time;
    later edits to the beneficiary or the category do not change them.
    """

    folio: int = Field(..., ge=1, description="Sequential receipt number")
    beneficiary_rut: str = Field(..., description="Beneficiary national ID")
    beneficiary_name: str = Field(..., description="Beneficiary name at delivery time")
    date: str = Field(..., description="Delivery date (ISO)")
    aid_type: str = Field(default="", description="Category name at delivery time")
    product: str = Field(default="", description="Benefit item name or inventory description")
    quantity: int = Field(..., gt=0, description="Units delivered")
    value: Union[int, float] = Field(default=0, description="Value of the aid")
    detail: str = Field(default="", description="Prescription / free-text detail")
    receiver_name: str = Field(default="", description="Person who picked up the aid")
    professional_id: str = Field(default="unknown", description="Rut of the acting user")

    @field_validator('value')
    @classmethod
    def validate_value(cls, v):
        return _require_non_negative(v, 'Value')
