# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models: partial updates and composite operation inputs.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from .base import BasePatch
from .entities import BenefitItem, SystemUserPermissions
from .enums import Status


class InventoryItemPatch(BasePatch):
    """Partial update of an inventory item. The id is not patchable."""

    code: Optional[str] = None
    year: Optional[int] = None
    process: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    department: Optional[str] = None
    section: Optional[str] = None
    purchase_price: Optional[Union[int, float]] = None
    internal_oc: Optional[str] = Field(None, alias="internalOC")
    public_market_oc: Optional[str] = Field(None, alias="publicMarketOC")
    upload_date: Optional[str] = None
    quantity_purchased: Optional[int] = None
    stock: Optional[int] = None


class ProfessionalPatch(BasePatch):
    """Partial update of a professional. The rut is not patchable."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    status: Optional[Status] = None
    email: Optional[str] = None


class SystemUserPatch(BasePatch):
    """Partial update of a system user. The rut is not patchable."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    status: Optional[Status] = None
    username: Optional[str] = None
    password: Optional[str] = None
    permissions: Optional[SystemUserPermissions] = None


class BeneficiaryPatch(BasePatch):
    """Partial update of a beneficiary. The rut is not patchable."""

    first_name: Optional[str] = None
    paternal_last_name: Optional[str] = None
    maternal_last_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class BenefitCategoryPatch(BasePatch):
    """
    Partial update of a benefit category.

    ``items`` replaces the whole list; callers build the new list.
    """

    name: Optional[str] = None
    items: Optional[List[BenefitItem]] = None


class BenefitItemRequest(BaseModel):
    """Body for adding or renaming a benefit item."""

    name: str = Field(..., description="Benefit name")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Benefit name cannot be empty')
        return v.strip()


class DeliveryRequest(BaseModel):
    """Transactional fields of an aid delivery."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    beneficiary_rut: str = Field(default="", description="Rut of the beneficiary")
    category_id: str = Field(default="", description="Selected benefit category")
    product: str = Field(default="", description="Benefit item name or inventory description")
    quantity: int = Field(default=1, gt=0, description="Units delivered")
    value: Optional[Union[int, float]] = Field(None, description="Value; pre-filled from inventory when omitted")
    date: Optional[str] = Field(None, description="Delivery date (ISO); today when omitted")
    detail: str = Field(default="", description="Prescription / free-text detail")
    receiver_name: Optional[str] = Field(None, description="Who picks up; beneficiary name when omitted")

    @field_validator('value')
    @classmethod
    def validate_value(cls, v):
        if v is not None and v < 0:
            raise ValueError('Value cannot be negative')
        return v


class LoginRequest(BaseModel):
    """Login form."""

    username: str = Field(..., description="Login name")
    password: str = Field(..., description="Login password")
