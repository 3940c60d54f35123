# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas for the DIDECO aid ledger.
"""

# Base models
from .base import BaseEntity, BasePatch

# Enumerations
from .enums import Status

# Core entities
from .entities import (
    InventoryItem,
    Professional,
    SystemUser,
    SystemUserPermissions,
    Beneficiary,
    BenefitItem,
    BenefitCategory,
    AidRecord
)

# Request models
from .requests import (
    InventoryItemPatch,
    ProfessionalPatch,
    SystemUserPatch,
    BeneficiaryPatch,
    BenefitCategoryPatch,
    BenefitItemRequest,
    DeliveryRequest,
    LoginRequest
)

__all__ = [
    # Base models
    "BaseEntity",
    "BasePatch",

    # Enumerations
    "Status",

    # Core entities
    "InventoryItem",
    "Professional",
    "SystemUser",
    "SystemUserPermissions",
    "Beneficiary",
    "BenefitItem",
    "BenefitCategory",
    "AidRecord",

    # Request models
    "InventoryItemPatch",
    "ProfessionalPatch",
    "SystemUserPatch",
    "BeneficiaryPatch",
    "BenefitCategoryPatch",
    "BenefitItemRequest",
    "DeliveryRequest",
    "LoginRequest"
]
