# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Aid ledger: append-only record of aid deliveries.

A delivery joins a beneficiary, a benefit category (or an inventory item) and
the acting user into one self-contained ``AidRecord``. Names are copied into
the record so later edits to the sources do not rewrite history.

Folios come from a persisted counter starting at 1001. Records are never
deleted, so the counter always equals ``1001 + len(records)``; the counter
exists so that stays true if deletion is ever added.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from opentelemetry import trace

from ..models.entities import AidRecord, Beneficiary, InventoryItem, today_iso
from ..models.requests import DeliveryRequest
from .catalog import BenefitCatalog
from .exceptions import NotFoundError, ValidationError
from .tables import ChangeListener, EntityTable

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

FIRST_FOLIO = 1001
UNKNOWN_PROFESSIONAL = "unknown"


def derive_folio_counter(records: Iterable[AidRecord]) -> int:
    """Next folio for a set of records loaded without a stored counter."""
    records = list(records)
    highest = max((r.folio for r in records), default=FIRST_FOLIO - 1)
    return max(FIRST_FOLIO + len(records), highest + 1)


def resolve_beneficiary(beneficiaries: EntityTable[Beneficiary], rut: str) -> Beneficiary:
    """Beneficiary with exactly this rut. Raises ``NotFoundError`` otherwise."""
    beneficiary = beneficiaries.find(lambda b: b.rut == rut)
    if beneficiary is None:
        raise NotFoundError("beneficiaries", rut)
    return beneficiary


def inventory_price(inventory: EntityTable[InventoryItem], product: str) -> Optional[Any]:
    """Purchase price of the first inventory item described as ``product``."""
    item = inventory.find(lambda i: i.description == product)
    return item.purchase_price if item else None


class AidLedger:
    """Append-only aid records with a monotonic folio counter."""

    def __init__(
        self,
        catalog: BenefitCatalog,
        inventory: EntityTable[InventoryItem],
        records: Optional[Iterable[AidRecord]] = None,
        folio_counter: Optional[int] = None
    ):
        self.catalog = catalog
        self.inventory = inventory
        self._records: List[AidRecord] = []
        self._listeners: List[ChangeListener] = []

        for record in records or []:
            record = AidRecord.model_validate(record).model_copy(deep=True)
            if any(r.folio == record.folio for r in self._records):
                raise ValidationError(f"Duplicate folio in aid records: {record.folio}")
            self._records.append(record)

        derived = derive_folio_counter(self._records)
        self._next_folio = max(folio_counter or FIRST_FOLIO, derived)

    def __len__(self) -> int:
        return len(self._records)

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    @property
    def next_folio(self) -> int:
        """Folio the next delivery will receive."""
        return self._next_folio

    def list(self) -> List[AidRecord]:
        """Copies of all records in folio order."""
        return [record.model_copy(deep=True) for record in self._records]

    def get(self, folio: int) -> AidRecord:
        for record in self._records:
            if record.folio == folio:
                return record.model_copy(deep=True)
        raise NotFoundError("aidRecords", folio)

    def build_record(
        self,
        beneficiary: Optional[Beneficiary],
        delivery: DeliveryRequest,
        professional_id: Optional[str] = None
    ) -> AidRecord:
        """
        Build the record for a delivery without appending it.

        Raises:
            ValidationError: no beneficiary or no category selected
        """
        if beneficiary is None:
            raise ValidationError("Debe seleccionar un beneficiario")
        if not delivery.category_id:
            raise ValidationError("Debe seleccionar un tipo de ayuda")

        value = delivery.value
        if value is None:
            value = inventory_price(self.inventory, delivery.product)
        if value is None:
            value = 0

        receiver_name = delivery.receiver_name
        if receiver_name is None:
            receiver_name = beneficiary.short_name

        return AidRecord(
            folio=self._next_folio,
            beneficiary_rut=beneficiary.rut,
            beneficiary_name=beneficiary.full_name,
            date=delivery.date or today_iso(),
            aid_type=self.catalog.category_name(delivery.category_id),
            product=delivery.product,
            quantity=delivery.quantity,
            value=value,
            detail=delivery.detail,
            receiver_name=receiver_name,
            professional_id=professional_id or UNKNOWN_PROFESSIONAL
        )

    def register_delivery(
        self,
        beneficiary: Optional[Beneficiary],
        delivery: DeliveryRequest,
        professional_id: Optional[str] = None
    ) -> AidRecord:
        """
        Record an aid delivery and return the new record.

        Validation happens before anything is written. Inventory stock is not
        touched.
        """
        with tracer.start_as_current_span("ledger.register_delivery") as span:
            record = self.build_record(beneficiary, delivery, professional_id)

            self._records.append(record)
            self._next_folio = record.folio + 1

            span.set_attributes({
                "aid.folio": record.folio,
                "aid.category_id": delivery.category_id,
                "aid.quantity": record.quantity
            })
            logger.info(
                "Aid delivery registered",
                extra={
                    "folio": record.folio,
                    "beneficiary_rut": record.beneficiary_rut,
                    "aid_type": record.aid_type,
                    "professional_id": record.professional_id
                }
            )

            for listener in self._listeners:
                listener("aidRecords", "create")
            return record.model_copy(deep=True)

    def to_documents(self) -> List[Dict[str, Any]]:
        return [record.to_document() for record in self._records]
