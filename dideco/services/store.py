# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Application store: the full table set of the aid ledger.

``AppStore`` owns every table, seeds a fresh state, converts to and from the
persisted document, and saves a snapshot after each mutation.
"""

import logging
from typing import Any, Dict, Optional

from opentelemetry import trace

from ..domain.authentication import authenticate
from ..domain.catalog import BenefitCatalog, seed_categories
from ..domain.exceptions import NotFoundError, ValidationError
from ..domain.ledger import AidLedger, resolve_beneficiary
from ..domain.tables import EntityTable
from ..models.entities import (
    AidRecord, Beneficiary, BenefitCategory, InventoryItem,
    Professional, SystemUser, SystemUserPermissions
)
from ..models.enums import Status
from ..models.requests import DeliveryRequest
from .snapshot import SnapshotConnectionError, SnapshotCorruptError, SnapshotService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def seed_admin() -> SystemUser:
    """Default administrator present in a fresh installation."""
    return SystemUser(
        rut="11111111-1",
        first_name="Admin",
        last_name="Sistema",
        position="Administrador",
        status=Status.ACTIVE,
        username="admin",
        password="123",
        permissions=SystemUserPermissions(create=True, read=True, update=True, delete=True)
    )


class AppStore:
    """All tables of the aid ledger plus their persistence boundary."""

    def __init__(
        self,
        inventory: EntityTable[InventoryItem],
        professionals: EntityTable[Professional],
        system_users: EntityTable[SystemUser],
        beneficiaries: EntityTable[Beneficiary],
        catalog: BenefitCatalog,
        ledger: AidLedger,
        snapshot_service: Optional[SnapshotService] = None
    ):
        self.inventory = inventory
        self.professionals = professionals
        self.system_users = system_users
        self.beneficiaries = beneficiaries
        self.catalog = catalog
        self.ledger = ledger
        self.snapshot_service = snapshot_service

        for table in (inventory, professionals, system_users, beneficiaries, catalog.table, ledger):
            table.subscribe(self._on_change)

    @classmethod
    def seeded(cls, snapshot_service: Optional[SnapshotService] = None) -> "AppStore":
        """Fresh state: the seed benefit taxonomy and the default administrator."""
        return cls.from_document({}, snapshot_service)

    @classmethod
    def from_document(
        cls,
        document: Dict[str, Any],
        snapshot_service: Optional[SnapshotService] = None
    ) -> "AppStore":
        """
        Build the store from a state document.

        Missing ``systemUsers`` or ``benefitCategories`` fall back to the seed
        data; other missing tables start empty.
        """
        inventory = EntityTable("inventory", InventoryItem, "id", document.get("inventory", []))
        professionals = EntityTable("professionals", Professional, "rut", document.get("professionals", []))

        users = document.get("systemUsers")
        system_users = EntityTable("systemUsers", SystemUser, "rut", [seed_admin()] if users is None else users)

        beneficiaries = EntityTable("beneficiaries", Beneficiary, "rut", document.get("beneficiaries", []))

        categories = document.get("benefitCategories")
        catalog = BenefitCatalog(EntityTable(
            "benefitCategories", BenefitCategory, "id",
            seed_categories() if categories is None else categories
        ))

        ledger = AidLedger(
            catalog,
            inventory,
            [AidRecord.model_validate(r) for r in document.get("aidRecords", [])],
            document.get("folioCounter")
        )

        return cls(inventory, professionals, system_users, beneficiaries, catalog, ledger, snapshot_service)

    @classmethod
    def load(cls, snapshot_service: SnapshotService) -> "AppStore":
        """
        Store from the persisted snapshot, or a seeded one when none exists.

        Seed data is written only when the backend reports that nothing is
        stored. Read failures and corrupt snapshots propagate untouched.

        Raises:
            SnapshotConnectionError: the backend could not be read
            SnapshotCorruptError: the stored snapshot is not a state document
        """
        with tracer.start_as_current_span("store.load") as span:
            try:
                document = snapshot_service.load()
            except (SnapshotConnectionError, SnapshotCorruptError) as e:
                span.set_attribute("store.snapshot_error", e.__class__.__name__)
                logger.error(
                    f"Snapshot could not be loaded: {str(e)}",
                    extra={"error_class": e.__class__.__name__}
                )
                raise

            span.set_attribute("store.snapshot_found", document is not None)

            if document is None:
                logger.info("No stored snapshot, starting from seed data")
                store = cls.seeded(snapshot_service)
                store.save()
                return store

            logger.info(
                "Snapshot loaded",
                extra={"schema_version": document.get("schemaVersion", SCHEMA_VERSION)}
            )
            return cls.from_document(document, snapshot_service)

    def to_document(self) -> Dict[str, Any]:
        return {
            "schemaVersion": SCHEMA_VERSION,
            "folioCounter": self.ledger.next_folio,
            "inventory": self.inventory.to_documents(),
            "professionals": self.professionals.to_documents(),
            "systemUsers": self.system_users.to_documents(),
            "beneficiaries": self.beneficiaries.to_documents(),
            "benefitCategories": self.catalog.table.to_documents(),
            "aidRecords": self.ledger.to_documents()
        }

    def save(self) -> bool:
        if self.snapshot_service is None:
            return False
        return self.snapshot_service.save(self.to_document())

    def _on_change(self, table: str, action: str) -> None:
        if not self.save() and self.snapshot_service is not None:
            logger.warning(
                "State snapshot not persisted",
                extra={"table": table, "action": action}
            )

    # Composite operations

    def authenticate(self, username: str, password: str) -> SystemUser:
        return authenticate(self.system_users.list(), username, password)

    def register_delivery(self, delivery: DeliveryRequest, professional_id: Optional[str] = None) -> AidRecord:
        """
        Resolve the beneficiary by exact rut and record the delivery.

        Raises:
            ValidationError: no rut given, the rut matches no beneficiary,
                or no category selected
        """
        beneficiary = None
        if delivery.beneficiary_rut:
            try:
                beneficiary = resolve_beneficiary(self.beneficiaries, delivery.beneficiary_rut)
            except NotFoundError as e:
                raise ValidationError(
                    f"Beneficiario no encontrado: {delivery.beneficiary_rut}",
                    [{"field": "beneficiaryRut", "message": "Beneficiary not found", "type": "not_found"}]
                ) from e
        return self.ledger.register_delivery(beneficiary, delivery, professional_id)
