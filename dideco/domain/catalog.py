# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Benefit catalog: aid categories and their benefit items.

The catalog starts from a fixed taxonomy of seven categories. Items are
edited one at a time, but the table only knows how to replace a category's
whole item list, so every item operation builds the new list and hands it to
``update_category``.
"""

import logging
import secrets
from typing import Any, Dict, List, Optional

from ..models.entities import BenefitCategory, BenefitItem
from ..models.requests import BenefitCategoryPatch
from .exceptions import NotFoundError, ValidationError
from .tables import EntityTable

logger = logging.getLogger(__name__)

SEED_CATEGORIES: List[Dict[str, Any]] = [
    {
        "id": "1",
        "name": "Aporte Económico",
        "items": [
            {"id": "1-1", "name": "Ahorro para la vivienda"},
            {"id": "1-2", "name": "Entrega y/o transporte de agua potable"},
            {"id": "1-3", "name": "Gas (vales, recarga, cilindros)"},
            {"id": "1-4", "name": "Pago de Servicios Básicos"},
            {"id": "1-5", "name": "Exención de pago servicio de aseo"},
            {"id": "1-6", "name": "Pago de Arriendo"},
            {"id": "1-7", "name": "Prestaciones y tratamientos de salud"},
            {"id": "1-8", "name": "Retiro de medicamentos"},
            {"id": "1-9", "name": "Otros"},
        ]
    },
    {
        "id": "2",
        "name": "Fúnebres",
        "items": [
            {"id": "2-1", "name": "Servicios Fúnebres"},
            {"id": "2-2", "name": "Entrega de Urna"},
            {"id": "2-3", "name": "Derecho a terreno en Cementerio Municipal"},
            {"id": "2-4", "name": "Servicio Sepultación"},
            {"id": "2-5", "name": "Derecho a Sepultación"},
            {"id": "2-6", "name": "Otros Funerales"},
        ]
    },
    {
        "id": "3",
        "name": "Artículos de uso personal",
        "items": [
            {"id": "3-1", "name": "Pañales, sabanillas, insumos de cuidados"},
            {"id": "3-2", "name": "Ajuar"},
            {"id": "3-3", "name": "Sabanillas"},
            {"id": "3-4", "name": "Útiles de Aseo"},
            {"id": "3-5", "name": "Vestuario"},
            {"id": "3-6", "name": "Otros artículos de aseo"},
        ]
    },
    {
        "id": "4",
        "name": "Pasajes y Traslados",
        "items": [
            {"id": "4-1", "name": "Entrega de pasajes"},
            {"id": "4-2", "name": "Traslados y Fletes"},
            {"id": "4-3", "name": "Reembolso de pasajes"},
            {"id": "4-4", "name": "Otros pasajes y traslado"},
        ]
    },
    {
        "id": "5",
        "name": "Salud",
        "items": [
            {"id": "5-1", "name": "Entrega de medicamento y similares"},
            {"id": "5-2", "name": "Atención Médica /Odontológicos"},
            {"id": "5-3", "name": "Traslados por Emergencias de Salud"},
            {"id": "5-4", "name": "Otros Salud"},
        ]
    },
    {
        "id": "6",
        "name": "Servicios Básicos",
        "items": [
            {"id": "6-1", "name": "Entrega de Agua Potable"},
            {"id": "6-2", "name": "Entrega de Paneles Solares o Baterías"},
            {"id": "6-3", "name": "Entrega de Gas, Leña, otros"},
            {"id": "6-4", "name": "Otros Servicios Básicos"},
        ]
    },
    {
        "id": "7",
        "name": "Otros",
        "items": [
            {"id": "7-1", "name": "Regalos de navidad a niños y niñas"},
            {"id": "7-2", "name": "Otro beneficio en especie o servicio municipal"},
        ]
    },
]


def seed_categories() -> List[BenefitCategory]:
    """Fresh copies of the seed taxonomy."""
    return [BenefitCategory.model_validate(category) for category in SEED_CATEGORIES]


def generate_item_id(category_id: str, existing_ids: Optional[set] = None) -> str:
    """
    New item id ``"{category_id}-{token}"``, unique among ``existing_ids``.

    Tokens are random, so ids created in the same millisecond never collide.
    """
    existing_ids = existing_ids or set()
    while True:
        item_id = f"{category_id}-{secrets.token_hex(6)}"
        if item_id not in existing_ids:
            return item_id


class BenefitCatalog:
    """Benefit categories keyed by id, with item-level editing."""

    def __init__(self, table: EntityTable[BenefitCategory]):
        self.table = table

    @classmethod
    def seeded(cls) -> "BenefitCatalog":
        return cls(EntityTable("benefitCategories", BenefitCategory, "id", seed_categories()))

    def list(self) -> List[BenefitCategory]:
        return self.table.list()

    def get(self, category_id: str) -> Optional[BenefitCategory]:
        return self.table.get(category_id)

    def category_name(self, category_id: str) -> str:
        """Category display name; empty string when the id is unknown."""
        category = self.table.get(category_id)
        return category.name if category else ""

    # Category-level operations

    def create_category(self, category: BenefitCategory) -> BenefitCategory:
        return self.table.create(category)

    def update_category(self, category_id: str, patch: BenefitCategoryPatch) -> BenefitCategory:
        """Merge ``patch`` into the category; ``items`` replaces the whole list."""
        return self.table.update(category_id, patch)

    def delete_category(self, category_id: str) -> BenefitCategory:
        return self.table.delete(category_id)

    # Item-level operations

    def _require_category(self, category_id: str) -> BenefitCategory:
        return self.table.require(category_id)

    @staticmethod
    def _clean_name(name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Benefit name cannot be empty")
        return name.strip()

    def add_item(self, category_id: str, name: str) -> BenefitItem:
        """Append a new item to the category."""
        category = self._require_category(category_id)
        name = self._clean_name(name)

        item = BenefitItem(
            id=generate_item_id(category_id, {i.id for i in category.items}),
            name=name
        )
        items = list(category.items) + [item]
        self.update_category(category_id, BenefitCategoryPatch(items=items))

        logger.info(
            "Benefit item added",
            extra={"category_id": category_id, "item_id": item.id}
        )
        return item

    def rename_item(self, category_id: str, item_id: str, name: str) -> BenefitItem:
        """Rename an item in place, keeping its position."""
        category = self._require_category(category_id)
        name = self._clean_name(name)

        if not any(i.id == item_id for i in category.items):
            raise NotFoundError("benefitItems", item_id)

        items = [
            BenefitItem(id=i.id, name=name) if i.id == item_id else i
            for i in category.items
        ]
        self.update_category(category_id, BenefitCategoryPatch(items=items))
        return next(i for i in items if i.id == item_id)

    def remove_item(self, category_id: str, item_id: str) -> BenefitItem:
        category = self._require_category(category_id)

        removed = next((i for i in category.items if i.id == item_id), None)
        if removed is None:
            raise NotFoundError("benefitItems", item_id)

        items = [i for i in category.items if i.id != item_id]
        self.update_category(category_id, BenefitCategoryPatch(items=items))

        logger.info(
            "Benefit item removed",
            extra={"category_id": category_id, "item_id": item_id}
        )
        return removed

    def search(self, term: str = "") -> List[BenefitCategory]:
        """
        Categories narrowed to the items whose name contains ``term``.

        Matching is case-insensitive. With an empty term every category is
        returned whole; otherwise categories without matches are dropped.
        """
        needle = (term or "").lower()
        results = []
        for category in self.table.list():
            items = [i for i in category.items if needle in i.name.lower()]
            if items or not needle:
                results.append(category.model_copy(update={"items": items}))
        return results
