# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Report views over the tables: critical stock, filtered aid history, list
searches, CSV export and the receipt payload.
"""

import csv
import io
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.base import BaseEntity
from ..models.entities import AidRecord, Beneficiary, InventoryItem, Professional

CRITICAL_STOCK_THRESHOLD = 5
RECEIPT_TITLE = "RECIBO DE AYUDA SOCIAL"
RECEIPT_FOOTER = "Este documento acredita la entrega de beneficio social municipal."
MUNICIPALITY = "Municipalidad de San Pedro - DIDECO"


def _contains(value: str, term: str) -> bool:
    return term.lower() in (value or "").lower()


def critical_stock(
    items: Iterable[InventoryItem],
    threshold: int = CRITICAL_STOCK_THRESHOLD
) -> List[InventoryItem]:
    """Items with ``stock <= threshold``, in their original order."""
    return [item for item in items if item.stock <= threshold]


def filter_aid_records(
    records: Iterable[AidRecord],
    rut: Optional[str] = None,
    professional_id: Optional[str] = None,
    date: Optional[str] = None
) -> List[AidRecord]:
    """
    Aid history narrowed by beneficiary rut fragment, exact professional and
    exact date. Empty filters match everything.
    """
    results = []
    for record in records:
        if rut and rut not in record.beneficiary_rut:
            continue
        if professional_id and professional_id != "all" and record.professional_id != professional_id:
            continue
        if date and record.date != date:
            continue
        results.append(record)
    return results


def search_inventory(
    items: Iterable[InventoryItem],
    term: str = "",
    year: Optional[int] = None
) -> List[InventoryItem]:
    """Items whose code, description or internal OC contains ``term``, optionally of one year."""
    return [
        item for item in items
        if (
            _contains(item.code, term)
            or _contains(item.description, term)
            or _contains(item.internal_oc, term)
        )
        and (year is None or item.year == year)
    ]


def inventory_years(items: Iterable[InventoryItem]) -> List[int]:
    """Distinct purchase years, newest first."""
    return sorted({item.year for item in items}, reverse=True)


def search_beneficiaries(beneficiaries: Iterable[Beneficiary], term: str = "") -> List[Beneficiary]:
    return [
        b for b in beneficiaries
        if _contains(b.rut, term) or _contains(b.first_name, term) or _contains(b.paternal_last_name, term)
    ]


def search_professionals(professionals: Iterable[Professional], term: str = "") -> List[Professional]:
    return [
        p for p in professionals
        if _contains(p.rut, term) or _contains(p.first_name, term) or _contains(p.last_name, term)
    ]


def export_csv(rows: Sequence[BaseEntity]) -> str:
    """
    Flat CSV of ``rows``.

    The header is taken from the first row's document keys; nested values
    (user permissions, category items) are written as their string form.
    An empty input gives an empty string.
    """
    if not rows:
        return ""

    documents = [row.to_document() for row in rows]
    fieldnames = list(documents[0].keys())

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction='ignore', lineterminator='\n')
    writer.writeheader()
    for document in documents:
        writer.writerow(document)
    return output.getvalue()


def format_folio(folio: int) -> str:
    return f"FOLIO N° {folio:06d}"


def build_receipt(record: AidRecord) -> Dict[str, Any]:
    """Everything the printable receipt shows for one aid record."""
    return {
        "title": RECEIPT_TITLE,
        "folioLabel": format_folio(record.folio),
        "record": record.to_document(),
        "footer": RECEIPT_FOOTER,
        "municipality": MUNICIPALITY
    }
