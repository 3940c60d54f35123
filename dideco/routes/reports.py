# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Report endpoints: critical stock and CSV exports.
"""

from flask import Blueprint, Response, current_app, jsonify, request
import logging

from ..domain.exceptions import NotFoundError
from ..domain.reports import critical_stock, export_csv, filter_aid_records
from ..middleware.auth import require_login

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')

EXPORT_FILENAMES = {
    "inventory": "inventario",
    "critical-stock": "stock_critico",
    "aid": "ayudas_entregadas",
    "beneficiaries": "beneficiarios",
    "professionals": "profesionales"
}


def _critical_stock():
    store = current_app.store
    return critical_stock(store.inventory.list(), current_app.config['CRITICAL_STOCK_THRESHOLD'])


@reports_bp.get('/critical-stock')
@require_login
def get_critical_stock():
    """Inventory items at or below the critical stock threshold."""
    return jsonify([item.to_document() for item in _critical_stock()])


@reports_bp.get('/<report>/export')
@require_login
def export_report(report: str):
    """Download one report as CSV."""
    if report not in EXPORT_FILENAMES:
        raise NotFoundError("reports", report)

    store = current_app.store
    if report == "inventory":
        rows = store.inventory.list()
    elif report == "critical-stock":
        rows = _critical_stock()
    elif report == "aid":
        rows = filter_aid_records(
            store.ledger.list(),
            rut=request.args.get('rut'),
            professional_id=request.args.get('professional'),
            date=request.args.get('date')
        )
    elif report == "beneficiaries":
        rows = store.beneficiaries.list()
    else:
        rows = store.professionals.list()

    logger.info("Report exported", extra={"report": report, "rows": len(rows)})

    return Response(
        export_csv(rows),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={EXPORT_FILENAMES[report]}.csv'}
    )
