# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Aid delivery endpoints: register deliveries, browse history, fetch receipts.
"""

from flask import Blueprint, current_app, g, jsonify, request
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging

from ..domain.exceptions import DomainException
from ..domain.reports import build_receipt, filter_aid_records
from ..middleware.auth import require_login
from ..middleware.validation import validate_json
from ..models.requests import DeliveryRequest

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

aid_bp = Blueprint('aid', __name__, url_prefix='/api/aid')


@aid_bp.get('')
@require_login
def list_records():
    """
    Aid history.

    Query args: ``rut`` (fragment of the beneficiary rut), ``professional``
    (exact rut, or ``all``), ``date`` (exact ISO date).
    """
    records = filter_aid_records(
        current_app.store.ledger.list(),
        rut=request.args.get('rut'),
        professional_id=request.args.get('professional'),
        date=request.args.get('date')
    )
    return jsonify([record.to_document() for record in records])


@aid_bp.get('/next-folio')
@require_login
def next_folio():
    return {"folio": current_app.store.ledger.next_folio}


@aid_bp.post('')
@require_login
@validate_json(DeliveryRequest)
def register_delivery(delivery: DeliveryRequest):
    """
    Register an aid delivery on behalf of the session user.

    Returns the created record and its receipt payload.
    """
    with tracer.start_as_current_span(
        "aid.register_delivery",
        attributes={
            "user.rut": g.current_user.rut,
            "aid.beneficiary_rut": delivery.beneficiary_rut,
            "aid.category_id": delivery.category_id
        }
    ) as span:
        try:
            record = current_app.store.register_delivery(delivery, g.current_user.rut)
        except DomainException as e:
            span.set_status(Status(StatusCode.ERROR, e.message))
            raise

        span.set_attribute("aid.folio", record.folio)
        return build_receipt(record), 201


@aid_bp.get('/<int:folio>')
@require_login
def get_record(folio: int):
    return current_app.store.ledger.get(folio).to_document()


@aid_bp.get('/<int:folio>/receipt')
@require_login
def get_receipt(folio: int):
    return build_receipt(current_app.store.ledger.get(folio))
