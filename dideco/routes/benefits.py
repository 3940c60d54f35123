# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Benefit catalog endpoints: browse categories and edit their items.
"""

from flask import Blueprint, current_app, jsonify, request
import logging

from ..middleware.auth import require_login
from ..middleware.validation import validate_json
from ..models.requests import BenefitItemRequest

logger = logging.getLogger(__name__)

benefits_bp = Blueprint('benefits', __name__, url_prefix='/api/benefits')


@benefits_bp.get('')
@require_login
def list_categories():
    """Categories with their items, narrowed by ``?q=`` on item names."""
    categories = current_app.store.catalog.search(request.args.get('q', ''))
    return jsonify([category.to_document() for category in categories])


@benefits_bp.get('/<category_id>')
@require_login
def get_category(category_id: str):
    return current_app.store.catalog.table.require(category_id).to_document()


@benefits_bp.post('/<category_id>/items')
@require_login
@validate_json(BenefitItemRequest)
def add_item(body: BenefitItemRequest, category_id: str):
    item = current_app.store.catalog.add_item(category_id, body.name)
    return item.to_document(), 201


@benefits_bp.patch('/<category_id>/items/<item_id>')
@require_login
@validate_json(BenefitItemRequest)
def rename_item(body: BenefitItemRequest, category_id: str, item_id: str):
    item = current_app.store.catalog.rename_item(category_id, item_id, body.name)
    return item.to_document()


@benefits_bp.delete('/<category_id>/items/<item_id>')
@require_login
def remove_item(category_id: str, item_id: str):
    current_app.store.catalog.remove_item(category_id, item_id)
    return '', 204
