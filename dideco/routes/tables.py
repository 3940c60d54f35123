# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
CRUD endpoints for the keyed tables: beneficiaries, professionals, system
users and inventory.
"""

from flask import Blueprint, current_app, jsonify, request
from opentelemetry import trace
import logging
from typing import Any, Callable, Dict, List, Optional, Type

from ..domain.reports import (
    inventory_years, search_beneficiaries, search_inventory, search_professionals
)
from ..domain.exceptions import ValidationError
from ..middleware.auth import require_login
from ..middleware.validation import validate_json
from ..models.base import BaseEntity, BasePatch
from ..models.entities import Beneficiary, InventoryItem, Professional, SystemUser
from ..models.requests import BeneficiaryPatch, InventoryItemPatch, ProfessionalPatch, SystemUserPatch

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

Search = Callable[[List[Any], Dict[str, str]], List[Any]]


def create_table_blueprint(
    name: str,
    table_attr: str,
    entity_type: Type[BaseEntity],
    patch_type: Type[BasePatch],
    search: Optional[Search] = None,
    serialize: Optional[Callable[[Any], Dict[str, Any]]] = None
) -> Blueprint:
    """
    Blueprint with list/create/find/update/delete for one table.

    Args:
        name: URL segment and blueprint name
        table_attr: attribute of ``AppStore`` holding the table
        entity_type: model validated on create
        patch_type: model validated on update
        search: optional filter applied to the list with the query args
        serialize: row to JSON; defaults to the document form
    """
    bp = Blueprint(name, __name__, url_prefix=f'/api/{name}')
    serialize = serialize or (lambda row: row.to_document())

    def get_table():
        return getattr(current_app.store, table_attr)

    @bp.get('')
    @require_login
    def list_rows():
        rows = get_table().list()
        if search:
            rows = search(rows, request.args)
        return jsonify([serialize(row) for row in rows])

    @bp.post('')
    @require_login
    @validate_json(entity_type)
    def create_row(entity):
        with tracer.start_as_current_span(f"{name}.create"):
            created = get_table().create(entity)
            logger.info(f"{name} row created", extra={"table": name})
            return serialize(created), 201

    @bp.get('/<key>')
    @require_login
    def get_row(key: str):
        return serialize(get_table().require(key))

    @bp.patch('/<key>')
    @require_login
    @validate_json(patch_type)
    def update_row(patch, key: str):
        with tracer.start_as_current_span(f"{name}.update"):
            return serialize(get_table().update(key, patch))

    @bp.delete('/<key>')
    @require_login
    def delete_row(key: str):
        with tracer.start_as_current_span(f"{name}.delete"):
            get_table().delete(key)
            logger.info(f"{name} row deleted", extra={"table": name})
            return '', 204

    return bp


def _search_inventory(rows, args):
    year = args.get('year')
    if year and year != 'all':
        try:
            year = int(year)
        except ValueError:
            raise ValidationError(f"Invalid year filter: {year}")
    else:
        year = None
    return search_inventory(rows, args.get('q', ''), year)


def _search_people(search):
    def apply(rows, args):
        return search(rows, args.get('q', ''))
    return apply


def _search_users(rows, args):
    term = args.get('q', '').lower()
    return [
        u for u in rows
        if term in u.rut.lower() or term in u.username.lower() or term in u.first_name.lower()
    ]


beneficiaries_bp = create_table_blueprint(
    'beneficiaries', 'beneficiaries', Beneficiary, BeneficiaryPatch,
    search=_search_people(search_beneficiaries)
)

professionals_bp = create_table_blueprint(
    'professionals', 'professionals', Professional, ProfessionalPatch,
    search=_search_people(search_professionals)
)

users_bp = create_table_blueprint(
    'users', 'system_users', SystemUser, SystemUserPatch,
    search=_search_users,
    serialize=lambda user: user.public_profile()
)

inventory_bp = create_table_blueprint(
    'inventory', 'inventory', InventoryItem, InventoryItemPatch,
    search=_search_inventory
)


@inventory_bp.get('/years')
@require_login
def list_inventory_years():
    """Distinct purchase years for the year filter, newest first."""
    return jsonify(inventory_years(current_app.store.inventory.list()))
