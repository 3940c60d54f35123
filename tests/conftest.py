# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest

from dideco.app import create_app
from dideco.models.entities import Beneficiary, InventoryItem, Professional
from dideco.services.snapshot import FileSnapshotService
from dideco.services.store import AppStore

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'


@pytest.fixture
def snapshot_service(tmp_path):
    """File snapshot service writing into a temporary directory."""
    return FileSnapshotService(str(tmp_path / "dideco-storage.json"))


@pytest.fixture
def store(snapshot_service):
    """Seeded store persisting to a temporary file."""
    return AppStore.seeded(snapshot_service)


@pytest.fixture
def sample_beneficiary_data():
    """Sample beneficiary data for testing."""
    return {
        "rut": "12345678-9",
        "firstName": "Juan",
        "paternalLastName": "Pérez",
        "maternalLastName": "",
        "address": "Calle Uno 123",
        "phone": "+56911111111",
        "email": "juan@example.com"
    }


@pytest.fixture
def sample_inventory_data():
    """Sample inventory item data for testing."""
    return {
        "code": "INV-001",
        "year": 2024,
        "process": "LIC-55",
        "description": "Caja de alimentos",
        "address": "Bodega central",
        "department": "DIDECO",
        "section": "Social",
        "purchasePrice": 15000,
        "internalOC": "OC-100",
        "publicMarketOC": "MP-200",
        "uploadDate": "2024-03-01",
        "quantityPurchased": 50,
        "stock": 20
    }


@pytest.fixture
def sample_professional_data():
    """Sample professional data for testing."""
    return {
        "rut": "22222222-2",
        "firstName": "María",
        "lastName": "González",
        "position": "Asistente Social",
        "status": "Active",
        "email": "maria@example.com"
    }


@pytest.fixture
def populated_store(store, sample_beneficiary_data, sample_inventory_data, sample_professional_data):
    """Seeded store with one beneficiary, one inventory item and one professional."""
    store.beneficiaries.create(Beneficiary.model_validate(sample_beneficiary_data))
    store.inventory.create(InventoryItem.model_validate(sample_inventory_data))
    store.professionals.create(Professional.model_validate(sample_professional_data))
    return store


@pytest.fixture
def app(populated_store):
    """Flask application bound to the populated store."""
    app = create_app(
        {
            'ENVIRONMENT': 'test',
            'SECRET_KEY': 'test-secret',
            'OTEL_ENABLED': False,
            'TESTING': True
        },
        store=populated_store
    )
    return app


@pytest.fixture
def client(app):
    """Anonymous test client."""
    return app.test_client()


@pytest.fixture
def auth_client(app):
    """Test client logged in as the seed administrator."""
    client = app.test_client()
    response = client.post('/api/auth/login', json={"username": "admin", "password": "123"})
    assert response.status_code == 200
    return client
