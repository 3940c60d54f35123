# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the HTTP endpoints.
"""

import csv
import io
import json


class TestHealthEndpoint:
    """Test cases for the /api/healthz endpoint."""

    def test_health_check(self, client):
        """Test health check without a session."""
        response = client.get('/api/healthz')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'healthy'
        assert data['service'] == 'dideco-aid-ledger'
        assert data['storage']['available'] is True
        assert 'timestamp' in data


class TestAuthEndpoints:
    """Test login, logout and session checks."""

    def test_login_success(self, client):
        """Test the seed administrator logs in and gets a profile."""
        response = client.post('/api/auth/login', json={"username": "admin", "password": "123"})

        assert response.status_code == 200
        data = response.get_json()
        assert data['username'] == 'admin'
        assert 'password' not in data

    def test_login_failure(self, client):
        """Test wrong credentials answer 401 with a problem body."""
        response = client.post('/api/auth/login', json={"username": "admin", "password": "nope"})

        assert response.status_code == 401
        data = response.get_json()
        assert data['type'].endswith('/authentication-required')
        assert data['detail'] == "Credenciales inválidas o usuario inactivo"

    def test_login_missing_field(self, client):
        """Test a malformed login body."""
        response = client.post('/api/auth/login', json={"username": "admin"})

        assert response.status_code == 422
        assert response.get_json()['errors'][0]['field'] == 'password'

    def test_routes_require_session(self, client):
        """Test anonymous access is rejected."""
        for path in ('/api/beneficiaries', '/api/aid', '/api/benefits', '/api/auth/me'):
            response = client.get(path)
            assert response.status_code == 401, path

    def test_me_and_logout(self, auth_client):
        """Test the session user and closing the session."""
        assert auth_client.get('/api/auth/me').get_json()['rut'] == '11111111-1'

        assert auth_client.post('/api/auth/logout').status_code == 204
        assert auth_client.get('/api/auth/me').status_code == 401

    def test_deactivated_user_loses_session(self, app, auth_client):
        """Test a user made inactive cannot keep using the session."""
        app.store.system_users.update('11111111-1', {"status": "Inactive"})

        assert auth_client.get('/api/beneficiaries').status_code == 401


class TestTableEndpoints:
    """Test the CRUD endpoints."""

    def test_list_beneficiaries(self, auth_client):
        response = auth_client.get('/api/beneficiaries')

        assert response.status_code == 200
        assert [b['rut'] for b in response.get_json()] == ['12345678-9']

    def test_search_beneficiaries(self, auth_client):
        """Test the q filter."""
        assert auth_client.get('/api/beneficiaries', query_string={'q': 'pérez'}).get_json()[0]['firstName'] == 'Juan'
        assert auth_client.get('/api/beneficiaries?q=nadie').get_json() == []

    def test_create_beneficiary(self, auth_client):
        """Test creation with a camelCase body."""
        response = auth_client.post('/api/beneficiaries', json={
            "rut": "7-7", "firstName": "Rosa", "paternalLastName": "Díaz"
        })

        assert response.status_code == 201
        assert response.get_json()['maternalLastName'] == ''
        assert auth_client.get('/api/beneficiaries/7-7').status_code == 200

    def test_create_duplicate(self, auth_client, sample_beneficiary_data):
        """Test duplicate keys answer 409."""
        response = auth_client.post('/api/beneficiaries', json=sample_beneficiary_data)

        assert response.status_code == 409
        assert response.get_json()['type'].endswith('/resource-conflict')

    def test_create_invalid(self, auth_client):
        """Test missing required fields answer 422."""
        response = auth_client.post('/api/beneficiaries', json={"rut": "7-7"})
        assert response.status_code == 422

    def test_create_not_json(self, auth_client):
        """Test a non-JSON body answers 400."""
        response = auth_client.post('/api/beneficiaries', data="rut=7-7")
        assert response.status_code == 400

    def test_patch_beneficiary(self, auth_client):
        """Test partial update keeps omitted fields."""
        response = auth_client.patch('/api/beneficiaries/12345678-9', json={"phone": "+56999999999"})

        assert response.status_code == 200
        data = response.get_json()
        assert data['phone'] == '+56999999999'
        assert data['address'] == 'Calle Uno 123'

    def test_patch_key_rejected(self, auth_client):
        """Test the key cannot be patched."""
        response = auth_client.patch('/api/beneficiaries/12345678-9', json={"rut": "1-1"})
        assert response.status_code == 422

    def test_delete_and_missing(self, auth_client):
        """Test deletion then lookup."""
        assert auth_client.delete('/api/professionals/22222222-2').status_code == 204

        response = auth_client.get('/api/professionals/22222222-2')
        assert response.status_code == 404
        assert response.get_json()['type'].endswith('/resource-not-found')

    def test_users_hide_passwords(self, auth_client):
        """Test user listings never include passwords."""
        users = auth_client.get('/api/users').get_json()
        assert users and all('password' not in u for u in users)

    def test_inventory_filters(self, auth_client):
        """Test inventory search and year list."""
        auth_client.post('/api/inventory', json={"code": "OLD-1", "description": "Frazada", "year": 2022})

        assert [i['code'] for i in auth_client.get('/api/inventory?year=2022').get_json()] == ['OLD-1']
        assert [i['code'] for i in auth_client.get('/api/inventory?q=alimentos&year=all').get_json()] == ['INV-001']
        assert auth_client.get('/api/inventory/years').get_json() == [2024, 2022]
        assert auth_client.get('/api/inventory?year=abc').status_code == 422


class TestBenefitEndpoints:
    """Test the benefit catalog endpoints."""

    def test_list_and_search(self, auth_client):
        assert len(auth_client.get('/api/benefits').get_json()) == 7

        results = auth_client.get('/api/benefits?q=urna').get_json()
        assert [c['id'] for c in results] == ['2']
        assert [i['name'] for i in results[0]['items']] == ['Entrega de Urna']

    def test_item_lifecycle(self, auth_client):
        """Test add, rename and remove of an item."""
        response = auth_client.post('/api/benefits/7/items', json={"name": "Juguetes"})
        assert response.status_code == 201
        item_id = response.get_json()['id']

        response = auth_client.patch(f'/api/benefits/7/items/{item_id}', json={"name": "Juguetes y libros"})
        assert response.get_json()['name'] == 'Juguetes y libros'

        assert auth_client.delete(f'/api/benefits/7/items/{item_id}').status_code == 204
        assert len(auth_client.get('/api/benefits/7').get_json()['items']) == 2

    def test_blank_item_name(self, auth_client):
        response = auth_client.post('/api/benefits/7/items', json={"name": "  "})
        assert response.status_code == 422

    def test_unknown_category(self, auth_client):
        assert auth_client.get('/api/benefits/99').status_code == 404


class TestAidEndpoints:
    """Test aid delivery endpoints."""

    def test_register_delivery(self, auth_client):
        """Test a delivery returns its receipt and advances the folio."""
        assert auth_client.get('/api/aid/next-folio').get_json() == {"folio": 1001}

        response = auth_client.post('/api/aid', json={
            "beneficiaryRut": "12345678-9",
            "categoryId": "1",
            "product": "Pago de Arriendo",
            "quantity": 1,
            "value": 50000
        })

        assert response.status_code == 201
        receipt = response.get_json()
        assert receipt['folioLabel'] == 'FOLIO N° 001001'
        assert receipt['record']['beneficiaryName'] == 'Juan Pérez '
        assert receipt['record']['aidType'] == 'Aporte Económico'
        assert receipt['record']['receiverName'] == 'Juan Pérez'
        assert receipt['record']['professionalId'] == '11111111-1'

        assert auth_client.get('/api/aid/next-folio').get_json() == {"folio": 1002}
        assert auth_client.get('/api/aid/1001').get_json()['product'] == 'Pago de Arriendo'
        assert auth_client.get('/api/aid/1001/receipt').get_json()['folioLabel'] == 'FOLIO N° 001001'

    def test_value_prefill(self, auth_client):
        """Test the inventory price fills an omitted value."""
        response = auth_client.post('/api/aid', json={
            "beneficiaryRut": "12345678-9", "categoryId": "7", "product": "Caja de alimentos"
        })
        assert response.get_json()['record']['value'] == 15000

    def test_missing_beneficiary(self, auth_client):
        """Test a delivery without beneficiary answers 422 and records nothing."""
        response = auth_client.post('/api/aid', json={"categoryId": "1"})

        assert response.status_code == 422
        assert response.get_json()['detail'] == 'Debe seleccionar un beneficiario'
        assert auth_client.get('/api/aid').get_json() == []

    def test_missing_category(self, auth_client):
        response = auth_client.post('/api/aid', json={"beneficiaryRut": "12345678-9"})

        assert response.status_code == 422
        assert response.get_json()['detail'] == 'Debe seleccionar un tipo de ayuda'

    def test_unknown_beneficiary(self, auth_client):
        response = auth_client.post('/api/aid', json={"beneficiaryRut": "0-0", "categoryId": "1"})
        assert response.status_code == 422
        assert response.get_json()['detail'] == "Beneficiario no encontrado: 0-0"
        assert auth_client.get('/api/aid/next-folio').get_json() == {"folio": 1001}

    def test_history_filters(self, auth_client):
        """Test the aid history query filters."""
        auth_client.post('/api/aid', json={"beneficiaryRut": "12345678-9", "categoryId": "1", "date": "2024-01-01"})
        auth_client.post('/api/aid', json={"beneficiaryRut": "12345678-9", "categoryId": "2", "date": "2024-01-02"})

        assert len(auth_client.get('/api/aid?rut=1234').get_json()) == 2
        assert [r['folio'] for r in auth_client.get('/api/aid?date=2024-01-02').get_json()] == [1002]
        assert len(auth_client.get('/api/aid?professional=all').get_json()) == 2
        assert auth_client.get('/api/aid?professional=9-9').get_json() == []

    def test_unknown_folio(self, auth_client):
        assert auth_client.get('/api/aid/4242').status_code == 404


class TestReportEndpoints:
    """Test report endpoints."""

    def test_critical_stock(self, app, auth_client):
        """Test items at or below the threshold."""
        auth_client.post('/api/inventory', json={"code": "LOW", "description": "Pañales", "stock": 5})

        codes = [i['code'] for i in auth_client.get('/api/reports/critical-stock').get_json()]
        assert codes == ['LOW']

        app.config['CRITICAL_STOCK_THRESHOLD'] = 20
        codes = [i['code'] for i in auth_client.get('/api/reports/critical-stock').get_json()]
        assert codes == ['INV-001', 'LOW']

    def test_export_csv(self, auth_client):
        """Test CSV download."""
        response = auth_client.get('/api/reports/beneficiaries/export')

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert 'beneficiarios.csv' in response.headers['Content-Disposition']

        rows = list(csv.DictReader(io.StringIO(response.get_data(as_text=True))))
        assert rows[0]['rut'] == '12345678-9'

    def test_export_empty(self, auth_client):
        response = auth_client.get('/api/reports/aid/export')

        assert response.status_code == 200
        assert response.get_data(as_text=True) == ''

    def test_unknown_report(self, auth_client):
        assert auth_client.get('/api/reports/salaries/export').status_code == 404
