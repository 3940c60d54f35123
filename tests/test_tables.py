# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for keyed entity tables.
"""

import pytest
from unittest.mock import Mock

from dideco.domain.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from dideco.domain.tables import EntityTable
from dideco.models.entities import Beneficiary, InventoryItem
from dideco.models.requests import BeneficiaryPatch, InventoryItemPatch


@pytest.fixture
def beneficiaries():
    return EntityTable("beneficiaries", Beneficiary, "rut")


def make_beneficiary(rut="1-9", first_name="Ana", paternal="Rojas", **kwargs):
    return Beneficiary(rut=rut, first_name=first_name, paternal_last_name=paternal, **kwargs)


class TestCreate:
    """Test row creation."""

    def test_create_appends_in_order(self, beneficiaries):
        """Test rows keep insertion order."""
        beneficiaries.create(make_beneficiary("1-9"))
        beneficiaries.create(make_beneficiary("2-7"))

        assert [b.rut for b in beneficiaries.list()] == ["1-9", "2-7"]
        assert len(beneficiaries) == 2
        assert "2-7" in beneficiaries

    def test_duplicate_key_rejected(self, beneficiaries):
        """Test creating an existing key fails and leaves the table unchanged."""
        beneficiaries.create(make_beneficiary("1-9", "Ana"))

        with pytest.raises(DuplicateKeyError) as exc_info:
            beneficiaries.create(make_beneficiary("1-9", "Otra"))

        assert exc_info.value.status_code == 409
        assert len(beneficiaries) == 1
        assert beneficiaries.get("1-9").first_name == "Ana"

    def test_create_from_document(self, beneficiaries, sample_beneficiary_data):
        """Test a camelCase mapping is validated into an entity."""
        created = beneficiaries.create(sample_beneficiary_data)

        assert isinstance(created, Beneficiary)
        assert created.paternal_last_name == "Pérez"

    def test_invalid_document(self, beneficiaries):
        """Test invalid documents raise a domain validation error."""
        with pytest.raises(ValidationError) as exc_info:
            beneficiaries.create({"rut": "1-9"})

        assert exc_info.value.status_code == 422
        assert exc_info.value.validation_errors

    def test_wrong_entity_type(self, beneficiaries):
        """Test rows of another entity type are rejected."""
        with pytest.raises(ValidationError):
            beneficiaries.create(InventoryItem(code="X", description="Y"))

    def test_stored_row_is_a_copy(self, beneficiaries):
        """Test later changes to the passed object do not leak into the table."""
        beneficiary = make_beneficiary("1-9", "Ana")
        beneficiaries.create(beneficiary)
        beneficiary.first_name = "Cambiada"

        assert beneficiaries.get("1-9").first_name == "Ana"

    def test_duplicate_rows_on_load(self):
        """Test loading two rows with the same key fails."""
        with pytest.raises(DuplicateKeyError):
            EntityTable("beneficiaries", Beneficiary, "rut", [make_beneficiary("1-9"), make_beneficiary("1-9")])


class TestUpdate:
    """Test partial updates."""

    def test_merge_present_fields(self, beneficiaries):
        """Test omitted fields keep their values."""
        beneficiaries.create(make_beneficiary("1-9", "Ana", phone="111", address="Calle 1"))

        updated = beneficiaries.update("1-9", BeneficiaryPatch(phone="222"))

        assert updated.phone == "222"
        assert updated.address == "Calle 1"
        assert updated.first_name == "Ana"

    def test_update_with_mapping(self, beneficiaries):
        """Test a plain mapping of attribute names can be merged."""
        beneficiaries.create(make_beneficiary("1-9"))
        updated = beneficiaries.update("1-9", {"email": "ana@example.com"})
        assert updated.email == "ana@example.com"

    def test_update_missing_key(self, beneficiaries):
        """Test updating an unknown key raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            beneficiaries.update("0-0", BeneficiaryPatch(phone="1"))
        assert exc_info.value.status_code == 404

    def test_key_cannot_change(self, beneficiaries):
        """Test the key field is not patchable."""
        beneficiaries.create(make_beneficiary("1-9"))

        with pytest.raises(ValidationError):
            beneficiaries.update("1-9", {"rut": "2-7"})

        assert "1-9" in beneficiaries

    def test_unknown_field(self, beneficiaries):
        """Test unknown fields are rejected."""
        beneficiaries.create(make_beneficiary("1-9"))
        with pytest.raises(ValidationError):
            beneficiaries.update("1-9", {"nickname": "x"})

    def test_invalid_result_leaves_row(self, beneficiaries):
        """Test a merge that breaks validation is not applied."""
        beneficiaries.create(make_beneficiary("1-9", "Ana"))

        with pytest.raises(ValidationError):
            beneficiaries.update("1-9", BeneficiaryPatch(first_name="   "))

        assert beneficiaries.get("1-9").first_name == "Ana"

    def test_inventory_update_keeps_id(self):
        """Test inventory rows are updated by their generated id."""
        inventory = EntityTable("inventory", InventoryItem, "id")
        item = inventory.create(InventoryItem(code="X", description="Frazada", stock=10))

        updated = inventory.update(item.id, InventoryItemPatch(stock=3))

        assert updated.id == item.id
        assert updated.stock == 3
        assert updated.description == "Frazada"


class TestDelete:
    """Test row deletion."""

    def test_delete(self, beneficiaries):
        """Test deleting returns the removed row."""
        beneficiaries.create(make_beneficiary("1-9"))
        removed = beneficiaries.delete("1-9")

        assert removed.rut == "1-9"
        assert len(beneficiaries) == 0

    def test_delete_missing(self, beneficiaries):
        """Test deleting an unknown key raises NotFoundError."""
        with pytest.raises(NotFoundError):
            beneficiaries.delete("0-0")


class TestQueries:
    """Test lookups."""

    def test_get_and_require(self, beneficiaries):
        """Test get returns None and require raises for unknown keys."""
        assert beneficiaries.get("1-9") is None
        with pytest.raises(NotFoundError):
            beneficiaries.require("1-9")

    def test_find_and_filter(self, beneficiaries):
        """Test predicate lookups."""
        beneficiaries.create(make_beneficiary("1-9", "Ana"))
        beneficiaries.create(make_beneficiary("2-7", "Luis"))
        beneficiaries.create(make_beneficiary("3-5", "Ana"))

        assert beneficiaries.find(lambda b: b.first_name == "Ana").rut == "1-9"
        assert [b.rut for b in beneficiaries.filter(lambda b: b.first_name == "Ana")] == ["1-9", "3-5"]
        assert beneficiaries.find(lambda b: b.first_name == "Nadie") is None


class TestListeners:
    """Test change notifications."""

    def test_every_mutation_notifies(self, beneficiaries):
        """Test listeners hear create, update and delete."""
        listener = Mock()
        beneficiaries.subscribe(listener)

        beneficiaries.create(make_beneficiary("1-9"))
        beneficiaries.update("1-9", BeneficiaryPatch(phone="1"))
        beneficiaries.delete("1-9")

        assert [c.args for c in listener.call_args_list] == [
            ("beneficiaries", "create"),
            ("beneficiaries", "update"),
            ("beneficiaries", "delete")
        ]

    def test_failed_mutation_does_not_notify(self, beneficiaries):
        """Test rejected operations stay silent."""
        listener = Mock()
        beneficiaries.subscribe(listener)

        with pytest.raises(NotFoundError):
            beneficiaries.delete("0-0")

        listener.assert_not_called()


class TestReadCopies:
    """Test reads never expose the stored rows."""

    def test_list_and_get_return_copies(self, beneficiaries):
        """Test changing a returned row leaves the table untouched and silent."""
        beneficiaries.create(make_beneficiary("1-9", "Ana"))
        listener = Mock()
        beneficiaries.subscribe(listener)

        beneficiaries.list()[0].first_name = "Cambiada"
        beneficiaries.get("1-9").phone = "999"
        beneficiaries.find(lambda b: b.rut == "1-9").address = "Otra"
        next(iter(beneficiaries)).email = "x@example.com"

        stored = beneficiaries.get("1-9")
        assert stored.first_name == "Ana"
        assert stored.phone == ""
        assert stored.address == ""
        assert stored.email == ""
        listener.assert_not_called()

    def test_create_and_update_return_copies(self, beneficiaries):
        """Test the rows returned by mutations are detached too."""
        created = beneficiaries.create(make_beneficiary("1-9", "Ana"))
        created.first_name = "Cambiada"

        updated = beneficiaries.update("1-9", BeneficiaryPatch(phone="111"))
        updated.phone = "222"

        stored = beneficiaries.get("1-9")
        assert stored.first_name == "Ana"
        assert stored.phone == "111"
