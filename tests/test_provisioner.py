"""
Tests for CollectionProvisioner

Uses a MagicMock database; create_collection/create_indexes side effects
stand in for server replies.
"""
from unittest.mock import patch

import pytest
from pymongo.errors import CollectionInvalid, OperationFailure, ServerSelectionTimeoutError

from errors import ProvisionError, UnknownCollectionError
from storage.provisioner import CollectionProvisioner
from storage.variants import BASE, CUSTOM


@pytest.fixture
def provisioner(mock_database):
    return CollectionProvisioner(mock_database)


class TestEnsure:

    def test_creates_collection_with_validator(self, provisioner, mock_database):
        assert provisioner.ensure("randoBase") is True

        mock_database.create_collection.assert_called_once_with(
            "randoBase",
            check_exists=False,
            validator={"$jsonSchema": BASE.schema},
        )

    def test_creates_variant_indexes(self, provisioner, mock_database):
        provisioner.ensure("randoCustom")

        collection = mock_database.collections["randoCustom"]
        collection.create_indexes.assert_called_once_with(list(CUSTOM.indexes))

    def test_existing_collection_is_not_modified(self, provisioner, mock_database):
        mock_database.create_collection.side_effect = OperationFailure(
            "Collection already exists", code=48
        )

        assert provisioner.ensure("randoBase") is False
        assert "randoBase" not in mock_database.collections

    def test_collection_invalid_treated_as_existing(self, provisioner, mock_database):
        mock_database.create_collection.side_effect = CollectionInvalid("collection randoBase already exists")

        assert provisioner.ensure("randoBase") is False

    def test_second_run_is_idempotent(self, provisioner, mock_database):
        provisioner.ensure("randoBase")
        mock_database.list_collection_names.return_value = ["randoBase"]

        assert provisioner.ensure("randoBase") is False
        mock_database.create_collection.assert_called_once()
        mock_database.collections["randoBase"].create_indexes.assert_called_once()

    def test_listed_collection_is_not_created(self, provisioner, mock_database):
        """Servers that accept a repeated identical create must not re-index"""
        mock_database.list_collection_names.return_value = ["randoCustom"]

        assert provisioner.ensure("randoCustom") is False

        mock_database.list_collection_names.assert_called_once_with(filter={"name": "randoCustom"})
        mock_database.create_collection.assert_not_called()
        assert "randoCustom" not in mock_database.collections

    def test_race_lost_after_listing(self, provisioner, mock_database):
        """Another instance created the collection between listing and create"""
        mock_database.create_collection.side_effect = OperationFailure("exists", code=48)

        assert provisioner.ensure("randoBase") is False
        assert "randoBase" not in mock_database.collections

    def test_listing_failure_raises(self, provisioner, mock_database):
        mock_database.list_collection_names.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(ProvisionError, match="list collections"):
            provisioner.ensure("randoBase")

        mock_database.create_collection.assert_not_called()

    def test_creation_failure_raises(self, provisioner, mock_database):
        mock_database.create_collection.side_effect = OperationFailure("not authorized", code=13)

        with pytest.raises(ProvisionError, match="create collection"):
            provisioner.ensure("randoBase")

    def test_unreachable_server_raises(self, provisioner, mock_database):
        mock_database.create_collection.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(ProvisionError):
            provisioner.ensure("randoCustom")

    def test_index_failure_raises(self, provisioner, mock_database):
        collection = mock_database["randoBase"]
        collection.create_indexes.side_effect = OperationFailure("E11000 duplicate key", code=11000)

        with pytest.raises(ProvisionError, match="create indices"):
            provisioner.ensure("randoBase")

    def test_unknown_collection_touches_nothing(self, provisioner, mock_database):
        with pytest.raises(UnknownCollectionError):
            provisioner.ensure("randoOther")

        mock_database.create_collection.assert_not_called()
        assert mock_database.collections == {}


class TestEnsureAll:

    def test_report(self, provisioner, mock_database):
        def create(name, **kwargs):
            if name == "randoBase":
                raise OperationFailure("exists", code=48)

        mock_database.create_collection.side_effect = create

        report = provisioner.ensure_all(["randoBase", "randoCustom"], timeout_seconds=5)

        assert report.created == ["randoCustom"]
        assert report.existing == ["randoBase"]

    def test_report_for_listed_collections(self, provisioner, mock_database):
        mock_database.list_collection_names.side_effect = lambda filter: [filter["name"]]

        report = provisioner.ensure_all(["randoBase", "randoCustom"], timeout_seconds=5)

        assert report.created == []
        assert report.existing == ["randoBase", "randoCustom"]
        mock_database.create_collection.assert_not_called()

    def test_runs_under_shared_deadline(self, provisioner):
        with patch("storage.provisioner.pymongo.timeout") as timeout:
            provisioner.ensure_all(["randoBase"], timeout_seconds=7)

        timeout.assert_called_once_with(7)

    def test_stops_at_first_failure(self, provisioner, mock_database):
        mock_database.create_collection.side_effect = OperationFailure("denied", code=13)

        with pytest.raises(ProvisionError):
            provisioner.ensure_all(["randoBase", "randoCustom"], timeout_seconds=5)

        assert mock_database.create_collection.call_count == 1
