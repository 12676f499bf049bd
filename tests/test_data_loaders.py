"""Tests for local snapshot loading and the snapshot dataset source."""

import json

import pytest
from conftest import FEMUR_MTL, FEMUR_PID

from shared.data_loaders import (
    get_available_datasets,
    load_dataset_detail,
    load_file_text,
    snapshot_persistent_id,
)
from specimen_viewer.errors import DatasetNotFoundError
from specimen_viewer.services.snapshot_source import SnapshotSource


@pytest.fixture
def data_dir(tmp_path, sample_detail):
    (tmp_path / "datasets").mkdir()
    (tmp_path / "files").mkdir()
    (tmp_path / "datasets" / "femur.json").write_text(json.dumps(sample_detail), encoding="utf-8")
    (tmp_path / "datasets" / "bare.json").write_text(json.dumps({"data": {}}), encoding="utf-8")
    (tmp_path / "files" / "102").write_text(FEMUR_MTL, encoding="utf-8")
    return tmp_path


class TestDataLoaders:
    def test_available_datasets(self, data_dir, tmp_path):
        assert get_available_datasets(data_dir) == ["bare", "femur"]
        assert get_available_datasets(tmp_path / "missing") == []

    def test_load_detail_and_file(self, data_dir):
        assert load_dataset_detail(data_dir, "femur")["data"]["identifier"] == "data100"
        assert load_dataset_detail(data_dir, "nope") is None
        assert load_file_text(data_dir, 102) == FEMUR_MTL
        assert load_file_text(data_dir, 999) is None

    def test_snapshot_persistent_id(self, sample_detail):
        assert snapshot_persistent_id(sample_detail, "femur") == FEMUR_PID
        assert snapshot_persistent_id({"data": {}}, "bare") == "bare"
        assert snapshot_persistent_id(None, "x") == "x"


class TestSnapshotSource:
    """Test the offline dataset source."""

    def test_list_and_fetch(self, data_dir):
        source = SnapshotSource(data_dir, "https://repo.test/api/")
        refs = source.list_dataset_refs()

        assert {"identifier": "femur", "persistentId": FEMUR_PID} in refs
        assert {"identifier": "bare", "persistentId": "bare"} in refs
        assert source.fetch_dataset_detail(FEMUR_PID)["data"]["id"] == 100

    def test_fetch_unknown_dataset(self, data_dir):
        with pytest.raises(DatasetNotFoundError):
            SnapshotSource(data_dir).fetch_dataset_detail("doi:10.1/none")

    def test_fetch_text_by_url(self, data_dir):
        source = SnapshotSource(data_dir, "https://repo.test/api")
        url = source.datafile_url(102)

        assert url == "https://repo.test/api/access/datafile/102?format=original"
        assert source.fetch_text(url) == FEMUR_MTL
        with pytest.raises(DatasetNotFoundError):
            source.fetch_text(source.datafile_url(999))
