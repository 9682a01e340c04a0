"""Tests for the record stores."""

import json
import os

import pytest

from floorplan_editor.app_io.store import InMemoryRecordStore, JsonFileRecordStore
from floorplan_editor.core.errors import RecordNotFoundError, StoreError
from floorplan_editor.core.model import FloorplanRecord, Point, Region, RegionType


def make_record(property_id="prop-1"):
    region = Region(
        id="r1",
        name="Kitchen",
        type=RegionType.ROOM,
        points=[Point(0, 0), Point(0, 40), Point(60, 40), Point(60, 0)],
    )
    region.compute_dimensions(20.0)
    return FloorplanRecord(
        property_id=property_id,
        file_path="plans/house.png",
        original_width=400,
        original_height=300,
        pixels_per_meter=20.0,
        regions=[region],
        metadata={"crop_area": {"x": 10, "y": 20, "width": 300, "height": 200}},
    )


def test_memory_store_missing_record():
    with pytest.raises(RecordNotFoundError):
        InMemoryRecordStore().load_floorplan("nope")


def test_memory_store_copies_records():
    store = InMemoryRecordStore()
    record = make_record()
    store.save_floorplan(record)

    record.regions.clear()
    loaded = store.load_floorplan("prop-1")
    loaded.regions[0].name = "Changed"

    assert store.load_floorplan("prop-1").regions[0].name == "Kitchen"


def test_json_store_round_trip(tmp_path):
    store = JsonFileRecordStore(str(tmp_path / "records"))
    record = make_record()

    store.save_floorplan(record)

    assert store.load_floorplan("prop-1") == record
    assert store.load_floorplan("prop-1").crop_area.width == 300


def test_json_store_file_layout(tmp_path):
    store = JsonFileRecordStore(str(tmp_path))
    store.save_floorplan(make_record())

    with open(tmp_path / "prop-1.json", encoding="utf-8") as f:
        data = json.load(f)

    assert data["property_id"] == "prop-1"
    assert data["file_path"] == "plans/house.png"
    assert data["calibration_method"] == "manual"
    assert data["pixels_per_meter"] == 20.0
    assert data["regions"][0]["metadata"]["dimensions"] == {"width": 3.0, "height": 2.0, "area": 6.0}
    assert os.listdir(tmp_path) == ["prop-1.json"]


def test_json_store_saving_twice_equals_saving_once(tmp_path):
    store = JsonFileRecordStore(str(tmp_path))
    record = make_record()

    store.save_floorplan(record)
    with open(tmp_path / "prop-1.json", encoding="utf-8") as f:
        once = f.read()
    store.save_floorplan(record)
    with open(tmp_path / "prop-1.json", encoding="utf-8") as f:
        twice = f.read()

    assert once == twice


def test_json_store_upsert_replaces_regions(tmp_path):
    store = JsonFileRecordStore(str(tmp_path))
    record = make_record()
    store.save_floorplan(record)

    record.regions = []
    record.pixels_per_meter = 12.5
    store.save_floorplan(record)

    loaded = store.load_floorplan("prop-1")
    assert loaded.regions == []
    assert loaded.pixels_per_meter == 12.5


def test_json_store_missing_record(tmp_path):
    with pytest.raises(RecordNotFoundError):
        JsonFileRecordStore(str(tmp_path)).load_floorplan("prop-1")


def test_json_store_malformed_record(tmp_path):
    (tmp_path / "prop-1.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError):
        JsonFileRecordStore(str(tmp_path)).load_floorplan("prop-1")


def test_json_store_record_missing_fields(tmp_path):
    (tmp_path / "prop-1.json").write_text('{"property_id": "prop-1"}', encoding="utf-8")

    with pytest.raises(StoreError):
        JsonFileRecordStore(str(tmp_path)).load_floorplan("prop-1")


def test_json_store_write_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(StoreError):
        JsonFileRecordStore(str(blocker / "records")).save_floorplan(make_record())
