"""Tests for the editor session: input routing, modes and persistence."""

import logging

import pytest
from PIL import Image

from floorplan_editor.core.errors import ScaleNotSetError, StoreError
from floorplan_editor.core.model import CropArea, FloorplanRecord, Point, Region
from floorplan_editor.core.state import EditorMode, NoticeLevel
from floorplan_editor.core.transform import Viewport, to_image_space
from floorplan_editor.editor import SECONDARY_BUTTON, FloorplanEditor

from conftest import IMAGE_PATH, PROPERTY_ID


class BrokenStore:
    def __init__(self):
        self.save_calls = 0

    def load_floorplan(self, property_id):
        raise StoreError("database unavailable")

    def save_floorplan(self, record):
        self.save_calls += 1
        raise StoreError("database unavailable")


def square_region(region_id="r1"):
    region = Region(id=region_id, name="Lounge", points=[Point(0, 0), Point(0, 50), Point(50, 50), Point(50, 0)])
    region.compute_dimensions(10.0)
    return region


def stored_record(file_path=IMAGE_PATH):
    return FloorplanRecord(
        property_id=PROPERTY_ID,
        file_path=file_path,
        original_width=400,
        original_height=300,
        pixels_per_meter=10.0,
        regions=[square_region()],
        metadata={"crop_area": {"x": 5, "y": 5, "width": 200, "height": 100}},
    )


def test_initial_state(editor):
    assert editor.is_ready
    assert editor.mode is EditorMode.CROP
    assert editor.image_size == (400, 300)


def test_input_ignored_before_image_loads(store):
    editor = FloorplanEditor(PROPERTY_ID, store, image_path=IMAGE_PATH)

    assert not editor.is_ready
    assert not editor.pointer_down(10, 10)
    assert not editor.click(10, 10)
    editor.pointer_move(20, 20)
    assert editor.state.pointer is None


def test_attach_fits_image(store):
    editor = FloorplanEditor(PROPERTY_ID, store, canvas_size=(880, 580))

    editor.attach_image(Image.new("RGBA", (1000, 500)))

    assert editor.viewport.zoom == pytest.approx(0.8)
    assert editor.viewport.pan == Point(40, 90)


def test_image_failure_is_terminal(store, tmp_path):
    editor = FloorplanEditor(PROPERTY_ID, store)
    received = []
    editor.on_notice = lambda level, message: received.append(level)

    assert not editor.open_image(str(tmp_path / "missing.png"))

    assert editor.load_error
    assert not editor.is_ready
    assert received == [NoticeLevel.ERROR]
    assert not editor.pointer_down(5, 5)


def test_open_image_from_disk(store, tmp_path):
    path = tmp_path / "plan.png"
    Image.new("RGB", (320, 240), (200, 200, 200)).save(path)
    editor = FloorplanEditor(PROPERTY_ID, store)

    assert editor.open_image(str(path))

    assert editor.image_size == (320, 240)
    assert editor.image_path == str(path)
    assert editor.mode is EditorMode.CROP


def test_resize_keeps_viewport(editor):
    editor.viewport = Viewport(1.7, Point(12, -8))

    editor.resize(1024, 768, device_pixel_ratio=2.0)

    assert editor.viewport == Viewport(1.7, Point(12, -8))
    assert editor.canvas_size == (1024, 768)
    assert editor.device_pixel_ratio == 2.0


def test_redraw_hook_receives_commands(editor):
    frames = []
    editor.on_render = frames.append

    editor.pointer_move(30, 40)

    assert frames and frames[-1] is editor.commands


def test_wheel_zoom_is_anchored(editor):
    before = to_image_space(Point(120, 80), editor.viewport)

    editor.wheel(120, 80, 1)

    assert editor.viewport.zoom == pytest.approx(0.9)
    after = to_image_space(Point(120, 80), editor.viewport)
    assert after.x == pytest.approx(before.x)
    assert after.y == pytest.approx(before.y)

    editor.wheel(120, 80, -1)
    assert editor.viewport.zoom == pytest.approx(0.99)


def test_zoom_buttons_use_step(editor):
    from floorplan_editor.core import facade

    facade.zoom_in(editor)
    assert editor.viewport.zoom == pytest.approx(1.2)
    facade.zoom_set(editor, 9)
    assert editor.viewport.zoom == 5.0


def test_secondary_drag_pans(calibrated):
    calibrated.click(0, 0)
    calibrated.click(50, 0)

    calibrated.pointer_down(10, 10, SECONDARY_BUTTON)
    calibrated.pointer_move(40, 30)
    calibrated.pointer_up(40, 30, SECONDARY_BUTTON)

    assert calibrated.viewport.pan == Point(30, 20)
    assert calibrated.state.regions == []
    assert calibrated.state.draw.drawing


def test_secondary_click_finishes_trace(calibrated):
    calibrated.click(0, 0)
    calibrated.click(50, 0)

    calibrated.pointer_down(60, 60, SECONDARY_BUTTON)
    calibrated.pointer_up(61, 60, SECONDARY_BUTTON)

    assert len(calibrated.state.regions) == 1


def test_pan_mode_primary_drag(editor):
    editor.toggle_pan()

    editor.pointer_down(100, 100)
    editor.pointer_move(90, 120)
    editor.pointer_up(90, 120)

    assert editor.mode is EditorMode.PAN
    assert editor.viewport.pan == Point(-10, 20)
    assert editor.state.crop_area is None


def test_enter_pan_twice_keeps_previous(calibrated):
    calibrated.set_mode(EditorMode.PAN)
    calibrated.set_mode(EditorMode.PAN)

    calibrated.exit_pan()

    assert calibrated.mode is EditorMode.REGION


def test_primary_release_in_scale_mode_clicks(editor):
    editor.set_mode(EditorMode.SCALE)

    editor.pointer_down(10, 10)
    editor.pointer_up(10, 10)

    assert editor.state.scale.points == [Point(10, 10)]


def test_save_requires_scale(editor, store):
    with pytest.raises(ScaleNotSetError):
        editor.save()

    assert store.save_count == 0


def test_save_with_no_regions(calibrated, store):
    saved = []
    calibrated.on_saved = saved.append

    record = calibrated.save()

    assert record.regions == []
    assert saved == [record]
    assert store.load_floorplan(PROPERTY_ID).pixels_per_meter == pytest.approx(10.0)


def test_save_builds_record(calibrated, store):
    calibrated.state.crop_area = CropArea(5, 5, 200, 100)
    for x, y in ((0, 0), (0, 100), (100, 100), (0, 0)):
        calibrated.click(x, y)

    record = calibrated.save()

    stored = store.load_floorplan(PROPERTY_ID)
    assert stored == record
    assert stored.file_path == IMAGE_PATH
    assert (stored.original_width, stored.original_height) == (400, 300)
    assert stored.calibration_method == "manual"
    assert stored.crop_area == CropArea(5, 5, 200, 100)
    assert stored.regions[0].dimensions.area == pytest.approx(100.0)


def test_saved_regions_are_snapshots(calibrated, store):
    for x, y in ((0, 0), (0, 100), (100, 100), (0, 0)):
        calibrated.click(x, y)
    calibrated.save()

    calibrated.state.regions[0].name = "Renamed"

    assert store.load_floorplan(PROPERTY_ID).regions[0].name == "Region 1"


def test_saving_twice_equals_saving_once(calibrated, store):
    for x, y in ((0, 0), (0, 100), (100, 100), (0, 0)):
        calibrated.click(x, y)

    calibrated.save()
    once = store.load_floorplan(PROPERTY_ID).to_dict()
    calibrated.save()

    assert store.load_floorplan(PROPERTY_ID).to_dict() == once


def test_save_refused_while_in_flight(calibrated, store):
    calibrated.saving = True

    assert calibrated.save() is None
    assert store.save_count == 0


def test_store_failure_keeps_state(image):
    store = BrokenStore()
    editor = FloorplanEditor(PROPERTY_ID, store, image_path=IMAGE_PATH, canvas_size=(400, 300))
    editor.attach_image(image)
    editor.viewport = Viewport()
    received = []
    editor.on_notice = lambda level, message: received.append(level)
    editor.state.pixels_per_metre = 10.0
    editor.state.regions.append(square_region())

    assert editor.save() is None

    assert store.save_calls == 1
    assert received == [NoticeLevel.ERROR]
    assert len(editor.state.regions) == 1
    assert editor.state.pixels_per_metre == 10.0
    assert not editor.saving


def test_load_existing_restores_session(editor, store):
    store.save_floorplan(stored_record())

    record = editor.load_existing()

    assert record is not None
    assert editor.mode is EditorMode.REGION
    assert editor.state.pixels_per_metre == 10.0
    assert editor.state.regions == [square_region()]
    assert editor.state.crop_area == CropArea(5, 5, 200, 100)


def test_stale_record_starts_empty_session(editor, store, notices):
    store.save_floorplan(stored_record(file_path="plans/old-house.png"))

    assert editor.load_existing() is None

    assert editor.state.regions == []
    assert editor.state.pixels_per_metre is None
    assert editor.state.crop_area is None
    assert editor.mode is EditorMode.CROP
    assert notices[-1][0] is NoticeLevel.WARNING


def test_missing_record_starts_empty_session(editor, notices):
    assert editor.load_existing() is None

    assert editor.mode is EditorMode.CROP
    assert notices == []


def test_store_error_on_load_is_logged(image, caplog):
    editor = FloorplanEditor(PROPERTY_ID, BrokenStore(), image_path=IMAGE_PATH)
    editor.attach_image(image)

    with caplog.at_level(logging.ERROR):
        assert editor.load_existing() is None

    assert "database unavailable" in caplog.text
    assert editor.mode is EditorMode.CROP
    assert editor.state.regions == []


def test_open_image_restores_matching_record(store, tmp_path):
    path = tmp_path / "plan.png"
    Image.new("RGB", (400, 300)).save(path)
    store.save_floorplan(stored_record(file_path=str(path)))
    editor = FloorplanEditor(PROPERTY_ID, store)

    editor.open_image(str(path))

    assert editor.mode is EditorMode.REGION
    assert len(editor.state.regions) == 1


def test_relative_and_absolute_paths_match(store, tmp_path, monkeypatch):
    """A record saved from a relative path is restored when the file is reopened by absolute path."""
    monkeypatch.chdir(tmp_path)
    Image.new("RGB", (400, 300)).save(tmp_path / "plan.png")
    first = FloorplanEditor(PROPERTY_ID, store)
    first.open_image("plan.png")
    first.state.pixels_per_metre = 10.0
    first.save()

    second = FloorplanEditor(PROPERTY_ID, store)
    second.open_image(str(tmp_path / "plan.png"))

    assert second.image_path == str(tmp_path / "plan.png")
    assert second.mode is EditorMode.REGION
    assert second.state.pixels_per_metre == 10.0
