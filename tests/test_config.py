"""Tests for EditorConfig."""

import logging

from floorplan_editor.core.config import EditorConfig
from floorplan_editor.core.transform import Viewport
from floorplan_editor.core.model import Point


def test_defaults():
    config = EditorConfig()

    assert (config.zoom_min, config.zoom_max, config.zoom_step) == (0.1, 5.0, 0.2)
    assert config.close_threshold_px == 10.0
    assert config.handle_radius_px == 8.0
    assert config.snap_threshold_deg == 5.0
    assert config.checker_cell_px == 8


def test_from_dict_casts_values():
    config = EditorConfig.from_dict({"zoom_max": "3", "checker_cell_px": 12.0})

    assert config.zoom_max == 3.0
    assert isinstance(config.zoom_max, float)
    assert config.checker_cell_px == 12


def test_unknown_keys_are_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        config = EditorConfig.from_dict({"panel_width": 2, "zoom_step": 0.5})

    assert config.zoom_step == 0.5
    assert "panel_width" in caplog.text


def test_to_dict_round_trip():
    config = EditorConfig(fit_padding_px=10)

    assert EditorConfig.from_dict(config.to_dict()) == config


def test_config_drives_zoom_limits(editor):
    from floorplan_editor.core import facade

    editor.config = EditorConfig(zoom_max=2.0)
    facade.zoom_set(editor, 4.0, Point(0, 0))

    assert editor.viewport == Viewport(2.0, Point(0, 0))


def test_config_drives_close_threshold(calibrated):
    calibrated.config = EditorConfig(close_threshold_px=20.0)
    for x, y in ((0, 0), (0, 100), (100, 100)):
        calibrated.click(x, y)

    calibrated.click(15, 0)

    assert len(calibrated.state.regions) == 1
