"""Tests for scale calibration."""

import pytest

from floorplan_editor.core.errors import InvalidMeasurementError
from floorplan_editor.core.model import Point
from floorplan_editor.core.state import EditorMode, NoticeLevel
from floorplan_editor.features.scale.scale import parse_measurement, pixel_distance, reset_scale


@pytest.fixture
def scaling(editor):
    editor.set_mode(EditorMode.SCALE)
    requests = []
    editor.on_measurement_requested = requests.append
    editor.requests = requests
    return editor


def test_two_clicks_request_measurement(scaling):
    scaling.click(10, 10)
    assert scaling.requests == []

    scaling.click(40, 50)

    assert scaling.requests == [pytest.approx(50.0)]
    assert scaling.state.scale.awaiting_measurement
    assert pixel_distance(scaling) == pytest.approx(50.0)


def test_submit_sets_scale_and_enters_region_mode(scaling):
    scaling.click(0, 0)
    scaling.click(100, 0)

    ppm = scaling.submit_measurement(5)

    assert ppm == pytest.approx(20.0)
    assert scaling.state.pixels_per_metre == pytest.approx(20.0)
    assert not scaling.state.scale.awaiting_measurement
    assert scaling.mode is EditorMode.REGION


def test_submit_accepts_numeric_strings(scaling):
    scaling.click(0, 0)
    scaling.click(0, 100)

    assert scaling.submit_measurement("2.5") == pytest.approx(40.0)


@pytest.mark.parametrize("value", ["abc", "", "0", "-3", 0, -1.5, "nan", "inf", True, None])
def test_invalid_measurement_keeps_points(scaling, value):
    scaling.click(0, 0)
    scaling.click(100, 0)

    with pytest.raises(InvalidMeasurementError):
        scaling.submit_measurement(value)

    assert scaling.state.scale.points == [Point(0, 0), Point(100, 0)]
    assert scaling.state.pixels_per_metre is None
    assert scaling.mode is EditorMode.SCALE


def test_invalid_measurement_messages():
    with pytest.raises(InvalidMeasurementError, match="numeric"):
        parse_measurement("ten")
    with pytest.raises(InvalidMeasurementError, match="greater than zero"):
        parse_measurement("0")


def test_invalid_measurement_is_a_value_error():
    with pytest.raises(ValueError):
        parse_measurement("x")


def test_submit_without_points_raises(scaling):
    with pytest.raises(InvalidMeasurementError):
        scaling.submit_measurement(3)


def test_third_click_is_ignored(scaling):
    scaling.click(0, 0)
    scaling.click(100, 0)

    assert not scaling.click(50, 50)
    assert len(scaling.state.scale.points) == 2


def test_coincident_points_are_rejected(scaling, notices):
    scaling.click(20, 20)
    scaling.click(20, 20)

    assert scaling.state.scale.points == []
    assert scaling.requests == []
    assert notices[-1][0] is NoticeLevel.ERROR


def test_click_coordinates_are_rounded(scaling):
    scaling.click(10.126, 20.444)

    assert scaling.state.scale.points == [Point(10.13, 20.44)]


def test_cancel_measurement_clears_points(scaling):
    scaling.click(0, 0)
    scaling.click(100, 0)

    scaling.cancel_measurement()

    assert scaling.state.scale.points == []
    assert not scaling.state.scale.awaiting_measurement


def test_region_mode_rejected_without_scale(scaling, notices):
    assert not scaling.set_mode(EditorMode.REGION)

    assert scaling.mode is EditorMode.SCALE
    assert notices[-1][0] is NoticeLevel.WARNING


def test_reset_returns_to_scale_mode(calibrated):
    reset_scale(calibrated)

    assert calibrated.state.pixels_per_metre is None
    assert calibrated.state.scale.points == []
    assert calibrated.mode is EditorMode.SCALE
    assert not calibrated.set_mode(EditorMode.REGION)


def test_reset_while_panning_from_region_mode(calibrated):
    calibrated.toggle_pan()

    reset_scale(calibrated)
    calibrated.exit_pan()

    assert calibrated.mode is EditorMode.SCALE
