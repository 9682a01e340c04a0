"""Shared fixtures for the editor tests."""

from typing import List, Tuple

import pytest
from PIL import Image

from floorplan_editor.app_io.store import InMemoryRecordStore
from floorplan_editor.core.model import Point
from floorplan_editor.core.state import EditorMode, NoticeLevel
from floorplan_editor.core.transform import Viewport
from floorplan_editor.editor import FloorplanEditor

IMAGE_PATH = "plans/house.png"
PROPERTY_ID = "prop-1"


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def image():
    return Image.new("RGBA", (400, 300), (255, 255, 255, 255))


@pytest.fixture
def editor(store, image):
    """Loaded editor whose screen coordinates equal image coordinates."""
    ed = FloorplanEditor(PROPERTY_ID, store, image_path=IMAGE_PATH, canvas_size=(400, 300))
    ed.attach_image(image)
    ed.viewport = Viewport(1.0, Point(0.0, 0.0))
    return ed


@pytest.fixture
def notices(editor) -> List[Tuple[NoticeLevel, str]]:
    received: List[Tuple[NoticeLevel, str]] = []
    editor.on_notice = lambda level, message: received.append((level, message))
    return received


@pytest.fixture
def calibrated(editor):
    """Editor in region mode at 10 px/m (a 100 px line measured as 10 m)."""
    editor.set_mode(EditorMode.SCALE)
    editor.click(0, 0)
    editor.click(100, 0)
    editor.submit_measurement(10)
    return editor
