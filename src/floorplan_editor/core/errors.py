from __future__ import annotations


class FloorplanError(Exception):
    """Base class for editor errors."""


class ImageLoadError(FloorplanError):
    """The source floorplan image could not be decoded."""


class EditorNotReadyError(FloorplanError):
    """The image has not finished loading, or failed to load."""


class ScaleNotSetError(FloorplanError):
    """An operation needs a calibrated scale and none is set."""


class InvalidMeasurementError(FloorplanError, ValueError):
    """A calibration distance was non-numeric or not positive."""


class RecordNotFoundError(FloorplanError):
    """No floorplan record is stored for the property."""


class StoreError(FloorplanError):
    """The record store failed to read or write a record."""
