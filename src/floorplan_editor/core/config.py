from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    zoom_min: float = 0.1
    zoom_max: float = 5.0
    zoom_step: float = 0.2  # zoom button increment
    wheel_zoom_in: float = 1.1
    wheel_zoom_out: float = 0.9
    fit_padding_px: float = 40.0
    handle_radius_px: float = 8.0
    close_threshold_px: float = 10.0
    snap_threshold_deg: float = 5.0
    right_angle_threshold_deg: float = 5.0
    checker_cell_px: int = 8
    store_dir: str = 'floorplans'

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            default = getattr(cls, key)
            values[key] = type(default)(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
