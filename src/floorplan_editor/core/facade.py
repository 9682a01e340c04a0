"""
Unified facade that re-exports feature functions from the modular packages.
The editor session dispatches through this module so it does not need to
know where each tool lives.
"""

from __future__ import annotations

# Crop
from ..features.crop.crop import (
    crop_on_pointer_down as crop_on_pointer_down,
    crop_on_pointer_move as crop_on_pointer_move,
    crop_on_pointer_up as crop_on_pointer_up,
    confirm_crop as crop_confirm,
    reset_crop as crop_reset,
)

# Scale
from ..features.scale.scale import (
    scale_on_canvas_click as scale_on_canvas_click,
    submit_measurement as scale_submit_measurement,
    cancel_measurement as scale_cancel_measurement,
    reset_scale as scale_reset,
    pixel_distance as scale_pixel_distance,
)

# Draw
from ..features.editing.draw import (
    draw_on_canvas_click as draw_on_canvas_click,
    force_complete as draw_finish,
    toggle_drawing_mode as draw_toggle_mode,
    cancel_trace as draw_cancel,
    undo_last_point as draw_undo_point,
    preview_target as draw_preview_target,
    is_closing as draw_is_closing,
)

# Region editing
from ..features.editing.regions import (
    rename_region as regions_rename,
    set_region_type as regions_set_type,
    delete_region as regions_delete,
    clear_regions as regions_clear,
    region_summaries as regions_summaries,
)

# Navigation
from ..features.navigation.pan import (
    pan_canvas as pan_canvas,
    on_pan_start as pan_on_start,
    on_pan_move as pan_on_move,
    on_pan_end as pan_on_end,
)
from ..features.navigation.zoom import (
    zoom_in as zoom_in,
    zoom_out as zoom_out,
    set_zoom as zoom_set,
    zoom_on_wheel as zoom_on_wheel,
    fit_to_view as zoom_fit,
)
