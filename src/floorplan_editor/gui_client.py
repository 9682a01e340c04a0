#!/usr/bin/env python3
"""
Desktop window for the floorplan calibration and region-mapping editor.

This module hosts a ``FloorplanEditor`` session in a Tkinter window: the
canvas shows the floorplan rendered by the Pillow raster backend, the side
panel switches between the crop, scale and region tools, lists the mapped
regions for renaming, retyping and deletion, and saves the floorplan record
to a directory of JSON files.

Controls:
  * Left-drag on the image to draw the crop rectangle; drag its handles to
    adjust it, then "Confirm Crop" (or "Skip Crop").
  * In scale mode click the two ends of a known length and enter it in
    metres.
  * In region mode click to trace a room; click near the first point to
    close it. Right-click finishes the trace as-is, right-drag pans.
  * ``r`` toggles rectangle drawing, Escape cancels the trace and Ctrl+Z
    removes the last point.
  * The mouse wheel zooms around the pointer.

Note: Tkinter needs a graphical desktop; run this locally rather than in a
headless environment.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import tkinter as tk
from tkinter import filedialog, messagebox, simpledialog
from typing import List, Optional

from PIL import ImageTk

from .app_io.store import JsonFileRecordStore
from .core import facade
from .core.config import EditorConfig
from .core.errors import EditorNotReadyError, InvalidMeasurementError, ScaleNotSetError
from .core.model import FloorplanRecord, RegionType
from .core.state import DrawingMode, EditorMode, NoticeLevel
from .editor import PRIMARY_BUTTON, SECONDARY_BUTTON, FloorplanEditor
from .file_io import load_config, save_config
from .ui.commands import DrawCommand
from .ui.raster import RasterCanvas

logger = logging.getLogger(__name__)

IMAGE_FILETYPES = [
    ("Floorplans", "*.png *.jpg *.jpeg *.gif *.bmp *.tif *.tiff *.webp *.pdf"),
    ("All files", "*.*"),
]
PAN_STEP = 50
CONTROL_MASK = 0x0004
COMMAND_MASK = 0x0008  # Cmd on macOS


class FloorplanEditorGUI:
    """Tkinter window around a FloorplanEditor session."""

    def __init__(self, root: tk.Tk, editor: FloorplanEditor) -> None:
        self.root = root
        self.editor = editor
        self.root.title("Floorplan Editor")
        self.root.geometry("1200x800")
        self.photo: Optional[ImageTk.PhotoImage] = None
        self._region_ids: List[str] = []

        main_frame = tk.Frame(root)
        main_frame.pack(fill=tk.BOTH, expand=True)
        canvas_frame = tk.Frame(main_frame)
        canvas_frame.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        self.canvas = tk.Canvas(canvas_frame, bg='gray', width=800, height=600, highlightthickness=0)
        self.canvas.pack(side=tk.TOP, fill=tk.BOTH, expand=True)

        # Navigation controls beneath the canvas.
        ctrl_canvas_frame = tk.Frame(canvas_frame)
        ctrl_canvas_frame.pack(side=tk.BOTTOM, fill=tk.X)
        for text, command in (
            ("Zoom In", lambda: facade.zoom_in(self.editor)),
            ("Zoom Out", lambda: facade.zoom_out(self.editor)),
            ("Fit", lambda: facade.zoom_fit(self.editor)),
            ("Pan Left", lambda: facade.pan_canvas(self.editor, -PAN_STEP, 0)),
            ("Pan Right", lambda: facade.pan_canvas(self.editor, PAN_STEP, 0)),
            ("Pan Up", lambda: facade.pan_canvas(self.editor, 0, -PAN_STEP)),
            ("Pan Down", lambda: facade.pan_canvas(self.editor, 0, PAN_STEP)),
        ):
            tk.Button(ctrl_canvas_frame, text=text, command=command).pack(side=tk.LEFT, padx=2)
        self.pan_btn = tk.Button(ctrl_canvas_frame, text="Pan Mode", command=self.toggle_pan)
        self.pan_btn.pack(side=tk.LEFT, padx=2)

        # Tool panel on the right.
        side_frame = tk.Frame(main_frame)
        side_frame.pack(side=tk.RIGHT, fill=tk.Y)
        tk.Button(side_frame, text="Open Floorplan", command=self.open_image).pack(fill=tk.X)
        tk.Button(side_frame, text="Load Config", command=self.load_config).pack(fill=tk.X)
        tk.Button(side_frame, text="Save Config", command=self.save_config).pack(fill=tk.X)
        tk.Label(side_frame, text="Crop").pack(fill=tk.X, pady=(10, 0))
        tk.Button(side_frame, text="Confirm Crop", command=lambda: facade.crop_confirm(self.editor)).pack(fill=tk.X)
        tk.Button(side_frame, text="Reset Crop", command=lambda: facade.crop_reset(self.editor)).pack(fill=tk.X)
        tk.Button(side_frame, text="Skip Crop", command=lambda: self.editor.set_mode(EditorMode.SCALE)).pack(fill=tk.X)
        tk.Button(side_frame, text="Edit Crop", command=lambda: self.editor.set_mode(EditorMode.CROP)).pack(fill=tk.X)
        tk.Label(side_frame, text="Scale").pack(fill=tk.X, pady=(10, 0))
        tk.Button(side_frame, text="Reset Scale", command=lambda: facade.scale_reset(self.editor)).pack(fill=tk.X)
        tk.Label(side_frame, text="Regions").pack(fill=tk.X, pady=(10, 0))
        tk.Button(side_frame, text="Map Regions", command=lambda: self.editor.set_mode(EditorMode.REGION)).pack(fill=tk.X)
        self.draw_mode_btn = tk.Button(side_frame, text="Rectangle Mode",
                                       command=lambda: facade.draw_toggle_mode(self.editor))
        self.draw_mode_btn.pack(fill=tk.X)
        tk.Button(side_frame, text="Finish Region", command=self.editor.secondary_click).pack(fill=tk.X)
        tk.Button(side_frame, text="Undo Point", command=lambda: facade.draw_undo_point(self.editor)).pack(fill=tk.X)

        self.region_list = tk.Listbox(side_frame, height=12, width=40, exportselection=False)
        self.region_list.pack(fill=tk.BOTH, expand=True, pady=(5, 0))
        list_btns = tk.Frame(side_frame)
        list_btns.pack(fill=tk.X)
        tk.Button(list_btns, text="Rename", command=self.rename_selected).pack(side=tk.LEFT, expand=True, fill=tk.X)
        tk.Button(list_btns, text="Type", command=self.retype_selected).pack(side=tk.LEFT, expand=True, fill=tk.X)
        tk.Button(list_btns, text="Delete", command=self.delete_selected).pack(side=tk.LEFT, expand=True, fill=tk.X)
        tk.Button(list_btns, text="Clear All", command=self.clear_regions).pack(side=tk.LEFT, expand=True, fill=tk.X)
        tk.Button(side_frame, text="Save Floorplan", command=self.save).pack(fill=tk.X, pady=(10, 0))

        self.mode_label = tk.Label(side_frame, text="")
        self.mode_label.pack(fill=tk.X, pady=(10, 0))
        self.scale_label = tk.Label(side_frame, text="Scale: not set")
        self.scale_label.pack(fill=tk.X)
        self.status_label = tk.Label(side_frame, text="", fg='gray')
        self.status_label.pack(fill=tk.X)

        # Canvas events go straight to the session in screen coordinates.
        self.canvas.bind("<ButtonPress-1>", lambda e: self.editor.pointer_down(e.x, e.y, PRIMARY_BUTTON))
        self.canvas.bind("<ButtonRelease-1>", lambda e: self.editor.pointer_up(e.x, e.y, PRIMARY_BUTTON))
        self.canvas.bind("<ButtonPress-3>", lambda e: self.editor.pointer_down(e.x, e.y, SECONDARY_BUTTON))
        self.canvas.bind("<ButtonRelease-3>", lambda e: self.editor.pointer_up(e.x, e.y, SECONDARY_BUTTON))
        for sequence in ("<Motion>", "<B1-Motion>", "<B3-Motion>"):
            self.canvas.bind(sequence, lambda e: self.editor.pointer_move(e.x, e.y))
        self.canvas.bind("<MouseWheel>", lambda e: self.editor.wheel(e.x, e.y, -e.delta))
        # X11 reports the wheel as buttons 4 and 5.
        self.canvas.bind("<Button-4>", lambda e: self.editor.wheel(e.x, e.y, -1))
        self.canvas.bind("<Button-5>", lambda e: self.editor.wheel(e.x, e.y, 1))
        # Tk canvas pixels are device pixels, so the frame is rasterized at ratio 1.
        self.canvas.bind("<Configure>", lambda e: self.editor.resize(e.width, e.height))
        self.root.bind("<Key>", self.on_key)

        editor.on_render = self.on_render
        editor.on_notice = self.on_notice
        editor.on_measurement_requested = self.on_measurement_requested
        editor.on_saved = self.on_saved

    # ----- Session hooks -----
    def on_render(self, commands: List[DrawCommand]) -> None:
        editor = self.editor
        img = RasterCanvas(editor.canvas_size, editor.device_pixel_ratio, editor.image).execute(commands)
        self.photo = ImageTk.PhotoImage(img)
        self.canvas.delete("all")
        self.canvas.create_image(0, 0, anchor=tk.NW, image=self.photo)
        self.update_labels()
        self.update_region_list()

    def on_notice(self, level: NoticeLevel, message: str) -> None:
        if level is NoticeLevel.ERROR:
            messagebox.showerror("Error", message)
        elif level is NoticeLevel.WARNING:
            messagebox.showwarning("Warning", message)
        else:
            self.show_status_message(message, duration_ms=3000)

    def on_measurement_requested(self, pixels: float) -> None:
        # Let the second calibration point paint before the dialog blocks.
        self.root.after_idle(self._prompt_measurement, pixels)

    def on_saved(self, record: FloorplanRecord) -> None:
        messagebox.showinfo("Save", f"Saved {len(record.regions)} regions for {record.property_id}.")

    def _prompt_measurement(self, pixels: float) -> None:
        """Ask for the length of the calibration line until it is valid or cancelled."""
        while True:
            prompt = f"Enter the real-world length of the {pixels:.1f} px line (in metres):"
            value = simpledialog.askstring("Set Scale", prompt, parent=self.root)
            if value is None:
                self.editor.cancel_measurement()
                return
            try:
                self.editor.submit_measurement(value.strip())
            except InvalidMeasurementError as e:
                messagebox.showerror("Set Scale", str(e))
                continue
            return

    # ----- Panel state -----
    def show_status_message(self, msg: str, duration_ms: int = 1200) -> None:
        """Show a transient status message in the side panel."""
        self.status_label.config(text=msg)
        if duration_ms > 0:
            self.root.after(duration_ms, lambda: self.status_label.config(text=""))

    def update_labels(self) -> None:
        editor = self.editor
        state = editor.state
        mode = state.mode.current
        text = f"Mode: {mode.value}"
        if mode is EditorMode.PAN:
            text += f" (from {state.mode.previous.value})"
        if state.mode.current is EditorMode.REGION or state.mode.previous is EditorMode.REGION:
            text += f" / {state.draw.sub_mode.value}"
        self.mode_label.config(text=text)
        ppm = state.pixels_per_metre
        self.scale_label.config(text=f"Scale: {ppm:.2f} px/m" if ppm else "Scale: not set")
        self.pan_btn.config(relief=tk.SUNKEN if mode is EditorMode.PAN else tk.RAISED)
        if state.draw.sub_mode is DrawingMode.RECTANGLE:
            self.draw_mode_btn.config(text="Freeform Mode")
        else:
            self.draw_mode_btn.config(text="Rectangle Mode")

    def update_region_list(self) -> None:
        summaries = self.editor.region_summaries()
        ids = [s.id for s in summaries]
        labels = [s.label for s in summaries]
        if ids == self._region_ids and list(self.region_list.get(0, tk.END)) == labels:
            return
        selected = self.selected_region_id()
        self.region_list.delete(0, tk.END)
        for label in labels:
            self.region_list.insert(tk.END, label)
        self._region_ids = ids
        if selected in ids:
            self.region_list.selection_set(ids.index(selected))

    def selected_region_id(self) -> Optional[str]:
        selection = self.region_list.curselection()
        if not selection or selection[0] >= len(self._region_ids):
            return None
        return self._region_ids[selection[0]]

    # ----- Region list actions -----
    def rename_selected(self) -> None:
        region_id = self.selected_region_id()
        if region_id is None:
            messagebox.showwarning("Rename Region", "Select a region first.")
            return
        current = next(r.name for r in self.editor.state.regions if r.id == region_id)
        name = simpledialog.askstring("Rename Region", "Region name:", initialvalue=current, parent=self.root)
        if name is None:
            return
        facade.regions_rename(self.editor, region_id, name)

    def retype_selected(self) -> None:
        region_id = self.selected_region_id()
        if region_id is None:
            messagebox.showwarning("Region Type", "Select a region first.")
            return
        choices = ", ".join(t.value for t in RegionType)
        value = simpledialog.askstring("Region Type", f"Enter the region type ({choices}):", parent=self.root)
        if value is None:
            return
        try:
            facade.regions_set_type(self.editor, region_id, value.strip().lower())
        except ValueError:
            messagebox.showerror("Region Type", f"Unknown region type {value!r}.")

    def delete_selected(self) -> None:
        region_id = self.selected_region_id()
        if region_id is None:
            messagebox.showwarning("Delete Region", "Select a region first.")
            return
        facade.regions_delete(self.editor, region_id)

    def clear_regions(self) -> None:
        if not self.editor.state.regions:
            return
        if messagebox.askyesno("Clear Regions", "Delete all mapped regions?"):
            facade.regions_clear(self.editor)

    # ----- Files -----
    def open_image(self) -> None:
        path = filedialog.askopenfilename(title="Select Floorplan", filetypes=IMAGE_FILETYPES)
        if not path:
            return
        self.open_image_path(path)

    def open_image_path(self, path: str) -> None:
        if self.editor.open_image(path):
            self.root.title(f"Floorplan Editor - {os.path.basename(path)}")

    def load_config(self) -> None:
        path = filedialog.askopenfilename(title="Select Config JSON", filetypes=[("JSON files", "*.json")])
        if not path:
            return
        try:
            self.editor.config = load_config(path)
        except (OSError, ValueError, TypeError) as e:
            messagebox.showerror("Error", f"Failed to load configuration: {e}")
            return
        self.editor.redraw()
        messagebox.showinfo("Config", "Configuration loaded.")

    def save_config(self) -> None:
        path = filedialog.asksaveasfilename(title="Save Config", defaultextension='.json',
                                            filetypes=[("JSON files", "*.json")])
        if not path:
            return
        try:
            save_config(self.editor.config, path)
        except OSError as e:
            messagebox.showerror("Error", f"Failed to save configuration: {e}")
            return
        messagebox.showinfo("Config", "Configuration saved.")

    def save(self) -> None:
        try:
            self.editor.save()
        except (ScaleNotSetError, EditorNotReadyError) as e:
            messagebox.showwarning("Save", str(e))

    # ----- Keyboard -----
    def toggle_pan(self) -> None:
        self.editor.toggle_pan()

    def on_key(self, event) -> None:
        ctrl = bool(event.state & (CONTROL_MASK | COMMAND_MASK))
        if event.keysym == 'space' and not ctrl:
            self.toggle_pan()
            return
        self.editor.key(event.keysym, ctrl=ctrl)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Crop, calibrate and map regions on a floorplan image.")
    p.add_argument("image", nargs="?", help="Floorplan image or PDF to open")
    p.add_argument("--property-id", help="Property the floorplan belongs to (default: image file name)")
    p.add_argument("--store-dir", help="Directory of saved floorplan records")
    p.add_argument("--config", help="Editor configuration JSON")
    p.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')

    config = EditorConfig()
    if args.config:
        try:
            config = load_config(args.config)
        except (OSError, ValueError, TypeError) as e:
            print(f"Error: failed to load configuration {args.config}: {e}", file=sys.stderr)
            return 2

    property_id = args.property_id
    if not property_id:
        property_id = os.path.splitext(os.path.basename(args.image))[0] if args.image else "floorplan"
    store = JsonFileRecordStore(args.store_dir or config.store_dir)
    logger.info("Editing property %s, records in %s", property_id, store.directory)

    root = tk.Tk()
    editor = FloorplanEditor(property_id, store, config=config)
    app = FloorplanEditorGUI(root, editor)
    if args.image:
        root.after_idle(app.open_image_path, args.image)
    root.mainloop()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
