from __future__ import annotations

import json
import logging
import os

import pymupdf as fitz
from PIL import Image

from .core.config import EditorConfig
from .core.errors import ImageLoadError

logger = logging.getLogger(__name__)

PDF_RENDER_ZOOM = 2


def _pdf_page_to_image(pdf_path: str, page_number: int = 0) -> Image.Image:
    """Load the specified page of a PDF and convert it to a PIL Image."""
    with open(pdf_path, 'rb') as f:
        doc = fitz.open(stream=f.read(), filetype='pdf')
    if page_number < 0 or page_number >= len(doc):
        raise ValueError(f"Invalid page number {page_number} for PDF with {len(doc)} pages")
    page = doc.load_page(page_number)
    mat = fitz.Matrix(PDF_RENDER_ZOOM, PDF_RENDER_ZOOM)
    pix = page.get_pixmap(matrix=mat)
    mode = 'RGB' if pix.alpha == 0 else 'RGBA'
    return Image.frombytes(mode, [pix.width, pix.height], pix.samples)


def load_source_image(path: str) -> Image.Image:
    """Decode a floorplan image (or the first page of a PDF) at its natural size."""
    try:
        if os.path.splitext(path)[1].lower() == '.pdf':
            img = _pdf_page_to_image(path)
        else:
            with Image.open(path) as src:
                src.load()
                img = src.copy()
    except (OSError, ValueError, RuntimeError) as e:
        raise ImageLoadError(f"Failed to load floorplan image {path}: {e}") from e
    logger.debug("Loaded %s (%dx%d)", path, img.width, img.height)
    return img.convert('RGBA')


def load_config(path: str) -> EditorConfig:
    with open(path, 'r', encoding='utf-8') as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return EditorConfig.from_dict(cfg)


def save_config(config: EditorConfig, path: str) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)
