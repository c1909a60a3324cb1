#!/usr/bin/env python3
"""
Static chart images for the PDF.

Handles:
- Writing Plotly figures to PNG through kaleido
- Reading pixel sizes with Pillow
- Turning an image plus caption (and optional warning note) into flowables
  that fit the content box
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import plotly.graph_objects as go
import plotly.io as pio
from PIL import Image as PILImage
from reportlab.platypus import Flowable, Image, Paragraph, Spacer
from reportlab.lib.units import cm

from campaign_report.core.pdf_styles import CONTENT_HEIGHT, CONTENT_WIDTH, style_caption, style_note

LOGGER = logging.getLogger(__name__)

# ============================================================================
# EXPORT DEFAULTS
# ============================================================================
DEFAULT_WIDTH = 1400  # px
DEFAULT_HEIGHT = 800  # px
DEFAULT_SCALE = 2
DEFAULT_FORMAT = 'png'

# Box an embedded chart must fit into (leaves room for heading and caption)
MAX_IMAGE_WIDTH = CONTENT_WIDTH
MAX_IMAGE_HEIGHT = 0.6 * CONTENT_HEIGHT


# ============================================================================
# EXPORT
# ============================================================================
def export_plotly_figure(
        fig: go.Figure,
        output_path: Path,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        scale: float = DEFAULT_SCALE,
        format: str = DEFAULT_FORMAT,
) -> Path:
    """
    Write a figure to a static image.

    Args:
        fig: Figure to export
        output_path: Target file; missing parent folders are created
        width: Width in px before scaling
        height: Height in px before scaling
        scale: Pixel density multiplier
        format: Image format understood by kaleido

    Returns:
        ``output_path``

    Raises:
        RuntimeError: If kaleido is missing or fails to render
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    LOGGER.debug("Writing %s (%dx%d, scale %.1f)", output_path.name, width, height, scale)
    try:
        pio.write_image(fig, str(output_path), format=format,
                        width=width, height=height, scale=scale)
    except Exception as e:
        raise RuntimeError(f"Plotly export failed for {output_path.name}: {e}") from e

    LOGGER.debug("Wrote %s (%.1f KB)", output_path, output_path.stat().st_size / 1024)
    return output_path


# ============================================================================
# EMBEDDING
# ============================================================================
def get_figure_dimensions(image_path: Path) -> Tuple[int, int]:
    """
    Pixel size ``(width, height)`` of an image.

    Raises:
        FileNotFoundError: If the file does not exist
        RuntimeError: If Pillow cannot read it
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")
    try:
        with PILImage.open(image_path) as img:
            return img.size
    except OSError as e:
        raise RuntimeError(f"Cannot read image {image_path.name}: {e}") from e


def fit_to_box(px_width: int, px_height: int,
               max_width: float = MAX_IMAGE_WIDTH,
               max_height: float = MAX_IMAGE_HEIGHT) -> Tuple[float, float]:
    """Largest (width, height) in points with the image's aspect ratio inside the box."""
    factor = min(max_width / px_width, max_height / px_height)
    return px_width * factor, px_height * factor


def create_figure_flowable(
        image_path: Path,
        caption: Optional[str] = None,
        note: Optional[str] = None,
        max_width: float = MAX_IMAGE_WIDTH,
) -> List[Flowable]:
    """
    Flowables for one chart: image, caption and optional warning note.

    Args:
        image_path: Exported chart
        caption: Caption paragraph text
        note: Highlighted note under the caption
        max_width: Maximum image width in points

    Returns:
        List of flowables; a single placeholder paragraph if the image is missing
    """
    image_path = Path(image_path)
    if not image_path.exists():
        LOGGER.warning("Chart image missing: %s", image_path)
        return [Paragraph(f"[Missing image: {image_path.name}]", style_caption)]

    try:
        px_width, px_height = get_figure_dimensions(image_path)
    except RuntimeError as e:
        LOGGER.warning("%s; assuming default export size", e)
        px_width, px_height = DEFAULT_WIDTH, DEFAULT_HEIGHT

    width, height = fit_to_box(px_width, px_height, max_width=min(max_width, CONTENT_WIDTH))

    block: List[Flowable] = [Image(str(image_path), width=width, height=height)]
    if caption:
        block.append(Spacer(1, 0.2 * cm))
        block.append(Paragraph(caption, style_caption))
    if note:
        block.append(Paragraph(note, style_note))

    return [Spacer(1, 0.3 * cm)] + block + [Spacer(1, 0.4 * cm)]
