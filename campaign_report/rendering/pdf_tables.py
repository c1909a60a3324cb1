#!/usr/bin/env python3
"""
ReportLab tables for the data appendix and the header info box.

Handles:
- Aggregate DataFrame -> striped table with a bold header row
- Number formatting (thousands separators, fixed decimals, "-" for missing)
- Two-column key/value box
"""
from __future__ import annotations

import logging
import numbers
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from reportlab.platypus import Paragraph, Table, TableStyle

from campaign_report.core.pdf_styles import COLORS, CONTENT_WIDTH, SANS, SANS_BOLD, style_h2

LOGGER = logging.getLogger(__name__)

MISSING = "-"


def format_cell(value, decimals: int = 2) -> str:
    """Render one table cell: ``1,234`` for integers, ``3.14`` for floats."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return MISSING
    if isinstance(value, (bool, np.bool_)):
        return str(value)
    if isinstance(value, numbers.Integral):
        return f"{int(value):,}"
    if isinstance(value, numbers.Real):
        return f"{float(value):,.{decimals}f}"
    return str(value)


def _grid_style(n_rows: int) -> List[tuple]:
    commands = [
        ('FONTNAME', (0, 0), (-1, 0), SANS_BOLD),
        ('FONTNAME', (0, 1), (-1, -1), SANS),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('TEXTCOLOR', (0, 0), (-1, -1), COLORS['text_dark']),
        ('BACKGROUND', (0, 0), (-1, 0), COLORS['background_light']),
        ('LINEBELOW', (0, 0), (-1, 0), 1.2, COLORS['primary']),
        ('LINEBELOW', (0, 1), (-1, -1), 0.25, COLORS['border']),
        ('ALIGN', (0, 0), (0, -1), 'LEFT'),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]
    # Zebra stripes on every other data row
    commands += [('BACKGROUND', (0, r), (-1, r), COLORS['background_light'])
                 for r in range(2, n_rows, 2)]
    return commands


# ============================================================================
# AGGREGATE TABLE
# ============================================================================
def create_aggregate_table(
        df: pd.DataFrame,
        title: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        max_width: float = CONTENT_WIDTH,
        round_decimals: int = 2,
) -> List:
    """
    Turn an aggregate frame into a titled table.

    Args:
        df: Aggregate to show; the index is ignored
        title: Heading above the table
        headers: Column name -> display label
        max_width: Total table width in points
        round_decimals: Decimals shown for float columns

    Returns:
        ``[Paragraph(title), Table]`` (title omitted when not given);
        an empty list for an empty frame

    Example:
        >>> story += create_aggregate_table(bundle.top_parties, title="Top Parties",
        ...                                 headers={'count': 'Candidates'})
    """
    if df is None or df.empty:
        LOGGER.debug("Skipping empty table %r", title)
        return []

    headers = headers or {}
    rows = [[headers.get(col, str(col)) for col in df.columns]]
    for record in df.itertuples(index=False):
        rows.append([format_cell(v, round_decimals) for v in record])

    n_cols = len(df.columns)
    table = Table(rows, colWidths=[max_width / n_cols] * n_cols, repeatRows=1)
    table.setStyle(TableStyle(_grid_style(len(rows))))

    flowables = [Paragraph(title, style_h2)] if title else []
    flowables.append(table)
    return flowables


# ============================================================================
# INFO BOX
# ============================================================================
def create_info_table(
        info: Dict[str, object],
        max_width: float = CONTENT_WIDTH,
) -> Optional[Table]:
    """
    Two-column label/value box used in the header.

    Args:
        info: Label -> value, shown in insertion order
        max_width: Total width in points

    Returns:
        Table, or None when ``info`` is empty
    """
    if not info:
        LOGGER.warning("Empty info dict provided")
        return None

    rows = [[label, format_cell(value)] for label, value in info.items()]
    table = Table(rows, colWidths=[max_width * 0.35, max_width * 0.65])
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), SANS_BOLD),
        ('FONTNAME', (1, 0), (1, -1), SANS),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (0, -1), COLORS['text_dark']),
        ('TEXTCOLOR', (1, 0), (1, -1), COLORS['secondary']),
        ('BACKGROUND', (0, 0), (-1, -1), COLORS['background_light']),
        ('BOX', (0, 0), (-1, -1), 1, COLORS['primary']),
        ('LINEBELOW', (0, 0), (-1, -2), 0.25, COLORS['border']),
        ('LEFTPADDING', (0, 0), (-1, -1), 10),
        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
    ]))
    return table
