#!/usr/bin/env python3
"""
Chart encodings for the campaign finance report.

Maps each aggregate onto a Plotly figure: geometry, axes, colour and labels.
No aggregation happens here; the two misleading charts reuse the faithful
builders with a distorting palette or pre-logged data.

Handles:
- Bar (top parties)
- Density curve (asinh contributions, Gaussian KDE)
- Violin + strip (log loans by state)
- Ridge line (records per coverage end year)
- Binned US-states choropleth (records per office state)
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from scipy.stats import gaussian_kde

from campaign_report.pipeline.aggregations import BUCKET_LABELS, DEFAULT_LOAN_STATES

LOGGER = logging.getLogger(__name__)

# ============================================================================
# PALETTE
# ============================================================================
PRIMARY = '#3498db'
ACCENT = '#e67e22'
TEXT_DARK = '#2c3e50'
GRID = '#ecf0f1'

STATE_COLORS = ['#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd',
                '#8c564b', '#e377c2', '#7f7f7f', '#bcbd22', '#17becf']

# Six buckets, light to dark
BUCKET_PALETTE = ['#deebf7', '#c6dbef', '#9ecae1', '#6baed6', '#3182bd', '#08519c']

# Six buckets squeezed into a narrow band of near-black blues
DARK_BUCKET_PALETTE = ['#14142b', '#16162f', '#181833', '#1a1a37', '#1c1c3b', '#1e1e3f']

KDE_POINTS = 512

FONT = dict(family="Helvetica, Arial, sans-serif", size=14, color=TEXT_DARK)


# ============================================================================
# SHARED LAYOUT
# ============================================================================
def _apply_layout(fig: go.Figure, title: str,
                  xaxis_title: str = "", yaxis_title: str = "") -> go.Figure:
    fig.update_layout(
        title=dict(text=title, x=0.5, xanchor='center'),
        xaxis_title=xaxis_title,
        yaxis_title=yaxis_title,
        template='plotly_white',
        font=FONT,
        margin=dict(l=70, r=40, t=80, b=60),
        showlegend=False,
    )
    return fig


def empty_figure(title: str, message: str = "No data") -> go.Figure:
    """
    Build a valid figure with no traces and a centred annotation.

    Args:
        title: Figure title
        message: Annotation text

    Returns:
        Plotly Figure
    """
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        x=0.5, y=0.5, xref='paper', yref='paper',
        showarrow=False,
        font=dict(size=20, color='#95a5a6'),
    )
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return _apply_layout(fig, title)


def discrete_colorscale(colors: Sequence[str]) -> List[list]:
    """
    Build a stepped colorscale so integer codes 0..n-1 each get one flat colour.

    Use with ``zmin=-0.5`` and ``zmax=n-0.5``.
    """
    n = len(colors)
    scale = []
    for i, color in enumerate(colors):
        scale.append([i / n, color])
        scale.append([(i + 1) / n, color])
    return scale


# ============================================================================
# 1. BAR
# ============================================================================
def build_top_parties_figure(parties: pd.DataFrame,
                             title: str = "Candidates by Party") -> go.Figure:
    """Bar chart of distinct candidates per party, largest first."""
    if parties is None or parties.empty:
        return empty_figure(title)

    fig = go.Figure(go.Bar(
        x=parties['party'].astype(str),
        y=parties['count'],
        marker_color=PRIMARY,
        text=parties['count'],
        textposition='outside',
        hovertemplate="<b>%{x}</b><br>Candidates: %{y}<extra></extra>",
    ))
    fig.update_yaxes(rangemode='tozero', gridcolor=GRID)
    return _apply_layout(fig, title, "Party affiliation", "Distinct candidates")


# ============================================================================
# 2. DENSITY CURVE
# ============================================================================
def build_contribution_density_figure(values: pd.Series,
                                      title: str = "Individual Contributions") -> go.Figure:
    """
    Gaussian KDE of asinh-transformed contributions.

    Fewer than two distinct values cannot be smoothed; a single spike is
    drawn instead.
    """
    if values is None or len(values) == 0:
        return empty_figure(title)

    data = np.asarray(values, dtype=float)
    x_title = "asinh(individual contribution)"

    if np.unique(data).size < 2:
        fig = go.Figure(go.Scatter(
            x=[data[0], data[0]], y=[0, 1],
            mode='lines', line=dict(color=PRIMARY, width=3),
        ))
        return _apply_layout(fig, title, x_title, "Density")

    kde = gaussian_kde(data)
    pad = 0.05 * (data.max() - data.min())
    grid = np.linspace(data.min() - pad, data.max() + pad, KDE_POINTS)
    density = kde(grid)

    fig = go.Figure(go.Scatter(
        x=grid,
        y=density,
        mode='lines',
        fill='tozeroy',
        line=dict(color=PRIMARY, width=2),
        fillcolor='rgba(52, 152, 219, 0.3)',
        hovertemplate="asinh: %{x:.2f}<br>density: %{y:.4f}<extra></extra>",
    ))
    fig.update_yaxes(rangemode='tozero', gridcolor=GRID)
    return _apply_layout(fig, title, x_title, "Density")


# ============================================================================
# 3. VIOLIN + STRIP
# ============================================================================
def build_loan_by_state_figure(loans: pd.DataFrame,
                               title: str = "Candidate Loans",
                               states: Sequence[str] = DEFAULT_LOAN_STATES) -> go.Figure:
    """One violin per state with every loan drawn as a jittered point."""
    if loans is None or loans.empty:
        return empty_figure(title)

    order = [s for s in states if s in set(loans['state'])]
    order += sorted(set(loans['state']) - set(order))

    fig = go.Figure()
    for idx, state in enumerate(order):
        subset = loans.loc[loans['state'] == state, 'log_loan']
        color = STATE_COLORS[idx % len(STATE_COLORS)]
        fig.add_trace(go.Violin(
            x=[state] * len(subset),
            y=subset,
            name=state,
            line_color=color,
            fillcolor=color,
            opacity=0.6,
            box_visible=True,
            meanline_visible=True,
            points='all',
            pointpos=0,
            jitter=0.4,
            marker=dict(size=4, color=TEXT_DARK, opacity=0.5),
            hovertemplate=f"<b>{state}</b><br>ln(loan): %{{y:.2f}}<extra></extra>",
        ))
    fig.update_yaxes(gridcolor=GRID)
    return _apply_layout(fig, title, "Office state", "ln(total loans, USD)")


# ============================================================================
# 4. RIDGE LINE
# ============================================================================
def build_end_year_figure(year_counts: pd.DataFrame,
                          title: str = "Coverage End Year",
                          log: bool = False) -> go.Figure:
    """
    Filled line of records per coverage end year.

    Args:
        year_counts: DataFrame with ``year``, ``count``
        title: Figure title
        log: Counts are already ln-transformed (axis label only)
    """
    if year_counts is None or year_counts.empty:
        return empty_figure(title)

    y_title = "ln(records)" if log else "Records"
    color = ACCENT if log else PRIMARY

    fig = go.Figure(go.Scatter(
        x=year_counts['year'],
        y=year_counts['count'],
        mode='lines+markers',
        fill='tozeroy',
        line=dict(color=color, width=3, shape='spline'),
        marker=dict(size=8, color=color),
        hovertemplate="%{x}<br>" + y_title + ": %{y:.2f}<extra></extra>",
    ))
    fig.update_xaxes(tickmode='linear', dtick=1, tickformat='d')
    fig.update_yaxes(rangemode='tozero', gridcolor=GRID)
    return _apply_layout(fig, title, "Coverage end year", y_title)


# ============================================================================
# 5. BINNED CHOROPLETH
# ============================================================================
def build_office_state_figure(state_counts: pd.DataFrame,
                              title: str = "Records per Office State",
                              palette: Sequence[str] = BUCKET_PALETTE,
                              dark: bool = False) -> go.Figure:
    """
    US-states choropleth coloured by count bucket.

    Args:
        state_counts: DataFrame with ``state``, ``count``, ``bucket``
        title: Figure title
        palette: One colour per bucket, in bucket order
        dark: Use a dark background around the map
    """
    if state_counts is None or state_counts.empty:
        return empty_figure(title)

    labels = list(BUCKET_LABELS)
    if len(palette) != len(labels):
        raise ValueError(f"Palette needs {len(labels)} colours, got {len(palette)}")

    buckets = pd.Categorical(state_counts['bucket'], categories=labels, ordered=True)
    codes = np.asarray(buckets.codes, dtype=float)

    fig = go.Figure(go.Choropleth(
        locations=state_counts['state'].astype(str),
        z=codes,
        locationmode='USA-states',
        colorscale=discrete_colorscale(palette),
        zmin=-0.5,
        zmax=len(labels) - 0.5,
        marker_line_color='#7f8c8d' if not dark else '#202040',
        marker_line_width=0.5,
        customdata=np.column_stack([state_counts['count'], np.asarray(buckets, dtype=object)]),
        hovertemplate="<b>%{location}</b><br>Records: %{customdata[0]}"
                      "<br>Range: %{customdata[1]}<extra></extra>",
        colorbar=dict(
            title="Records",
            tickvals=list(range(len(labels))),
            ticktext=labels,
        ),
    ))
    fig.update_geos(scope='usa', showlakes=False)
    _apply_layout(fig, title)
    if dark:
        fig.update_layout(
            paper_bgcolor='#0b0b1a',
            geo_bgcolor='#0b0b1a',
            font=dict(FONT, color='#3a3a5a'),
        )
    return fig


build_dark_office_state_figure = partial(
    build_office_state_figure, palette=DARK_BUCKET_PALETTE, dark=True
)


# ============================================================================
# ENCODER REGISTRY
# ============================================================================
ENCODERS: Dict[str, Callable[..., go.Figure]] = {
    'top_parties': build_top_parties_figure,
    'contribution_density': build_contribution_density_figure,
    'loan_by_state': build_loan_by_state_figure,
    'end_year_counts': build_end_year_figure,
    'office_state_counts': build_office_state_figure,
    'log_end_year_counts': partial(build_end_year_figure, log=True),
    'dark_office_state_counts': build_dark_office_state_figure,
}


def build_figure(chart_id: str, aggregate, title: Optional[str] = None) -> go.Figure:
    """
    Encode one aggregate as a figure.

    Args:
        chart_id: Key of ENCODERS
        aggregate: Output of the matching aggregation
        title: Figure title (defaults to the builder's own)

    Returns:
        Plotly Figure

    Raises:
        KeyError: If chart_id has no encoder
    """
    try:
        encoder = ENCODERS[chart_id]
    except KeyError:
        raise KeyError(f"No encoder registered for chart '{chart_id}'") from None

    LOGGER.debug("Encoding %s (%d rows)", chart_id,
                 0 if aggregate is None else len(aggregate))
    if title is None:
        return encoder(aggregate)
    return encoder(aggregate, title=title)
