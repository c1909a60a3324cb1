#!/usr/bin/env python3
"""
Chart encoding tests.

Figures are built and inspected only; nothing is exported, so no image
engine is needed.

Run with: pytest campaign_report/test_chart_specs.py -v
"""
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

REPO = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO))

from campaign_report.core.chart_config import CHART_CONFIGS
from campaign_report.pipeline.aggregations import bucket_counts
from campaign_report.rendering.chart_specs import (
    BUCKET_PALETTE,
    DARK_BUCKET_PALETTE,
    ENCODERS,
    KDE_POINTS,
    build_contribution_density_figure,
    build_dark_office_state_figure,
    build_end_year_figure,
    build_figure,
    build_loan_by_state_figure,
    build_office_state_figure,
    build_top_parties_figure,
    discrete_colorscale,
    empty_figure,
)


@pytest.fixture
def state_counts():
    df = pd.DataFrame({"state": ["CA", "TX", "WY"], "count": [2500, 900, 12]})
    df["bucket"] = bucket_counts(df["count"])
    return df


def test_every_chart_has_an_encoder():
    assert set(ENCODERS) == set(CHART_CONFIGS)


def test_unknown_chart_raises():
    with pytest.raises(KeyError):
        build_figure("pie_of_everything", pd.DataFrame())


def test_empty_figure():
    fig = empty_figure("Nothing here")

    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "No data"
    assert fig.layout.title.text == "Nothing here"


def test_empty_aggregate_gives_empty_figure():
    fig = build_top_parties_figure(pd.DataFrame(columns=["party", "count"]))
    assert len(fig.data) == 0


def test_top_parties_bar():
    parties = pd.DataFrame({"party": ["DEM", "REP"], "count": [10, 8]})
    fig = build_figure("top_parties", parties, title="Parties")

    assert fig.data[0].type == "bar"
    assert list(fig.data[0].x) == ["DEM", "REP"]
    assert list(fig.data[0].y) == [10, 8]
    assert fig.layout.title.text == "Parties"


def test_contribution_density_curve():
    values = pd.Series(np.arcsinh([0.0, 0.0, 50.0, 1000.0, 25000.0]))
    fig = build_contribution_density_figure(values)

    trace = fig.data[0]
    assert trace.type == "scatter"
    assert len(trace.x) == KDE_POINTS
    assert np.all(np.asarray(trace.y) >= 0)


def test_contribution_density_single_value():
    fig = build_contribution_density_figure(pd.Series([0.0, 0.0, 0.0]))
    assert list(fig.data[0].x) == [0.0, 0.0]


def test_loan_violins_follow_state_order():
    loans = pd.DataFrame({
        "state": ["TX", "CA", "CA", "NY"],
        "log_loan": np.log([1e4, 5e3, 2e5, 1e3]),
    })
    fig = build_loan_by_state_figure(loans, states=("CA", "TX", "FL", "NY", "IL"))

    assert [t.type for t in fig.data] == ["violin"] * 3
    assert [t.name for t in fig.data] == ["CA", "TX", "NY"]
    assert fig.data[0].points == "all"


def test_end_year_linear_and_log():
    years = pd.DataFrame({"year": [2019, 2020], "count": [3, 400]})

    fig = build_end_year_figure(years)
    assert fig.layout.yaxis.title.text == "Records"

    log_fig = build_figure("log_end_year_counts", years.assign(count=np.log(years["count"])))
    assert log_fig.layout.yaxis.title.text == "ln(records)"
    assert log_fig.data[0].y[1] == pytest.approx(np.log(400))


def test_discrete_colorscale():
    scale = discrete_colorscale(["#000000", "#ffffff"])
    assert scale == [[0.0, "#000000"], [0.5, "#000000"], [0.5, "#ffffff"], [1.0, "#ffffff"]]


def test_office_state_choropleth(state_counts):
    fig = build_office_state_figure(state_counts)
    trace = fig.data[0]

    assert trace.type == "choropleth"
    assert trace.locationmode == "USA-states"
    assert list(trace.locations) == ["CA", "TX", "WY"]
    # Bucket codes: >=2000 -> 5, 800-1200 -> 2, <400 -> 0
    assert list(trace.z) == [5, 2, 0]
    assert trace.zmin == -0.5
    assert trace.zmax == 5.5
    assert fig.layout.geo.scope == "usa"
    assert {color for _, color in trace.colorscale} == set(BUCKET_PALETTE)


def test_dark_choropleth_uses_dark_palette(state_counts):
    fig = build_dark_office_state_figure(state_counts)
    trace = fig.data[0]

    assert {color for _, color in trace.colorscale} == set(DARK_BUCKET_PALETTE)
    assert list(trace.z) == [5, 2, 0]


def test_palette_must_match_buckets(state_counts):
    with pytest.raises(ValueError):
        build_office_state_figure(state_counts, palette=["#000000", "#ffffff"])
