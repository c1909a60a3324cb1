#!/usr/bin/env python3
"""
Aggregation tests (pytest version).

Run with: pytest campaign_report/test_aggregations.py -v
"""
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

REPO = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO))

from campaign_report.pipeline.data_loader import CandidateData
from campaign_report.pipeline.aggregations import (
    AGGREGATE_NAMES,
    BUCKET_LABELS,
    asinh,
    bucket_counts,
    compute_all_aggregates,
    contribution_density,
    dark_office_state_counts,
    end_year_counts,
    loan_by_state,
    log_end_year_counts,
    office_state_counts,
    summarize_aggregate_bundle,
    top_parties,
)

COLUMNS = ["cand_name", "party", "office_state", "cand_state",
           "indiv_contrib", "total_loan", "cov_end_date"]


def make_records(rows):
    """Build a record frame with the canonical report columns."""
    df = pd.DataFrame(rows, columns=COLUMNS)
    df["indiv_contrib"] = df["indiv_contrib"].astype(float)
    df["total_loan"] = df["total_loan"].astype(float)
    return df


def row(name, party="DEM", office="CA", state=None, contrib=0.0, loan=0.0, end="12/31/2020"):
    return (name, party, office, state or office, contrib, loan, end)


# ============================================================================
# TOP PARTIES
# ============================================================================
def test_top_parties_counts_distinct_names():
    """Repeated filings of one candidate count once."""
    records = make_records([
        row("A", "DEM"), row("A", "DEM"), row("B", "REP"), row("C", "DEM"),
    ])
    result = top_parties(records, k=5)

    assert list(result.columns) == ["party", "count"]
    assert result["party"].tolist() == ["DEM", "REP"]
    assert result["count"].tolist() == [2, 1]


def test_top_parties_first_occurrence_wins():
    """A candidate listed under two parties is counted under the first."""
    records = make_records([row("A", "DEM"), row("A", "REP"), row("B", "REP")])
    result = top_parties(records)

    assert dict(zip(result["party"], result["count"])) == {"DEM": 1, "REP": 1}


def test_top_parties_limit_and_ties():
    """At most k rows; equal counts keep first-seen order."""
    parties = ["LIB", "GRE", "IND", "CON", "OTH", "NNE", "UNK"]
    rows = [row(f"N{i}", p) for i, p in enumerate(parties)]
    rows += [row("X1", "DEM"), row("X2", "DEM")]
    result = top_parties(make_records(rows), k=5)

    assert len(result) == 5
    assert result["party"].tolist() == ["DEM", "LIB", "GRE", "IND", "CON"]
    counts = result["count"].tolist()
    assert counts == sorted(counts, reverse=True)


def test_top_parties_zero_k_is_empty():
    result = top_parties(make_records([row("A")]), k=0)
    assert result.empty
    assert list(result.columns) == ["party", "count"]


# ============================================================================
# CONTRIBUTION DENSITY
# ============================================================================
def test_asinh_is_odd_and_monotonic():
    x = np.array([-1e6, -10.0, -1.0, 0.0, 1.0, 10.0, 1e6])
    y = asinh(x)

    assert y[3] == 0.0
    np.testing.assert_allclose(asinh(-x), -y)
    assert np.all(np.diff(y) > 0)


def test_contribution_density_keeps_zero_and_negative():
    records = make_records([
        row("A", contrib=0.0), row("B", contrib=-5.0),
        row("C", contrib=100.0), row("D", contrib=np.nan),
    ])
    result = contribution_density(records)

    assert result.name == "asinh_contrib"
    assert len(result) == 3
    np.testing.assert_allclose(result.to_numpy(), np.arcsinh([0.0, -5.0, 100.0]))


# ============================================================================
# LOANS
# ============================================================================
def test_loan_by_state_filters():
    """Only positive loans in the chosen states with the year in the end date."""
    records = make_records([
        row("A", office="CA", loan=100.0, end="12/31/2020"),
        row("B", office="TX", loan=0.0, end="12/31/2020"),
        row("C", office="NY", loan=50.0, end="12/31/2019"),
        row("D", office="WA", loan=10.0, end="12/31/2020"),
        row("E", office="FL", loan=np.nan, end="12/31/2020"),
        row("F", office="IL", loan=25.0, end=None),
    ])
    result = loan_by_state(records, states=("CA", "TX", "FL", "NY", "IL"), year="2020")

    assert list(result.columns) == ["state", "log_loan"]
    assert result["state"].tolist() == ["CA"]
    assert result["log_loan"].iloc[0] == pytest.approx(np.log(100.0))


def test_loan_by_state_empty():
    result = loan_by_state(make_records([row("A", loan=0.0)]))
    assert result.empty
    assert list(result.columns) == ["state", "log_loan"]


# ============================================================================
# END YEAR
# ============================================================================
def test_end_year_counts_drops_single_years():
    records = make_records([
        row("A", end="12/31/2019"),
        row("B", end="12/31/2020"),
        row("C", end="06/30/2020"),
        row("D", end="03/31/2020"),
        row("E", end="not a date"),
    ])
    result = end_year_counts(records)

    assert result["year"].tolist() == [2020]
    assert result["count"].tolist() == [3]


def test_end_year_counts_unpadded_dates():
    records = make_records([
        row("A", end="1/1/2019"), row("B", end="2/2/2019"), row("C", end="3/3/2020"),
    ])
    result = end_year_counts(records)

    assert list(zip(result["year"], result["count"])) == [(2019, 2)]


def test_log_end_year_counts():
    years = pd.DataFrame({"year": [2018, 2020], "count": [2, 3]})
    result = log_end_year_counts(years)

    assert result["year"].tolist() == [2018, 2020]
    np.testing.assert_allclose(result["count"], np.log([2.0, 3.0]))
    # Input untouched
    assert years["count"].tolist() == [2, 3]


# ============================================================================
# OFFICE STATES
# ============================================================================
def test_office_state_counts_example():
    records = make_records([row("A", office="CA"), row("B", office="CA"), row("C", office="TX")])
    result = office_state_counts(records)

    assert dict(zip(result["state"], result["count"])) == {"CA": 2, "TX": 1}
    assert set(result["bucket"]) == {"<400"}


def test_office_state_counts_excludes_on_candidate_state():
    """Exclusion looks at the candidate state; grouping uses the office state."""
    records = make_records([
        row("A", office="CA", state="CA"),
        row("B", office="CA", state="PR"),
        row("C", office="PR", state="NY"),
        row("D", office="VI", state="VI"),
    ])
    result = office_state_counts(records, excluded=("VI", "PR"))

    assert dict(zip(result["state"], result["count"])) == {"CA": 1, "PR": 1}


def test_bucket_boundaries():
    """Lower edges are inclusive; exactly 2000 lands in the top range."""
    buckets = bucket_counts(pd.Series([0, 399, 400, 1999, 2000, 5000]))

    assert list(buckets) == ["<400", "<400", "400-800", "1600-2000", ">=2000", ">=2000"]
    assert list(buckets.cat.categories) == list(BUCKET_LABELS)


def test_dark_office_state_counts_is_copy():
    records = make_records([row("A", office="CA"), row("B", office="TX")])
    counts = office_state_counts(records)
    dark = dark_office_state_counts(counts)

    pd.testing.assert_frame_equal(dark, counts)
    assert dark is not counts


# ============================================================================
# BUNDLE
# ============================================================================
def test_empty_records_give_empty_aggregates():
    data = CandidateData(source=Path("empty.csv"), records=make_records([]))
    bundle = compute_all_aggregates(data)

    assert bundle.failures == {}
    for name, value in bundle.items():
        assert value is not None, name
        assert len(value) == 0, name


def test_compute_all_aggregates_reads_config():
    records = make_records([row("A", "DEM"), row("B", "REP"), row("C", "DEM")])
    data = CandidateData(source=Path("x.csv"), records=records)
    cfg = {"aggregations": {"top_parties": {"k": 1}}}

    bundle = compute_all_aggregates(data, cfg)

    assert bundle.top_parties["party"].tolist() == ["DEM"]


def test_compute_all_aggregates_isolates_failures():
    """A missing date column breaks the date aggregates only."""
    records = make_records([row("A", office="CA"), row("B", office="TX")])
    records = records.drop(columns="cov_end_date")
    data = CandidateData(source=Path("x.csv"), records=records)

    bundle = compute_all_aggregates(data)

    assert bundle.top_parties is not None
    assert bundle.contribution_density is not None
    assert bundle.office_state_counts is not None
    assert bundle.dark_office_state_counts is not None

    assert bundle.loan_by_state is None
    assert bundle.end_year_counts is None
    assert bundle.log_end_year_counts is None
    assert set(bundle.failures) == {"loan_by_state", "end_year_counts", "log_end_year_counts"}
    assert bundle.failures["log_end_year_counts"] == "end_year_counts unavailable"

    summary = summarize_aggregate_bundle(bundle)
    for name in AGGREGATE_NAMES:
        assert name in summary
