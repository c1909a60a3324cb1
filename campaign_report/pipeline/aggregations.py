#!/usr/bin/env python3
"""
Aggregations for the campaign finance report.

Seven pure functions, one per chart. Each takes the full record frame (or,
for the two re-encoded variants, a previously computed aggregate) and returns
a new frame/series; none of them mutates its input.

Provides:
- top_parties(), contribution_density(), loan_by_state(), end_year_counts(),
  office_state_counts(), log_end_year_counts(), dark_office_state_counts()
- AggregateBundle: Container for all computed aggregates
- compute_all_aggregates(): Single entry point to compute everything
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from core.config import get_section
from campaign_report.pipeline.data_loader import CandidateData

LOGGER = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================
DEFAULT_TOP_K = 5
DEFAULT_LOAN_STATES = ("CA", "TX", "FL", "NY", "IL")
DEFAULT_LOAN_YEAR = "2020"
DEFAULT_EXCLUDED_STATES = ("VI", "PR")

# Lower edges are inclusive: [0, 400), [400, 800), ..., [2000, inf)
BUCKET_EDGES = (0, 400, 800, 1200, 1600, 2000, np.inf)
BUCKET_LABELS = ("<400", "400-800", "800-1200", "1200-1600", "1600-2000", ">=2000")

DATE_FORMAT = "%m/%d/%Y"


# ============================================================================
# HELPERS
# ============================================================================
def asinh(values) -> np.ndarray:
    """Inverse hyperbolic sine, ln(x + sqrt(x^2 + 1)); defined for all reals."""
    return np.arcsinh(np.asarray(values, dtype=float))


def bucket_counts(counts: pd.Series) -> pd.Series:
    """
    Map record counts onto the six ordered choropleth buckets.

    Args:
        counts: Non-negative counts

    Returns:
        Ordered categorical series of bucket labels
    """
    return pd.cut(
        counts,
        bins=list(BUCKET_EDGES),
        labels=list(BUCKET_LABELS),
        right=False,
        ordered=True,
    )


def _state_predicate(cand_state: pd.Series, excluded: Sequence[str]) -> pd.Series:
    # Keep-filter on the candidate state, one != test per excluded code (AND-ed).
    keep = pd.Series(True, index=cand_state.index)
    for state in excluded:
        keep &= cand_state != state
    return keep


def _empty(columns: Mapping[str, str]) -> pd.DataFrame:
    return pd.DataFrame({name: pd.Series(dtype=dtype) for name, dtype in columns.items()})


# ============================================================================
# AGGREGATIONS
# ============================================================================
def top_parties(records: pd.DataFrame, k: int = DEFAULT_TOP_K) -> pd.DataFrame:
    """
    Count distinct candidates per party and keep the ``k`` largest.

    Candidates are deduplicated by name (first occurrence wins) before
    counting. Ties keep the order in which the party label was first seen.

    Args:
        records: Candidate records
        k: Number of parties to keep

    Returns:
        DataFrame with columns ``party``, ``count``

    Example:
        >>> top_parties(data.records, k=3)
          party  count
        0   DEM   ...
    """
    if k <= 0:
        return _empty({"party": "object", "count": "int64"})

    named = records.loc[records["cand_name"].notna(), ["cand_name", "party"]]
    unique = named.drop_duplicates(subset="cand_name", keep="first")
    unique = unique[unique["party"].notna()]

    counts = unique.groupby("party", sort=False).size()
    if counts.empty:
        return _empty({"party": "object", "count": "int64"})

    out = pd.DataFrame({
        "party": counts.index.to_numpy(dtype=object),
        "count": counts.to_numpy(dtype="int64"),
        "seen": np.arange(len(counts)),
    })
    out = out.sort_values(["count", "seen"], ascending=[False, True]).head(k)
    return out.drop(columns="seen").reset_index(drop=True)


def contribution_density(records: pd.DataFrame) -> pd.Series:
    """
    Apply ``asinh`` to every numeric individual-contribution value.

    Zero and negative values are kept; density estimation happens in the
    encoder.

    Args:
        records: Candidate records

    Returns:
        Series ``asinh_contrib`` aligned to the surviving rows
    """
    values = pd.to_numeric(records["indiv_contrib"], errors="coerce")
    values = values[np.isfinite(values)]
    return pd.Series(asinh(values.to_numpy()), index=values.index,
                     name="asinh_contrib", dtype=float)


def loan_by_state(records: pd.DataFrame,
                  states: Sequence[str] = DEFAULT_LOAN_STATES,
                  year: str = DEFAULT_LOAN_YEAR) -> pd.DataFrame:
    """
    Log total loans for candidates running in ``states`` during ``year``.

    A row qualifies when its office state is in ``states``, its total loan
    is positive and its coverage end date string contains ``year``.

    Args:
        records: Candidate records
        states: Office states to keep
        year: Literal substring searched in the coverage end date

    Returns:
        DataFrame with columns ``state``, ``log_loan`` (natural log)
    """
    loans = pd.to_numeric(records["total_loan"], errors="coerce")
    end_dates = records["cov_end_date"].astype(object)

    mask = (
        records["office_state"].isin(list(states))
        & (loans > 0)
        & end_dates.str.contains(str(year), regex=False, na=False).astype(bool)
    )
    if not mask.any():
        return _empty({"state": "object", "log_loan": "float64"})

    return pd.DataFrame({
        "state": records.loc[mask, "office_state"].to_numpy(dtype=object),
        "log_loan": np.log(loans[mask].to_numpy(dtype=float)),
    })


def end_year_counts(records: pd.DataFrame) -> pd.DataFrame:
    """
    Count records per coverage end year, keeping years seen more than once.

    Dates are parsed as month/day/year; unparseable dates are dropped.

    Args:
        records: Candidate records

    Returns:
        DataFrame with columns ``year``, ``count`` ordered by year
    """
    dates = pd.to_datetime(records["cov_end_date"].astype(object),
                           format=DATE_FORMAT, errors="coerce")
    years = dates.dt.year.dropna().astype("int64")

    counts = years.value_counts().sort_index()
    counts = counts[counts > 1]
    if counts.empty:
        return _empty({"year": "int64", "count": "int64"})

    return pd.DataFrame({
        "year": counts.index.to_numpy(dtype="int64"),
        "count": counts.to_numpy(dtype="int64"),
    })


def office_state_counts(records: pd.DataFrame,
                        excluded: Sequence[str] = DEFAULT_EXCLUDED_STATES) -> pd.DataFrame:
    """
    Count records per office state and bucket the counts.

    Args:
        records: Candidate records
        excluded: Candidate states combined into the keep-predicate
            ``cand_state != excluded[0] and cand_state != excluded[1] ...``

    Returns:
        DataFrame with columns ``state``, ``count``, ``bucket`` (ordered categorical)
    """
    keep = _state_predicate(records["cand_state"], excluded)
    keep &= records["office_state"].notna()

    counts = records.loc[keep].groupby("office_state").size()
    if counts.empty:
        out = _empty({"state": "object", "count": "int64"})
        out["bucket"] = pd.Categorical([], categories=list(BUCKET_LABELS), ordered=True)
        return out

    out = pd.DataFrame({
        "state": counts.index.to_numpy(dtype=object),
        "count": counts.to_numpy(dtype="int64"),
    })
    out["bucket"] = bucket_counts(out["count"])
    return out


def log_end_year_counts(year_counts: pd.DataFrame) -> pd.DataFrame:
    """Same years as :func:`end_year_counts`, each count replaced by ln(count)."""
    out = year_counts.copy()
    out["count"] = np.log(out["count"].astype(float))
    return out


def dark_office_state_counts(state_counts: pd.DataFrame) -> pd.DataFrame:
    """Copy of :func:`office_state_counts`; only the colour scale differs downstream."""
    return state_counts.copy()


# ============================================================================
# AGGREGATE BUNDLE
# ============================================================================
@dataclass
class AggregateBundle:
    """
    Container for all computed aggregates.

    A ``None`` entry means the aggregation failed; the reason is kept in
    ``failures`` under the same key.

    Attributes:
        top_parties: Distinct candidates per party (top k)
        contribution_density: asinh of individual contributions
        loan_by_state: ln(total loan) per selected state
        end_year_counts: Records per coverage end year (count > 1)
        office_state_counts: Records per office state, bucketed
        log_end_year_counts: end_year_counts with ln(count)
        dark_office_state_counts: office_state_counts, re-encoded
        failures: Aggregate name -> error message
    """
    top_parties: Optional[pd.DataFrame] = None
    contribution_density: Optional[pd.Series] = None
    loan_by_state: Optional[pd.DataFrame] = None
    end_year_counts: Optional[pd.DataFrame] = None
    office_state_counts: Optional[pd.DataFrame] = None
    log_end_year_counts: Optional[pd.DataFrame] = None
    dark_office_state_counts: Optional[pd.DataFrame] = None
    failures: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Log aggregate availability."""
        LOGGER.info("AggregateBundle computed:")
        for name, value in self.items():
            if value is None:
                LOGGER.info("  %-26s FAILED", name)
            else:
                LOGGER.info("  %-26s %d rows", name, len(value))

    def get(self, name: str) -> Any:
        """Return the aggregate stored under ``name`` (None if failed)."""
        return getattr(self, name, None)

    def items(self):
        """Yield ``(name, aggregate)`` in report order."""
        for name in AGGREGATE_NAMES:
            yield name, getattr(self, name)


AGGREGATE_NAMES = (
    "top_parties",
    "contribution_density",
    "loan_by_state",
    "end_year_counts",
    "office_state_counts",
    "log_end_year_counts",
    "dark_office_state_counts",
)


# ============================================================================
# COMPUTATION FUNCTIONS
# ============================================================================
def _run(name: str, failures: Dict[str, str], fn: Callable, *args, **kwargs):
    try:
        result = fn(*args, **kwargs)
    except Exception as e:
        LOGGER.error("✗ %s failed: %s", name, e, exc_info=True)
        failures[name] = f"{type(e).__name__}: {e}"
        return None
    LOGGER.info("✓ %s: %d rows", name, len(result))
    return result


def compute_all_aggregates(data: CandidateData,
                           cfg: Optional[Mapping[str, Any]] = None) -> AggregateBundle:
    """
    Compute all seven aggregates for report generation.

    A failing aggregation is logged and recorded; the others still run.
    The two re-encoded variants are skipped when their source failed.

    Args:
        data: CandidateData with loaded records
        cfg: Configuration dict (``aggregations`` section is read)

    Returns:
        AggregateBundle with all computed aggregates

    Example:
        >>> data = load_candidate_data(Path("candidate_summary_2020.csv"))
        >>> aggregates = compute_all_aggregates(data, get_config())
        >>> print(aggregates.top_parties)
    """
    cfg = cfg or {}
    records = data.records
    failures: Dict[str, str] = {}

    k = int(get_section(cfg, "aggregations.top_parties.k", DEFAULT_TOP_K))
    states = tuple(get_section(cfg, "aggregations.loan_by_state.states", DEFAULT_LOAN_STATES))
    year = str(get_section(cfg, "aggregations.loan_by_state.year", DEFAULT_LOAN_YEAR))
    excluded = tuple(get_section(cfg, "aggregations.office_state.excluded_states",
                                 DEFAULT_EXCLUDED_STATES))

    LOGGER.info("Computing aggregates over %d records", len(records))

    # ========================================================================
    # 1-5. AGGREGATES OVER THE RECORD SET
    # ========================================================================
    parties = _run("top_parties", failures, top_parties, records, k=k)
    density = _run("contribution_density", failures, contribution_density, records)
    loans = _run("loan_by_state", failures, loan_by_state, records, states=states, year=year)
    years = _run("end_year_counts", failures, end_year_counts, records)
    state_counts = _run("office_state_counts", failures, office_state_counts,
                        records, excluded=excluded)

    # ========================================================================
    # 6-7. RE-ENCODED VARIANTS
    # ========================================================================
    log_years = None
    if years is not None:
        log_years = _run("log_end_year_counts", failures, log_end_year_counts, years)
    else:
        failures["log_end_year_counts"] = "end_year_counts unavailable"

    dark_states = None
    if state_counts is not None:
        dark_states = _run("dark_office_state_counts", failures,
                           dark_office_state_counts, state_counts)
    else:
        failures["dark_office_state_counts"] = "office_state_counts unavailable"

    return AggregateBundle(
        top_parties=parties,
        contribution_density=density,
        loan_by_state=loans,
        end_year_counts=years,
        office_state_counts=state_counts,
        log_end_year_counts=log_years,
        dark_office_state_counts=dark_states,
        failures=failures,
    )


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================
def summarize_aggregate_bundle(aggregates: AggregateBundle) -> str:
    """
    Create human-readable summary of the aggregate bundle.

    Args:
        aggregates: AggregateBundle to summarize

    Returns:
        Multi-line summary string
    """
    lines = ["Aggregate Bundle Summary", ""]
    for name, value in aggregates.items():
        if value is None:
            reason = aggregates.failures.get(name, "not computed")
            lines.append(f"  {name:26s}  ✗ {reason}")
        else:
            lines.append(f"  {name:26s}  {len(value):6d} rows")
    return "\n".join(lines)
