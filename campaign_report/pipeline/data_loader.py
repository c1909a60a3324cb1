#!/usr/bin/env python3
"""
Data loader for the campaign finance report.

Thin wrapper around ``core.io.load_candidate_summary``.

Provides:
- CandidateRecord: One immutable row of the candidate summary
- CandidateData: Container for the loaded record set
- load_candidate_data(): Single entry point to load everything
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Iterator, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from core.io import load_candidate_summary

LOGGER = logging.getLogger(__name__)


# ============================================================================
# RECORDS
# ============================================================================
@dataclass(frozen=True)
class CandidateRecord:
    """
    One row of the candidate summary, restricted to the report columns.

    Money fields are ``None`` when the source value was not numeric.
    """
    cand_name: Optional[str]
    party: Optional[str]
    office_state: Optional[str]
    cand_state: Optional[str]
    indiv_contrib: Optional[float]
    total_loan: Optional[float]
    cov_end_date: Optional[str]


def _text_or_none(value) -> Optional[str]:
    return None if pd.isna(value) else str(value)


def _number_or_none(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


# ============================================================================
# DATA BUNDLE
# ============================================================================
@dataclass(frozen=True)
class CandidateData:
    """
    Container for the loaded candidate summary.

    Attributes:
        source: Path of the file that was read
        records: Candidate summary (source columns + canonical report columns)
    """
    source: Path
    records: pd.DataFrame

    def __post_init__(self):
        """Log data sizes."""
        LOGGER.info("CandidateData loaded:")
        LOGGER.info("  Source:        %s", self.source)
        LOGGER.info("  Records:       %d rows x %d columns",
                    len(self.records), len(self.records.columns))
        LOGGER.info("  Candidates:    %d distinct names", self.n_candidates)

    @property
    def n_records(self) -> int:
        """Number of rows in the file."""
        return len(self.records)

    @property
    def n_candidates(self) -> int:
        """Number of distinct candidate names."""
        return int(self.records["cand_name"].nunique(dropna=True))

    @property
    def is_empty(self) -> bool:
        return self.records.empty

    def iter_records(self) -> Iterator[CandidateRecord]:
        """Yield the report columns of every row, in file order."""
        columns = [f.name for f in fields(CandidateRecord)]
        for row in self.records[columns].itertuples(index=False):
            yield CandidateRecord(
                cand_name=_text_or_none(row.cand_name),
                party=_text_or_none(row.party),
                office_state=_text_or_none(row.office_state),
                cand_state=_text_or_none(row.cand_state),
                indiv_contrib=_number_or_none(row.indiv_contrib),
                total_loan=_number_or_none(row.total_loan),
                cov_end_date=_text_or_none(row.cov_end_date),
            )


# ============================================================================
# LOADING FUNCTIONS
# ============================================================================
def load_candidate_data(path: Path,
                        columns: Optional[Mapping[str, Sequence[str]]] = None,
                        sep: str = ",",
                        encoding: str = "utf-8") -> CandidateData:
    """
    Load the candidate summary for report generation.

    Args:
        path: Delimited file with a header row
        columns: Optional logical column -> header aliases overrides
        sep: Field delimiter
        encoding: File encoding

    Returns:
        CandidateData with the loaded records

    Raises:
        ParseError: If the file is missing, malformed or lacks a required column

    Example:
        >>> data = load_candidate_data(Path("candidate_summary_2020.csv"))
        >>> print(data.n_records, "records")
    """
    path = Path(path)
    LOGGER.info("Loading candidate summary: %s", path)

    records = load_candidate_summary(path, columns=columns, sep=sep, encoding=encoding)

    n_bad_contrib = int(records["indiv_contrib"].isna().sum())
    n_bad_loan = int(records["total_loan"].isna().sum())
    if n_bad_contrib or n_bad_loan:
        LOGGER.warning("Non-numeric amounts: %d contribution(s), %d loan(s)",
                       n_bad_contrib, n_bad_loan)

    return CandidateData(source=path, records=records)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================
def summarize_candidate_data(data: CandidateData) -> str:
    """
    Create human-readable summary of the loaded data.

    Args:
        data: CandidateData to summarize

    Returns:
        Multi-line summary string
    """
    df = data.records
    contrib = df["indiv_contrib"]
    lines = [
        "Candidate Data Summary",
        f"  Source:          {data.source}",
        "",
        f"  Records:         {data.n_records:8d}",
        f"  Candidates:      {data.n_candidates:8d}",
        f"  Parties:         {df['party'].nunique(dropna=True):8d}",
        f"  Office states:   {df['office_state'].nunique(dropna=True):8d}",
        f"  Contributions:   {int(contrib.notna().sum()):8d} numeric"
        f"  (total ${np.nansum(contrib.to_numpy()):,.0f})",
        f"  Loans > 0:       {int((df['total_loan'] > 0).sum()):8d}",
    ]
    return "\n".join(lines)
