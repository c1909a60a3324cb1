"""Centralised CSV I/O for the candidate summary file.

Every read goes through here so the pipeline modules focus on the
aggregation logic.  The helpers are intentionally lightweight: the loader
enforces the minimal schema the report relies on and applies the usual
fallbacks for header spelling and money formatting.
"""

from pathlib import Path

import pandas as pd


class ParseError(ValueError):
    """Raised when the input file is missing, unreadable or lacks a required column."""


# Logical column -> accepted header names, matched case-insensitively.
DEFAULT_COLUMNS = {
    "cand_name": ["can_nam", "cand_name", "candidate_name"],
    "party": ["can_par_aff", "cand_pty_affiliation", "cand_party_affiliation", "party"],
    "office_state": ["can_off_sta", "cand_office_st", "office_state"],
    "cand_state": ["can_sta", "cand_state", "cand_st"],
    "indiv_contrib": ["ind_con", "ttl_indiv_contrib", "individual_contribution"],
    "total_loan": ["tot_loa", "total_loan", "ttl_loans"],
    "cov_end_date": ["cov_end_dat", "cvg_end_dt", "coverage_end_date"],
}

STRING_COLUMNS = ("cand_name", "party", "office_state", "cand_state")
MONEY_COLUMNS = ("indiv_contrib", "total_loan")
DATE_COLUMNS = ("cov_end_date",)


# ---------------------------------------------------------------------------
# Generic utilities
# ---------------------------------------------------------------------------

def _normalise(df):
    """Strip column names and keep a lowercase lookup."""

    df.columns = [str(c).strip() for c in df.columns]
    return {c.lower(): c for c in df.columns}


def _pick(df, lookup, aliases, required=False):
    for name in aliases:
        if name in df.columns:
            return name
        low = name.lower()
        if low in lookup:
            return lookup[low]
    if required:
        raise ParseError("missing columns: %s" % (list(aliases),))
    return None


def to_money(values):
    """Parse ``$1,234.50``-style strings; anything unparseable becomes NaN."""

    if pd.api.types.is_numeric_dtype(values):
        return pd.to_numeric(values, errors="coerce").astype(float)
    cleaned = (
        values.astype(object).where(values.notna(), "")
        .astype(str)
        .str.replace(r"[\$,\s]", "", regex=True)
        .str.replace(r"^\((.*)\)$", r"-\1", regex=True)
    )
    return pd.to_numeric(cleaned, errors="coerce").astype(float)


def _clean_text(values):
    text = values.astype(object).str.strip()
    return text.mask(text == "")


# ---------------------------------------------------------------------------
# Candidate summary
# ---------------------------------------------------------------------------

def load_candidate_summary(path, columns=None, sep=",", encoding="utf-8"):
    """Return the candidate summary with canonical report columns added.

    ``columns`` maps logical names (see :data:`DEFAULT_COLUMNS`) to alias
    lists; entries missing from it fall back to the defaults.  Every source
    column is kept; the canonical ones are appended under their logical name.
    """

    path = Path(path)
    if not path.exists():
        raise ParseError(f"Input file not found: {path}")
    if not path.is_file():
        raise ParseError(f"Input path is not a file: {path}")

    try:
        df = pd.read_csv(path, sep=sep, encoding=encoding, dtype=str,
                         keep_default_na=True, skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot parse {path.name}: {e}") from e

    aliases = dict(DEFAULT_COLUMNS)
    aliases.update(columns or {})

    lookup = _normalise(df)
    resolved = {
        logical: _pick(df, lookup, names, required=True)
        for logical, names in aliases.items()
    }

    for logical in STRING_COLUMNS:
        df[logical] = _clean_text(df[resolved[logical]])
    for logical in MONEY_COLUMNS:
        df[logical] = to_money(df[resolved[logical]])
    for logical in DATE_COLUMNS:
        df[logical] = _clean_text(df[resolved[logical]])

    df["office_state"] = df["office_state"].str.upper()
    df["cand_state"] = df["cand_state"].str.upper()

    df.attrs["source"] = str(path)
    df.attrs["resolved_columns"] = resolved
    return df.reset_index(drop=True)
