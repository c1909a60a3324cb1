#!/usr/bin/env python3
"""
Chart configuration registry.

Provides:
- ChartConfig dataclass for chart metadata (title, caption, order)
- Central CHART_CONFIGS registry keyed by chart id
- Helpers to apply ``charts.<id>.enabled`` switches from the YAML config

Captions are fixed prose written against the 2020 candidate summary; they
are never generated from the data.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional
import logging

LOGGER = logging.getLogger(__name__)


# ============================================================================
# CHART CONFIGURATION
# ============================================================================
@dataclass(frozen=True)
class ChartConfig:
    """
    Configuration for a single chart.

    Attributes:
        chart_id: Unique chart identifier, also the aggregate name and PNG stem
        title: Section heading and figure title
        caption: Literal caption printed under the figure
        order: Sort order (lower = earlier in report)
        misleading: Deliberately distorting encoding of a faithful chart
        source_chart: Chart whose aggregate this one re-encodes
        enabled: Whether the chart is rendered
    """
    chart_id: str
    title: str
    caption: str
    order: int
    misleading: bool = False
    source_chart: Optional[str] = None
    enabled: bool = True

    @property
    def filename(self) -> str:
        return f"{self.chart_id}.png"


# ============================================================================
# CAPTIONS
# ============================================================================
CAPTIONS: Dict[str, str] = {
    "top_parties": (
        "Figure 1: Number of distinct candidates for the five most common party "
        "affiliations. Each candidate is counted once, however many reporting "
        "periods they filed. Democratic and Republican candidates make up the "
        "overwhelming majority of the field; every other affiliation, independents "
        "and Libertarians included, fields only a small fraction of that number."
    ),
    "contribution_density": (
        "Figure 2: Density of individual contributions after an inverse hyperbolic "
        "sine transform. The transform behaves like a logarithm for large amounts "
        "but keeps the many zero-contribution filings on the chart. The tall spike "
        "at zero shows how many committees report no individual money at all, while "
        "the second hump marks the typical fundraising range of competitive campaigns."
    ),
    "loan_by_state": (
        "Figure 3: Natural log of total loans for 2020 filings in the five largest "
        "states, with every individual loan drawn as a point over its violin. Loan "
        "sizes span several orders of magnitude in every state; the medians sit "
        "close together, so the differences between states are driven by a handful "
        "of very large self-funded loans rather than by the typical candidate."
    ),
    "end_year_counts": (
        "Figure 4: Number of summary records by the year their coverage period "
        "ended. Almost all filings close in the election year itself; earlier years "
        "are stragglers from committees that stopped reporting. Years represented "
        "by a single record are omitted."
    ),
    "office_state_counts": (
        "Figure 5: Number of summary records per office state, grouped into six "
        "ranges. Populous states with large House delegations, led by California, "
        "Texas and Florida, fall into the top ranges, while small states with a "
        "single at-large seat stay below 400 records."
    ),
    "log_end_year_counts": (
        "Figure 6: The data of Figure 4 with each count replaced by its natural "
        "logarithm. The log scale flattens the election-year peak so that a year "
        "with thousands of filings looks only a few times larger than a year with "
        "a dozen. Nothing in the data changed; only the encoding did, and it "
        "suggests a steady stream of filings that does not exist."
    ),
    "dark_office_state_counts": (
        "Figure 7: The data of Figure 5 drawn with a narrow, dark colour scale. "
        "Adjacent ranges differ only slightly in shade, so the map reads as nearly "
        "uniform and the concentration of candidates in a few large states "
        "disappears. The counts are identical to Figure 5."
    ),
}


# ============================================================================
# CHART REGISTRY
# ============================================================================
CHART_CONFIGS: Dict[str, ChartConfig] = {
    "top_parties": ChartConfig(
        chart_id="top_parties",
        title="Candidates by Party",
        caption=CAPTIONS["top_parties"],
        order=10,
    ),
    "contribution_density": ChartConfig(
        chart_id="contribution_density",
        title="Individual Contributions",
        caption=CAPTIONS["contribution_density"],
        order=20,
    ),
    "loan_by_state": ChartConfig(
        chart_id="loan_by_state",
        title="Candidate Loans in Five Large States (2020)",
        caption=CAPTIONS["loan_by_state"],
        order=30,
    ),
    "end_year_counts": ChartConfig(
        chart_id="end_year_counts",
        title="Coverage End Year",
        caption=CAPTIONS["end_year_counts"],
        order=40,
    ),
    "office_state_counts": ChartConfig(
        chart_id="office_state_counts",
        title="Records per Office State",
        caption=CAPTIONS["office_state_counts"],
        order=50,
    ),
    "log_end_year_counts": ChartConfig(
        chart_id="log_end_year_counts",
        title="Coverage End Year (Log Scale)",
        caption=CAPTIONS["log_end_year_counts"],
        order=60,
        misleading=True,
        source_chart="end_year_counts",
    ),
    "dark_office_state_counts": ChartConfig(
        chart_id="dark_office_state_counts",
        title="Records per Office State (Dark Scale)",
        caption=CAPTIONS["dark_office_state_counts"],
        order=70,
        misleading=True,
        source_chart="office_state_counts",
    ),
}


# ============================================================================
# HELPERS
# ============================================================================
def get_chart_configs(cfg: Optional[Mapping[str, Any]] = None) -> List[ChartConfig]:
    """
    Return all chart configs in report order, with ``enabled`` taken from cfg.

    Args:
        cfg: Configuration dict; ``charts.<chart_id>.enabled`` overrides the default

    Returns:
        List of ChartConfig sorted by order
    """
    charts_cfg = (cfg or {}).get("charts", {}) or {}
    configs = []
    for chart_id, chart in CHART_CONFIGS.items():
        enabled = (charts_cfg.get(chart_id) or {}).get("enabled", chart.enabled)
        if not enabled:
            LOGGER.debug("Chart disabled by config: %s", chart_id)
        configs.append(replace(chart, enabled=bool(enabled)))
    unknown = set(charts_cfg) - set(CHART_CONFIGS)
    if unknown:
        LOGGER.warning("Ignoring unknown chart ids in config: %s", sorted(unknown))
    return sorted(configs, key=lambda c: c.order)


def get_enabled_chart_configs(cfg: Optional[Mapping[str, Any]] = None) -> List[ChartConfig]:
    """Return enabled chart configs in report order."""
    return [c for c in get_chart_configs(cfg) if c.enabled]
