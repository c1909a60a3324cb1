#!/usr/bin/env python3
"""
Complete test for PDF registry pattern (pytest version).
"""
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from PIL import Image as PILImage

# Setup paths
REPO = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO))

from reportlab.platypus import Paragraph, PageBreak, Image

from campaign_report.core.chart_config import CHART_CONFIGS
from campaign_report.core.pdf_section_registry import (
    SECTION_REGISTRY, RenderContext, Section, SectionConfig, SectionRegistry,
)
from campaign_report.core.pdf_styles import style_body
from campaign_report.pipeline.aggregations import (
    AggregateBundle, BUCKET_LABELS, bucket_counts, log_end_year_counts,
)
from campaign_report.pipeline.section_renderer import SectionRenderer
from campaign_report.rendering.pdf_tables import create_aggregate_table, create_info_table

# Import sections (triggers auto-registration)
import campaign_report.pdf_sections
from campaign_report.pdf_sections.charts import misleading_note
from campaign_report.pdf_sections.data_appendix import bucket_table, loan_table, year_table


def make_context(chart_paths=None, chart_failures=None, aggregates=None, enabled=None):
    return RenderContext(
        data=None,
        aggregates=aggregates,
        chart_paths=chart_paths or {},
        config={},
        generated="2020-12-31 12:00 UTC",
        enabled_charts=list(CHART_CONFIGS) if enabled is None else enabled,
        chart_failures=chart_failures or {},
    )


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "chart.png"
    PILImage.new("RGB", (140, 80), "white").save(path)
    return path


def test_registry_populated():
    """Test that sections are auto-registered."""
    print("\n[TEST] Registry Status Check")
    print("-" * 70)

    assert "header" in SECTION_REGISTRY
    assert "data_appendix" in SECTION_REGISTRY
    for chart_id in CHART_CONFIGS:
        assert f"chart_{chart_id}" in SECTION_REGISTRY

    for section in SECTION_REGISTRY.get_enabled_sections():
        print(f"  [{section.config.order:3d}] {section.config.name}")


def test_sections_ordered():
    """Header first, charts in figure order, appendix last."""
    names = [s.config.name for s in SECTION_REGISTRY.get_enabled_sections()]

    expected_charts = [f"chart_{c.chart_id}"
                       for c in sorted(CHART_CONFIGS.values(), key=lambda c: c.order)]
    assert names[0] == "header"
    assert names[-1] == "data_appendix"
    assert [n for n in names if n.startswith("chart_")] == expected_charts


def test_chart_section_with_image(png_file):
    section = SECTION_REGISTRY.get("chart_top_parties")
    flowables = section.render(make_context(chart_paths={"top_parties": png_file}))

    assert any(isinstance(f, Image) for f in flowables)
    texts = [f.getPlainText() for f in flowables if isinstance(f, Paragraph)]
    assert any(t.startswith("Figure 1:") for t in texts)


def test_misleading_chart_gets_note(png_file):
    section = SECTION_REGISTRY.get("chart_log_end_year_counts")
    flowables = section.render(make_context(chart_paths={"log_end_year_counts": png_file}))

    note = misleading_note(CHART_CONFIGS["log_end_year_counts"])
    assert CHART_CONFIGS["end_year_counts"].title in note
    texts = [f.getPlainText() for f in flowables if isinstance(f, Paragraph)]
    assert any("Misleading encoding" in t for t in texts)


def test_chart_section_without_image():
    section = SECTION_REGISTRY.get("chart_loan_by_state")
    context = make_context(chart_failures={"loan_by_state": "no aggregate (KeyError: <x>)"})
    flowables = section.render(context)

    assert not any(isinstance(f, Image) for f in flowables)
    texts = [f.getPlainText() for f in flowables if isinstance(f, Paragraph)]
    assert any("Chart unavailable" in t for t in texts)


def test_disabled_chart_is_skipped():
    section = SECTION_REGISTRY.get("chart_loan_by_state")
    assert not section.validate(make_context(enabled=["top_parties"]))


def test_renderer_isolates_failures():
    """A section that raises is dropped; the rest still render."""
    registry = SectionRegistry()

    class GoodSection(Section):
        def render(self, context):
            return [Paragraph("Good", style_body)]

    class BadSection(Section):
        def render(self, context):
            raise RuntimeError("boom")

    registry.register(GoodSection(SectionConfig(name="first", title="First", order=1)))
    registry.register(BadSection(SectionConfig(name="bad", title="Bad", order=2,
                                               page_break_before=True)))
    registry.register(GoodSection(SectionConfig(name="last", title="Last", order=3,
                                                page_break_before=True)))

    renderer = SectionRenderer(registry)
    story = renderer.render_all(make_context())

    assert renderer.failures == {"bad": "boom"}
    assert len([f for f in story if isinstance(f, Paragraph)]) == 2
    assert len([f for f in story if isinstance(f, PageBreak)]) == 1


def test_data_appendix_tables():
    state_counts = pd.DataFrame({"state": ["CA", "TX", "WY"], "count": [2500, 900, 12]})
    state_counts["bucket"] = bucket_counts(state_counts["count"])

    buckets = bucket_table(state_counts)
    assert buckets["range"].tolist() == list(BUCKET_LABELS)
    assert buckets["states"].sum() == 3
    assert buckets["records"].sum() == 3412

    year_counts = pd.DataFrame({"year": [2019, 2020], "count": [3, 8]})
    years = year_table(year_counts, log_end_year_counts(year_counts))
    assert years["year"].tolist() == ["2019", "2020"]
    assert years["ln_count"].tolist() == pytest.approx([np.log(3), np.log(8)])

    # ln values come from the aggregate passed in
    stored = pd.DataFrame({"year": [2020, 2019], "count": [9.5, 1.25]})
    assert year_table(year_counts, stored)["ln_count"].tolist() == [1.25, 9.5]
    assert "ln_count" not in year_table(year_counts, None).columns

    loans = loan_table(pd.DataFrame({"state": ["CA", "CA", "TX"], "log_loan": [1.0, 3.0, 2.0]}))
    assert loans.set_index("state")["median_ln_loan"].to_dict() == {"CA": 2.0, "TX": 2.0}


def test_data_appendix_lists_failures():
    section = SECTION_REGISTRY.get("data_appendix")
    aggregates = AggregateBundle(failures={"end_year_counts": "KeyError: 'cov_end_date'"})
    context = make_context(aggregates=aggregates,
                           chart_failures={"top_parties": "export <failed> & more"})

    texts = [f.getPlainText() for f in section.render(context) if isinstance(f, Paragraph)]

    assert any("end_year_counts" in t for t in texts)
    assert any("top_parties" in t for t in texts)


def test_table_helpers_handle_empty_input():
    assert create_aggregate_table(pd.DataFrame()) == []
    assert create_info_table({}) is None

    flowables = create_aggregate_table(pd.DataFrame({"party": ["DEM"], "count": [3]}), title="Parties")
    assert len(flowables) == 2
