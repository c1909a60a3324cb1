# test_foundation.py
"""
Test foundation modules: styles, section registry, chart configuration.

Run with: pytest campaign_report/core/test_foundation.py -v
"""
import pytest
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer
from reportlab.lib.units import cm

from campaign_report.core.pdf_styles import *
from campaign_report.core.pdf_section_registry import *
from campaign_report.core.chart_config import *


def test_palette_and_styles():
    """Palette keys and paragraph styles used by the sections exist."""
    for key in ('primary', 'secondary', 'warning', 'background_light', 'background_warning', 'border'):
        assert key in COLORS
    for style in (style_title, style_subtitle, style_h1, style_h2, style_body, style_caption, style_note):
        assert style.fontSize > 0
    assert CONTENT_WIDTH < PAGE_WIDTH


def test_registry_register_and_order():
    """Sections come back enabled-only and sorted by order."""
    registry = SectionRegistry()

    class TextSection(Section):
        def render(self, context):
            return [Paragraph(self.config.title, style_body)]

    registry.register(TextSection(SectionConfig(name="late", title="Late", order=50)))
    registry.register(TextSection(SectionConfig(name="early", title="Early", order=5)))
    registry.register(TextSection(SectionConfig(name="off", title="Off", order=1, enabled=False)))

    assert len(registry) == 3
    assert "early" in registry
    assert [s.config.name for s in registry.get_enabled_sections()] == ["early", "late"]

    with pytest.raises(ValueError):
        registry.register(TextSection(SectionConfig(name="late", title="Again")))

    registry.unregister("late")
    assert registry.list_all() == ["early", "off"]
    assert registry.get("late") is None


def test_section_config_validation():
    with pytest.raises(ValueError):
        SectionConfig(name="", title="No name")
    with pytest.raises(ValueError):
        SectionConfig(name="neg", title="Negative", order=-1)


def test_chart_registry():
    """Seven charts, captions numbered in report order, two misleading re-encodings."""
    charts = get_chart_configs()

    assert len(charts) == len(CHART_CONFIGS) == 7
    assert [c.order for c in charts] == sorted(c.order for c in charts)
    assert charts[0].filename == 'top_parties.png'

    for number, chart in enumerate(charts, start=1):
        assert chart.caption.startswith(f"Figure {number}:")

    misleading = {c.chart_id: c.source_chart for c in charts if c.misleading}
    assert misleading == {
        'log_end_year_counts': 'end_year_counts',
        'dark_office_state_counts': 'office_state_counts',
    }


def test_chart_enabled_switches():
    cfg = {'charts': {'loan_by_state': {'enabled': False}, 'unknown_chart': {'enabled': True}}}

    enabled = [c.chart_id for c in get_enabled_chart_configs(cfg)]

    assert 'loan_by_state' not in enabled
    assert len(enabled) == 6
    # Registry defaults untouched
    assert CHART_CONFIGS['loan_by_state'].enabled


def test_styled_pdf_builds(tmp_path):
    """All styles and the running header render into a valid PDF."""
    output = tmp_path / "styles.pdf"

    doc = SimpleDocTemplate(str(output), pagesize=A4,
                            leftMargin=MARGIN_LEFT, rightMargin=MARGIN_RIGHT,
                            topMargin=MARGIN_TOP, bottomMargin=MARGIN_BOTTOM)
    story = [
        Paragraph(REPORT_TITLE, style_title),
        Paragraph("Source: summary.csv", style_subtitle),
        Spacer(1, 0.5 * cm),
        Paragraph("Section Heading", style_h1),
        Paragraph("Body text goes here.", style_body),
        Paragraph("Figure 1: caption text.", style_caption),
        Paragraph("Misleading encoding.", style_note),
    ]
    template = create_page_template_function("summary.csv", "2020-12-31 12:00 UTC")
    doc.build(story, onFirstPage=template, onLaterPages=template)

    assert output.read_bytes().startswith(b"%PDF")
