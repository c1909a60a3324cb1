#!/usr/bin/env python3
"""
Opening block of the report: title, source line, introduction and a small
box of dataset counts.
"""
from xml.sax.saxutils import escape

from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, Spacer

from campaign_report.core.pdf_section_registry import Section, SectionConfig, SECTION_REGISTRY
from campaign_report.core.pdf_styles import REPORT_TITLE, style_body, style_subtitle, style_title
from campaign_report.rendering.pdf_tables import create_info_table

INTRODUCTION = (
    "This report summarises the Federal Election Commission candidate summary "
    "file: one row per candidate committee and reporting period, with receipts, "
    "loans and coverage dates. Five charts describe the field of candidates, how "
    "much they raised from individuals, how much they borrowed and where they ran. "
    "The last two charts redraw earlier figures with deliberately poor encodings "
    "to show how a chart can mislead without any change to the underlying data."
)


def dataset_facts(data, chart_count: int, enabled_count: int) -> dict:
    """Label -> value rows for the info box; data may be None."""
    facts = {}
    if data is not None:
        facts['Records'] = f"{data.n_records:,}"
        facts['Distinct candidates'] = f"{data.n_candidates:,}"
        facts['Party affiliations'] = data.records['party'].nunique(dropna=True)
        facts['Office states'] = data.records['office_state'].nunique(dropna=True)
    facts['Charts rendered'] = f"{chart_count} / {enabled_count}"
    return facts


class HeaderSection(Section):

    def render(self, context):
        data = context.data
        source = escape(data.source.name) if data is not None else "-"
        facts = dataset_facts(data, len(context.chart_paths), len(context.enabled_charts))
        return [
            Paragraph(REPORT_TITLE, style_title),
            Paragraph(f"<b>Source:</b> {source} | <b>Generated:</b> {context.generated}",
                      style_subtitle),
            Paragraph(INTRODUCTION, style_body),
            Spacer(1, 0.5 * cm),
            create_info_table(facts),
            Spacer(1, 1 * cm),
        ]

    def get_bookmark_title(self):
        return "Header"


SECTION_REGISTRY.register(HeaderSection(SectionConfig(name="header", title="Report Header", order=0)))
