#!/usr/bin/env python3
"""
Data Appendix section.

Renders the small aggregates behind the charts as tables:
- Top parties
- Records per coverage end year (with ln)
- Office states per count range
- Log loans per state
- Charts that could not be produced
"""
from typing import Optional
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.platypus import Paragraph, Spacer
from reportlab.lib.units import cm

from campaign_report.core.pdf_section_registry import Section, SectionConfig, SECTION_REGISTRY
from campaign_report.core.pdf_styles import style_h1, style_h2, style_body
from campaign_report.pipeline.aggregations import BUCKET_LABELS
from campaign_report.rendering.pdf_tables import create_aggregate_table


def year_table(year_counts: pd.DataFrame,
               log_year_counts: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    """Year counts next to the ln(count) plotted by the log-scale chart.

    ``ln_count`` is taken from the ``log_end_year_counts`` aggregate and left
    out when that aggregate is unavailable.
    """
    out = year_counts[['year', 'count']].copy()
    if log_year_counts is not None:
        out['ln_count'] = out['year'].map(log_year_counts.set_index('year')['count'])
    out['year'] = out['year'].astype(str)
    return out


def bucket_table(state_counts: pd.DataFrame) -> pd.DataFrame:
    """Number of states and records falling in each count range."""
    grouped = state_counts.groupby('bucket', observed=False).agg(
        states=('state', 'count'),
        records=('count', 'sum'),
    )
    grouped = grouped.reindex(list(BUCKET_LABELS), fill_value=0)
    return grouped.rename_axis('range').reset_index()


def loan_table(loans: pd.DataFrame) -> pd.DataFrame:
    """Loan count and median ln(loan) per state."""
    grouped = loans.groupby('state', sort=False)['log_loan'].agg(['count', 'median'])
    return grouped.rename(columns={'median': 'median_ln_loan'}).reset_index()


class DataAppendixSection(Section):
    """Aggregate tables."""

    def render(self, context):
        """
        Render all aggregate tables.

        Args:
            context: RenderContext with aggregates bundle

        Returns:
            List of Flowables
        """
        flowables = [Paragraph("Data Appendix", style_h1)]
        aggregates = context.aggregates

        if aggregates is None:
            flowables.append(Paragraph("<i>No aggregates available.</i>", style_body))
            return flowables

        # ====================================================================
        # 1. TOP PARTIES
        # ====================================================================
        if aggregates.top_parties is not None and not aggregates.top_parties.empty:
            flowables.extend(create_aggregate_table(
                aggregates.top_parties,
                title="Distinct Candidates by Party",
                headers={'party': 'Party', 'count': 'Candidates'},
            ))
            flowables.append(Spacer(1, 0.6 * cm))

        # ====================================================================
        # 2. COVERAGE END YEAR
        # ====================================================================
        if aggregates.end_year_counts is not None and not aggregates.end_year_counts.empty:
            flowables.extend(create_aggregate_table(
                year_table(aggregates.end_year_counts, aggregates.log_end_year_counts),
                title="Records by Coverage End Year",
                headers={'year': 'Year', 'count': 'Records', 'ln_count': 'ln(records)'},
            ))
            flowables.append(Spacer(1, 0.6 * cm))

        # ====================================================================
        # 3. OFFICE STATE RANGES
        # ====================================================================
        if aggregates.office_state_counts is not None and not aggregates.office_state_counts.empty:
            flowables.extend(create_aggregate_table(
                bucket_table(aggregates.office_state_counts),
                title="Office States by Record Count",
                headers={'range': 'Records per state', 'states': 'States', 'records': 'Records'},
            ))
            flowables.append(Spacer(1, 0.6 * cm))

        # ====================================================================
        # 4. LOANS
        # ====================================================================
        if aggregates.loan_by_state is not None and not aggregates.loan_by_state.empty:
            flowables.extend(create_aggregate_table(
                loan_table(aggregates.loan_by_state),
                title="Candidate Loans (2020)",
                headers={'state': 'State', 'count': 'Loans', 'median_ln_loan': 'Median ln(loan)'},
            ))
            flowables.append(Spacer(1, 0.6 * cm))

        # ====================================================================
        # 5. FAILURES
        # ====================================================================
        failures = dict(aggregates.failures)
        failures.update(context.chart_failures)
        if failures:
            flowables.append(Paragraph("Charts Not Produced", style_h2))
            for name, reason in failures.items():
                flowables.append(Paragraph(f"<b>{name}</b>: {escape(reason)}", style_body))

        return flowables

    def get_bookmark_title(self):
        return "Data Appendix"


# ============================================================================
# AUTO-REGISTER
# ============================================================================
SECTION_REGISTRY.register(
    DataAppendixSection(
        SectionConfig(
            name="data_appendix",
            title="Data Appendix",
            order=100,  # After all charts
            enabled=True,
            page_break_before=True,
        )
    )
)
