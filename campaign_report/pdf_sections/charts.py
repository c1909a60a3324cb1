#!/usr/bin/env python3
"""
Chart sections.

One section per entry of CHART_CONFIGS, in chart order. Each renders:
- Heading
- Exported chart image, scaled to page width
- Literal caption
- Warning note for the deliberately misleading encodings
"""
from xml.sax.saxutils import escape

from reportlab.platypus import Paragraph, Spacer
from reportlab.lib.units import cm

from campaign_report.core.chart_config import CHART_CONFIGS, ChartConfig
from campaign_report.core.pdf_section_registry import Section, SectionConfig, SECTION_REGISTRY
from campaign_report.core.pdf_styles import style_h1, style_body
from campaign_report.rendering.pdf_charts import create_figure_flowable


def misleading_note(chart: ChartConfig) -> str:
    source = CHART_CONFIGS.get(chart.source_chart)
    source_title = source.title if source else chart.source_chart
    return (f"Misleading encoding: same data as “{source_title}”, "
            f"drawn to distort the comparison.")


class ChartSection(Section):
    """Heading, figure and caption for one chart."""

    def __init__(self, chart: ChartConfig, config: SectionConfig):
        super().__init__(config)
        self.chart = chart

    def validate(self, context):
        return self.chart.chart_id in context.enabled_charts

    def render(self, context):
        """
        Render the chart with its caption.

        Args:
            context: RenderContext with chart_paths / chart_failures

        Returns:
            List of Flowables
        """
        chart = self.chart
        flowables = [Paragraph(chart.title, style_h1)]

        path = context.chart_paths.get(chart.chart_id)
        if path is None:
            reason = context.chart_failures.get(chart.chart_id, "not rendered")
            self.logger.warning("Chart %s unavailable: %s", chart.chart_id, reason)
            flowables.append(Spacer(1, 0.3 * cm))
            flowables.append(Paragraph(
                f"<i>Chart unavailable: {escape(reason)}</i>", style_body
            ))
            return flowables

        note = misleading_note(chart) if chart.misleading else None
        flowables.extend(create_figure_flowable(path, caption=chart.caption, note=note))
        return flowables

    def get_bookmark_title(self):
        return self.chart.title


# ============================================================================
# AUTO-REGISTER
# ============================================================================
for _chart in CHART_CONFIGS.values():
    SECTION_REGISTRY.register(
        ChartSection(
            _chart,
            SectionConfig(
                name=f"chart_{_chart.chart_id}",
                title=_chart.title,
                order=_chart.order,
                enabled=True,
                page_break_before=True,
                metadata={'chart_id': _chart.chart_id},
            )
        )
    )
