#!/usr/bin/env python3
"""
Chart Exporter

Encodes every enabled aggregate as a Plotly figure and exports it to PNG.
Each chart is isolated: a failure is logged and recorded, the rest still run.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

import plotly.graph_objects as go

LOGGER = logging.getLogger(__name__)


class ChartExporter:
    """
    Exports report charts to PNG for PDF embedding.

    Attributes:
        chart_dir: Output directory for PNG exports
        paths: Chart id -> PNG path for every chart that exported
        failures: Chart id -> error message
    """

    def __init__(self, chart_dir: Path,
                 width: int = 1400,
                 height: int = 800,
                 scale: float = 2,
                 export_fn: Optional[Callable[..., Path]] = None):
        """
        Initialize chart exporter.

        Args:
            chart_dir: Output directory for PNG exports
            width: Image width in pixels
            height: Image height in pixels
            scale: Scale factor
            export_fn: Figure writer, defaults to export_plotly_figure
        """
        self.chart_dir = Path(chart_dir)
        self.width = width
        self.height = height
        self.scale = scale
        self._export_fn = export_fn
        self.paths: Dict[str, Path] = {}
        self.failures: Dict[str, str] = {}

        self.chart_dir.mkdir(parents=True, exist_ok=True)

    def export_all(self, aggregates, charts: Iterable) -> Dict[str, Path]:
        """
        Encode and export every chart in ``charts``.

        Args:
            aggregates: AggregateBundle with computed aggregates
            charts: ChartConfig instances, in report order

        Returns:
            Dict mapping chart id to exported PNG path
        """
        LOGGER.info("  Exporting charts to: %s", self.chart_dir)

        charts = list(charts)
        for chart in charts:
            self._export_one(chart, aggregates)

        LOGGER.info("  Exported %d/%d charts", len(self.paths), len(charts))
        return self.paths

    def _export_one(self, chart, aggregates) -> None:
        from campaign_report.rendering.chart_specs import build_figure

        chart_id = chart.chart_id
        try:
            aggregate = aggregates.get(chart_id)
            if aggregate is None:
                reason = aggregates.failures.get(chart_id, "aggregate missing")
                raise RuntimeError(f"no aggregate ({reason})")

            fig = build_figure(chart_id, aggregate, title=chart.title)
            path = self._export(fig, self.chart_dir / chart.filename)
            self.paths[chart_id] = path
            LOGGER.info("    [OK] %s", chart_id)

        except Exception as e:
            LOGGER.error("    Failed %s: %s", chart_id, e, exc_info=True)
            self.failures[chart_id] = str(e)

    def _export(self, fig: go.Figure, output_path: Path) -> Path:
        export_fn = self._export_fn
        if export_fn is None:
            from campaign_report.rendering.pdf_charts import export_plotly_figure
            export_fn = export_plotly_figure
        return export_fn(fig, output_path,
                         width=self.width, height=self.height, scale=self.scale)
