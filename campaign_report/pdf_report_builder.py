#!/usr/bin/env python3
"""
Campaign finance report assembly.

``ReportBuilder`` runs five stages against one candidate summary file:

    load -> aggregate -> export charts -> render sections -> write PDF

A parse error in the first stage propagates as ``ParseError``; anything
unexpected after that is wrapped in ``RuntimeError``. A single failing
aggregate, chart or section does not stop the run: it is recorded on the
builder (``aggregates.failures``, ``chart_failures``, ``section_failures``)
and left out of the document.

Usage:
    pdf = ReportBuilder("data/cands.csv", "reports", get_config()).build()
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate

from core.config import get_section
from core.io import ParseError
from core.runtime import prepare_output_dir, timestamp_utc
from campaign_report.core.chart_config import get_enabled_chart_configs
from campaign_report.core.pdf_section_registry import RenderContext
from campaign_report.core.pdf_styles import (
    MARGIN_BOTTOM, MARGIN_LEFT, MARGIN_RIGHT, MARGIN_TOP, REPORT_TITLE,
    create_page_template_function,
)
from campaign_report.pipeline.aggregations import compute_all_aggregates
from campaign_report.pipeline.chart_exporter import ChartExporter
from campaign_report.pipeline.data_loader import load_candidate_data
from campaign_report.pipeline.section_renderer import SectionRenderer

# Registers header, chart and appendix sections
import campaign_report.pdf_sections  # noqa: F401

LOGGER = logging.getLogger(__name__)

DEFAULT_PDF_NAME = "campaign_finance_report.pdf"
CHART_SUBDIR = "charts"


class ReportBuilder:
    """
    One report run: input file in, ``<output_dir>/<pdf_name>`` out.

    Attributes:
        output_path: Target PDF (``output.pdf_name`` inside ``output_dir``)
        chart_dir: Folder receiving one PNG per exported chart
        aggregates: AggregateBundle after stage 2
        charts: Enabled ChartConfigs, in report order
        chart_paths: chart_id -> PNG for every exported chart
        chart_failures: chart_id -> reason for charts that could not be exported
        section_failures: section name -> reason for sections that raised
    """

    def __init__(self,
                 input_path: Path,
                 output_dir: Path,
                 cfg: Optional[Dict[str, Any]] = None,
                 export_fn=None):
        """
        Args:
            input_path: Candidate summary file
            output_dir: Folder for the PDF and its ``charts/`` subfolder
            cfg: Resolved configuration; ``{}`` means all defaults
            export_fn: Replacement for the plotly/kaleido writer, see ChartExporter
        """
        self.input_path = Path(input_path)
        self.output_dir = Path(output_dir)
        self.cfg = cfg if cfg is not None else {}
        self.export_fn = export_fn

        self.output_path = self.output_dir / get_section(self.cfg, "output.pdf_name", DEFAULT_PDF_NAME)
        self.chart_dir = self.output_dir / CHART_SUBDIR
        self.generated = timestamp_utc()

        self.data = None
        self.aggregates = None
        self.charts = []
        self.chart_paths: Dict[str, Path] = {}
        self.chart_failures: Dict[str, str] = {}
        self.section_failures: Dict[str, str] = {}
        self.story = []

    def stages(self):
        """Ordered ``(label, callable)`` pairs making up one run."""
        return [
            ("Loading candidate summary", self._load),
            ("Computing aggregates", self._aggregate),
            ("Exporting charts", self._export),
            ("Rendering sections", self._render),
            ("Writing PDF", self._write),
        ]

    def build(self) -> Path:
        """
        Run every stage and return the written PDF.

        Raises:
            ParseError: input missing, unreadable or lacking a required column
            RuntimeError: any other stage failed as a whole
        """
        LOGGER.info("Report: %s -> %s", self.input_path, self.output_path)

        stages = self.stages()
        for step, (label, stage) in enumerate(stages, start=1):
            LOGGER.info("[%d/%d] %s", step, len(stages), label)
            try:
                stage()
            except ParseError:
                raise
            except Exception as e:
                LOGGER.error("%s failed: %s", label, e, exc_info=True)
                raise RuntimeError(f"{label} failed: {e}") from e

        LOGGER.info("Wrote %s (%.1f KB, %d of %d charts)",
                    self.output_path,
                    self.output_path.stat().st_size / 1024,
                    len(self.chart_paths), len(self.charts))
        return self.output_path

    # ------------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------------
    def _load(self):
        self.data = load_candidate_data(
            self.input_path,
            columns=get_section(self.cfg, "input.columns"),
            sep=get_section(self.cfg, "input.sep", ","),
            encoding=get_section(self.cfg, "input.encoding", "utf-8"),
        )

    def _aggregate(self):
        self.aggregates = compute_all_aggregates(self.data, self.cfg)
        for name, reason in self.aggregates.failures.items():
            LOGGER.warning("  aggregate %s unavailable: %s", name, reason)

    def _export(self):
        self.charts = get_enabled_chart_configs(self.cfg)
        exporter = ChartExporter(
            chart_dir=self.chart_dir,
            width=int(get_section(self.cfg, "export.width", 1400)),
            height=int(get_section(self.cfg, "export.height", 800)),
            scale=float(get_section(self.cfg, "export.scale", 2)),
            export_fn=self.export_fn,
        )
        self.chart_paths = exporter.export_all(self.aggregates, self.charts)
        self.chart_failures = dict(exporter.failures)

    def _render(self):
        renderer = SectionRenderer()
        self.story = renderer.render_all(RenderContext(
            data=self.data,
            aggregates=self.aggregates,
            chart_paths=self.chart_paths,
            config=self.cfg,
            generated=self.generated,
            enabled_charts=[chart.chart_id for chart in self.charts],
            chart_failures=self.chart_failures,
        ))
        self.section_failures = dict(renderer.failures)

    def _write(self):
        if not self.story:
            raise RuntimeError("no section produced any content")

        prepare_output_dir(self.output_path.parent)
        on_page = create_page_template_function(self.input_path.name, self.generated)
        SimpleDocTemplate(
            str(self.output_path),
            pagesize=A4,
            title=REPORT_TITLE,
            leftMargin=MARGIN_LEFT, rightMargin=MARGIN_RIGHT,
            topMargin=MARGIN_TOP, bottomMargin=MARGIN_BOTTOM,
        ).build(self.story, onFirstPage=on_page, onLaterPages=on_page)


def generate_report(input_path: Path,
                    output_dir: Path,
                    cfg: Optional[Dict[str, Any]] = None) -> Path:
    """Build the report for ``input_path`` and return the PDF path."""
    return ReportBuilder(input_path, output_dir, cfg).build()
