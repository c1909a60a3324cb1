#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Campaign Finance Report - command line entry point

Reads the FEC candidate summary, computes the seven report aggregates, writes
one PNG per chart to ``<output>/charts/`` and assembles the captioned charts
into ``<output>/campaign_finance_report.pdf``.

Usage:
    python generate_pdf_report.py                       # everything from core/defaults.yaml
    python generate_pdf_report.py -i data/cands.csv -o reports/2020
    python generate_pdf_report.py --set aggregations.top_parties.k=8
    python generate_pdf_report.py --set charts.dark_office_state_counts.enabled=false
    python generate_pdf_report.py --list-charts
    python generate_pdf_report.py -v                    # DEBUG logging

Exit status is 0 when the PDF was written and 1 otherwise.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from core.config import get_config, get_config_overrides, get_config_source, get_section, resolve_path
from core.io import ParseError

LOG_FORMAT = "[%(levelname)s] %(message)s"
RULE = "=" * 80

LOGGER = logging.getLogger(__name__)


def _banner(title: str, rows=()):
    print()
    print(RULE)
    print(f"  {title}")
    print(RULE)
    for label, value in rows:
        print(f"  {label + ':':14s}{value}")
    if rows:
        print(RULE)
    print()


# ============================================================================
# MAIN LOGIC
# ============================================================================
def generate_report(input_path: Path,
                    output_dir: Path,
                    cfg: dict,
                    verbose: bool = False) -> int:
    """
    Build the report and print a summary.

    Args:
        input_path: Candidate summary file
        output_dir: Folder receiving the PDF and ``charts/``
        cfg: Resolved configuration
        verbose: Print the traceback of a failed build

    Returns:
        Exit code (0 = PDF written, 1 = failure)
    """
    from campaign_report.pdf_report_builder import ReportBuilder

    rows = [("Input", input_path), ("Output", output_dir), ("Config", get_config_source())]
    rows += [("Override", f"{key} = {value!r}") for key, value in get_config_overrides().items()]
    rows.append(("Started", datetime.now().strftime("%Y-%m-%d %H:%M:%S")))
    _banner("CAMPAIGN FINANCE REPORT", rows)

    builder = ReportBuilder(input_path=input_path, output_dir=output_dir, cfg=cfg)
    try:
        pdf_path = builder.build()
    except ParseError as e:
        LOGGER.error("[FAIL] Cannot load %s: %s", input_path, e)
        return 1
    except RuntimeError as e:
        LOGGER.error("[FAIL] %s", e)
        if verbose:
            import traceback
            traceback.print_exc()
        return 1

    rows = [
        ("PDF", pdf_path),
        ("Size", f"{pdf_path.stat().st_size / 1024:.1f} KB"),
        ("Charts", f"{len(builder.chart_paths)}/{len(builder.charts)} in {builder.chart_dir}"),
    ]
    rows += [("Failed", f"{chart_id}: {reason}") for chart_id, reason in builder.chart_failures.items()]
    _banner("[OK] GENERATION COMPLETE", rows)
    return 0


def list_charts(cfg: dict) -> int:
    """Print every chart id with its order, state and title."""
    from campaign_report.core.chart_config import get_chart_configs

    _banner("CHARTS")
    for chart in get_chart_configs(cfg):
        state = "enabled " if chart.enabled else "disabled"
        suffix = "  [misleading]" if chart.misleading else ""
        print(f"  {chart.order:3d}  {chart.chart_id:26s} {state}  {chart.title}{suffix}")
    print()
    return 0


# ============================================================================
# COMMAND LINE INTERFACE
# ============================================================================
def parse_args(argv=None):
    """Parse the command line; ``--config``/``--set`` are forwarded to core.config."""
    parser = argparse.ArgumentParser(
        prog="campaign-finance-report",
        description="Render the campaign finance narrative report (PNG charts + PDF).",
        epilog="Configuration: core/defaults.yaml, CFR_CONFIG, CFR__SECTION__KEY=value.",
    )
    parser.add_argument("-i", "--input", type=Path, metavar="PATH",
                        help="candidate summary file (default: input.path)")
    parser.add_argument("-o", "--output", type=Path, metavar="DIR",
                        help="output folder (default: output.dir)")
    parser.add_argument("--config", metavar="PATH",
                        help="YAML file replacing core/defaults.yaml")
    parser.add_argument("--set", action="append", default=[], metavar="KEY=VALUE",
                        help="dotted config override, repeatable (e.g. export.scale=1)")
    parser.add_argument("--list-charts", action="store_true",
                        help="list chart ids and exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="DEBUG logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Entry point for ``python generate_pdf_report.py`` and the console script."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    forwarded = ["--config", args.config] if args.config else []
    for item in args.set:
        forwarded += ["--set", item]

    try:
        cfg = get_config(cli_args=forwarded)
    except (OSError, TypeError, ValueError) as e:
        LOGGER.error("[FAIL] Invalid configuration: %s", e)
        return 1

    if args.list_charts:
        return list_charts(cfg)

    if args.input is None and not get_section(cfg, "input.path"):
        LOGGER.error("[FAIL] No input file: pass --input or set input.path")
        return 1

    input_path = args.input or resolve_path(get_section(cfg, "input.path"), cfg)
    output_dir = args.output or resolve_path(get_section(cfg, "output.dir", "reports"), cfg)
    return generate_report(Path(input_path), Path(output_dir), cfg, verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())
