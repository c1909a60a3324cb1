"""
Report generation pipeline modules.

Modular components for data loading, aggregation,
chart export, and section rendering.
"""

from .data_loader import load_candidate_data, CandidateData, CandidateRecord
from .aggregations import compute_all_aggregates, AggregateBundle
from .chart_exporter import ChartExporter
from .section_renderer import SectionRenderer

__all__ = [
    'load_candidate_data',
    'CandidateData',
    'CandidateRecord',
    'compute_all_aggregates',
    'AggregateBundle',
    'ChartExporter',
    'SectionRenderer',
]
