"""
Rendering layer: chart encodings, image export and PDF tables.
"""

from .chart_specs import (
    ENCODERS,
    build_figure,
    empty_figure,
)
from .pdf_charts import (
    export_plotly_figure,
    create_figure_flowable,
)
from .pdf_tables import (
    create_aggregate_table,
    create_info_table,
)

__all__ = [
    'ENCODERS',
    'build_figure',
    'empty_figure',
    'export_plotly_figure',
    'create_figure_flowable',
    'create_aggregate_table',
    'create_info_table',
]
