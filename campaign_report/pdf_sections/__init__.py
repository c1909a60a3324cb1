"""
PDF sections package.

Auto-imports all section modules to trigger registration.
"""

# Import all sections (triggers auto-registration)
from . import header
from . import charts
from . import data_appendix

__all__ = [
    'header',
    'charts',
    'data_appendix',
]
