"""
Campaign finance narrative report.

Loads the FEC candidate summary, computes seven aggregates and renders
them as captioned charts in a PDF report.
"""

__version__ = "0.1.0"
