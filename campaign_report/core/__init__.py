"""
Report foundation: styles, section registry and chart configuration.
"""
