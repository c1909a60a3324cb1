#!/usr/bin/env python3
"""
Section Renderer

Walks the section registry in order and concatenates every section's
flowables into one story, inserting the configured page breaks.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from reportlab.platypus import Flowable, PageBreak

LOGGER = logging.getLogger(__name__)


class SectionRenderer:
    """
    Builds the document story from registered sections.

    Sections that opt out via ``validate`` are skipped silently; sections that
    raise are logged, recorded in ``failures`` and left out.

    Attributes:
        registry: SectionRegistry being rendered
        failures: Section name -> error message from the last render
    """

    def __init__(self, registry=None):
        if registry is None:
            from campaign_report.core.pdf_section_registry import SECTION_REGISTRY
            registry = SECTION_REGISTRY
        self.registry = registry
        self.failures: Dict[str, str] = {}

    def render_all(self, context) -> List[Flowable]:
        """
        Render every enabled section.

        Args:
            context: RenderContext shared by all sections

        Returns:
            Story (list of flowables) ready for ``doc.build``
        """
        story: List[Flowable] = []
        self.failures = {}

        sections = self.registry.get_enabled_sections()
        LOGGER.info("  Rendering %d enabled sections:", len(sections))

        for section in sections:
            flowables = self._render_one(section, context)
            if not flowables:
                continue
            # No leading blank page
            if section.config.page_break_before and story:
                story.append(PageBreak())
            story.extend(flowables)
            if section.config.page_break_after:
                story.append(PageBreak())

        LOGGER.info("  Story: %d flowables, %d failed section(s)", len(story), len(self.failures))
        return story

    def _render_one(self, section, context) -> Optional[List[Flowable]]:
        name = section.config.name
        try:
            if not section.validate(context):
                LOGGER.info("    - %s (skipped)", name)
                return None
            flowables = section.render(context)
        except Exception as e:
            LOGGER.error("    ✗ %s failed: %s", name, e, exc_info=True)
            self.failures[name] = str(e)
            return None

        LOGGER.info("    ✓ %s (%d flowables)", name, len(flowables))
        return flowables
