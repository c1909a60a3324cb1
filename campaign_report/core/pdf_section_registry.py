#!/usr/bin/env python3
"""
Pluggable report sections.

Every part of the PDF (header, one section per chart, data appendix) is a
``Section`` subclass that registers an instance in ``SECTION_REGISTRY`` when
its module is imported. The renderer only ever sees the registry, so adding
a section means adding a module under ``pdf_sections``.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from reportlab.platypus import Flowable

LOGGER = logging.getLogger(__name__)


# ============================================================================
# SECTION METADATA
# ============================================================================
@dataclass
class SectionConfig:
    """
    Placement of a section in the document.

    Attributes:
        name: Registry key, unique (e.g. "header", "chart_top_parties")
        title: Human readable title
        enabled: Include the section at all
        order: Position in the document, ascending
        page_break_before: Start the section on a new page
        page_break_after: Force a new page after the section
        metadata: Free-form extras (chart sections store their chart id)
    """
    name: str
    title: str
    enabled: bool = True
    order: int = 100
    page_break_before: bool = False
    page_break_after: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Section name cannot be empty")
        if self.order < 0:
            raise ValueError(f"Section order must be non-negative, got {self.order}")


@dataclass
class RenderContext:
    """
    Everything a section may draw from during one build.

    Attributes:
        data: CandidateData (None if loading was skipped)
        aggregates: AggregateBundle
        chart_paths: Chart id -> exported PNG
        config: Resolved configuration dict
        generated: Timestamp printed in the header
        enabled_charts: Chart ids selected for this build, in order
        chart_failures: Chart id -> reason the chart could not be produced
    """
    data: Any
    aggregates: Any
    chart_paths: Dict[str, Path]
    config: Dict[str, Any]
    generated: str
    enabled_charts: List[str] = field(default_factory=list)
    chart_failures: Dict[str, str] = field(default_factory=dict)


# ============================================================================
# SECTION BASE CLASS
# ============================================================================
class Section(ABC):
    """
    One block of the report.

    Subclasses implement ``render``; ``validate`` lets a section opt out of
    a particular build (e.g. a chart that was disabled in the config).
    """

    def __init__(self, config: SectionConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{config.name}")

    @abstractmethod
    def render(self, context: RenderContext) -> List[Flowable]:
        """Return the flowables of this section."""

    def validate(self, context: RenderContext) -> bool:
        return True

    def get_bookmark_title(self) -> str:
        return self.config.title

    def __repr__(self) -> str:
        c = self.config
        return f"{type(self).__name__}(name='{c.name}', order={c.order}, enabled={c.enabled})"


# ============================================================================
# REGISTRY
# ============================================================================
class SectionRegistry:
    """
    Name -> Section mapping with ordered retrieval.

    Example:
        >>> registry = SectionRegistry()
        >>> registry.register(HeaderSection(SectionConfig(name="header", title="Header", order=0)))
        >>> [s.config.name for s in registry.get_enabled_sections()]
        ['header']
    """

    def __init__(self):
        self._sections: Dict[str, Section] = {}

    def register(self, section: Section) -> None:
        """
        Add a section.

        Raises:
            ValueError: If the name is already taken
        """
        name = section.config.name
        if name in self._sections:
            raise ValueError(f"Section '{name}' already registered")
        self._sections[name] = section
        LOGGER.debug("Registered section %s (order=%d)", name, section.config.order)

    def unregister(self, name: str) -> None:
        if self._sections.pop(name, None) is not None:
            LOGGER.debug("Unregistered section %s", name)

    def get(self, name: str) -> Optional[Section]:
        return self._sections.get(name)

    def get_enabled_sections(self) -> List[Section]:
        """Enabled sections sorted by ``config.order``."""
        return sorted(
            (s for s in self._sections.values() if s.config.enabled),
            key=lambda s: s.config.order,
        )

    def list_all(self) -> List[str]:
        return list(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __contains__(self, name: str) -> bool:
        return name in self._sections


SECTION_REGISTRY = SectionRegistry()
