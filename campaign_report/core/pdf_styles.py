#!/usr/bin/env python3
"""
Look and feel of the campaign finance PDF.

Defines:
- A4 page geometry and the usable content box
- Report palette (navy/slate text, red for warnings)
- Paragraph styles for title, headings, body, captions and warning notes
- Running header (report title, source file, timestamp) and page-number footer
"""
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.lib.enums import TA_LEFT, TA_CENTER, TA_JUSTIFY

# ============================================================================
# PAGE GEOMETRY
# ============================================================================
PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_LEFT = MARGIN_RIGHT = 1.8 * cm
MARGIN_TOP = 2.4 * cm
MARGIN_BOTTOM = 2.0 * cm

CONTENT_WIDTH = PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT
CONTENT_HEIGHT = PAGE_HEIGHT - MARGIN_TOP - MARGIN_BOTTOM

REPORT_TITLE = "Campaign Finance Summary, 2020 Cycle"

# ============================================================================
# PALETTE
# ============================================================================
COLORS = {
    'primary': HexColor('#1f3a5f'),        # navy: headings, rules
    'secondary': HexColor('#5d6d7e'),      # slate: captions, header text
    'warning': HexColor('#b03a2e'),        # misleading-chart notes
    'background_light': HexColor('#eef2f7'),
    'background_warning': HexColor('#fbeeee'),
    'border': HexColor('#c5cdd8'),
    'text_dark': HexColor('#1b2631'),
    'text_light': HexColor('#99a3ad'),
}

SANS = 'Helvetica'
SANS_BOLD = 'Helvetica-Bold'
SANS_ITALIC = 'Helvetica-Oblique'
SERIF = 'Times-Roman'

# ============================================================================
# PARAGRAPH STYLES
# ============================================================================
_sample = getSampleStyleSheet()


def _style(name, parent='Normal', **overrides):
    base = dict(fontName=SANS, textColor=COLORS['text_dark'], alignment=TA_LEFT)
    base.update(overrides)
    return ParagraphStyle(name, parent=_sample[parent], **base)


style_title = _style('CfrTitle', 'Title', fontName=SANS_BOLD, fontSize=22, leading=27,
                     textColor=COLORS['primary'], spaceAfter=0.25 * cm)

style_subtitle = _style('CfrSubtitle', fontSize=11, leading=15,
                        textColor=COLORS['secondary'], spaceAfter=0.6 * cm)

style_h1 = _style('CfrHeading1', 'Heading1', fontName=SANS_BOLD, fontSize=16, leading=20,
                  textColor=COLORS['primary'], spaceBefore=0.4 * cm, spaceAfter=0.3 * cm)

style_h2 = _style('CfrHeading2', 'Heading2', fontName=SANS_BOLD, fontSize=12, leading=15,
                  spaceBefore=0.4 * cm, spaceAfter=0.2 * cm)

# Narrative prose is set in a serif face
style_body = _style('CfrBody', fontName=SERIF, fontSize=11, leading=15,
                    spaceAfter=0.3 * cm, alignment=TA_JUSTIFY)

style_caption = _style('CfrCaption', fontName=SERIF, fontSize=10, leading=13,
                       textColor=COLORS['secondary'], spaceBefore=0.15 * cm,
                       spaceAfter=0.3 * cm, alignment=TA_JUSTIFY)

style_note = _style('CfrNote', fontName=SANS_ITALIC, fontSize=9, leading=12,
                    textColor=COLORS['warning'], backColor=COLORS['background_warning'],
                    borderColor=COLORS['warning'], borderWidth=0.5, borderPadding=5,
                    spaceBefore=0.2 * cm, spaceAfter=0.3 * cm, alignment=TA_CENTER)


# ============================================================================
# RUNNING HEADER / FOOTER
# ============================================================================
def create_header_footer(canvas_obj, doc, source_name: str, generated: str):
    """
    Draw the running header and footer.

    Header: report title and source file on the left, timestamp on the right,
    over a thin rule. Footer: centred page number under a rule.
    """
    top = PAGE_HEIGHT - MARGIN_TOP + 0.6 * cm
    bottom = MARGIN_BOTTOM - 0.6 * cm
    right = PAGE_WIDTH - MARGIN_RIGHT

    canvas_obj.saveState()
    canvas_obj.setStrokeColor(COLORS['border'])
    canvas_obj.setLineWidth(0.5)
    canvas_obj.line(MARGIN_LEFT, top - 0.15 * cm, right, top - 0.15 * cm)
    canvas_obj.line(MARGIN_LEFT, bottom + 0.35 * cm, right, bottom + 0.35 * cm)

    canvas_obj.setFillColor(COLORS['secondary'])
    canvas_obj.setFont(SANS, 8)
    canvas_obj.drawString(MARGIN_LEFT, top, f"{REPORT_TITLE} | {source_name}")
    canvas_obj.drawRightString(right, top, generated)
    canvas_obj.drawCentredString(PAGE_WIDTH / 2, bottom, f"Page {doc.page}")
    canvas_obj.restoreState()


def create_page_template_function(source_name: str, generated: str):
    """Bind source and timestamp; returns a callable for onFirstPage/onLaterPages."""

    def _template(canvas_obj, doc):
        create_header_footer(canvas_obj, doc, source_name, generated)

    return _template
