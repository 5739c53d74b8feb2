from __future__ import annotations

import logging
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

logger = logging.getLogger(__name__)


def write_text_pdf(text: str, path: Path) -> Path:
    """Render plain paragraphs onto letter pages and return the file path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    style = getSampleStyleSheet()["BodyText"]
    story = []
    for paragraph in text.split("\n\n"):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        story.append(Paragraph(escape(paragraph).replace("\n", "<br/>"), style))
        story.append(Spacer(1, 0.2 * inch))

    document = SimpleDocTemplate(
        str(path),
        pagesize=letter,
        leftMargin=inch,
        rightMargin=inch,
        topMargin=inch,
        bottomMargin=inch,
    )
    document.build(story or [Paragraph("", style)])
    logger.info("Cover letter written to %s", path)
    return path.resolve()
