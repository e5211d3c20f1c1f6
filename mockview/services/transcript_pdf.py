from io import BytesIO
from typing import Any

from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

MARGIN = 72
TITLE_FONT = ("Helvetica-Bold", 18)
BODY_FONT = ("Helvetica", 12)
LINE_HEIGHT = 16
PARAGRAPH_GAP = 5


def transcript_lines(transcript: Any) -> list[str]:
    """Paragraphs to print for a Vapi transcript payload."""
    if isinstance(transcript, dict) and isinstance(transcript.get("entries"), list):
        return [
            f"[{entry.get('speaker', 'unknown')}] {entry.get('text', '')}"
            for entry in transcript["entries"]
            if isinstance(entry, dict)
        ]
    if isinstance(transcript, str) and transcript.strip():
        return transcript.splitlines()
    return ["No transcript available."]


def render_transcript_pdf(transcript: Any) -> bytes:
    buffer = BytesIO()
    p = canvas.Canvas(buffer, pagesize=letter)
    width, height = letter
    text_width = width - 2 * MARGIN

    p.setFont(*TITLE_FONT)
    p.drawCentredString(width / 2, height - MARGIN, "Interview Transcript")
    y_position = height - MARGIN - 2 * LINE_HEIGHT

    p.setFont(*BODY_FONT)
    for paragraph in transcript_lines(transcript):
        for line in simpleSplit(paragraph, BODY_FONT[0], BODY_FONT[1], text_width) or [""]:
            if y_position < MARGIN:
                p.showPage()
                p.setFont(*BODY_FONT)
                y_position = height - MARGIN
            p.drawString(MARGIN, y_position, line)
            y_position -= LINE_HEIGHT
        y_position -= PARAGRAPH_GAP

    p.showPage()
    p.save()
    return buffer.getvalue()
