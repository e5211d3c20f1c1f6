import io

import docx2txt
import PyPDF2

PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def extract_text_from_pdf(pdf_file: bytes) -> str:
    """Extract text from PDF file bytes."""
    pdf_reader = PyPDF2.PdfReader(io.BytesIO(pdf_file))
    text = ""
    for page in pdf_reader.pages:
        text += (page.extract_text() or "") + "\n"
    return text


def extract_text_from_docx(docx_file: bytes) -> str:
    return docx2txt.process(io.BytesIO(docx_file)) or ""


def extract_text(file_content: bytes, content_type: str, filename: str = "") -> str:
    """Extract text from an uploaded resume based on content type."""
    name = (filename or "").lower()
    if content_type == PDF_TYPE or name.endswith(".pdf"):
        return extract_text_from_pdf(file_content)
    if content_type == DOCX_TYPE or name.endswith(".docx"):
        return extract_text_from_docx(file_content)
    return file_content.decode("utf-8", errors="replace")
