"""
PDF inspection utilities for compiled and fallback documents.

Helper functions:
    page_count: Quick page count without full extraction.
    extract_pdf_text: Plain text of every page, for previews and checks.
    looks_like_pdf: Magic-number check on raw bytes.
"""

from io import BytesIO
from typing import Optional

import pdfplumber
from PyPDF2 import PdfReader

PDF_MAGIC = b"%PDF-"


def looks_like_pdf(document: bytes) -> bool:
    """Check whether raw bytes start with the PDF header."""
    return document[:1024].lstrip().startswith(PDF_MAGIC)


def page_count(document: bytes) -> Optional[int]:
    """Get page count from PDF bytes, or None if unreadable."""
    try:
        reader = PdfReader(BytesIO(document))
        return len(reader.pages)
    except Exception:
        return None


def extract_pdf_text(document: bytes) -> str:
    """
    Extract plain text from all pages of a PDF.

    Args:
        document: PDF bytes

    Returns:
        Text of every page joined by blank lines (empty string for pages without text)
    """
    with pdfplumber.open(BytesIO(document)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n\n".join(pages)
