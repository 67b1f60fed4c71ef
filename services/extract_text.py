import logging

from pypdf import PdfReader

logger = logging.getLogger(__name__)


def from_pdf(path: str) -> str:
    try:
        reader = PdfReader(path)
        return '\n'.join((page.extract_text() or '') for page in reader.pages)
    except Exception as e:
        logger.error("PDF text extraction failed for %s: %s", path, e)
        return ''


def from_path(path: str) -> str:
    """Extract text from a PDF, or read a plain-text file as is."""
    if path.lower().endswith('.pdf'):
        return from_pdf(path)
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        return f.read()
