from __future__ import annotations

import threading
from io import BytesIO

from pypdf import PdfReader

MAX_PDF_PAGES = 100


class ParseCancelled(RuntimeError):
    """Raised from inside the parser once the caller stops waiting for it."""


def parse_pdf_text(content: bytes, cancel: threading.Event, max_pages: int = MAX_PDF_PAGES) -> str:
    reader = PdfReader(BytesIO(content))
    text_parts: list[str] = []
    for index, page in enumerate(reader.pages):
        if index >= max_pages:
            break
        if cancel.is_set():
            raise ParseCancelled(f"PDF parsing cancelled after {index} pages")
        page_text = (page.extract_text() or "").strip()
        if page_text:
            text_parts.append(page_text)
    return "\n".join(text_parts)
