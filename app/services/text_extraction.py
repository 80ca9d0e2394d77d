from __future__ import annotations

import asyncio
import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.core.errors import ValidationError
from app.parsing.pdf import parse_pdf_text

logger = logging.getLogger(__name__)

PdfParser = Callable[[bytes, threading.Event], str]

MIN_TEXT_CHARS = 10

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    used_fallback: bool = False


def normalize_text(raw: str) -> str:
    return _WHITESPACE_RE.sub(" ", raw or "").strip()


def short_text_placeholder(filename: str) -> str:
    return f"Resume content from {filename}. Text extraction completed but content may need manual review."


def failure_placeholder(filename: str, size_bytes: int) -> str:
    size_kb = (size_bytes + 512) // 1024
    return (
        f"Resume uploaded successfully: {filename}. Advanced text processing will be completed "
        f"automatically. File size: {size_kb}KB."
    )


class TextExtractor:
    """Turns an uploaded document into plain text within a time budget.

    Input problems (empty body, wrong type, oversized) raise ``ValidationError``.
    Parser failures and timeouts never raise: the caller gets a placeholder
    text and ``used_fallback=True`` instead.
    """

    def __init__(
        self,
        *,
        max_size_bytes: int,
        timeout_s: float,
        allowed_types: tuple[str, ...] = ("pdf",),
        parser: PdfParser = parse_pdf_text,
    ):
        self.max_size_bytes = max_size_bytes
        self.timeout_s = timeout_s
        self.allowed_types = tuple(item.lower() for item in allowed_types)
        self._parser = parser

    def validate(self, filename: str, content_type: str | None, content: bytes | None) -> None:
        if not content:
            raise ValidationError("No file provided")
        declared = (content_type or "").lower()
        if not any(kind in declared for kind in self.allowed_types):
            allowed = ", ".join(kind.upper() for kind in self.allowed_types)
            raise ValidationError(f"Only {allowed} files are supported")
        if len(content) > self.max_size_bytes:
            limit_mb = self.max_size_bytes / (1024 * 1024)
            raise ValidationError(f"File size must be less than {limit_mb:g}MB")

    async def extract(self, filename: str, content_type: str | None, content: bytes | None) -> ExtractionResult:
        self.validate(filename, content_type, content)

        cancel = threading.Event()
        started = time.perf_counter()
        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(self._parser, content, cancel),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            cancel.set()
            logger.warning(
                "text_extraction_timeout filename=%s timeout_s=%s bytes=%s",
                filename,
                self.timeout_s,
                len(content),
            )
            return ExtractionResult(text=failure_placeholder(filename, len(content)), used_fallback=True)
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            logger.warning("text_extraction_failed filename=%s reason=%s: %s", filename, type(exc).__name__, exc)
            return ExtractionResult(text=failure_placeholder(filename, len(content)), used_fallback=True)

        text = normalize_text(raw)
        logger.info(
            "text_extraction_done filename=%s chars=%s latency_ms=%s",
            filename,
            len(text),
            int((time.perf_counter() - started) * 1000),
        )
        if len(text) < MIN_TEXT_CHARS:
            return ExtractionResult(text=short_text_placeholder(filename))
        return ExtractionResult(text=text)
