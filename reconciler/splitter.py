"""Page-bounded splitting of paginated documents."""
from __future__ import annotations

import logging
from io import BytesIO
from typing import List

from PyPDF2 import PdfReader, PdfWriter

from .constants import MAX_PAGES_PER_CHUNK
from .exceptions import MalformedDocument
from .models import Chunk, Document

logger = logging.getLogger(__name__)


def open_pdf(document: Document) -> PdfReader:
    try:
        reader = PdfReader(BytesIO(document.data))
        if reader.is_encrypted:
            reader.decrypt("")
        # Touch the page tree so broken cross-reference tables fail here.
        len(reader.pages)
    except Exception as exc:
        raise MalformedDocument(f"Could not read pages of {document.name}: {exc}") from exc
    return reader


def write_pages(reader: PdfReader, start: int, end: int) -> bytes:
    writer = PdfWriter()
    for idx in range(start, end):
        writer.add_page(reader.pages[idx])
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class PageSplitter:
    """Partitions a document into contiguous chunks of at most ``max_pages`` pages."""

    def __init__(self, max_pages: int = MAX_PAGES_PER_CHUNK) -> None:
        if max_pages < 1:
            raise ValueError(f"max_pages must be positive, got {max_pages}")
        self.max_pages = max_pages

    def split(self, document: Document) -> List[Chunk]:
        if not document.is_paginated:
            logger.info("%s is not paginated (%s); using a single chunk", document.name, document.media_type)
            return [Chunk(index=0, document=document)]

        reader = open_pdf(document)
        total_pages = len(reader.pages)
        logger.info("%s has %d page(s)", document.name, total_pages)
        if total_pages <= self.max_pages:
            return [Chunk(index=0, document=document, start_page=0, end_page=total_pages)]

        bounds = [
            (start, min(start + self.max_pages, total_pages))
            for start in range(0, total_pages, self.max_pages)
        ]
        chunks: List[Chunk] = []
        for idx, (start, end) in enumerate(bounds):
            try:
                data = write_pages(reader, start, end)
            except Exception as exc:
                raise MalformedDocument(
                    f"Could not copy pages {start + 1}-{end} of {document.name}: {exc}"
                ) from exc
            chunk_doc = Document(
                data=data,
                media_type=document.media_type,
                name=f"{document.name}_chunk_{idx + 1}",
            )
            chunks.append(
                Chunk(
                    index=idx,
                    document=chunk_doc,
                    start_page=start,
                    end_page=end,
                    total_chunks=len(bounds),
                )
            )
        logger.info("Split %s into %d chunk(s) of at most %d pages", document.name, len(chunks), self.max_pages)
        return chunks
