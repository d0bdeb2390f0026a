"""Copy page ranges out of a source PDF into standalone, size-optimized PDFs.

Each segment is built in memory:

1. a new empty document receives the range's pages (text, images and fonts
   are copied with the page objects);
2. pass 1 strips document and XMP metadata and re-serializes without object
   streams to normalize the structure;
3. pass 2 re-opens that output and serializes it with packed object streams
   and deflate compression.

If either optimization pass fails the segment falls back to one plain
compressed save. Only a page-copy failure is fatal, and it aborts the batch.
"""

from collections.abc import Iterator

import pymupdf

from docsplit.logging.logger import Log
from docsplit.pipeline.exceptions import ExtractionError
from docsplit.splitting.ranges import PageRange


class SegmentExtractor:
    """Splits a parsed source PDF into one optimized byte buffer per range."""

    def __init__(self, garbage_level: int = 3) -> None:
        self._garbage = garbage_level

    @staticmethod
    def open_source(pdf_bytes: bytes) -> pymupdf.Document:
        """Parse source bytes. The caller owns (and closes) the document.

        Raises:
            ExtractionError: if the bytes are not a readable PDF.
        """
        try:
            return pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise ExtractionError(f"Could not open source PDF: {exc}") from exc

    def split(self, pdf_bytes: bytes, ranges: list[PageRange]) -> list[bytes]:
        """Parse ``pdf_bytes`` and extract every range."""
        source = self.open_source(pdf_bytes)
        try:
            return self.extract(source, ranges)
        finally:
            source.close()

    def extract(self, source: pymupdf.Document, ranges: list[PageRange]) -> list[bytes]:
        """Return one optimized PDF per range, in the order given."""
        return list(self.iter_segments(source, ranges))

    def iter_segments(
        self, source: pymupdf.Document, ranges: list[PageRange]
    ) -> Iterator[bytes]:
        """Yield segments one at a time, closing each working document first.

        Only one intermediate document is open at once. ``split`` still
        collects every segment because the batch must succeed as a whole
        before anything is uploaded.
        """
        total = source.page_count
        for page_range in ranges:
            segment = self._copy_pages(source, page_range, total)
            try:
                data = self._optimize(segment, page_range)
            finally:
                segment.close()
            Log.debug(f"Extracted pages {page_range} ({len(data)} bytes)")
            yield data

    def _copy_pages(
        self, source: pymupdf.Document, page_range: PageRange, total: int
    ) -> pymupdf.Document:
        if page_range.start < 1 or page_range.end > total or page_range.start > page_range.end:
            raise ExtractionError(
                f"Failed to copy pages {page_range}: range outside 1-{total}"
            )
        segment = pymupdf.open()  # type: ignore[no-untyped-call]
        try:
            segment.insert_pdf(
                source,
                from_page=page_range.start - 1,
                to_page=page_range.end - 1,
            )
        except Exception as exc:
            segment.close()
            raise ExtractionError(f"Failed to copy pages {page_range}: {exc}") from exc
        return segment

    def _optimize(self, segment: pymupdf.Document, page_range: PageRange) -> bytes:
        try:
            normalized = self._strip_and_normalize(segment)
            return self._compress(normalized)
        except Exception as exc:
            Log.warning(
                f"Optimization failed for pages {page_range}, using basic save: {exc}"
            )
            return segment.tobytes(deflate=True)

    def _strip_and_normalize(self, segment: pymupdf.Document) -> bytes:
        segment.set_metadata({})
        segment.del_xml_metadata()
        return segment.tobytes(garbage=self._garbage, deflate=True, use_objstms=0)

    def _compress(self, normalized: bytes) -> bytes:
        with pymupdf.open(stream=normalized, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
            return doc.tobytes(
                garbage=self._garbage,
                deflate=True,
                deflate_images=True,
                deflate_fonts=True,
                use_objstms=1,
            )
