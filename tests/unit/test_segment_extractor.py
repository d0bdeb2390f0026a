from collections.abc import Callable
from unittest.mock import patch

import pymupdf
import pytest

from docsplit.pipeline.exceptions import ExtractionError
from docsplit.splitting.extractor import SegmentExtractor
from docsplit.splitting.ranges import PageRange, compute_page_ranges


def _page_texts(pdf_bytes: bytes) -> list[str]:
    with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text().strip() for page in doc]


class TestSegmentExtractor:
    def test_one_segment_per_range_in_order(self, ten_page_pdf_bytes: bytes) -> None:
        ranges = [PageRange(1, 3), PageRange(4, 7), PageRange(8, 10)]

        segments = SegmentExtractor().split(ten_page_pdf_bytes, ranges)

        assert len(segments) == 3
        assert _page_texts(segments[0]) == ["Page 1", "Page 2", "Page 3"]
        assert _page_texts(segments[1]) == ["Page 4", "Page 5", "Page 6", "Page 7"]
        assert _page_texts(segments[2]) == ["Page 8", "Page 9", "Page 10"]

    def test_segment_page_counts_sum_to_source(self, make_pdf: Callable[..., bytes]) -> None:
        source = make_pdf(13)
        ranges = compute_page_ranges([1, 2, 6, 12], 13)

        segments = SegmentExtractor().split(source, ranges)

        counts = [len(_page_texts(s)) for s in segments]
        assert sum(counts) == 13
        assert counts == [1, 4, 6, 2]

    def test_segments_are_valid_standalone_pdfs(self, ten_page_pdf_bytes: bytes) -> None:
        segments = SegmentExtractor().split(ten_page_pdf_bytes, [PageRange(1, 10)])

        assert segments[0].startswith(b"%PDF")
        with pymupdf.open(stream=segments[0], filetype="pdf") as doc:
            assert doc.page_count == 10

    def test_strips_descriptive_metadata(self, ten_page_pdf_bytes: bytes) -> None:
        with pymupdf.open(stream=ten_page_pdf_bytes, filetype="pdf") as doc:
            assert doc.metadata["title"] == "Invoices batch"

        segment = SegmentExtractor().split(ten_page_pdf_bytes, [PageRange(2, 3)])[0]

        with pymupdf.open(stream=segment, filetype="pdf") as doc:
            assert not doc.metadata["title"]
            assert not doc.metadata["author"]

    def test_falls_back_to_basic_save_when_optimization_fails(
        self, ten_page_pdf_bytes: bytes
    ) -> None:
        extractor = SegmentExtractor()

        with patch.object(
            extractor, "_strip_and_normalize", side_effect=RuntimeError("boom")
        ):
            segments = extractor.split(ten_page_pdf_bytes, [PageRange(1, 2)])

        assert _page_texts(segments[0]) == ["Page 1", "Page 2"]

    def test_falls_back_when_second_pass_fails(self, ten_page_pdf_bytes: bytes) -> None:
        extractor = SegmentExtractor()

        with patch.object(extractor, "_compress", side_effect=RuntimeError("boom")):
            segments = extractor.split(ten_page_pdf_bytes, [PageRange(5, 5)])

        assert _page_texts(segments[0]) == ["Page 5"]

    def test_out_of_bounds_range_names_the_range(self, ten_page_pdf_bytes: bytes) -> None:
        with pytest.raises(ExtractionError, match="Failed to copy pages 8-12"):
            SegmentExtractor().split(ten_page_pdf_bytes, [PageRange(1, 7), PageRange(8, 12)])

    def test_copy_failure_aborts_batch(self, ten_page_pdf_bytes: bytes) -> None:
        extractor = SegmentExtractor()
        source = extractor.open_source(ten_page_pdf_bytes)
        original_copy = extractor._copy_pages
        calls: list[PageRange] = []

        def flaky_copy(src, page_range, total):  # type: ignore[no-untyped-def]
            calls.append(page_range)
            if page_range.start == 4:
                raise ExtractionError(f"Failed to copy pages {page_range}: broken xref")
            return original_copy(src, page_range, total)

        try:
            with (
                patch.object(extractor, "_copy_pages", side_effect=flaky_copy),
                pytest.raises(ExtractionError, match="4-7"),
            ):
                extractor.extract(source, compute_page_ranges([1, 4, 8], 10))
        finally:
            source.close()

        assert calls == [PageRange(1, 3), PageRange(4, 7)]

    def test_open_source_rejects_garbage(self) -> None:
        with pytest.raises(ExtractionError, match="Could not open source PDF"):
            SegmentExtractor.open_source(b"not a pdf")

    def test_iter_segments_is_lazy(self, ten_page_pdf_bytes: bytes) -> None:
        extractor = SegmentExtractor()
        source = extractor.open_source(ten_page_pdf_bytes)
        try:
            iterator = extractor.iter_segments(source, [PageRange(1, 5), PageRange(6, 10)])
            first = next(iterator)
            assert _page_texts(first)[0] == "Page 1"
            assert len(list(iterator)) == 1
        finally:
            source.close()

    def test_iter_segments_closes_each_working_document(
        self, ten_page_pdf_bytes: bytes
    ) -> None:
        extractor = SegmentExtractor()
        original_copy = extractor._copy_pages
        opened: list[pymupdf.Document] = []

        def tracking_copy(source, page_range, total):  # type: ignore[no-untyped-def]
            segment = original_copy(source, page_range, total)
            opened.append(segment)
            return segment

        source = extractor.open_source(ten_page_pdf_bytes)
        try:
            with patch.object(extractor, "_copy_pages", side_effect=tracking_copy):
                iterator = extractor.iter_segments(
                    source, [PageRange(1, 5), PageRange(6, 10)]
                )
                next(iterator)
                assert len(opened) == 1
                assert opened[0].is_closed
                list(iterator)
            assert all(doc.is_closed for doc in opened)
        finally:
            source.close()
