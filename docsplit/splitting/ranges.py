"""Boundary pages -> contiguous page ranges."""

from dataclasses import dataclass

from docsplit.pipeline.exceptions import ValidationError


@dataclass(frozen=True)
class PageRange:
    """Closed, 1-based page range of one segment."""

    start: int
    end: int

    @property
    def page_count(self) -> int:
        return self.end - self.start + 1

    def zero_based_indices(self) -> range:
        return range(self.start - 1, self.end)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def compute_page_ranges(boundaries: list[int], total_pages: int) -> list[PageRange]:
    """Compute one range per boundary, together covering ``[1, total_pages]``.

    Boundaries are sorted ascending. Each range ends one page before the next
    boundary, the last one at ``total_pages``. A range is only emitted when
    ``start <= end``, so repeated boundary values do not produce extra ranges.

    Raises:
        ValidationError: if ``boundaries`` is empty, contains a non-integer,
            or contains a value outside ``[1, total_pages]``.
    """
    if total_pages < 1:
        raise ValidationError(f"Total page count must be positive, got {total_pages}")
    if not boundaries:
        raise ValidationError("Boundary list must not be empty")

    invalid_types = [b for b in boundaries if isinstance(b, bool) or not isinstance(b, int)]
    if invalid_types:
        raise ValidationError(f"Boundaries must be integers, got {invalid_types!r}")

    ordered = sorted(boundaries)
    out_of_range = [b for b in ordered if b < 1 or b > total_pages]
    if out_of_range:
        raise ValidationError(
            f"Boundaries out of range: {', '.join(map(str, out_of_range))}. "
            f"Total pages: {total_pages}"
        )

    ranges: list[PageRange] = []
    for i, start in enumerate(ordered):
        end = ordered[i + 1] - 1 if i + 1 < len(ordered) else total_pages
        if start <= end:
            ranges.append(PageRange(start=start, end=end))
    return ranges
