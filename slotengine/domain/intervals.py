"""
Interval arithmetic on TimeRange collections.

Both helpers return new lists and never mutate their input.
"""

from typing import Iterable, List

from .models import TimeRange


def merge_ranges(ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping or adjacent time ranges.

    Example: [09:00-10:00, 10:00-11:00, 10:30-12:00] -> [09:00-12:00]
    """
    sorted_ranges = sorted(ranges, key=lambda r: (r.start, r.end))
    if not sorted_ranges:
        return []

    merged: List[TimeRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        # Overlapping or adjacent (no gap)
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = TimeRange(start=last.start, end=current.end)
        else:
            merged.append(current)

    return merged


def subtract_range(base: TimeRange, cut: TimeRange) -> List[TimeRange]:
    """
    Remove ``cut`` from ``base``, yielding zero, one or two ranges.

    Example:
    Base: 09:00 - 17:00
    Cut:  12:00 - 13:00
    Result: [09:00-12:00, 13:00-17:00]
    """
    if not base.overlaps(cut):
        return [base]

    pieces: List[TimeRange] = []
    if cut.start > base.start:
        pieces.append(TimeRange(start=base.start, end=cut.start))
    if cut.end < base.end:
        pieces.append(TimeRange(start=cut.end, end=base.end))
    return pieces


def subtract_ranges(
    base: Iterable[TimeRange],
    cuts: Iterable[TimeRange]
) -> List[TimeRange]:
    """
    Subtract the union of ``cuts`` from ``base``.

    The result is sorted and disjoint, and does not depend on the order
    in which cuts are given.
    """
    sorted_cuts = merge_ranges(cuts)
    free_ranges: List[TimeRange] = []

    for block in merge_ranges(base):
        remaining = [block]

        for cut in sorted_cuts:
            if cut.start >= block.end:
                break
            if cut.end <= block.start:
                continue

            next_remaining: List[TimeRange] = []
            for piece in remaining:
                next_remaining.extend(subtract_range(piece, cut))
            remaining = next_remaining

            if not remaining:
                break

        free_ranges.extend(remaining)

    return free_ranges
