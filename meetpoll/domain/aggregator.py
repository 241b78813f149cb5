"""
Core business logic for ranking overlapping availability.

Pure domain logic: no storage, no I/O. The aggregator only sees the
intervals of each form, in submission order.
"""

import logging
from typing import List, Sequence

from .intervals import breakpoints, count_containing, distinct_pairs, flatten
from .models import AggregatedRange, Interval

logger = logging.getLogger(__name__)


class AvailabilityAggregator:
    """
    Ranks sub-ranges by how many submitted intervals cover them.

    Algorithm (sweep over breakpoints):
    1. Flatten every start and end across all forms and sort them
    2. Walk adjacent distinct pairs; each pair is a candidate sub-range
    3. Count the non-zero-length intervals that fully contain the candidate
    4. Keep candidates with a positive count
    5. Stable sort by count descending, so ties stay in time order

    Runs in O(breakpoints x intervals), which is fine for a poll-sized group.
    """

    def aggregate(self, form_availabilities: Sequence[Sequence[Interval]]) -> List[AggregatedRange]:
        """
        Compute the ranked overlap ranges.

        Args:
            form_availabilities: One sequence of intervals per submitted form

        Returns:
            AggregatedRange objects, highest count first
        """
        intervals = flatten(form_availabilities)

        if not intervals:
            return []

        ranges: List[AggregatedRange] = []

        for start, end in distinct_pairs(breakpoints(intervals)):
            count = count_containing(intervals, start, end)
            if count > 0:
                ranges.append(AggregatedRange(start=start, end=end, count=count))

        # sorted() is stable: equal counts keep ascending start order
        ranked = sorted(ranges, key=lambda r: r.count, reverse=True)

        logger.debug(
            "Aggregated %d intervals from %d forms into %d ranges",
            len(intervals), len(form_availabilities), len(ranked)
        )
        return ranked

    @staticmethod
    def optimal_ranges(ranges: Sequence[AggregatedRange]) -> List[AggregatedRange]:
        """Return the ranges that share the highest count."""
        if not ranges:
            return []
        best = max(r.count for r in ranges)
        return [r for r in ranges if r.count == best]
