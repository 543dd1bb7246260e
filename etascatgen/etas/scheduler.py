"""Event-ordering engine of the ETAS branching process.

Two lanes of future candidate times are merged into one time-ordered
stream: a scalar next background time and a min-heap of active
excitation sources keyed by their next candidate time. The offspring lane
is expanded lazily, one realized earthquake at a time.
"""

from __future__ import annotations

import heapq
import math
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple

from .process import ProcessParameters
from .kernel import (
    next_background_occurrence,
    next_single_occurrence,
    draw_magnitude,
)


class CatalogEvent(NamedTuple):
    """A realized earthquake."""
    time: float
    magnitude: float


@dataclass(order=True)
class ExcitationSource:
    """An active triggering lane spawned by one earthquake.

    Ordered by ``tnext`` only so that the heap pops the earliest source.

    Attributes:
        tnext: Next candidate occurrence time
        ti: Origin time
        Mi: Origin magnitude
    """
    tnext: float
    ti: float = field(compare=False)
    Mi: float = field(compare=False)


class EventScheduler:
    """Produces the ETAS catalog one event at a time.

    Every call of ``next_event`` consumes exactly three uniform variates,
    in this order:

    1. the redraw of the lane that produced the event (background time,
       or the next descendant of the popped source),
    2. the magnitude,
    3. the first descendant of the new earthquake.

    The constructor consumes one more variate for the first background
    time.

    Args:
        params: Validated process parameters
        uniform: Callable returning the next uniform (0, 1) variate

    Attributes:
        time: Time of the most recent event
        magnitude: Magnitude of the most recent event (NaN before the first)
        next_background: Pending background occurrence time
        sources: Heap of active excitation sources
        event_count: Events produced so far
        background_count: Background events among them
    """

    def __init__(
        self,
        params: ProcessParameters,
        uniform: Callable[[], float]
    ):
        self.params = params
        self.uniform = uniform

        self.time = 0.0
        self.magnitude = math.nan
        self.sources: List[ExcitationSource] = []
        self.event_count = 0
        self.background_count = 0

        self.next_background = next_background_occurrence(
            params, uniform(), self.time
        )

    @property
    def offspring_count(self) -> int:
        """Number of triggered events produced so far."""
        return self.event_count - self.background_count

    @property
    def active_sources(self) -> int:
        """Number of excitation sources that may still produce offspring."""
        return len(self.sources)

    def next_event(self) -> CatalogEvent:
        """Advance the process to its next earthquake.

        Returns:
            The new event
        """
        params = self.params
        uniform = self.uniform
        sources = self.sources

        if not sources or self.next_background < sources[0].tnext:
            # Background event
            t = self.next_background
            self.next_background = next_background_occurrence(params, uniform(), t)
            self.background_count += 1
        else:
            # Descendant of the earliest source; re-arm it or retire it
            source = sources[0]
            t = source.tnext
            tnext = next_single_occurrence(params, uniform(), source.ti, source.Mi, t)
            if tnext is None:
                heapq.heappop(sources)
            else:
                source.tnext = tnext
                heapq.heapreplace(sources, source)

        M = draw_magnitude(params, uniform())

        # Does this earthquake trigger another?
        tnext = next_single_occurrence(params, uniform(), t, M, t)
        if tnext is not None:
            heapq.heappush(sources, ExcitationSource(tnext, t, M))

        self.time = t
        self.magnitude = M
        self.event_count += 1
        return CatalogEvent(t, M)

    def skip(self, n: int) -> None:
        """Produce and discard ``n`` events."""
        for _ in range(n):
            self.next_event()
