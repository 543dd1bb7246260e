"""High-level adapter for stateful catalog simulation.

The adapter wraps the configuration, runtime and scheduler with a
stateful, user-friendly API for interactive (notebook) use. The
functional entry point ``generate_catalog`` remains available for
callers that manage their own buffers.
"""

from __future__ import annotations
from typing import Optional, Tuple

import numpy as np

from .etas.config import ETASConfig
from .etas.process import ProcessParameters
from .etas.rng import UniformStream
from .etas.scheduler import EventScheduler, CatalogEvent
from .etas.kernel import get_branching_ratio, get_stationary_rate


__all__ = [
    'ETASAdapter',
]


class ETASAdapter:
    """High-level adapter for the temporal ETAS process with stateful API.

    Events are produced one at a time in increasing time order. The
    configured burn-in is run on construction and on every reset, so the
    first event returned is the first recorded one.

    Example:
        >>> config = ETASConfig(
        ...     background_rate="1 / day",
        ...     min_magnitude=3.0,
        ...     max_magnitude=8.0,
        ...     beta=2.3,
        ...     p=1.2,
        ...     c="0.01 day",
        ...     offspring_fraction=0.3,
        ...     seed=42
        ... )
        >>> adapter = ETASAdapter(config)
        >>> event = adapter.step()
        >>> times, magnitudes = adapter.simulate(1000)

    Args:
        config: ETASConfig instance

    Attributes:
        config: The ETASConfig used to build the runtime
        runtime: ETASRuntime structure with unit metadata
        process: Derived ProcessParameters
        scheduler: Current EventScheduler
    """

    def __init__(self, config: ETASConfig):
        self.config = config
        self.runtime = config.to_runtime()
        self.process = ProcessParameters.from_runtime(self.runtime)
        self.reset()

    def step(self) -> CatalogEvent:
        """Produce the next earthquake (stateful).

        Returns:
            CatalogEvent with time (seconds) and magnitude
        """
        return self.scheduler.next_event()

    def simulate(self, n_events: int) -> Tuple[np.ndarray, np.ndarray]:
        """Produce the next ``n_events`` earthquakes.

        Args:
            n_events: Number of events

        Returns:
            Tuple of (times in seconds, magnitudes)
        """
        times = np.empty(n_events)
        magnitudes = np.empty(n_events)
        for i in range(n_events):
            times[i], magnitudes[i] = self.scheduler.next_event()
        return times, magnitudes

    def reset(self, seed: Optional[int] = None):
        """Restart the process from time zero and rerun the burn-in.

        Args:
            seed: New random seed (optional, keeps configured seed if None)
        """
        if seed is not None:
            self.config = self.config.model_copy(update={'seed': seed})
        self.uniform = UniformStream(self.config.seed)
        self.scheduler = EventScheduler(self.process, self.uniform)
        self.scheduler.skip(self.config.n_skip)

    def get_branching_ratio(self) -> float:
        """Get the mean number of direct offspring per event."""
        return get_branching_ratio(self.process)

    def get_stationary_rate(self) -> float:
        """Get the long-term mean event rate (1/second)."""
        return get_stationary_rate(self.process)

    def get_state(self) -> dict:
        """Get current state as dictionary of Python types.

        Returns:
            Dictionary with state values including:
            - time: Time of the most recent event
            - magnitude: Magnitude of the most recent event
            - next_background: Pending background occurrence time
            - event_count: Events produced, burn-in included
            - background_count: Background events among them
            - offspring_count: Triggered events among them
            - active_sources: Excitation sources still able to trigger
            - draws: Uniform variates consumed
        """
        scheduler = self.scheduler
        return {
            'time': float(scheduler.time),
            'magnitude': float(scheduler.magnitude),
            'next_background': float(scheduler.next_background),
            'event_count': int(scheduler.event_count),
            'background_count': int(scheduler.background_count),
            'offspring_count': int(scheduler.offspring_count),
            'active_sources': int(scheduler.active_sources),
            'draws': int(self.uniform.draws),
        }
