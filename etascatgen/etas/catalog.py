"""Catalog generation driver.

``generate_catalog`` is the single entry operation: it validates all
inputs eagerly, runs the scheduler through a burn-in of ``N_skip``
discarded events and then records exactly as many events as the caller's
output buffers hold.
"""

from __future__ import annotations

import logging
import numbers
from typing import Tuple

import numpy as np
import pint

from ..errors import InvalidParameter, SizeMismatch
from ..units import UnitManager, QuantityInput
from .config import ETASConfig
from .process import ProcessParameters
from .rng import UniformStream, DEFAULT_BLOCK_SIZE, MAX_SEED
from .scheduler import EventScheduler, CatalogEvent

logger = logging.getLogger(__name__)


class CatalogBuffer:
    """Pre-sized output sequences filled in event order.

    Events are staged internally and only copied into the caller's
    sequences by ``commit``, so a run that does not complete leaves them
    untouched.

    Args:
        magnitudes: Output sequence for magnitudes
        times: Output sequence for times, optionally a pint Quantity
            wrapping an array; times are then written in its units.

    Raises:
        SizeMismatch: If the sequences differ in length
        InvalidParameter: If ``times`` carries non-time units
    """

    def __init__(self, magnitudes, times):
        if len(magnitudes) != len(times):
            raise SizeMismatch(
                f"Size of M and t not compatible ({len(magnitudes)} != {len(times)})"
            )

        self.magnitudes = magnitudes
        if isinstance(times, pint.Quantity):
            try:
                self.time_factor = UnitManager.instance().canonical_factor(
                    times.units, "time"
                )
            except ValueError as e:
                raise InvalidParameter(f"Output times need time units: {e}")
            self.times = times.magnitude
        else:
            self.time_factor = 1.0
            self.times = times

        self.size = len(magnitudes)
        self._M = np.empty(self.size)
        self._t = np.empty(self.size)
        self._n = 0

    def __len__(self) -> int:
        return self.size

    @property
    def full(self) -> bool:
        return self._n == self.size

    def append(self, event: CatalogEvent) -> None:
        self._t[self._n] = event.time
        self._M[self._n] = event.magnitude
        self._n += 1

    def commit(self) -> None:
        """Write staged events into the output sequences."""
        _write(self.magnitudes, self._M)
        _write(self.times, self._t / self.time_factor)


def _write(out, values: np.ndarray) -> None:
    if isinstance(out, np.ndarray):
        out[...] = values
    else:
        out[:] = values.tolist()


def _canonical(value: QuantityInput, dimension: str, default_unit: str, name: str) -> float:
    manager = UnitManager.instance()
    try:
        quantity = manager.ensure_quantity(value, default_unit)
        canonical, _ = manager.to_canonical(quantity, dimension)
    except ValueError as e:
        raise InvalidParameter(f"{name}: {e}")
    return float(canonical)


def run_catalog(
    process: ProcessParameters,
    n_skip: int,
    seed: int,
    buffer: CatalogBuffer,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> EventScheduler:
    """Fill ``buffer`` after discarding ``n_skip`` events.

    Args:
        process: Validated process parameters
        n_skip: Burn-in length
        seed: Seed of the uniform stream
        buffer: Output buffer
        block_size: Variates generated per JAX call

    Returns:
        The scheduler in its final state
    """
    scheduler = EventScheduler(process, UniformStream(seed, block_size))
    logger.debug(
        "Generating %d events after %d burn-in events (seed %d)",
        len(buffer), n_skip, seed
    )

    scheduler.skip(n_skip)
    logger.debug(
        "Burn-in finished at t=%g with %d active sources",
        scheduler.time, scheduler.active_sources
    )

    while not buffer.full:
        buffer.append(scheduler.next_event())
    buffer.commit()

    logger.debug(
        "Catalog complete: %d background and %d triggered events",
        scheduler.background_count, scheduler.offspring_count
    )
    return scheduler


def generate_catalog(
    mu_0: QuantityInput,
    Mmin: float,
    Mmax: float,
    beta: float,
    p: float,
    c: QuantityInput,
    Mr: float,
    offspring_fraction: float,
    N_skip: int,
    seed: int,
    M,
    t,
    *,
    reference_time: QuantityInput = "1 second",
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> None:
    """Simulate an ETAS catalog into caller-allocated buffers.

    Args:
        mu_0: Background rate; bare numbers are taken in 1/second
        Mmin: Lower magnitude bound
        Mmax: Upper magnitude bound
        beta: Gutenberg-Richter rate
        p: Omori-Utsu exponent (> 1)
        c: Omori-Utsu time offset; bare numbers are taken in seconds
        Mr: Reference magnitude of the productivity law
        offspring_fraction: Branching ratio in [0, 1)
        N_skip: Number of burn-in events discarded
        seed: Non-negative seed
        M: Output magnitudes, length N
        t: Output times, length N; numpy array (seconds) or pint Quantity
        reference_time: Reference time scale Tref
        block_size: Variates generated per JAX call

    Raises:
        InvalidParameter: If a parameter is out of range
        SizeMismatch: If ``M`` and ``t`` differ in length

    Example:
        >>> M = np.empty(1000)
        >>> t = np.empty(1000)
        >>> generate_catalog("1 Hz", 3.0, 8.0, math.log(10), 1.2, "0.01 s",
        ...                  3.0, 0.3, 100, 42, M, t)
    """
    mu_0 = _canonical(mu_0, "1/time", "1/second", "mu_0")
    c = _canonical(c, "time", "second", "c")
    Tref = _canonical(reference_time, "time", "second", "reference_time")

    process = ProcessParameters.create(
        mu_0=mu_0,
        min_magnitude=Mmin,
        max_magnitude=Mmax,
        beta=beta,
        p=p,
        c=c,
        reference_magnitude=Mr,
        offspring_fraction=offspring_fraction,
        reference_time=Tref,
    )

    if not isinstance(N_skip, numbers.Integral) or N_skip < 0:
        raise InvalidParameter(f"N_skip must be a non-negative integer, got {N_skip}")
    if not isinstance(seed, numbers.Integral) or not 0 <= seed <= MAX_SEED:
        raise InvalidParameter(
            f"seed must be an integer in [0, 2**64 - 1], got {seed}"
        )

    buffer = CatalogBuffer(M, t)

    run_catalog(process, int(N_skip), int(seed), buffer, block_size)


def simulate_catalog(
    config: ETASConfig,
    n_events: int,
) -> Tuple[pint.Quantity, np.ndarray]:
    """Simulate ``n_events`` events after the configured burn-in.

    Args:
        config: ETAS configuration
        n_events: Number of recorded events

    Returns:
        Tuple of (times as a pint Quantity in seconds, magnitudes)
    """
    if n_events < 0:
        raise ValueError(f"n_events must be non-negative, got {n_events}")

    manager = UnitManager.instance()
    M = np.empty(n_events)
    t = np.empty(n_events)
    run_catalog(config.to_process(), config.n_skip, config.seed, CatalogBuffer(M, t))
    return manager.registry.Quantity(t, "second"), M
