"""ETAS kernel functions.

Closed-form inverse-CDF samplers for the background lane, the offspring
lanes and the magnitudes, together with the Omori-Utsu intensities they
invert. Each sampler consumes exactly one uniform variate ``q`` in (0, 1).

The scalar functions work on Python floats since the event loop is
inherently sequential. ``conditional_intensity`` is vectorized with JAX
for evaluating a whole history at once.
"""

from __future__ import annotations

import math
from typing import Optional

import jax.numpy as jnp
import numpy as np

from .process import ProcessParameters, MAX_LOG_FLOAT


def productivity(params: ProcessParameters, M: float) -> float:
    """Magnitude-dependent productivity scaling ``exp(beta * (M - Mr))``."""
    return math.exp(params.beta * (M - params.reference_magnitude))


def source_intensity(
    params: ProcessParameters,
    t: float,
    ti: float,
    Mi: float
) -> float:
    """Omori-Utsu rate of a single excitation source.

        f(Mi) * FK * (Tref / (t - ti + c))**p

    Args:
        params: Process parameters
        t: Evaluation time
        ti: Origin time of the source
        Mi: Origin magnitude of the source

    Returns:
        Rate (canonical 1/time), zero before the origin time
    """
    if t < ti:
        return 0.0
    return params.FK * math.exp(
        params.beta * (Mi - params.reference_magnitude)
        + params.p * math.log(params.reference_time / (t - ti + params.c))
    )


def integrated_intensity(
    params: ProcessParameters,
    ti: float,
    Mi: float,
    tl: float,
    tr: float
) -> float:
    """Expected number of offspring of one source within ``[tl, tr]``.

    With FK = K / Tref**p,

        Tref * FK * ((t - ti + c) / Tref)**(1-p) = K * (t - ti + c)**(1-p),

    so all powers act on dimensionless ratios.
    """
    _1mp = 1.0 - params.p
    Tref = params.reference_time
    return productivity(params, Mi) * Tref * params.FK / _1mp * (
        math.pow((tr - ti + params.c) / Tref, _1mp)
        - math.pow((tl - ti + params.c) / Tref, _1mp)
    )


def integrated_intensity_to_infinity(
    params: ProcessParameters,
    ti: float,
    Mi: float,
    tl: float
) -> float:
    """Expected number of offspring of one source after ``tl``."""
    _1mp = 1.0 - params.p
    Tref = params.reference_time
    return -productivity(params, Mi) * Tref * params.FK / _1mp * math.pow(
        (tl - ti + params.c) / Tref, _1mp
    )


def expected_offspring(params: ProcessParameters, M: float) -> float:
    """Expected number of direct offspring of a magnitude ``M`` event."""
    return integrated_intensity_to_infinity(params, 0.0, M, 0.0)


def next_background_occurrence(
    params: ProcessParameters,
    q: float,
    tl: float
) -> float:
    """Next occurrence of the homogeneous Poisson background after ``tl``."""
    return tl - math.log(q) / params.mu_0


def draw_magnitude(params: ProcessParameters, q: float) -> float:
    """Inverse CDF of the Gutenberg-Richter law truncated to [Mmin, Mmax]."""
    Mmin = params.min_magnitude
    beta = params.beta
    M = Mmin - math.log(
        1.0 - q * (1.0 - math.exp(-beta * (params.max_magnitude - Mmin)))
    ) / beta
    # Rounding may push q close to 1 a hair beyond the upper bound
    return min(M, params.max_magnitude)


def next_single_occurrence(
    params: ProcessParameters,
    q: float,
    ti: float,
    Mi: float,
    tl: float
) -> Optional[float]:
    """Time of the next descendant of one source after ``tl``.

    Inverts the survival function of the non-homogeneous Poisson process
    with intensity ``f(Mi) * FK * (Tref / (t - ti + c))**p``, conditioned
    on no occurrence since ``tl``.

    Args:
        params: Process parameters
        q: Uniform variate in (0, 1)
        ti: Origin time of the source
        Mi: Origin magnitude of the source
        tl: Lower time bound (>= ti)

    Returns:
        The next occurrence time, or None if the source produces no
        further descendant within finite time.
    """
    # Early exit if no occurrence in finite time:
    if q <= math.exp(-integrated_intensity_to_infinity(params, ti, Mi, tl)):
        return None

    # A factor Tref**(1-p) is extracted from the outer logarithm. Since
    # K = FK * Tref**p, the second summand becomes 1 / (FK * Tref).
    _1mp = 1.0 - params.p
    Tref = params.reference_time
    remaining = (
        math.pow((tl - ti + params.c) / Tref, _1mp)
        - _1mp / (productivity(params, Mi) * params.FK * Tref) * math.log(q)
    )
    # Just above the threshold rounding can leave nothing to invert
    if remaining <= 0.0:
        return None
    exponent = math.log(remaining) / _1mp
    # Occurrences beyond the float range never happen
    if exponent >= MAX_LOG_FLOAT - math.log(Tref):
        return None
    tnext = ti - params.c + Tref * math.exp(exponent)
    # Rounding must not move the occurrence before tl
    return max(tnext, tl)


def conditional_intensity(
    params: ProcessParameters,
    t,
    times,
    magnitudes
) -> jnp.ndarray:
    """Total intensity ``mu0 + sum_i source_intensity(t, ti, Mi)``.

    Args:
        params: Process parameters
        t: Evaluation time(s), scalar or 1-d array
        times: Event history times
        magnitudes: Event history magnitudes

    Returns:
        Intensity at each evaluation time (canonical 1/time)
    """
    t = jnp.atleast_1d(jnp.asarray(t))
    ti = jnp.asarray(np.asarray(times))
    Mi = jnp.asarray(np.asarray(magnitudes))

    dt = t[:, None] - ti[None, :]
    active = dt >= 0.0
    # Keep the power well defined for sources after t; they are masked
    safe_dt = jnp.where(active, dt, 0.0)
    rates = params.FK * jnp.exp(
        params.beta * (Mi[None, :] - params.reference_magnitude)
        + params.p * jnp.log(params.reference_time / (safe_dt + params.c))
    )
    return params.mu_0 + jnp.sum(jnp.where(active, rates, 0.0), axis=1)


def get_branching_ratio(params: ProcessParameters) -> float:
    """Mean number of direct offspring per earthquake.

    Averages ``expected_offspring`` over the truncated Gutenberg-Richter
    law in closed form. For a valid process this reproduces the
    configured ``offspring_fraction``.
    """
    beta = params.beta
    dM = params.max_magnitude - params.min_magnitude
    mean_productivity = (
        beta * math.exp(beta * (params.min_magnitude - params.reference_magnitude))
        * dM / (1.0 - math.exp(-beta * dM))
    )
    return expected_offspring(params, params.reference_magnitude) * mean_productivity


def get_stationary_rate(params: ProcessParameters) -> float:
    """Long-term mean event rate ``mu0 / (1 - n)`` of the subcritical process."""
    return params.mu_0 / (1.0 - params.offspring_fraction)
