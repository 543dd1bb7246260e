"""Process parameters of the temporal ETAS model.

The triggering productivity is not given directly. Instead the caller
chooses the branching ratio (``offspring_fraction``), the mean number of
direct offspring per earthquake, and the productivity is derived from it.

Parameters used here
====================

FK : Frequency ``K / Tref**p`` derived from K of Ogata (1988) and a
     reference time scale Tref. It is used instead of K itself to avoid
     fractional time units.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass

from ..errors import InvalidParameter


# Largest argument of math.exp with a finite result
MAX_LOG_FLOAT = math.log(sys.float_info.max)


def check_parameters(
    background_rate: float,
    min_magnitude: float,
    max_magnitude: float,
    beta: float,
    p: float,
    c: float,
    offspring_fraction: float,
    reference_time: float = 1.0,
) -> None:
    """Validate process parameters.

    Args:
        background_rate: Background rate mu0 (canonical 1/time)
        min_magnitude: Lower magnitude bound Mmin
        max_magnitude: Upper magnitude bound Mmax
        beta: Gutenberg-Richter rate
        p: Omori-Utsu exponent
        c: Omori-Utsu time offset (canonical time)
        offspring_fraction: Branching ratio
        reference_time: Reference time scale Tref (canonical time)

    Raises:
        InvalidParameter: On the first parameter found out of range
    """
    values = {
        "background_rate": background_rate,
        "min_magnitude": min_magnitude,
        "max_magnitude": max_magnitude,
        "beta": beta,
        "p": p,
        "c": c,
        "offspring_fraction": offspring_fraction,
        "reference_time": reference_time,
    }
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidParameter(f"{name} must be finite, got {value}")

    if min_magnitude >= max_magnitude:
        raise InvalidParameter(
            f"Mmin >= Mmax ({min_magnitude} >= {max_magnitude})"
        )
    if p <= 1.0:
        raise InvalidParameter(f"p <= 1 (got {p})")
    if offspring_fraction >= 1.0:
        raise InvalidParameter(
            f"Instable process (offspring ratio {offspring_fraction} >= 1)"
        )
    if offspring_fraction < 0.0:
        raise InvalidParameter(
            f"Offspring ratio needs to be non-negative, got {offspring_fraction}"
        )
    if beta <= 0.0:
        raise InvalidParameter(f"beta must be positive, got {beta}")
    if c <= 0.0:
        raise InvalidParameter(f"c must be positive, got {c}")
    if background_rate <= 0.0:
        raise InvalidParameter(
            f"Background rate must be positive, got {background_rate}"
        )
    if reference_time <= 0.0:
        raise InvalidParameter(
            f"Reference time must be positive, got {reference_time}"
        )


def critical_productivity(
    min_magnitude: float,
    max_magnitude: float,
    p: float,
    c: float,
    reference_time: float,
    beta: float,
    reference_magnitude: float,
) -> float:
    """Productivity FK of a process with branching ratio exactly one.

    Evaluates

        (p-1) * c**(p-1) * (1 - exp(-beta * (Mmax - Mmin)))
          / (beta * exp(beta * (Mmin - Mr)) * (Mmax - Mmin)) / Tref**p

    with the power of ``c`` taken on the ratio ``c / Tref``.

    Returns:
        FK in canonical frequency units
    """
    dM = max_magnitude - min_magnitude
    return (
        (p - 1.0) * math.exp(p * math.log(c / reference_time)) / c
        * (1.0 - math.exp(-beta * dM))
        / (beta * math.exp(beta * (min_magnitude - reference_magnitude)) * dM)
    )


@dataclass(frozen=True)
class ProcessParameters:
    """Immutable, validated parameters of the simulation.

    All time-bearing values are plain floats in canonical units (seconds
    and hertz).

    Attributes:
        mu_0: Background rate
        min_magnitude: Mmin
        max_magnitude: Mmax
        beta: Gutenberg-Richter rate
        reference_magnitude: Mr
        p: Omori-Utsu exponent
        c: Omori-Utsu time offset
        reference_time: Tref
        offspring_fraction: Branching ratio
        FK: Derived triggering productivity
    """
    mu_0: float
    min_magnitude: float
    max_magnitude: float
    beta: float
    reference_magnitude: float
    p: float
    c: float
    reference_time: float
    offspring_fraction: float
    FK: float

    @classmethod
    def create(
        cls,
        mu_0: float,
        min_magnitude: float,
        max_magnitude: float,
        beta: float,
        p: float,
        c: float,
        reference_magnitude: float,
        offspring_fraction: float,
        reference_time: float = 1.0,
    ) -> ProcessParameters:
        """Validate inputs and derive the productivity FK.

        Raises:
            InvalidParameter: If any parameter is out of range
        """
        check_parameters(
            mu_0, min_magnitude, max_magnitude, beta, p, c,
            offspring_fraction, reference_time,
        )
        if not math.isfinite(reference_magnitude):
            raise InvalidParameter(
                f"reference_magnitude must be finite, got {reference_magnitude}"
            )
        # Productivities exp(beta * (M - Mr)) over [Mmin, Mmax] must stay finite
        spread = beta * max(max_magnitude - reference_magnitude,
                            reference_magnitude - min_magnitude)
        if spread >= MAX_LOG_FLOAT:
            raise InvalidParameter(
                f"reference_magnitude {reference_magnitude} too far from "
                f"[{min_magnitude}, {max_magnitude}] for beta={beta}"
            )

        FK = critical_productivity(
            min_magnitude, max_magnitude, p, c, reference_time, beta,
            reference_magnitude,
        ) * offspring_fraction

        return cls(
            mu_0=float(mu_0),
            min_magnitude=float(min_magnitude),
            max_magnitude=float(max_magnitude),
            beta=float(beta),
            reference_magnitude=float(reference_magnitude),
            p=float(p),
            c=float(c),
            reference_time=float(reference_time),
            offspring_fraction=float(offspring_fraction),
            FK=FK,
        )

    @classmethod
    def from_runtime(cls, runtime) -> ProcessParameters:
        """Build parameters from an ``ETASRuntime``."""
        return cls.create(
            mu_0=runtime.background_rate.to_float(),
            min_magnitude=runtime.min_magnitude.to_float(),
            max_magnitude=runtime.max_magnitude.to_float(),
            beta=runtime.beta.to_float(),
            p=runtime.p.to_float(),
            c=runtime.c.to_float(),
            reference_magnitude=runtime.reference_magnitude.to_float(),
            offspring_fraction=runtime.offspring_fraction.to_float(),
            reference_time=runtime.reference_time.to_float(),
        )
