"""ETAS process configuration with unit-aware Pydantic models.

This module provides configuration for the temporal Epidemic-Type
Aftershock Sequence model: a Poisson background, Omori-Utsu triggering
and a truncated Gutenberg-Richter magnitude law.
"""

from __future__ import annotations

import math
import warnings
from typing import Tuple, Optional

import pint
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from ..units import UnitManager, UnitSpec
from ..fields import quantity_field
from ..runtime import QuantityNode
from .process import ProcessParameters
from .rng import MAX_SEED
from .runtime import ETASRuntime


# Branching ratios above this need very long burn-ins
NEAR_CRITICAL = 0.95


class ETASConfig(BaseModel):
    """Configuration for the temporal ETAS process.

    The conditional intensity is:
        λ(t) = μ₀ + Σ FK * exp(β (Mᵢ - Mr)) * (Tref / (t - tᵢ + c))^p

    Where FK follows from the requested branching ratio.

    Example:
        >>> config = ETASConfig(
        ...     background_rate="1 / day",
        ...     min_magnitude=3.0,
        ...     max_magnitude=8.0,
        ...     beta=math.log(10),
        ...     p=1.2,
        ...     c="0.01 day",
        ...     offspring_fraction=0.3,
        ...     seed=42
        ... )
    """

    background_rate: Tuple[float, UnitSpec] = Field(
        description="Background (Poisson) event rate mu0 (events/time)"
    )

    min_magnitude: float = Field(description="Lower magnitude bound Mmin")
    max_magnitude: float = Field(description="Upper magnitude bound Mmax")

    beta: float = Field(
        description="Gutenberg-Richter rate (b-value times ln 10)"
    )

    p: float = Field(description="Omori-Utsu exponent (> 1)")

    c: Tuple[float, UnitSpec] = Field(
        description="Omori-Utsu time offset"
    )

    reference_magnitude: Optional[float] = Field(
        default=None,
        description="Reference magnitude Mr of the productivity law (default: Mmin)"
    )

    offspring_fraction: float = Field(
        description="Branching ratio, mean number of direct offspring (< 1)"
    )

    reference_time: Tuple[float, UnitSpec] = Field(
        default="1 second",
        validate_default=True,
        description="Reference time scale Tref used to normalise powers"
    )

    n_skip: int = Field(
        default=1000,
        ge=0,
        description="Number of burn-in events discarded before recording"
    )

    seed: int = Field(
        default=0,
        ge=0,
        le=MAX_SEED,
        description="Random seed for catalog generation"
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Validators
    _validate_rate = field_validator("background_rate", mode="before")(
        quantity_field("1/time", "1/second")
    )

    _validate_c = field_validator("c", mode="before")(
        quantity_field("time", "second")
    )

    _validate_reference_time = field_validator("reference_time", mode="before")(
        quantity_field("time", "second")
    )

    @field_validator("background_rate", "c", "reference_time", mode="after")
    def _validate_positive(cls, value: Tuple[float, UnitSpec]) -> Tuple[float, UnitSpec]:
        """Ensure rates and times are positive."""
        if value[0] <= 0:
            raise ValueError(f"Value must be positive, got {value[0]}")
        return value

    @field_validator("beta", mode="after")
    def _validate_beta(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"beta must be positive, got {value}")
        return value

    @model_validator(mode="after")
    def _validate_process(self) -> ETASConfig:
        """Run the same range checks as the catalog generator."""
        self.to_process()
        if self.offspring_fraction >= NEAR_CRITICAL:
            warnings.warn(
                f"Offspring fraction {self.offspring_fraction} is close to "
                "critical; clusters become very long and the burn-in of "
                f"{self.n_skip} events may not be representative.",
                RuntimeWarning,
                stacklevel=2
            )
        return self

    @property
    def Mr(self) -> float:
        """Effective reference magnitude."""
        if self.reference_magnitude is None:
            return self.min_magnitude
        return self.reference_magnitude

    @property
    def b_value(self) -> float:
        """Gutenberg-Richter b-value ``beta / ln 10``."""
        return self.beta / math.log(10.0)

    def to_process(self) -> ProcessParameters:
        """Build validated simulation parameters from canonical values."""
        return ProcessParameters.create(
            mu_0=self.background_rate[0],
            min_magnitude=self.min_magnitude,
            max_magnitude=self.max_magnitude,
            beta=self.beta,
            p=self.p,
            c=self.c[0],
            reference_magnitude=self.Mr,
            offspring_fraction=self.offspring_fraction,
            reference_time=self.reference_time[0],
        )

    def to_runtime(self) -> ETASRuntime:
        """Convert to runtime structure.

        Returns:
            ETASRuntime structure with QuantityNodes
        """
        def to_node(value_spec: Tuple[float, UnitSpec]) -> QuantityNode:
            return QuantityNode.from_float(value_spec[0], value_spec[1])

        return ETASRuntime(
            background_rate=to_node(self.background_rate),
            min_magnitude=QuantityNode.dimensionless(self.min_magnitude),
            max_magnitude=QuantityNode.dimensionless(self.max_magnitude),
            beta=QuantityNode.dimensionless(self.beta),
            p=QuantityNode.dimensionless(self.p),
            c=to_node(self.c),
            reference_magnitude=QuantityNode.dimensionless(self.Mr),
            offspring_fraction=QuantityNode.dimensionless(self.offspring_fraction),
            reference_time=to_node(self.reference_time),
        )

    @staticmethod
    def from_runtime(runtime: ETASRuntime, manager: Optional[UnitManager] = None) -> ETASConfigOutput:
        """Create output config from runtime structure.

        Args:
            runtime: ETASRuntime to convert
            manager: Optional UnitManager instance

        Returns:
            ETASConfigOutput with pint quantities
        """
        if manager is None:
            manager = UnitManager.instance()

        return ETASConfigOutput(
            background_rate=runtime.background_rate.to_quantity(manager),
            min_magnitude=runtime.min_magnitude.to_float(),
            max_magnitude=runtime.max_magnitude.to_float(),
            beta=runtime.beta.to_float(),
            p=runtime.p.to_float(),
            c=runtime.c.to_quantity(manager),
            reference_magnitude=runtime.reference_magnitude.to_float(),
            offspring_fraction=runtime.offspring_fraction.to_float(),
            reference_time=runtime.reference_time.to_quantity(manager),
        )

    def summary(self, format: str = "markdown") -> str:
        """Generate summary of the ETAS configuration.

        Args:
            format: Output format ('markdown', 'text', or 'dict')

        Returns:
            Formatted summary string
        """
        if format == "dict":
            return str(self.model_dump())

        from .kernel import get_stationary_rate

        manager = UnitManager.instance()
        process = self.to_process()
        lines = []

        if format == "markdown":
            lines.append("# ETAS Process Configuration\n")
            lines.append("| Parameter | Value | Units |")
            lines.append("|-----------|--------|-------|")

            def format_row(name: str, value, units: str = "-") -> str:
                return f"| {name} | {value:.4g} | {units} |"

        else:  # text format
            lines.append("ETAS Process Configuration")
            lines.append("-" * 40)

            def format_row(name: str, value, units: str = "") -> str:
                return f"  {name}: {value:.4g} {units}".rstrip()

        def format_quantity(name: str, value: Tuple[float, UnitSpec]) -> str:
            qty = manager.from_canonical(value[0], value[1])
            return format_row(name, qty.magnitude, str(qty.units))

        lines.append(format_quantity("Background rate", self.background_rate))
        lines.append(format_row("Mmin", self.min_magnitude))
        lines.append(format_row("Mmax", self.max_magnitude))
        lines.append(format_row("beta", self.beta))
        lines.append(format_row("b-value", self.b_value))
        lines.append(format_row("p", self.p))
        lines.append(format_quantity("c", self.c))
        lines.append(format_row("Mr", self.Mr))
        lines.append(format_row("Offspring fraction", self.offspring_fraction))
        lines.append(format_row("FK", process.FK, "Hz"))
        lines.append(format_row("Stationary rate", get_stationary_rate(process), "Hz"))

        lines.append("")
        lines.append(f"Burn-in: {self.n_skip} events, seed {self.seed}")

        return "\n".join(lines)


class ETASConfigOutput(BaseModel):
    """Output format for ETAS configuration with pint quantities."""

    background_rate: pint.Quantity
    min_magnitude: float
    max_magnitude: float
    beta: float
    p: float
    c: pint.Quantity
    reference_magnitude: float
    offspring_fraction: float
    reference_time: pint.Quantity

    model_config = ConfigDict(arbitrary_types_allowed=True)
