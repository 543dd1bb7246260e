"""Unit management for etascatgen using pint.

This module provides the foundation for unit-aware catalog generation:
- UnitManager: Singleton registry management and unit conversions
- UnitSpec: Metadata for units that survives JAX transformations
- Conversion utilities between pint quantities and canonical floats

Simulated time is abstract: the core only needs rates and times to be
expressed in reciprocal units, which is what the canonical units ensure.
"""

from __future__ import annotations

import pint
from dataclasses import dataclass
from typing import Union, Optional, ClassVar

# Type alias for inputs that can be converted to quantities
QuantityInput = Union[str, float, int, pint.Quantity]


@dataclass(frozen=True)
class UnitSpec:
    """Immutable metadata for units that can be attached to JAX arrays.

    Attributes:
        dimension: Physical dimension string (e.g., "time", "1/time")
        symbol: Unit symbol string (e.g., "day", "1 / year")
        to_canonical: Factor to convert from this unit to canonical
    """
    dimension: str
    symbol: str
    to_canonical: float = 1.0

    def __hash__(self):
        return hash((self.dimension, self.symbol, self.to_canonical))


class UnitManager:
    """Manages unit registry and conversions for etascatgen.

    Provides:
    - Singleton pint.UnitRegistry access
    - Canonical unit definitions per dimension
    - Conversion utilities to/from canonical floats
    """

    _instance: ClassVar[Optional[UnitManager]] = None

    def __init__(self, registry: Optional[pint.UnitRegistry] = None):
        """Initialize with optional custom registry.

        Args:
            registry: Custom pint registry. If None, creates default.
        """
        self.registry = registry or pint.UnitRegistry()

        self._setup_aliases()

        # Internal units everything is converted to
        self.canonical_units = {
            "time": self.registry.second,
            "frequency": self.registry.Hz,
            "1/time": self.registry.Hz,  # Alternative name for frequency
            "dimensionless": self.registry.dimensionless,
        }

    @classmethod
    def instance(cls) -> UnitManager:
        """Get or create the singleton instance.

        Returns:
            The global UnitManager instance
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _setup_aliases(self) -> None:
        """Set up time aliases commonly used for catalogs."""
        if not hasattr(self.registry, 'day'):
            self.registry.define('day = 24 * hour')
        if not hasattr(self.registry, 'week'):
            self.registry.define('week = 7 * day')
        if not hasattr(self.registry, 'year'):
            self.registry.define('year = 365.25 * day')

    def ensure_quantity(
        self,
        value: QuantityInput,
        default_unit: Optional[str] = None
    ) -> pint.Quantity:
        """Convert input to a pint Quantity.

        Args:
            value: String, number, or Quantity to convert
            default_unit: Unit to use if value is a bare number

        Returns:
            pint.Quantity object

        Raises:
            ValueError: If string cannot be parsed as quantity
        """
        if isinstance(value, pint.Quantity):
            if value._REGISTRY is not self.registry:
                # Quantities from a user registry are rebuilt in ours
                return self.registry.Quantity(value.magnitude, str(value.units))
            return value
        elif isinstance(value, str):
            try:
                q = self.registry(value)
            except Exception as e:
                raise ValueError(f"Cannot parse '{value}' as quantity: {e}")
            # A bare number in a string parses to a plain float
            if not isinstance(q, pint.Quantity):
                q = self.registry.Quantity(q, default_unit or 'dimensionless')
            return q
        else:
            return self.registry.Quantity(value, default_unit or 'dimensionless')

    def to_canonical(
        self,
        quantity: pint.Quantity,
        dimension: str
    ) -> tuple[float, UnitSpec]:
        """Convert quantity to canonical units for dimension.

        Args:
            quantity: pint Quantity to convert
            dimension: Target dimension name

        Returns:
            Tuple of (canonical_value, unit_spec)

        Raises:
            ValueError: If quantity dimension doesn't match target
        """
        if dimension not in self.canonical_units:
            return (
                quantity.magnitude,
                UnitSpec(
                    dimension=dimension,
                    symbol=str(quantity.units),
                    to_canonical=1.0
                )
            )

        canonical_unit = self.canonical_units[dimension]

        try:
            canonical_quantity = quantity.to(canonical_unit)
        except pint.DimensionalityError as e:
            raise ValueError(
                f"Cannot convert {quantity} to dimension '{dimension}': {e}"
            )

        # Factor from units rather than magnitudes so zero values work
        # e.g., for days to seconds: 1 day = 86400 seconds, so factor = 86400
        original_units = quantity.units
        one_original = self.registry.Quantity(1.0, original_units)
        conversion_factor = float(one_original.to(canonical_unit).magnitude)

        return (
            canonical_quantity.magnitude,
            UnitSpec(
                dimension=dimension,
                symbol=str(original_units),
                to_canonical=conversion_factor
            )
        )

    def from_canonical(
        self,
        value: float,
        spec: UnitSpec
    ) -> pint.Quantity:
        """Reconstruct pint Quantity from canonical value and spec.

        Args:
            value: Canonical value (float or array)
            spec: UnitSpec with dimension and symbol info

        Returns:
            pint.Quantity in original units
        """
        # original * to_canonical = canonical
        original_value = value / spec.to_canonical if spec.to_canonical != 0 else value
        return self.registry.Quantity(original_value, spec.symbol)

    def canonical_factor(self, units: Union[str, pint.Unit], dimension: str) -> float:
        """Factor converting one of ``units`` into canonical units.

        Args:
            units: Unit (or unit string) to convert from
            dimension: Dimension the unit must have

        Returns:
            Multiplicative factor, e.g. 86400.0 for ("day", "time")

        Raises:
            ValueError: If the unit has the wrong dimension
        """
        _, spec = self.to_canonical(
            self.registry.Quantity(1.0, str(units)), dimension
        )
        return spec.to_canonical
