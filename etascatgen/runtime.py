"""Runtime structures using Penzai for JAX-compatible unit-aware values.

This module provides the Penzai struct that carries unit metadata next to
a value while staying compatible with JAX transformations.
"""

from __future__ import annotations

import dataclasses
import jax
import numpy as np
import pint
from penzai.core import struct

from .units import UnitManager, UnitSpec


# Register UnitSpec as static so it can be used as pytree metadata
jax.tree_util.register_static(UnitSpec)


@struct.pytree_dataclass
class QuantityNode(struct.Struct):
    """A Penzai struct that holds a value with unit metadata.

    The value field is a pytree node (participates in transformations),
    while the units field is treated as static metadata.

    Attributes:
        value: Array containing the numerical value in canonical units
        units: UnitSpec metadata describing the units
    """
    value: jax.Array
    units: UnitSpec = dataclasses.field(metadata={'pytree_node': False})

    @classmethod
    def from_float(
        cls,
        value: float,
        units: UnitSpec,
        dtype: np.dtype = np.float64
    ) -> QuantityNode:
        """Create a QuantityNode from a float value.

        Args:
            value: Numerical value in canonical units
            units: Unit specification
            dtype: Array dtype (default float64, kept on the host so no
                precision is lost when JAX runs without x64)

        Returns:
            QuantityNode instance
        """
        return cls(
            value=np.asarray(value, dtype=dtype),
            units=units
        )

    @classmethod
    def dimensionless(cls, value: float) -> QuantityNode:
        """Create a dimensionless QuantityNode."""
        return cls.from_float(value, UnitSpec("dimensionless", "dimensionless", 1.0))

    def to_float(self) -> float:
        """Extract the float value from the node.

        Returns:
            Float value (assumes scalar array)
        """
        return float(self.value)

    def to_quantity(self, manager: UnitManager = None) -> pint.Quantity:
        """Convert back to a pint Quantity in the original units."""
        if manager is None:
            manager = UnitManager.instance()
        return manager.from_canonical(self.to_float(), self.units)

    def __repr__(self) -> str:
        """Pretty representation showing value and units."""
        return f"QuantityNode({self.value}, {self.units.symbol})"
