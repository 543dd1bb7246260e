"""Runtime structure for the ETAS process with Penzai/JAX."""

from __future__ import annotations

from penzai.core import struct

from ..runtime import QuantityNode


@struct.pytree_dataclass
class ETASRuntime(struct.Struct):
    """Runtime ETAS parameters.

    All fields are QuantityNodes holding canonical values with unit metadata.
    Penzai's @struct.pytree_dataclass registers this as a JAX pytree.
    """

    background_rate: QuantityNode
    min_magnitude: QuantityNode
    max_magnitude: QuantityNode
    beta: QuantityNode
    p: QuantityNode
    c: QuantityNode
    reference_magnitude: QuantityNode
    offspring_fraction: QuantityNode
    reference_time: QuantityNode
