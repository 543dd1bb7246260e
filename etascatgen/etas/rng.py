"""Seeded source of uniform variates for the event loop.

The scheduler consumes uniforms one at a time, so bits are drawn from
JAX in fixed-size blocks and handed out as Python floats. Two 32-bit
words form a 52-bit mantissa, giving doubles on the open interval (0, 1)
independent of whether JAX runs with x64 enabled.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
import numpy as np


DEFAULT_BLOCK_SIZE = 3 * 4096

# Seeds span the unsigned 64-bit range
MAX_SEED = 2 ** 64 - 1

_SHIFT = np.uint64(6)
_HIGH = np.uint64(26)
_SCALE = 2.0 ** -52


class UniformStream:
    """Deterministic stream of uniform (0, 1) variates.

    The sequence depends only on ``seed`` and ``block_size``.

    Example:
        >>> uniform = UniformStream(seed=42)
        >>> q = uniform()

    Attributes:
        seed: Seed the stream was created with
        block_size: Number of variates generated per JAX call
        key: Current PRNG key
        draws: Number of variates handed out so far
    """

    def __init__(self, seed: int, block_size: int = DEFAULT_BLOCK_SIZE):
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        if not 0 <= seed <= MAX_SEED:
            raise ValueError(f"seed must lie in [0, 2**64 - 1], got {seed}")
        self.seed = seed
        self.block_size = block_size
        # High and low 32-bit halves, so that every 64-bit seed is accepted
        self.key = jax.random.fold_in(
            jax.random.PRNGKey(seed >> 32), seed & 0xFFFFFFFF
        )
        self.draws = 0
        self._block: list = []
        self._pos = 0

    def _refill(self) -> None:
        self.key, subkey = jax.random.split(self.key)
        words = np.asarray(
            jax.random.bits(subkey, (self.block_size, 2), dtype=jnp.uint32),
            dtype=np.uint64,
        )
        mantissa = ((words[:, 0] >> _SHIFT) << _HIGH) | (words[:, 1] >> _SHIFT)
        self._block = ((mantissa.astype(np.float64) + 0.5) * _SCALE).tolist()
        self._pos = 0

    def __call__(self) -> float:
        """Return the next variate."""
        if self._pos == len(self._block):
            self._refill()
        q = self._block[self._pos]
        self._pos += 1
        self.draws += 1
        return q
