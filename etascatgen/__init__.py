"""etascatgen: synthetic earthquake catalogs from the temporal ETAS model."""

from .units import UnitManager, UnitSpec, QuantityInput
from .fields import quantity_field
from .runtime import QuantityNode
from .errors import ETASCatGenError, InvalidParameter, SizeMismatch
from .etas import (
    ETASConfig,
    ETASConfigOutput,
    ETASRuntime,
    ProcessParameters,
    CatalogEvent,
    EventScheduler,
    generate_catalog,
    simulate_catalog,
    get_branching_ratio,
    get_stationary_rate,
)
from .adapters import ETASAdapter

__version__ = "0.1.0"

__all__ = [
    # Units
    'UnitManager',
    'UnitSpec',
    'QuantityInput',
    # Fields
    'quantity_field',
    # Runtime structures
    'QuantityNode',
    # Errors
    'ETASCatGenError',
    'InvalidParameter',
    'SizeMismatch',
    # ETAS (core tier)
    'ETASConfig',
    'ETASConfigOutput',
    'ETASRuntime',
    'ProcessParameters',
    'CatalogEvent',
    'EventScheduler',
    'generate_catalog',
    'simulate_catalog',
    'get_branching_ratio',
    'get_stationary_rate',
    # Adapters (high-level tier)
    'ETASAdapter',
]
