"""Temporal ETAS process module with unit-aware configuration.

This module provides configuration, parameter derivation, samplers and
the event scheduler for simulating earthquake catalogs (times and
magnitudes) from a self-exciting ETAS point process.
"""

from .config import ETASConfig, ETASConfigOutput
from .runtime import ETASRuntime
from .process import ProcessParameters, check_parameters, critical_productivity
from .rng import UniformStream, MAX_SEED
from .scheduler import CatalogEvent, ExcitationSource, EventScheduler
from .kernel import (
    productivity,
    source_intensity,
    integrated_intensity,
    integrated_intensity_to_infinity,
    expected_offspring,
    next_background_occurrence,
    next_single_occurrence,
    draw_magnitude,
    conditional_intensity,
    get_branching_ratio,
    get_stationary_rate,
)
from .catalog import CatalogBuffer, generate_catalog, simulate_catalog, run_catalog

__all__ = [
    'ETASConfig',
    'ETASConfigOutput',
    'ETASRuntime',
    'ProcessParameters',
    'check_parameters',
    'critical_productivity',
    'UniformStream',
    'MAX_SEED',
    'CatalogEvent',
    'ExcitationSource',
    'EventScheduler',
    'productivity',
    'source_intensity',
    'integrated_intensity',
    'integrated_intensity_to_infinity',
    'expected_offspring',
    'next_background_occurrence',
    'next_single_occurrence',
    'draw_magnitude',
    'conditional_intensity',
    'get_branching_ratio',
    'get_stationary_rate',
    'CatalogBuffer',
    'generate_catalog',
    'simulate_catalog',
    'run_catalog',
]
