"""
lightfield/ — Light Field Simulation Package
=============================================
Exports the interfaces the driver and the renderer use.

Driver imports:   SimulationConfig, LightSimulation, default_scene
                  (or new_field / advance / current_field for a custom loop)
Renderer imports: to_rgb8, quantities
"""

from .attenuation import (ATTENUATION_DISTANCE, ATTENUATION_THROUGHPUT,
                          DirectionalThroughput, InverseDistance, make_policy)
from .cell import Cell
from .config import SimulationConfig
from .double_buffer import DoubleBuffer
from .errors import GridSizeError, OutOfBoundsError
from .grid import Grid, flatten_index
from .propagation import PropagationRule, next_cell
from .render import quantities, to_rgb8
from .sampling import blend, intensity, sample
from .scene import Scene, default_scene
from .simulation import LightSimulation, advance, current_field, new_field

__all__ = [
    "ATTENUATION_DISTANCE", "ATTENUATION_THROUGHPUT",
    "Cell", "DirectionalThroughput", "DoubleBuffer", "Grid", "GridSizeError",
    "InverseDistance", "LightSimulation", "OutOfBoundsError", "PropagationRule",
    "Scene", "SimulationConfig",
    "advance", "blend", "current_field", "default_scene", "flatten_index",
    "intensity", "make_policy", "new_field", "next_cell", "quantities",
    "sample", "to_rgb8",
]
