"""
config.py — Simulation Parameters
==================================
Start-up constants for a light field run. Nothing here is re-derived
while the simulation is running.

Defaults reproduce the classic 128×128 demo:
  - accumulation 1.0 → each generation fully adopts what the target delivers
  - blur 0.1         → 10% pulled toward the neighbor average
  - distance scale   → 32 world units across the field height
"""

from dataclasses import dataclass
from typing import Optional

from .attenuation import ATTENUATION_POLICIES, ATTENUATION_THROUGHPUT, make_policy
from .errors import GridSizeError
from .propagation import PropagationRule

# ── Field defaults ────────────────────────────────────────────────────────────
DEFAULT_WIDTH = 128
DEFAULT_HEIGHT = 128
DEFAULT_QUANTITY = 0.0
DEFAULT_CHANNELS = 3           # R, G, B as three independent scalar fields

# ── Propagation defaults ──────────────────────────────────────────────────────
ACCUMULATION_FACTOR = 1.0
BLUR_FACTOR = 0.1
WORLD_HEIGHT = 32.0            # world units spanned by the field height
DEFAULT_ATTENUATION = ATTENUATION_THROUGHPUT
DISTANCE_OFFSET = 1.0          # only used by the "distance" policy

MIN_FIELD_SIZE = 2


def cells_to_distance(height: int) -> float:
    """World distance of one cell step for a field of the given height."""
    return WORLD_HEIGHT / height


def check_field_size(width: int, height: int):
    """Every cell needs at least one neighbor, so fields start at 2×2."""
    if width < MIN_FIELD_SIZE or height < MIN_FIELD_SIZE:
        raise GridSizeError(
            f"Light fields must be at least {MIN_FIELD_SIZE}x{MIN_FIELD_SIZE}, got {width}x{height}"
        )


@dataclass
class SimulationConfig:
    """
    Attributes:
        width, height   : Field size in cells (≥ 2 each)
        accumulation    : Blend weight toward the received quantity, [0, 1]
        blur            : Blend weight toward the neighbor average, [0, 1]
        attenuation     : "throughput" or "distance"
        distance_scale  : World units per cell step (None → WORLD_HEIGHT / height)
        distance_offset : Denominator offset of the "distance" policy
        channels        : Independent scalar fields per buffer side (3 = RGB)
        default_quantity: Initial quantity of every cell
        workers         : Thread pool size, or None to update sequentially
    """
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    accumulation: float = ACCUMULATION_FACTOR
    blur: float = BLUR_FACTOR
    attenuation: str = DEFAULT_ATTENUATION
    distance_scale: Optional[float] = None
    distance_offset: float = DISTANCE_OFFSET
    channels: int = DEFAULT_CHANNELS
    default_quantity: float = DEFAULT_QUANTITY
    workers: Optional[int] = None

    def __post_init__(self):
        check_field_size(self.width, self.height)
        for name in ("accumulation", "blur"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.attenuation not in ATTENUATION_POLICIES:
            raise ValueError(
                f"Unknown attenuation: {self.attenuation}. Use one of {ATTENUATION_POLICIES}."
            )
        if self.distance_scale is None:
            self.distance_scale = cells_to_distance(self.height)
        if self.distance_scale <= 0:
            raise ValueError(f"distance_scale must be positive, got {self.distance_scale}")
        if self.channels < 1:
            raise ValueError(f"channels must be at least 1, got {self.channels}")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be at least 1 (or None), got {self.workers}")

    def make_rule(self) -> PropagationRule:
        policy = make_policy(self.attenuation, self.distance_scale, self.distance_offset)
        return PropagationRule(self.accumulation, self.blur, policy)

    def as_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "accumulation": self.accumulation,
            "blur": self.blur,
            "attenuation": self.attenuation,
            "distance_scale": self.distance_scale,
            "distance_offset": self.distance_offset,
            "channels": self.channels,
            "default_quantity": self.default_quantity,
            "workers": self.workers,
        }
