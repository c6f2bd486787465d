"""
attenuation.py — How Much Light Reaches a Cell
===============================================
R(source, sink): the quantity `sink` would receive if it drew from `source`.

Two policies, picked by name in the config and applied to every cell:

  "throughput" (default) — directional beam model
      Split the straight line sink → source into its |x| and |y| parts.
      Each part only counts if the axis-aligned neighbor of `sink` in that
      direction is ALSO targeting `source` (i.e. it is "in the beam").

          throughput = |x̂|/(|x̂|+|ŷ|) · [x-neighbor targets source]
                     + |ŷ|/(|x̂|+|ŷ|) · [y-neighbor targets source]

          R = throughput · q(source) / (dist · distance_scale + 1)

      throughput ∈ [0, 1], and R = 0 whenever nobody upstream is lit by
      the same source. Light cannot jump around corners it never reached.

  "distance" — plain inverse-distance falloff, no beam gate
          R = q(source) / (dist · distance_scale + offset)

Both return the source's own quantity unattenuated when source == sink,
and both are strictly decreasing in distance for a positive source.
"""

import math
from typing import Tuple

from .grid import Grid

ATTENUATION_THROUGHPUT = "throughput"
ATTENUATION_DISTANCE = "distance"
ATTENUATION_POLICIES = (ATTENUATION_THROUGHPUT, ATTENUATION_DISTANCE)


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


class AttenuationPolicy:
    """Base class. Subclasses implement `_attenuated()` for source != sink."""

    name = ""

    def __init__(self, distance_scale: float = 0.25):
        if distance_scale <= 0:
            raise ValueError(f"distance_scale must be positive, got {distance_scale}")
        self.distance_scale = distance_scale

    def distance(self, lhs: Tuple[int, int], rhs: Tuple[int, int]) -> float:
        """Euclidean cell distance converted to world units."""
        return math.hypot(lhs[0] - rhs[0], lhs[1] - rhs[1]) * self.distance_scale

    def received(self, reader: Grid, source: Tuple[int, int], sink: Tuple[int, int]):
        if source == sink:
            return reader[source].quantity
        return self._attenuated(reader, source, sink)

    def _attenuated(self, reader, source, sink):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(distance_scale={self.distance_scale})"


class DirectionalThroughput(AttenuationPolicy):

    name = ATTENUATION_THROUGHPUT

    def throughput(self, reader: Grid, source, sink) -> float:
        """Fraction of the beam from `source` that reaches `sink` through lit neighbors."""
        dx = source[0] - sink[0]
        dy = source[1] - sink[1]
        length = math.hypot(dx, dy)
        nx = abs(dx) / length
        ny = abs(dy) / length
        total = nx + ny

        through = 0.0
        if nx > 0:
            x_sample = (sink[0] + _sign(dx), sink[1])
            if reader[x_sample].target == source:
                through += nx / total
        if ny > 0:
            y_sample = (sink[0], sink[1] + _sign(dy))
            if reader[y_sample].target == source:
                through += ny / total
        return through

    def _attenuated(self, reader, source, sink):
        through = self.throughput(reader, source, sink)
        return through * reader[source].quantity / (self.distance(source, sink) + 1.0)


class InverseDistance(AttenuationPolicy):

    name = ATTENUATION_DISTANCE

    def __init__(self, distance_scale: float = 0.25, offset: float = 1.0):
        super().__init__(distance_scale)
        if offset <= 0:
            raise ValueError(f"offset must be positive, got {offset}")
        self.offset = offset

    def _attenuated(self, reader, source, sink):
        return reader[source].quantity / (self.distance(source, sink) + self.offset)


def make_policy(name: str, distance_scale: float = 0.25, offset: float = 1.0) -> AttenuationPolicy:
    """Build the policy registered under `name`."""
    if name == ATTENUATION_THROUGHPUT:
        return DirectionalThroughput(distance_scale)
    elif name == ATTENUATION_DISTANCE:
        return InverseDistance(distance_scale, offset)
    raise ValueError(f"Unknown attenuation: {name}. Use one of {ATTENUATION_POLICIES}.")
