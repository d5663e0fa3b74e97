"""Numeric constants shared by the geometry kernel.

Tolerances are chosen to sit just above DXF coordinate precision (about
1e-10) while staying far below laser/plasma kerf widths (about 0.1 mm).
Two values are considered equal when ``abs(a - b) < GEOMETRY_EPSILON``.
"""

from __future__ import annotations

import math

GEOMETRY_EPSILON = 1e-9
"""Smallest meaningful difference between two geometric values."""

MIN_LINE_LENGTH = GEOMETRY_EPSILON
"""Segments shorter than this are degenerate."""

MIN_ARC_RADIUS = GEOMETRY_EPSILON
"""Arcs with a smaller radius are degenerate."""

MIN_ARC_SWEEP = GEOMETRY_EPSILON
"""Arcs sweeping less than this many radians are degenerate."""

PI = math.pi
TWO_PI = 2.0 * math.pi
HALF_PI = math.pi / 2.0

DEFAULT_DRIFT_TOLERANCE = 0.001
"""Manufacturing tolerance for cumulative drift checks (1 micron in mm)."""
