"""
Hex coordinate math for a pointy-top axial grid.

Axial coordinates (q, r) imply the cube coordinate s = -q - r. Distances,
rings and lines are computed in cube space.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from tribesim.data_models import HexCoord


# Unit direction vectors, starting east and turning counter-clockwise.
HEX_DIRECTIONS: tuple[HexCoord, ...] = (
    HexCoord(1, 0),
    HexCoord(1, -1),
    HexCoord(0, -1),
    HexCoord(-1, 0),
    HexCoord(-1, 1),
    HexCoord(0, 1),
)

SQRT3 = math.sqrt(3)


@dataclass(frozen=True)
class Point:
    """A pixel-space point."""
    x: float
    y: float


# =============================================================================
# KEYS
# =============================================================================


def hex_key(coord: HexCoord) -> str:
    """String key "q,r" for external serializers."""
    return f"{coord.q},{coord.r}"


def parse_hex_key(key: str) -> HexCoord:
    """
    Parse a "q,r" key back into a coordinate.

    Raises:
        ValueError: If the key is not two comma-separated integers
    """
    parts = key.split(",")
    if len(parts) != 2:
        raise ValueError(f"Invalid hex key: {key!r}")
    try:
        return HexCoord(int(parts[0]), int(parts[1]))
    except ValueError as e:
        raise ValueError(f"Invalid hex key: {key!r}") from e


# =============================================================================
# NEIGHBORS AND DISTANCE
# =============================================================================


def hex_neighbor(coord: HexCoord, direction: int) -> HexCoord:
    return coord + HEX_DIRECTIONS[direction % 6]


def hex_neighbors(coord: HexCoord) -> list[HexCoord]:
    """All six neighbors in direction order."""
    return [coord + d for d in HEX_DIRECTIONS]


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    """Cube distance: max(|dq|, |dr|, |ds|)."""
    dq = a.q - b.q
    dr = a.r - b.r
    ds = a.s - b.s
    return max(abs(dq), abs(dr), abs(ds))


def hex_range(center: HexCoord, radius: int) -> list[HexCoord]:
    """Every hex within ``radius`` of ``center``, center included."""
    results: list[HexCoord] = []
    for dq in range(-radius, radius + 1):
        for dr in range(max(-radius, -dq - radius), min(radius, -dq + radius) + 1):
            results.append(HexCoord(center.q + dq, center.r + dr))
    return results


def hex_ring(center: HexCoord, radius: int) -> list[HexCoord]:
    """Hexes exactly ``radius`` away. Radius 0 is the center itself."""
    if radius <= 0:
        return [center]

    results: list[HexCoord] = []
    corner = HEX_DIRECTIONS[4]
    current = HexCoord(center.q + corner.q * radius, center.r + corner.r * radius)
    for side in range(6):
        for _ in range(radius):
            results.append(current)
            current = hex_neighbor(current, side)
    return results


# =============================================================================
# ROUNDING AND LINES
# =============================================================================


def cube_round(q: float, r: float, s: float) -> tuple[int, int, int]:
    """Round fractional cube coordinates, fixing the component with the largest error."""
    rq = round(q)
    rr = round(r)
    rs = round(s)

    q_diff = abs(rq - q)
    r_diff = abs(rr - r)
    s_diff = abs(rs - s)

    if q_diff > r_diff and q_diff > s_diff:
        rq = -rr - rs
    elif r_diff > s_diff:
        rr = -rq - rs
    else:
        rs = -rq - rr

    return int(rq), int(rr), int(rs)


def hex_round(q: float, r: float) -> HexCoord:
    rq, rr, _ = cube_round(q, r, -q - r)
    return HexCoord(rq, rr)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def hex_line(a: HexCoord, b: HexCoord) -> list[HexCoord]:
    """Hexes on the straight line from a to b, both ends included."""
    n = hex_distance(a, b)
    if n == 0:
        return [a]

    # Nudge off exact edges so ties round consistently
    aq, ar = a.q + 1e-6, a.r + 1e-6
    bq, br = b.q + 1e-6, b.r + 1e-6

    results: list[HexCoord] = []
    for i in range(n + 1):
        t = i / n
        results.append(hex_round(_lerp(aq, bq, t), _lerp(ar, br, t)))
    return results


# =============================================================================
# PIXEL CONVERSION
# =============================================================================


def hex_to_pixel(coord: HexCoord, size: float, origin: Point = Point(0.0, 0.0)) -> Point:
    """Center of a hex in pixel space."""
    x = size * (SQRT3 * coord.q + SQRT3 / 2 * coord.r)
    y = size * (1.5 * coord.r)
    return Point(x + origin.x, y + origin.y)


def pixel_to_hex(x: float, y: float, size: float, origin: Point = Point(0.0, 0.0)) -> HexCoord:
    """Hex containing a pixel-space point."""
    px = (x - origin.x) / size
    py = (y - origin.y) / size
    q = SQRT3 / 3 * px - 1.0 / 3 * py
    r = 2.0 / 3 * py
    return hex_round(q, r)


def hex_corners(center: Point, size: float) -> list[Point]:
    """Six corner points of a pointy-top hex."""
    corners: list[Point] = []
    for i in range(6):
        angle = math.radians(60 * i - 30)
        corners.append(Point(center.x + size * math.cos(angle), center.y + size * math.sin(angle)))
    return corners
