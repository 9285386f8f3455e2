"""
Hex grid geometry and search.

Axial/cube coordinate math, neighbor/distance/range queries, pixel
conversion, A* pathfinding and budget-bounded reachability.
"""

from tribesim.hex_grid.hex_math import (
    HEX_DIRECTIONS,
    Point,
    cube_round,
    hex_corners,
    hex_distance,
    hex_key,
    hex_line,
    hex_neighbor,
    hex_neighbors,
    hex_range,
    hex_ring,
    hex_round,
    hex_to_pixel,
    parse_hex_key,
    pixel_to_hex,
)
from tribesim.hex_grid.pathfinding import (
    find_path,
    path_cost,
    reachable,
)

__all__ = [
    "HEX_DIRECTIONS",
    "Point",
    "cube_round",
    "hex_corners",
    "hex_distance",
    "hex_key",
    "hex_line",
    "hex_neighbor",
    "hex_neighbors",
    "hex_range",
    "hex_ring",
    "hex_round",
    "hex_to_pixel",
    "parse_hex_key",
    "pixel_to_hex",
    "find_path",
    "path_cost",
    "reachable",
]
