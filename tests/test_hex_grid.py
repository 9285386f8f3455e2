"""
Tests for hex geometry, A* pathfinding and reachability.
"""

import math

import pytest

from tribesim.data_models import HexCoord
from tribesim.hex_grid import (
    find_path,
    hex_corners,
    hex_distance,
    hex_key,
    hex_line,
    hex_neighbors,
    hex_range,
    hex_ring,
    hex_to_pixel,
    parse_hex_key,
    path_cost,
    pixel_to_hex,
    reachable,
)


def uniform_cost(coord):
    return 1


def bounded(width, height):
    return lambda c: 0 <= c.q < width and 0 <= c.r < height


# =============================================================================
# GEOMETRY
# =============================================================================


class TestDistance:
    """Distance is a metric on the grid."""

    def test_distance_to_self_is_zero(self):
        """distance(a, a) = 0."""
        assert hex_distance(HexCoord(3, -2), HexCoord(3, -2)) == 0

    def test_distance_is_symmetric(self):
        """distance(a, b) = distance(b, a)."""
        a, b = HexCoord(0, 0), HexCoord(4, -7)
        assert hex_distance(a, b) == hex_distance(b, a) == 7

    def test_triangle_inequality(self):
        """distance(a, c) <= distance(a, b) + distance(b, c) over a small patch."""
        patch = hex_range(HexCoord(0, 0), 2)
        for a in patch:
            for b in patch:
                for c in patch[::3]:
                    assert hex_distance(a, c) <= hex_distance(a, b) + hex_distance(b, c)

    def test_neighbors_are_distance_one(self):
        """All six neighbors are one step away and distinct."""
        center = HexCoord(5, 5)
        neighbors = hex_neighbors(center)
        assert len(set(neighbors)) == 6
        assert all(hex_distance(center, n) == 1 for n in neighbors)

    def test_cube_coordinate_sums_to_zero(self):
        """s is derived so that q + r + s = 0."""
        coord = HexCoord(2, 5)
        assert coord.q + coord.r + coord.s == 0


class TestRangesAndRings:
    """hex_range and hex_ring sizes."""

    @pytest.mark.parametrize("radius,expected", [(0, 1), (1, 7), (2, 19), (3, 37)])
    def test_range_size(self, radius, expected):
        """A range of radius n holds 3n(n+1)+1 hexes."""
        assert len(hex_range(HexCoord(0, 0), radius)) == expected

    @pytest.mark.parametrize("radius", [1, 2, 4])
    def test_ring_is_exact_distance(self, radius):
        """Every ring hex is exactly radius away and there are 6*radius of them."""
        center = HexCoord(1, 1)
        ring = hex_ring(center, radius)
        assert len(ring) == 6 * radius
        assert len(set(ring)) == 6 * radius
        assert all(hex_distance(center, c) == radius for c in ring)

    def test_ring_zero_is_center(self):
        assert hex_ring(HexCoord(2, 3), 0) == [HexCoord(2, 3)]


class TestLine:
    """hex_line draws a connected line."""

    def test_line_endpoints_and_length(self):
        """A line of distance n has n+1 hexes including both ends."""
        a, b = HexCoord(0, 0), HexCoord(5, -2)
        line = hex_line(a, b)
        assert line[0] == a
        assert line[-1] == b
        assert len(line) == hex_distance(a, b) + 1

    def test_line_steps_are_adjacent(self):
        line = hex_line(HexCoord(-3, 1), HexCoord(4, 2))
        for first, second in zip(line, line[1:]):
            assert hex_distance(first, second) == 1


class TestKeysAndPixels:
    """Key strings and pixel conversion."""

    def test_key_round_trip(self):
        coord = HexCoord(-4, 11)
        assert hex_key(coord) == "-4,11"
        assert parse_hex_key("-4,11") == coord

    @pytest.mark.parametrize("bad", ["", "1", "1,2,3", "a,b"])
    def test_malformed_key_raises(self, bad):
        """A malformed key is a programmer error."""
        with pytest.raises(ValueError):
            parse_hex_key(bad)

    def test_pixel_center_maps_back_to_hex(self):
        """The center of a hex converts back to the same hex."""
        for coord in hex_range(HexCoord(2, 2), 2):
            point = hex_to_pixel(coord, size=32)
            assert pixel_to_hex(point.x, point.y, size=32) == coord

    def test_corners_lie_on_radius(self):
        center = hex_to_pixel(HexCoord(1, 0), size=10)
        for corner in hex_corners(center, 10):
            assert math.isclose(math.hypot(corner.x - center.x, corner.y - center.y), 10)


# =============================================================================
# PATHFINDING
# =============================================================================


class TestFindPath:
    """A* search."""

    def test_straight_path_on_open_ground(self):
        """On uniform cost the path length equals the distance."""
        start, goal = HexCoord(0, 0), HexCoord(4, 0)
        path = find_path(start, goal, uniform_cost, in_bounds=bounded(10, 10))
        assert path[0] == start
        assert path[-1] == goal
        assert len(path) == 5

    def test_start_equals_goal(self):
        assert find_path(HexCoord(1, 1), HexCoord(1, 1), uniform_cost) == [HexCoord(1, 1)]

    def test_routes_around_walls(self):
        """Impassable hexes are never entered."""
        wall = {HexCoord(2, r) for r in range(0, 4)}

        def cost(coord):
            return math.inf if coord in wall else 1

        path = find_path(HexCoord(0, 1), HexCoord(4, 1), cost, in_bounds=bounded(6, 6))
        assert path is not None
        assert not wall.intersection(path)

    def test_unreachable_goal_returns_none(self):
        def cost(coord):
            return math.inf if coord == HexCoord(3, 3) else 1

        assert find_path(HexCoord(0, 0), HexCoord(3, 3), cost, in_bounds=bounded(5, 5)) is None

    def test_max_cost_is_a_hard_ceiling(self):
        """A path costing more than max_cost is not returned."""
        assert find_path(HexCoord(0, 0), HexCoord(3, 0), uniform_cost, max_cost=2) is None
        assert find_path(HexCoord(0, 0), HexCoord(3, 0), uniform_cost, max_cost=3) is not None

    def test_prefers_cheaper_detour(self):
        """The optimal path avoids an expensive hex when a cheaper detour exists."""
        expensive = HexCoord(1, 0)

        def cost(coord):
            return 5 if coord == expensive else 1

        path = find_path(HexCoord(0, 0), HexCoord(2, 0), cost, in_bounds=bounded(5, 5))
        assert expensive not in path
        assert path_cost(path, cost) == 3

    def test_stop_hex_can_end_a_path_but_not_pass_through(self):
        """Zone-of-control style hexes are terminal."""
        stop = {HexCoord(1, 0), HexCoord(1, -1), HexCoord(0, -1), HexCoord(0, 1), HexCoord(-1, 1), HexCoord(-1, 0)}
        path = find_path(HexCoord(0, 0), HexCoord(1, 0), uniform_cost, stop_fn=lambda c: c in stop)
        assert path == [HexCoord(0, 0), HexCoord(1, 0)]
        assert find_path(HexCoord(0, 0), HexCoord(2, 0), uniform_cost, stop_fn=lambda c: c in stop) is None


class TestReachable:
    """Budget-bounded flood fill."""

    def test_budget_two_on_open_ground(self):
        """Budget 2 reaches the radius-2 neighborhood with leftovers."""
        result = reachable(HexCoord(5, 5), 2, uniform_cost)
        assert set(result) == set(hex_range(HexCoord(5, 5), 2))
        assert result[HexCoord(5, 5)] == 2
        assert result[HexCoord(6, 5)] == 1
        assert result[HexCoord(7, 5)] == 0

    def test_keeps_best_remaining_movement(self):
        """A hex reached through rough or open ground keeps the larger leftover."""
        rough = HexCoord(1, 0)

        def cost(coord):
            return 2 if coord == rough else 1

        result = reachable(HexCoord(0, 0), 3, cost)
        assert result[HexCoord(2, -1)] == 1

    def test_stop_hexes_zero_leftover(self):
        stop = HexCoord(1, 0)
        result = reachable(HexCoord(0, 0), 3, uniform_cost, stop_fn=lambda c: c == stop)
        assert result[stop] == 0

    def test_respects_bounds(self):
        result = reachable(HexCoord(0, 0), 3, uniform_cost, in_bounds=bounded(2, 2))
        assert all(0 <= c.q < 2 and 0 <= c.r < 2 for c in result)
