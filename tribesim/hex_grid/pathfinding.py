"""
Pathfinding and reachability over the hex grid.

Both searches take a ``cost_fn`` returning the cost of entering a hex, or
``math.inf`` when the hex is impassable. Costs are at least 1, which keeps
hex distance an admissible A* heuristic.

An optional ``stop_fn`` marks hexes that end movement on entry (zone of
control). Such a hex may be the last step of a path but is never expanded.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from collections import deque
from typing import Callable, Optional

from tribesim.data_models import HexCoord
from tribesim.hex_grid.hex_math import hex_distance, hex_neighbors

logger = logging.getLogger(__name__)

CostFn = Callable[[HexCoord], float]
BoundsFn = Callable[[HexCoord], bool]
StopFn = Callable[[HexCoord], bool]


def find_path(
    start: HexCoord,
    goal: HexCoord,
    cost_fn: CostFn,
    max_cost: Optional[float] = None,
    in_bounds: Optional[BoundsFn] = None,
    stop_fn: Optional[StopFn] = None,
) -> Optional[list[HexCoord]]:
    """
    A* search from start to goal.

    Ties on f-score are broken toward the lower heuristic, so the search
    prefers nodes closer to the goal.

    Args:
        start: Starting hex
        goal: Target hex
        cost_fn: Entry cost per hex (math.inf = impassable)
        max_cost: Optional hard ceiling on total path cost
        in_bounds: Optional bounds predicate
        stop_fn: Optional predicate for hexes that end movement

    Returns:
        Ordered path including both endpoints, or None when no path exists
        within the ceiling
    """
    if in_bounds is not None and (not in_bounds(start) or not in_bounds(goal)):
        return None
    if start == goal:
        return [start]

    counter = itertools.count()
    g_score: dict[HexCoord, float] = {start: 0}
    came_from: dict[HexCoord, HexCoord] = {}
    closed: set[HexCoord] = set()

    h = hex_distance(start, goal)
    open_heap: list[tuple[float, int, int, HexCoord]] = [(h, h, next(counter), start)]

    while open_heap:
        _, _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue

        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path

        closed.add(current)
        if current != start and stop_fn is not None and stop_fn(current):
            continue

        for neighbor in hex_neighbors(current):
            if neighbor in closed:
                continue
            if in_bounds is not None and not in_bounds(neighbor):
                continue

            step = cost_fn(neighbor)
            if step == math.inf:
                continue

            tentative = g_score[current] + step
            if max_cost is not None and tentative > max_cost:
                continue
            if neighbor in g_score and g_score[neighbor] <= tentative:
                continue

            g_score[neighbor] = tentative
            came_from[neighbor] = current
            nh = hex_distance(neighbor, goal)
            heapq.heappush(open_heap, (tentative + nh, nh, next(counter), neighbor))

    logger.debug(f"No path from {start} to {goal}")
    return None


def path_cost(path: list[HexCoord], cost_fn: CostFn) -> float:
    """Total entry cost of a path. The start hex is free."""
    return sum(cost_fn(coord) for coord in path[1:])


def reachable(
    start: HexCoord,
    budget: float,
    cost_fn: CostFn,
    in_bounds: Optional[BoundsFn] = None,
    stop_fn: Optional[StopFn] = None,
) -> dict[HexCoord, float]:
    """
    Bounded-budget flood fill from start.

    Returns every reachable hex mapped to the movement left when stopping
    there, start included. A hex is re-queued only when a strictly larger
    remaining budget is found for it.
    """
    results: dict[HexCoord, float] = {start: budget}
    frontier: deque[tuple[HexCoord, float]] = deque([(start, budget)])

    while frontier:
        current, remaining = frontier.popleft()
        if remaining < results.get(current, -1):
            continue  # stale entry
        if current != start and stop_fn is not None and stop_fn(current):
            continue

        for neighbor in hex_neighbors(current):
            if in_bounds is not None and not in_bounds(neighbor):
                continue

            step = cost_fn(neighbor)
            if step == math.inf:
                continue

            left = remaining - step
            if left < 0:
                continue
            if stop_fn is not None and stop_fn(neighbor):
                left = 0

            if left > results.get(neighbor, -1):
                results[neighbor] = left
                frontier.append((neighbor, left))

    return results
