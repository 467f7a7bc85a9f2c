"""Shortest-path computation using Dijkstra's algorithm.

The search itself works over a neighbor callback so that graphs can run
it under their own lock and with their own edge filters. Edge costs are
selected by a routing criterion:

- ``"distance"``: the stored edge weight.
- ``"time"``: weight divided by ``max_speed`` if positive, else by
  ``free_speed`` if positive, else the weight itself.
"""

from __future__ import annotations

import heapq
import itertools
import math
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Hashable,
    Iterable,
    List,
    Mapping,
    Tuple,
    TypeVar,
    Union,
)

from ..domain.attributes import numeric_attribute
from ..domain.models import Criterion

if TYPE_CHECKING:
    from .directed_graph import DirectedGraph

N = TypeVar("N", bound=Hashable)

Neighbors = Callable[[N], Iterable[Tuple[N, float]]]


def edge_cost(weight: float, attrs: Mapping[str, Any], criterion: Criterion) -> float:
    """Cost of traversing one edge under a criterion.

    Args:
        weight: Stored edge weight (the link length).
        attrs: Edge attributes, read for ``max_speed`` / ``free_speed``.
        criterion: Routing criterion.

    Returns:
        The edge cost.
    """
    if criterion is Criterion.TIME:
        speed = numeric_attribute(attrs, "max_speed", 0.0)
        if speed <= 0.0:
            speed = numeric_attribute(attrs, "free_speed", 0.0)
        if speed > 0.0:
            return weight / speed
    return weight


def dijkstra(start: N, end: N, neighbors: Neighbors) -> Tuple[List[N], float]:
    """Compute the cheapest path between two nodes.

    Parameters
    ----------
    start:
        Identifier of the departure node.
    end:
        Identifier of the arrival node.
    neighbors:
        Callback returning ``(neighbor, edge_cost)`` pairs for a node.
        Costs must be non-negative.

    Returns
    -------
    list, float
        The node sequence from ``start`` to ``end`` (inclusive) and its
        total cost. If no path exists, returns ``([], float("inf"))``.
        When ``start == end`` the path is ``[start]`` with cost 0.
    """
    if start == end:
        return [start], 0.0

    distances: Dict[N, float] = {start: 0.0}
    previous: Dict[N, N] = {}
    visited = set()

    # The sequence number keeps equal-cost entries in discovery order
    counter = itertools.count()
    heap: List[Tuple[float, int, N]] = [(0.0, next(counter), start)]

    while heap:
        current_distance, _, u = heapq.heappop(heap)

        if u in visited or current_distance > distances.get(u, math.inf):
            continue

        if u == end:
            break

        visited.add(u)

        for v, cost in neighbors(u):
            if v in visited:
                continue
            new_distance = current_distance + cost
            if new_distance < distances.get(v, math.inf):
                distances[v] = new_distance
                previous[v] = u
                heapq.heappush(heap, (new_distance, next(counter), v))

    if end not in distances:
        return [], math.inf

    path: List[N] = [end]
    current = end
    while current != start:
        current = previous[current]
        path.append(current)

    path.reverse()
    return path, distances[end]


def shortest_path(
    graph: DirectedGraph[N],
    start: N,
    end: N,
    criterion: Union[str, Criterion] = Criterion.DISTANCE,
) -> List[N]:
    """Shortest node path between two nodes of a graph.

    Args:
        graph: Graph to search.
        start: Departure node id.
        end: Arrival node id.
        criterion: ``"distance"`` or ``"time"``.

    Returns:
        Node ids from start to end, ``[start]`` when they are equal, or
        an empty list when either is absent or unreachable.

    Raises:
        InvalidArgumentError: If the criterion is unknown.
    """
    path, _ = graph.find_shortest_path(start, end, criterion)
    return path
