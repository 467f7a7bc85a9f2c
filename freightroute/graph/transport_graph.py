"""Directed graph specialised for road transport.

Adds per-edge traffic counts, a BPR volume-delay congestion factor,
path metrics, link-id bookkeeping, link modes and Yen's k-shortest
loopless paths on top of DirectedGraph.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from typing import (
    Any,
    Callable,
    Dict,
    Hashable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
    TypeVar,
)

from ..config import RoutingConfig, get_config
from ..domain.attributes import numeric_attribute
from ..domain.errors import InvalidArgumentError
from .dijkstra import dijkstra
from .directed_graph import DirectedGraph

N = TypeVar("N", bound=Hashable)

EdgeFilter = Callable[[Any, Any], bool]

PATH_METRICS = ("distance", "time", "cost")


def _check_count(count: int, argument: str = "count") -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidArgumentError(
            f"Vehicle count must be a non-negative integer, got {count!r}",
            argument=argument,
        )
    return count


class TransportGraph(DirectedGraph[N]):
    """Road transport graph with traffic and congestion.

    Edge attributes read by this class:
        link_id: Integer link identifier
        free_speed: Free-flow speed (default from RoutingConfig)
        lanes: Number of lanes (default 1)
        saturation_flow: Vehicles per lane per hour (default 1800)
        cost_factor: Multiplier for the "cost" metric (default 1)

    Args:
        config: Routing configuration, defaults to get_config().routing.
        node_type: See DirectedGraph.
    """

    def __init__(
        self,
        config: Optional[RoutingConfig] = None,
        node_type: Optional[Callable[[Any], N]] = None,
    ) -> None:
        super().__init__(node_type=node_type)
        self.config = config or get_config().routing
        self._traffic: Dict[Tuple[N, N], int] = {}
        self._link_modes: Dict[int, int] = {}
        self._logger = logging.getLogger(__name__)

    def _reset_state(self) -> None:
        super()._reset_state()
        self._traffic = {}
        self._link_modes = {}

    def _delete_edge(self, from_id: N, to_id: N) -> None:
        self._traffic.pop((from_id, to_id), None)
        super()._delete_edge(from_id, to_id)

    # ------------------------------------------------------------------
    # Constrained search

    def find_path_with_constraints(
        self, start: N, end: N, edge_filter: EdgeFilter
    ) -> List[N]:
        """Shortest path by weight using only edges accepted by a filter.

        Args:
            start: Departure node id.
            end: Arrival node id.
            edge_filter: ``edge_filter(from_id, to_id)`` returns False for
                edges that must not be used.

        Returns:
            The node path, or an empty list if there is none.
        """
        def neighbors(node_id: N) -> Iterator[Tuple[N, float]]:
            for neighbor, weight in self._succ[node_id].items():
                if edge_filter(node_id, neighbor):
                    yield neighbor, weight

        with self._lock:
            if start not in self._nodes or end not in self._nodes:
                return []
            path, _ = dijkstra(start, end, neighbors)
            return path

    # ------------------------------------------------------------------
    # Traffic and congestion

    def add_traffic(self, from_id: N, to_id: N, count: int = 1) -> None:
        """Add vehicles to an edge's traffic count."""
        count = _check_count(count)
        if count == 0:
            return
        with self._lock:
            key = (from_id, to_id)
            self._traffic[key] = self._traffic.get(key, 0) + count

    def remove_traffic(self, from_id: N, to_id: N, count: int = 1) -> None:
        """Remove vehicles from an edge, clamping at zero."""
        count = _check_count(count)
        with self._lock:
            key = (from_id, to_id)
            remaining = self._traffic.get(key, 0) - count
            if remaining > 0:
                self._traffic[key] = remaining
            else:
                self._traffic.pop(key, None)

    def traffic(self, from_id: N, to_id: N) -> int:
        """Current vehicle count on an edge (0 when none)."""
        with self._lock:
            return self._traffic.get((from_id, to_id), 0)

    def _congestion(self, from_id: N, to_id: N) -> float:
        attrs = self._edge_attrs.get((from_id, to_id))
        if attrs is None:
            return 1.0
        volume = self._traffic.get((from_id, to_id), 0)
        lanes = numeric_attribute(attrs, "lanes", self.config.default_lanes)
        saturation_flow = numeric_attribute(
            attrs, "saturation_flow", self.config.default_saturation_flow
        )
        capacity = lanes * saturation_flow
        if capacity <= 0.0:
            return 1.0
        return 1.0 + self.config.bpr_alpha * (volume / capacity) ** self.config.bpr_beta

    def congestion(self, from_id: N, to_id: N) -> float:
        """BPR congestion factor ``1 + alpha * (v / c) ** beta``.

        ``v`` is the edge's vehicle count and ``c`` is
        ``lanes * saturation_flow``. Returns 1.0 for absent edges and
        non-positive capacity.
        """
        with self._lock:
            return self._congestion(from_id, to_id)

    def path_metric(self, path: List[N], name: str) -> float:
        """Sum a metric over consecutive node pairs of a path.

        Args:
            path: Node ids.
            name: ``"distance"`` (edge weight), ``"time"`` (weight divided
                by free_speed, scaled by congestion) or ``"cost"`` (weight
                times cost_factor).

        Returns:
            The summed metric. Pairs without an edge are skipped.

        Raises:
            InvalidArgumentError: If the metric name is unknown.
        """
        if name not in PATH_METRICS:
            raise InvalidArgumentError(
                f"Unknown path metric: {name!r}", argument="name"
            )
        total = 0.0
        with self._lock:
            for from_id, to_id in zip(path, path[1:]):
                attrs = self._edge_attrs.get((from_id, to_id))
                if attrs is None:
                    continue
                distance = self._succ[from_id][to_id]
                if name == "distance":
                    total += distance
                elif name == "time":
                    speed = numeric_attribute(
                        attrs, "free_speed", self.config.default_free_speed
                    )
                    if speed > 0.0:
                        total += distance / speed * self._congestion(from_id, to_id)
                else:
                    total += distance * numeric_attribute(
                        attrs, "cost_factor", self.config.default_cost_factor
                    )
        return total

    def node_path_to_link_path(self, path: List[N]) -> List[int]:
        """Link ids along a node path, skipping pairs without ``link_id``."""
        link_ids: List[int] = []
        with self._lock:
            for from_id, to_id in zip(path, path[1:]):
                attrs = self._edge_attrs.get((from_id, to_id))
                if attrs is None or "link_id" not in attrs:
                    continue
                link_ids.append(attrs["link_id"])
        return link_ids

    # ------------------------------------------------------------------
    # Link modes

    def link_mode(self, link_id: int) -> int:
        """Mode of a link, 0 when unset."""
        with self._lock:
            return self._link_modes.get(link_id, 0)

    def set_link_mode(self, link_id: int, mode: int) -> None:
        with self._lock:
            self._link_modes[link_id] = mode

    def link_modes(self) -> Dict[int, int]:
        with self._lock:
            return dict(self._link_modes)

    # ------------------------------------------------------------------
    # K shortest paths

    def _path_weight(self, path: List[N]) -> float:
        total = 0.0
        for from_id, to_id in zip(path, path[1:]):
            total += self._succ.get(from_id, {}).get(to_id, math.inf)
        return total

    def k_shortest_paths(self, start: N, end: N, k: int) -> List[List[N]]:
        """Yen's k shortest loopless paths by total edge weight.

        Args:
            start: Departure node id.
            end: Arrival node id.
            k: Maximum number of paths.

        Returns:
            Up to ``k`` distinct paths in non-decreasing weight order.
            Empty when ``k <= 0`` or no path exists.
        """
        if k <= 0:
            return []

        with self._lock:
            if start not in self._nodes or end not in self._nodes:
                return []
            first, _ = dijkstra(start, end, self._restricted_successors(set(), set()))
            if not first:
                return []

            accepted: List[List[N]] = [first]
            seen: Set[Tuple[N, ...]] = {tuple(first)}
            candidates: List[Tuple[float, int, List[N]]] = []
            counter = itertools.count()

            while len(accepted) < k:
                previous = accepted[-1]
                for i in range(len(previous) - 1):
                    spur_node = previous[i]
                    root = previous[: i + 1]

                    blocked_edges = {
                        (path[i], path[i + 1])
                        for path in accepted
                        if len(path) > i + 1 and path[: i + 1] == root
                    }
                    blocked_nodes = set(root[:-1])

                    spur_path, _ = dijkstra(
                        spur_node,
                        end,
                        self._restricted_successors(blocked_edges, blocked_nodes),
                    )
                    if not spur_path:
                        continue

                    candidate = root[:-1] + spur_path
                    key = tuple(candidate)
                    if key in seen:
                        continue
                    cost = self._path_weight(candidate)
                    if math.isinf(cost):
                        continue
                    seen.add(key)
                    heapq.heappush(candidates, (cost, next(counter), candidate))

                if not candidates:
                    break
                _, _, best = heapq.heappop(candidates)
                accepted.append(best)

        self._logger.debug(
            "K shortest paths computed",
            extra={"start": start, "end": end, "k": k, "found": len(accepted)},
        )
        return accepted

    def _restricted_successors(
        self, blocked_edges: Set[Tuple[N, N]], blocked_nodes: Set[N]
    ) -> Callable[[N], Iterator[Tuple[N, float]]]:
        def neighbors(node_id: N) -> Iterator[Tuple[N, float]]:
            for neighbor, weight in self._succ[node_id].items():
                if neighbor in blocked_nodes or (node_id, neighbor) in blocked_edges:
                    continue
                yield neighbor, weight

        return neighbors

    # ------------------------------------------------------------------
    # Documents

    def to_document(self) -> Dict[str, Any]:
        """Serialize graph, traffic counts and link modes.

        Adds ``"traffic"`` (``[{"from", "to", "count"}]``) and
        ``"link_modes"`` (``[{"link_id", "mode"}]``) to the base document.
        """
        with self._lock:
            doc = super().to_document()
            doc["traffic"] = [
                {"from": from_id, "to": to_id, "count": count}
                for (from_id, to_id), count in self._traffic.items()
            ]
            doc["link_modes"] = [
                {"link_id": link_id, "mode": mode}
                for link_id, mode in self._link_modes.items()
            ]
            return doc

    def from_document(self, doc: Mapping[str, Any]) -> None:
        """Replace graph, traffic counts and link modes from a document.

        Traffic entries for edges that are not in the document are dropped.
        """
        nodes, edges = self._parse_document(doc)
        try:
            traffic = [
                (
                    self._node_id(entry["from"], f"traffic[{i}].from"),
                    self._node_id(entry["to"], f"traffic[{i}].to"),
                    _check_count(entry["count"], f"traffic[{i}].count"),
                )
                for i, entry in enumerate(doc.get("traffic", []))
            ]
            link_modes = {
                int(entry["link_id"]): int(entry["mode"])
                for entry in doc.get("link_modes", [])
            }
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgumentError(
                "Malformed transport graph document", argument="doc", cause=e
            )

        with self._events.deferred(), self._lock:
            self.rebuild(nodes, edges)
            for from_id, to_id, count in traffic:
                if count and self._has_edge(from_id, to_id):
                    self._traffic[(from_id, to_id)] = count
            self._link_modes = link_modes
