"""Attributed directed graph with change notifications.

Nodes and edges carry attribute maps (see ``domain.attributes``) and
every edge carries a non-negative weight. There is at most one edge per
ordered node pair. Adding an edge creates missing endpoints; removing a
node removes its incident edges.

All operations hold the graph's lock. Change events are delivered after
the lock is released, on the thread that made the change.
"""

from __future__ import annotations

import copy
import logging
import math
import threading
from typing import (
    Any,
    Callable,
    ContextManager,
    Dict,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from ..domain.attributes import AttrMap, copy_attributes
from ..domain.errors import InvalidArgumentError
from ..domain.models import Criterion, GraphEvent
from ..events import EventCallback, EventEmitter
from .dijkstra import dijkstra, edge_cost

N = TypeVar("N", bound=Hashable)

NodeEntry = Tuple[Any, Optional[Mapping[str, Any]]]
EdgeEntry = Tuple[Any, Any, float, Optional[Mapping[str, Any]]]


def check_weight(weight: Any) -> float:
    """Validate an edge weight.

    Raises:
        InvalidArgumentError: If the weight is not a finite number >= 0.
    """
    if isinstance(weight, bool):
        raise InvalidArgumentError(
            f"Edge weight must be a number, got {weight!r}", argument="weight"
        )
    try:
        value = float(weight)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"Edge weight must be a number, got {weight!r}",
            argument="weight",
            cause=e,
        )
    if math.isnan(value) or math.isinf(value) or value < 0.0:
        raise InvalidArgumentError(
            f"Edge weight must be finite and non-negative, got {weight!r}",
            argument="weight",
        )
    return value


class DirectedGraph(Generic[N]):
    """Directed graph with attributes on nodes and edges.

    Example:
        graph = DirectedGraph[str]()
        graph.add_edge("A", "B", 10.0, {"max_speed": 20.0})
        graph.find_shortest_path("A", "B", "time")  # (["A", "B"], 0.5)

    Args:
        node_type: Optional converter applied to node ids read from a
            document, e.g. ``int`` for integer ids that went through JSON.
    """

    def __init__(self, node_type: Optional[Callable[[Any], N]] = None) -> None:
        self._node_type = node_type
        self._lock = threading.RLock()
        self._events = EventEmitter("graph")
        self._logger = logging.getLogger(__name__)
        self._nodes: Dict[N, AttrMap] = {}
        self._succ: Dict[N, Dict[N, float]] = {}
        self._pred: Dict[N, Dict[N, float]] = {}
        self._edge_attrs: Dict[Tuple[N, N], AttrMap] = {}

    # ------------------------------------------------------------------
    # Observers

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a change callback.

        The callback is called as ``callback(GraphEvent.NODE_*, node_id)``,
        ``callback(GraphEvent.EDGE_*, from_id, to_id)`` or
        ``callback(GraphEvent.GRAPH_CHANGED)``.

        Returns:
            A function that removes the subscription.
        """
        return self._events.subscribe(callback)

    def deferred_events(self) -> ContextManager[None]:
        """Hold back change events until the outermost block exits.

        Owners that mutate the graph under their own lock open this
        outside that lock, so observers never run while it is held.
        """
        return self._events.deferred()

    # ------------------------------------------------------------------
    # Internal mutators, called with the lock held

    def _insert_node(self, node_id: N, attrs: AttrMap) -> None:
        if node_id in self._nodes:
            self._nodes[node_id] = attrs
            self._events.emit(GraphEvent.NODE_MODIFIED, node_id)
            return
        self._nodes[node_id] = attrs
        self._succ[node_id] = {}
        self._pred[node_id] = {}
        self._events.emit(GraphEvent.NODE_ADDED, node_id)

    def _ensure_node(self, node_id: N) -> None:
        if node_id not in self._nodes:
            self._insert_node(node_id, {})

    def _insert_edge(self, from_id: N, to_id: N, weight: float, attrs: AttrMap) -> None:
        self._ensure_node(from_id)
        self._ensure_node(to_id)
        existed = to_id in self._succ[from_id]
        self._succ[from_id][to_id] = weight
        self._pred[to_id][from_id] = weight
        self._edge_attrs[(from_id, to_id)] = attrs
        event = GraphEvent.EDGE_MODIFIED if existed else GraphEvent.EDGE_ADDED
        self._events.emit(event, from_id, to_id)

    def _delete_edge(self, from_id: N, to_id: N) -> None:
        del self._succ[from_id][to_id]
        del self._pred[to_id][from_id]
        del self._edge_attrs[(from_id, to_id)]
        self._events.emit(GraphEvent.EDGE_REMOVED, from_id, to_id)

    def _reset_state(self) -> None:
        self._nodes = {}
        self._succ = {}
        self._pred = {}
        self._edge_attrs = {}

    def _weighted_successors(self, criterion: Criterion) -> Callable[[N], Iterator[Tuple[N, float]]]:
        def neighbors(node_id: N) -> Iterator[Tuple[N, float]]:
            for neighbor, weight in self._succ[node_id].items():
                if criterion is Criterion.DISTANCE:
                    yield neighbor, weight
                else:
                    yield neighbor, edge_cost(
                        weight, self._edge_attrs[(node_id, neighbor)], criterion
                    )

        return neighbors

    # ------------------------------------------------------------------
    # Mutations

    def add_node(self, node_id: N, attrs: Optional[Mapping[str, Any]] = None) -> None:
        """Insert a node or replace its attributes.

        Emits NODE_ADDED or NODE_MODIFIED, then GRAPH_CHANGED.
        """
        attrs = copy_attributes(attrs)
        with self._events.deferred(), self._lock:
            self._insert_node(node_id, attrs)
            self._events.emit(GraphEvent.GRAPH_CHANGED)

    def add_edge(
        self,
        from_id: N,
        to_id: N,
        weight: float,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Insert an edge or replace its weight and attributes.

        Missing endpoints are added with empty attributes. Emits
        EDGE_ADDED or EDGE_MODIFIED, then GRAPH_CHANGED.

        Raises:
            InvalidArgumentError: If the weight is negative or not finite,
                or an attribute value is unsupported.
        """
        weight = check_weight(weight)
        attrs = copy_attributes(attrs)
        with self._events.deferred(), self._lock:
            self._insert_edge(from_id, to_id, weight, attrs)
            self._events.emit(GraphEvent.GRAPH_CHANGED)

    def remove_node(self, node_id: N) -> None:
        """Remove a node and every incident edge. No-op if absent."""
        with self._events.deferred(), self._lock:
            if node_id not in self._nodes:
                return
            for neighbor in list(self._succ[node_id]):
                self._delete_edge(node_id, neighbor)
            for neighbor in list(self._pred[node_id]):
                self._delete_edge(neighbor, node_id)
            del self._nodes[node_id]
            del self._succ[node_id]
            del self._pred[node_id]
            self._events.emit(GraphEvent.NODE_REMOVED, node_id)
            self._events.emit(GraphEvent.GRAPH_CHANGED)

    def remove_edge(self, from_id: N, to_id: N) -> None:
        """Remove an edge, keeping its endpoints. No-op if absent."""
        with self._events.deferred(), self._lock:
            if not self._has_edge(from_id, to_id):
                return
            self._delete_edge(from_id, to_id)
            self._events.emit(GraphEvent.GRAPH_CHANGED)

    def set_node_attributes(self, node_id: N, attrs: Optional[Mapping[str, Any]]) -> None:
        """Replace a node's attributes, adding the node if absent."""
        self.add_node(node_id, attrs)

    def set_edge_attributes(
        self, from_id: N, to_id: N, attrs: Optional[Mapping[str, Any]]
    ) -> None:
        """Replace an edge's attributes.

        An absent edge is added with weight 1.0.
        """
        attrs = copy_attributes(attrs)
        with self._events.deferred(), self._lock:
            weight = self._succ.get(from_id, {}).get(to_id, 1.0)
            self._insert_edge(from_id, to_id, weight, attrs)
            self._events.emit(GraphEvent.GRAPH_CHANGED)

    def set_edge_weight(self, from_id: N, to_id: N, weight: float) -> None:
        """Replace an edge's weight, adding the edge if absent."""
        weight = check_weight(weight)
        with self._events.deferred(), self._lock:
            attrs = self._edge_attrs.get((from_id, to_id), {})
            self._insert_edge(from_id, to_id, weight, attrs)
            self._events.emit(GraphEvent.GRAPH_CHANGED)

    def clear(self) -> None:
        """Remove every node and edge. Emits a single GRAPH_CHANGED."""
        with self._events.deferred(), self._lock:
            self._reset_state()
            self._events.emit(GraphEvent.GRAPH_CHANGED)
        self._logger.debug("Graph cleared")

    def rebuild(self, nodes: Iterable[NodeEntry], edges: Iterable[EdgeEntry]) -> None:
        """Replace the whole graph in one step.

        Equivalent to ``clear()`` followed by ``add_node`` for each node
        entry and ``add_edge`` for each edge entry, except that only a
        single GRAPH_CHANGED is emitted. Entries are validated before the
        graph is touched.

        Args:
            nodes: ``(node_id, attrs)`` pairs.
            edges: ``(from_id, to_id, weight, attrs)`` tuples.

        Raises:
            InvalidArgumentError: If any weight or attribute is invalid.
        """
        node_entries = [(node_id, copy_attributes(attrs)) for node_id, attrs in nodes]
        edge_entries = [
            (from_id, to_id, check_weight(weight), copy_attributes(attrs))
            for from_id, to_id, weight, attrs in edges
        ]

        with self._events.deferred(), self._lock:
            self._reset_state()
            for node_id, attrs in node_entries:
                if node_id not in self._nodes:
                    self._succ[node_id] = {}
                    self._pred[node_id] = {}
                self._nodes[node_id] = attrs
            for from_id, to_id, weight, attrs in edge_entries:
                for endpoint in (from_id, to_id):
                    if endpoint not in self._nodes:
                        self._nodes[endpoint] = {}
                        self._succ[endpoint] = {}
                        self._pred[endpoint] = {}
                self._succ[from_id][to_id] = weight
                self._pred[to_id][from_id] = weight
                self._edge_attrs[(from_id, to_id)] = attrs
            self._events.emit(GraphEvent.GRAPH_CHANGED)

        self._logger.debug(
            "Graph rebuilt",
            extra={"nodes": len(node_entries), "edges": len(edge_entries)},
        )

    # ------------------------------------------------------------------
    # Queries

    def _has_edge(self, from_id: N, to_id: N) -> bool:
        return from_id in self._succ and to_id in self._succ[from_id]

    def has_node(self, node_id: N) -> bool:
        with self._lock:
            return node_id in self._nodes

    def has_edge(self, from_id: N, to_id: N) -> bool:
        with self._lock:
            return self._has_edge(from_id, to_id)

    def node_attributes(self, node_id: N) -> Optional[AttrMap]:
        """Copy of a node's attributes, or None if the node is absent."""
        with self._lock:
            attrs = self._nodes.get(node_id)
            return copy.deepcopy(attrs) if attrs is not None else None

    def edge_attributes(self, from_id: N, to_id: N) -> Optional[AttrMap]:
        """Copy of an edge's attributes, or None if the edge is absent."""
        with self._lock:
            attrs = self._edge_attrs.get((from_id, to_id))
            return copy.deepcopy(attrs) if attrs is not None else None

    def edge_weight(self, from_id: N, to_id: N) -> float:
        """Weight of an edge, or ``math.inf`` if the edge is absent."""
        with self._lock:
            return self._succ.get(from_id, {}).get(to_id, math.inf)

    def outgoing(self, node_id: N) -> List[Tuple[N, float]]:
        """``(neighbor, weight)`` for every edge leaving a node."""
        with self._lock:
            return list(self._succ.get(node_id, {}).items())

    def incoming(self, node_id: N) -> List[Tuple[N, float]]:
        """``(neighbor, weight)`` for every edge entering a node."""
        with self._lock:
            return list(self._pred.get(node_id, {}).items())

    def out_degree(self, node_id: N) -> int:
        with self._lock:
            return len(self._succ.get(node_id, {}))

    def in_degree(self, node_id: N) -> int:
        with self._lock:
            return len(self._pred.get(node_id, {}))

    def nodes(self) -> List[N]:
        """Node ids in insertion order."""
        with self._lock:
            return list(self._nodes)

    def edges(self) -> List[Tuple[N, N, float]]:
        """``(from_id, to_id, weight)`` for every edge."""
        with self._lock:
            return [
                (from_id, to_id, weight)
                for from_id, targets in self._succ.items()
                for to_id, weight in targets.items()
            ]

    @property
    def node_count(self) -> int:
        with self._lock:
            return len(self._nodes)

    @property
    def edge_count(self) -> int:
        with self._lock:
            return len(self._edge_attrs)

    def __len__(self) -> int:
        return self.node_count

    def __contains__(self, node_id: object) -> bool:
        with self._lock:
            return node_id in self._nodes

    # ------------------------------------------------------------------
    # Routing

    def find_shortest_path(
        self,
        start: N,
        end: N,
        criterion: Union[str, Criterion] = Criterion.DISTANCE,
    ) -> Tuple[List[N], float]:
        """Dijkstra shortest path under a criterion.

        Args:
            start: Departure node id.
            end: Arrival node id.
            criterion: ``"distance"`` or ``"time"``.

        Returns:
            The node path and its cost, or ``([], inf)`` when either node
            is absent or unreachable.

        Raises:
            InvalidArgumentError: If the criterion is unknown.
        """
        criterion = Criterion.parse(criterion)
        with self._lock:
            if start not in self._nodes or end not in self._nodes:
                return [], math.inf
            return dijkstra(start, end, self._weighted_successors(criterion))

    # ------------------------------------------------------------------
    # Documents

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible document.

        Returns:
            ``{"nodes": [{"id", "attributes"}], "edges": [{"from", "to",
            "weight", "attributes"}]}``
        """
        with self._lock:
            return {
                "nodes": [
                    {"id": node_id, "attributes": copy.deepcopy(attrs)}
                    for node_id, attrs in self._nodes.items()
                ],
                "edges": [
                    {
                        "from": from_id,
                        "to": to_id,
                        "weight": weight,
                        "attributes": copy.deepcopy(self._edge_attrs[(from_id, to_id)]),
                    }
                    for from_id, targets in self._succ.items()
                    for to_id, weight in targets.items()
                ],
            }

    def _node_id(self, raw: Any, path: str) -> N:
        if self._node_type is None:
            return raw
        try:
            return self._node_type(raw)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                f"Invalid node id at {path}: {raw!r}", argument=path, cause=e
            )

    def _parse_document(self, doc: Mapping[str, Any]) -> Tuple[List[NodeEntry], List[EdgeEntry]]:
        if not isinstance(doc, Mapping):
            raise InvalidArgumentError("Graph document must be a mapping", argument="doc")
        try:
            nodes = [
                (self._node_id(entry["id"], f"nodes[{i}].id"), entry.get("attributes"))
                for i, entry in enumerate(doc.get("nodes", []))
            ]
            edges = [
                (
                    self._node_id(entry["from"], f"edges[{i}].from"),
                    self._node_id(entry["to"], f"edges[{i}].to"),
                    entry.get("weight", 1.0),
                    entry.get("attributes"),
                )
                for i, entry in enumerate(doc.get("edges", []))
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise InvalidArgumentError(
                "Malformed graph document", argument="doc", cause=e
            )
        return nodes, edges

    def from_document(self, doc: Mapping[str, Any]) -> None:
        """Replace the graph with the contents of a document.

        Emits a single GRAPH_CHANGED and no per-element events. The graph
        is left untouched if the document is malformed.

        Raises:
            InvalidArgumentError: If the document is malformed.
        """
        nodes, edges = self._parse_document(doc)
        self.rebuild(nodes, edges)
