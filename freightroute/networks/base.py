"""Shared machinery of the train and road networks.

A network owns its node and link records, the graph built from them, a
reader-writer lock and an event emitter. Records are frozen; changing
one means handing a replacement to ``update_node`` / ``update_link``.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from ..concurrency import ReadWriteLock
from ..domain.errors import InvalidArgumentError
from ..domain.models import GraphEvent, NetworkEvent
from ..events import EventCallback, EventEmitter
from ..graph.directed_graph import DirectedGraph, EdgeEntry, NodeEntry, check_weight

NodeT = TypeVar("NodeT")
LinkT = TypeVar("LinkT")
GraphT = TypeVar("GraphT", bound=DirectedGraph)


class BaseNetwork(ABC, Generic[NodeT, LinkT, GraphT]):
    """Records, graph, lock and events common to every network.

    Subclasses define how records are built from plain mappings, how
    they are identified and which graph entries they project to.
    """

    def __init__(self, graph: GraphT, name: str = "") -> None:
        self._graph = graph
        self._name = name
        self._lock = ReadWriteLock()
        self._events = EventEmitter("network")
        self._logger = logging.getLogger(type(self).__module__)
        self._variables: Dict[str, Any] = {}
        self._nodes: List[NodeT] = []
        self._links: List[LinkT] = []
        self._nodes_by_id: Dict[int, NodeT] = {}
        self._links_by_id: Dict[int, LinkT] = {}
        self._closed = False
        self._graph.subscribe(self._on_graph_event)

    # ------------------------------------------------------------------
    # Hooks

    @abstractmethod
    def _node_id(self, node: NodeT) -> int:
        ...

    @abstractmethod
    def _link_id(self, link: LinkT) -> int:
        ...

    @abstractmethod
    def _materialize(
        self, node_records: List[Any], link_records: List[Any]
    ) -> Tuple[List[NodeT], List[LinkT]]:
        ...

    @abstractmethod
    def _coerce_node(self, record: Any) -> NodeT:
        ...

    @abstractmethod
    def _coerce_link(self, record: Any) -> LinkT:
        ...

    def _check_link(self, link: LinkT, nodes_by_id: Dict[int, NodeT]) -> None:
        """Reject a link that the network cannot hold."""

    @abstractmethod
    def _node_entry(self, node: NodeT) -> NodeEntry:
        ...

    @abstractmethod
    def _link_edges(self, link: LinkT) -> List[EdgeEntry]:
        ...

    def _links_changed(self) -> None:
        """Called with the write lock held after the link list changed."""

    # ------------------------------------------------------------------
    # Events

    def _on_graph_event(self, event: GraphEvent, *payload: Any) -> None:
        if event is GraphEvent.GRAPH_CHANGED:
            self._events.emit(NetworkEvent.NETWORK_CHANGED)

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a callback for NetworkEvent notifications.

        Returns:
            A function that removes the subscription.
        """
        return self._events.subscribe(callback)

    # ------------------------------------------------------------------
    # Loading

    def load(self, node_records: Iterable[Any], link_records: Iterable[Any]) -> None:
        """Replace the network contents.

        Builds the records, rebuilds the graph in one step and emits
        NETWORK_CHANGED, NODES_CHANGED and LINKS_CHANGED once each. The
        previous contents are kept if any record is invalid.

        Raises:
            InvalidArgumentError: If a record cannot be converted.
            NetworkIntegrityError: If a link references an unknown node.
        """
        nodes, links = self._materialize(list(node_records), list(link_records))
        node_entries = [self._node_entry(node) for node in nodes]
        edge_entries = [edge for link in links for edge in self._link_edges(link)]
        for edge in edge_entries:
            check_weight(edge[2])

        with self._events.deferred(), self._graph.deferred_events(), self._lock.write_locked():
            self._nodes = nodes
            self._links = links
            self._nodes_by_id = {self._node_id(node): node for node in nodes}
            self._links_by_id = {self._link_id(link): link for link in links}
            self._closed = False
            self._links_changed()
            self._graph.rebuild(node_entries, edge_entries)
            self._events.emit(NetworkEvent.NODES_CHANGED)
            self._events.emit(NetworkEvent.LINKS_CHANGED)

        self._logger.info(
            "Network loaded",
            extra={
                "network": self._name,
                "nodes": len(nodes),
                "links": len(links),
            },
        )

    def from_document(self, doc: Dict[str, Any]) -> None:
        """Reload from a ``{"nodes": [...], "links": [...]}`` document."""
        try:
            node_records = doc["nodes"]
            link_records = doc["links"]
        except (KeyError, TypeError) as e:
            raise InvalidArgumentError(
                "Network document needs 'nodes' and 'links'", argument="doc", cause=e
            )
        self.load(node_records, link_records)

    def to_document(self) -> Dict[str, Any]:
        with self._lock.read_locked():
            return {
                "nodes": [node.to_dict() for node in self._nodes],
                "links": [link.to_dict() for link in self._links],
            }

    # ------------------------------------------------------------------
    # Record updates

    def update_node(self, record: Any) -> NodeT:
        """Add or replace a node record and refresh its graph attributes.

        Emits NETWORK_CHANGED and NODES_CHANGED.

        Returns:
            The stored record.
        """
        node = self._coerce_node(record)
        node_id = self._node_id(node)
        node_entry = self._node_entry(node)

        with self._events.deferred(), self._graph.deferred_events(), self._lock.write_locked():
            previous = self._nodes_by_id.get(node_id)
            if previous is None:
                self._nodes.append(node)
            else:
                self._nodes[self._nodes.index(previous)] = node
            self._nodes_by_id[node_id] = node
            self._graph.add_node(*node_entry)
            self._events.emit(NetworkEvent.NODES_CHANGED)
        return node

    def update_link(self, record: Any) -> LinkT:
        """Add or replace a link record and refresh its graph edges.

        Edges of the previous record that the new one no longer covers
        are removed. Emits NETWORK_CHANGED and LINKS_CHANGED.

        Returns:
            The stored record.

        Raises:
            NetworkIntegrityError: If the link references an unknown node.
        """
        link = self._coerce_link(record)
        link_id = self._link_id(link)
        new_edges = self._link_edges(link)
        for edge in new_edges:
            check_weight(edge[2])

        with self._events.deferred(), self._graph.deferred_events(), self._lock.write_locked():
            self._check_link(link, self._nodes_by_id)
            previous = self._links_by_id.get(link_id)
            if previous is None:
                self._links.append(link)
            else:
                self._links[self._links.index(previous)] = link
                kept = {(edge[0], edge[1]) for edge in new_edges}
                stale = {
                    (edge[0], edge[1]) for edge in self._link_edges(previous)
                } - kept
                # Pairs still covered by another link get that link's edge back
                for other in self._links:
                    if not stale or self._link_id(other) == link_id:
                        continue
                    for edge in self._link_edges(other):
                        if (edge[0], edge[1]) in stale:
                            stale.discard((edge[0], edge[1]))
                            self._graph.add_edge(*edge)
                for from_id, to_id in stale:
                    self._graph.remove_edge(from_id, to_id)
            self._links_by_id[link_id] = link
            for edge in new_edges:
                self._graph.add_edge(*edge)
            self._links_changed()
            self._events.emit(NetworkEvent.LINKS_CHANGED)
        return link

    # ------------------------------------------------------------------
    # Queries

    @property
    def graph(self) -> GraphT:
        """The graph built from the records."""
        return self._graph

    def nodes(self) -> List[NodeT]:
        with self._lock.read_locked():
            return list(self._nodes)

    def links(self) -> List[LinkT]:
        with self._lock.read_locked():
            return list(self._links)

    def node_by_id(self, node_id: int) -> Optional[NodeT]:
        with self._lock.read_locked():
            return self._nodes_by_id.get(node_id)

    def link_by_id(self, link_id: int) -> Optional[LinkT]:
        with self._lock.read_locked():
            return self._links_by_id.get(link_id)

    def start_nodes(self) -> List[NodeT]:
        """Nodes without incoming links."""
        with self._lock.read_locked():
            return [
                node for node in self._nodes
                if self._graph.in_degree(self._node_id(node)) == 0
            ]

    def end_nodes(self) -> List[NodeT]:
        """Nodes without outgoing links."""
        with self._lock.read_locked():
            return [
                node for node in self._nodes
                if self._graph.out_degree(self._node_id(node)) == 0
            ]

    # ------------------------------------------------------------------
    # Name and variables

    @property
    def network_name(self) -> str:
        with self._lock.read_locked():
            return self._name

    def set_network_name(self, name: str) -> None:
        with self._lock.write_locked():
            self._name = name

    def set_variable(self, key: str, value: Any) -> None:
        """Store user metadata. Nothing in the network reads it."""
        with self._lock.write_locked():
            self._variables[key] = copy.deepcopy(value)

    def variable(self, key: str, default: Any = None) -> Any:
        with self._lock.read_locked():
            return copy.deepcopy(self._variables.get(key, default))

    def variables(self) -> Dict[str, Any]:
        with self._lock.read_locked():
            return copy.deepcopy(self._variables)

    # ------------------------------------------------------------------
    # Lifecycle

    @property
    def closed(self) -> bool:
        with self._lock.read_locked():
            return self._closed

    def close(self) -> None:
        """Release every record and clear the graph.

        The network stays usable and can be loaded again.
        """
        with self._events.deferred(), self._graph.deferred_events(), self._lock.write_locked():
            if self._closed:
                return
            self._nodes = []
            self._links = []
            self._nodes_by_id = {}
            self._links_by_id = {}
            self._links_changed()
            self._graph.clear()
            self._closed = True
        self._logger.debug("Network closed", extra={"network": self._name})
