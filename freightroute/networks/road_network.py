"""Road (truck) network built from the road nodes and links files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from ..adapters.parsers.road_files import read_road_links_file, read_road_nodes_file
from ..config import ParserConfig, RoutingConfig
from ..domain.errors import InvalidArgumentError
from ..domain.models import Criterion, PathResult
from ..domain.road import RoadLink, RoadNode
from ..graph.directed_graph import EdgeEntry, NodeEntry
from ..graph.transport_graph import TransportGraph
from .base import BaseNetwork


class RoadNetwork(BaseNetwork[RoadNode, RoadLink, TransportGraph[int]]):
    """Road network on a TransportGraph.

    Links are directed from upstream to downstream node and weighted by
    length. Travel times account for congestion from the traffic counts
    kept on ``graph``.

    Args:
        name: Network name.
        config: Routing configuration for the underlying TransportGraph.
    """

    def __init__(self, name: str = "", config: Optional[RoutingConfig] = None) -> None:
        super().__init__(TransportGraph[int](config=config, node_type=int), name)

    @classmethod
    def from_files(
        cls,
        nodes_file: Union[str, Path],
        links_file: Union[str, Path],
        name: str = "",
        config: Optional[ParserConfig] = None,
    ) -> RoadNetwork:
        network = cls(name)
        network.load_from_files(nodes_file, links_file, config)
        return network

    def load_from_files(
        self,
        nodes_file: Union[str, Path],
        links_file: Union[str, Path],
        config: Optional[ParserConfig] = None,
    ) -> None:
        """Read both files and load their records.

        Raises:
            NetworkFileError: If a file cannot be used.
        """
        self.load(read_road_nodes_file(nodes_file, config), read_road_links_file(links_file, config))

    # ------------------------------------------------------------------
    # Record hooks

    def _node_id(self, node: RoadNode) -> int:
        return node.node_id

    def _link_id(self, link: RoadLink) -> int:
        return link.link_id

    def _coerce_node(self, record: Any) -> RoadNode:
        return record if isinstance(record, RoadNode) else RoadNode.from_dict(record)

    def _coerce_link(self, record: Any) -> RoadLink:
        return record if isinstance(record, RoadLink) else RoadLink.from_dict(record)

    def _materialize(
        self, node_records: List[Any], link_records: List[Any]
    ) -> Tuple[List[RoadNode], List[RoadLink]]:
        nodes = [self._coerce_node(record) for record in node_records]
        links = [self._coerce_link(record) for record in link_records]
        node_ids = {node.node_id for node in nodes}
        dangling = [
            link.link_id
            for link in links
            if link.upstream_node_id not in node_ids or link.downstream_node_id not in node_ids
        ]
        if dangling:
            # The graph adds the missing endpoints without attributes
            self._logger.warning(
                "Links reference unknown nodes",
                extra={"links": dangling[:20], "count": len(dangling)},
            )
        return nodes, links

    def _node_entry(self, node: RoadNode) -> NodeEntry:
        return node.node_id, node.graph_attributes()

    def _link_edges(self, link: RoadLink) -> List[EdgeEntry]:
        return [
            (link.upstream_node_id, link.downstream_node_id, link.length, link.graph_attributes())
        ]

    # ------------------------------------------------------------------
    # Routing

    def _path_result(self, path: List[int], criterion: Criterion) -> PathResult:
        link_ids = self._graph.node_path_to_link_path(path)
        total_length = 0.0
        for link_id in link_ids:
            link = self._links_by_id.get(link_id)
            if link is None:
                self._logger.warning("Path link has no record", extra={"link_id": link_id})
                continue
            total_length += link.length
        return PathResult(
            node_ids=tuple(path),
            link_ids=tuple(link_ids),
            total_length=total_length,
            min_travel_time=self._graph.path_metric(path, "time"),
            criterion=criterion.value,
        )

    def shortest_path(
        self,
        start_id: int,
        end_id: int,
        criterion: Union[str, Criterion] = Criterion.DISTANCE,
    ) -> PathResult:
        """Shortest path between two nodes.

        Args:
            start_id: Departure node id.
            end_id: Arrival node id.
            criterion: "distance" or "time".

        Returns:
            PathResult whose length sums the traversed link lengths and
            whose travel time is the congestion-aware "time" metric.
            Empty when either node is unknown or unreachable.

        Raises:
            InvalidArgumentError: If the criterion is unknown.
        """
        criterion = Criterion.parse(criterion)
        with self._lock.read_locked():
            path, _ = self._graph.find_shortest_path(start_id, end_id, criterion)
            if not path:
                return PathResult.empty(criterion.value)
            return self._path_result(path, criterion)

    def multiple_paths(self, start_id: int, end_id: int, max_k: int) -> List[PathResult]:
        """Up to ``max_k`` loopless paths, shortest first.

        Raises:
            InvalidArgumentError: If max_k is not an integer.
        """
        if isinstance(max_k, bool) or not isinstance(max_k, int):
            raise InvalidArgumentError(
                f"max_k must be an integer, got {max_k!r}", argument="max_k"
            )
        with self._lock.read_locked():
            paths = self._graph.k_shortest_paths(start_id, end_id, max_k)
            return [self._path_result(path, Criterion.DISTANCE) for path in paths]
