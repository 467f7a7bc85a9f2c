"""Train network built from the train nodes and links files."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..adapters.parsers.train_files import read_train_links_file, read_train_nodes_file
from ..config import ParserConfig
from ..domain.errors import InvalidArgumentError, NetworkIntegrityError
from ..domain.models import Criterion, PathResult
from ..domain.train import TrainLink, TrainNode
from ..graph.directed_graph import DirectedGraph, EdgeEntry, NodeEntry
from .base import BaseNetwork


class TrainNetwork(BaseNetwork[TrainNode, TrainLink, DirectedGraph[int]]):
    """Train network keyed by node and link user ids.

    Each link becomes an edge weighted by its length; bidirectional links
    also get the reverse edge. Routing by time divides lengths by the
    link's max_speed.

    Example:
        network = TrainNetwork.from_files("nodes.dat", "links.dat")
        result = network.shortest_path(1, 4, "time")
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(DirectedGraph[int](node_type=int), name)
        self._link_index: Dict[Tuple[int, int], TrainLink] = {}

    @classmethod
    def from_files(
        cls,
        nodes_file: Union[str, Path],
        links_file: Union[str, Path],
        name: str = "",
        config: Optional[ParserConfig] = None,
    ) -> TrainNetwork:
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
            NetworkIntegrityError: If a link references an unknown node.
        """
        node_records = read_train_nodes_file(nodes_file, config)
        link_records = read_train_links_file(links_file, config)
        self.load(node_records, link_records)

    # ------------------------------------------------------------------
    # Record hooks

    def _node_id(self, node: TrainNode) -> int:
        return node.user_id

    def _link_id(self, link: TrainLink) -> int:
        return link.user_id

    def _coerce_node(self, record: Any) -> TrainNode:
        if isinstance(record, TrainNode):
            return record
        if not isinstance(record, dict) or "simulator_id" not in record:
            raise InvalidArgumentError(
                "Node updates need a TrainNode or a dict with simulator_id",
                argument="record",
            )
        return TrainNode.from_dict(record)

    def _coerce_link(self, record: Any) -> TrainLink:
        if isinstance(record, TrainLink):
            return record
        if not isinstance(record, dict) or "simulator_id" not in record:
            raise InvalidArgumentError(
                "Link updates need a TrainLink or a dict with simulator_id",
                argument="record",
            )
        return TrainLink.from_dict(record)

    def _check_link(self, link: TrainLink, nodes_by_id: Dict[int, TrainNode]) -> None:
        missing = [
            node_id
            for node_id in (link.from_node_id, link.to_node_id)
            if node_id not in nodes_by_id
        ]
        if missing:
            raise NetworkIntegrityError(
                f"Link {link.user_id} references unknown nodes {missing}",
                link_id=link.user_id,
            )

    def _materialize(
        self, node_records: List[Any], link_records: List[Any]
    ) -> Tuple[List[TrainNode], List[TrainLink]]:
        nodes = [
            record if isinstance(record, TrainNode)
            else TrainNode.from_dict(record, **self._default_simulator_id(record, i))
            for i, record in enumerate(node_records)
        ]
        nodes_by_id = {node.user_id: node for node in nodes}
        links = [
            record if isinstance(record, TrainLink)
            else TrainLink.from_dict(record, **self._default_simulator_id(record, i))
            for i, record in enumerate(link_records)
        ]
        for link in links:
            self._check_link(link, nodes_by_id)
        return nodes, links

    @staticmethod
    def _default_simulator_id(record: Any, index: int) -> Dict[str, int]:
        if isinstance(record, dict) and "simulator_id" in record:
            return {}
        return {"simulator_id": index}

    def _node_entry(self, node: TrainNode) -> NodeEntry:
        return node.user_id, node.graph_attributes()

    def _link_edges(self, link: TrainLink) -> List[EdgeEntry]:
        attrs = link.graph_attributes()
        edges: List[EdgeEntry] = [(link.from_node_id, link.to_node_id, link.length, attrs)]
        if link.is_bidirectional:
            edges.append((link.to_node_id, link.from_node_id, link.length, attrs))
        return edges

    def _links_changed(self) -> None:
        # Forward matches first, then reverse matches of bidirectional
        # links; the first link in list order wins each node pair.
        index: Dict[Tuple[int, int], TrainLink] = {}
        for link in self._links:
            index.setdefault((link.from_node_id, link.to_node_id), link)
            if link.is_bidirectional:
                index.setdefault((link.to_node_id, link.from_node_id), link)
        self._link_index = index

    # ------------------------------------------------------------------
    # Routing

    def shortest_path(
        self,
        start_id: int,
        end_id: int,
        criterion: Union[str, Criterion] = Criterion.DISTANCE,
    ) -> PathResult:
        """Shortest path between two nodes by user id.

        Args:
            start_id: Departure node user id.
            end_id: Arrival node user id.
            criterion: "distance" or "time".

        Returns:
            PathResult whose length sums the traversed link lengths and
            whose travel time sums length / max_speed. Empty when either
            node is unknown or unreachable.

        Raises:
            InvalidArgumentError: If the criterion is unknown.
        """
        criterion = Criterion.parse(criterion)
        with self._lock.read_locked():
            path, _ = self._graph.find_shortest_path(start_id, end_id, criterion)
            if not path:
                self._logger.debug(
                    "No train route",
                    extra={"start": start_id, "end": end_id, "network": self._name},
                )
                return PathResult.empty(criterion.value)

            link_ids: List[int] = []
            total_length = 0.0
            travel_time = 0.0
            for from_id, to_id in zip(path, path[1:]):
                link = self._link_index.get((from_id, to_id))
                if link is None:
                    self._logger.warning(
                        "No link between path nodes",
                        extra={"from_node": from_id, "to_node": to_id},
                    )
                    continue
                link_ids.append(link.user_id)
                total_length += link.length
                if link.max_speed > 0.0:
                    travel_time += link.length / link.max_speed
                else:
                    travel_time = math.inf

        return PathResult(
            node_ids=tuple(path),
            link_ids=tuple(link_ids),
            total_length=total_length,
            min_travel_time=travel_time,
            criterion=criterion.value,
        )
