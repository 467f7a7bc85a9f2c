"""Network port - the routing surface shared by train and road networks.

The registry and callers that route over "a network" depend on this
protocol rather than on a concrete network class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Protocol, Union

if TYPE_CHECKING:
    from ..domain.models import Criterion, PathResult


class NetworkPort(Protocol):
    """Port for a routable transport network.

    Implementations: networks/train_network.py, networks/road_network.py
    """

    @property
    def network_name(self) -> str:
        ...

    def set_network_name(self, name: str) -> None:
        ...

    def shortest_path(
        self,
        start_id: int,
        end_id: int,
        criterion: Union[str, Criterion] = "distance",
    ) -> PathResult:
        """Find the shortest path between two nodes.

        Args:
            start_id: Departure node id.
            end_id: Arrival node id.
            criterion: "distance" or "time".

        Returns:
            PathResult, empty when no route exists.
        """
        ...

    def start_nodes(self) -> List[Any]:
        """Node records without incoming links."""
        ...

    def end_nodes(self) -> List[Any]:
        """Node records without outgoing links."""
        ...

    def node_by_id(self, node_id: int) -> Optional[Any]:
        ...

    def link_by_id(self, link_id: int) -> Optional[Any]:
        ...

    def to_document(self) -> Dict[str, Any]:
        """Serialize as ``{"nodes": [...], "links": [...]}``."""
        ...

    def subscribe(self, callback: Callable[..., None]) -> Callable[[], None]:
        ...

    def close(self) -> None:
        """Release every record held by the network."""
        ...
