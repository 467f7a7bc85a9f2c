"""Multi-modal freight routing over train and road networks.

The package builds directed graphs from the vendor network files, routes
over them with Dijkstra and Yen's algorithm and keeps named networks in a
region-keyed registry.

Typical use:
    from freightroute import TrainNetwork, get_registry

    network = TrainNetwork.from_files("nodes.dat", "links.dat")
    get_registry().add_train_network("main", "north", network)
"""

from .domain import Criterion, FreightRouteError, PathResult
from .networks import RoadNetwork, RoadSimulationConfig, TrainNetwork
from .registry import NetworkRegistry, get_registry, reset_registry

__all__ = [
    "Criterion",
    "FreightRouteError",
    "PathResult",
    "TrainNetwork",
    "RoadNetwork",
    "RoadSimulationConfig",
    "NetworkRegistry",
    "get_registry",
    "reset_registry",
]
