"""Train and road networks: records, graph and routing in one object."""

from .base import BaseNetwork
from .road_network import RoadNetwork
from .simulation_config import RoadSimulationConfig
from .train_network import TrainNetwork

__all__ = ["BaseNetwork", "RoadNetwork", "RoadSimulationConfig", "TrainNetwork"]
