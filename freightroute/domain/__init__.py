"""Domain layer - Network records, routing results and typed errors.

Records and results are frozen dataclasses. This package has no
dependency on the graph, the readers or the registry.
"""

from .errors import (
    ConfigurationError,
    FreightRouteError,
    InvalidArgumentError,
    MessageFormatError,
    NetworkFileError,
    NetworkIntegrityError,
)
from .models import (
    ControlMessage,
    Criterion,
    GraphEvent,
    NetworkEvent,
    PathResult,
    RegistryEvent,
)
from .road import RoadLink, RoadNode
from .train import TrainLink, TrainNode

__all__ = [
    # Models
    "Criterion",
    "PathResult",
    "ControlMessage",
    "GraphEvent",
    "NetworkEvent",
    "RegistryEvent",
    # Records
    "TrainNode",
    "TrainLink",
    "RoadNode",
    "RoadLink",
    # Errors
    "FreightRouteError",
    "InvalidArgumentError",
    "NetworkFileError",
    "NetworkIntegrityError",
    "ConfigurationError",
    "MessageFormatError",
]
