"""Immutable domain models for freightroute.

Routing results are frozen dataclasses with slots. Event kinds are
plain enums passed as the first argument to observer callbacks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Tuple, Union

from .errors import InvalidArgumentError


class Criterion(str, Enum):
    """Per-edge cost fed to Dijkstra.

    DISTANCE uses the stored edge weight. TIME divides the weight by
    the edge speed, falling back to the weight when no speed is known.
    """

    DISTANCE = "distance"
    TIME = "time"

    @classmethod
    def parse(cls, value: Union[str, Criterion]) -> Criterion:
        """Convert a user supplied criterion.

        Raises:
            InvalidArgumentError: If the value is not a known criterion.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidArgumentError(
                f"Unknown routing criterion: {value!r}",
                argument="criterion",
                cause=e,
            )


class GraphEvent(Enum):
    """Changes reported by a DirectedGraph."""

    NODE_ADDED = auto()
    NODE_MODIFIED = auto()
    NODE_REMOVED = auto()
    EDGE_ADDED = auto()
    EDGE_MODIFIED = auto()
    EDGE_REMOVED = auto()
    GRAPH_CHANGED = auto()


class NetworkEvent(Enum):
    """Changes reported by a train or road network."""

    NETWORK_CHANGED = auto()
    NODES_CHANGED = auto()
    LINKS_CHANGED = auto()


class RegistryEvent(Enum):
    """Changes reported by the NetworkRegistry.

    Payloads:
        *_ADDED / *_REMOVED: (name, region)
        *_RENAMED: (old_name, new_name, region)
        REGION_RENAMED: (old_region, new_region)
        REGION_CLEARED: (region,)
    """

    TRAIN_NETWORK_ADDED = auto()
    TRAIN_NETWORK_REMOVED = auto()
    TRAIN_NETWORK_RENAMED = auto()
    ROAD_NETWORK_ADDED = auto()
    ROAD_NETWORK_REMOVED = auto()
    ROAD_NETWORK_RENAMED = auto()
    REGION_RENAMED = auto()
    REGION_CLEARED = auto()


@dataclass(frozen=True, slots=True)
class PathResult:
    """Result of a network routing query.

    An empty result (no route) has no node or link ids and infinite
    length and travel time.

    Attributes:
        node_ids: Ordered node ids from start to end
        link_ids: Ids of the links traversed, in order
        total_length: Sum of the traversed link lengths
        min_travel_time: Travel time along the path
        criterion: Criterion the path was optimised for
    """

    node_ids: Tuple[int, ...] = ()
    link_ids: Tuple[int, ...] = ()
    total_length: float = math.inf
    min_travel_time: float = math.inf
    criterion: str = Criterion.DISTANCE.value

    @property
    def is_empty(self) -> bool:
        """Check if no route was found."""
        return not self.node_ids

    @classmethod
    def empty(cls, criterion: str = Criterion.DISTANCE.value) -> PathResult:
        return cls(criterion=criterion)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_ids": list(self.node_ids),
            "link_ids": list(self.link_ids),
            "total_length": self.total_length,
            "min_travel_time": self.min_travel_time,
            "criterion": self.criterion,
        }


@dataclass(frozen=True, slots=True)
class ControlMessage:
    """A parsed control-channel message.

    Attributes:
        message_id: Sequence number assigned by the sender
        ack: Acknowledgement flag/number
        message_type: Numeric message type (see MessageType)
        code: Numeric code, meaning depends on message_type
        content: Payload text between the fixed fields and terminator
    """

    message_id: int
    ack: int
    message_type: int
    code: int
    content: str = field(default="")
