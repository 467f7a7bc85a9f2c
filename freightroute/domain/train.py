"""Train network records.

A TrainLink refers to its endpoints by node user id. The owning
TrainNetwork resolves those ids to TrainNode records on demand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .attributes import AttrMap
from .fields import record_from_dict, record_to_dict


@dataclass(frozen=True, slots=True)
class TrainNode:
    """A node of a train network.

    Attributes:
        simulator_id: Position of the node in load order
        user_id: Identifier used in the network files and in routing
        x: X coordinate (unscaled)
        y: Y coordinate (unscaled)
        description: Free text, "ND" when the file has none
        x_scale: Scale applied to x
        y_scale: Scale applied to y
        is_terminal: Whether trains may start or end here
        dwell_time: Expected stop time at a terminal
    """

    simulator_id: int
    user_id: int
    x: float
    y: float
    description: str = "ND"
    x_scale: float = 1.0
    y_scale: float = 1.0
    is_terminal: bool = False
    dwell_time: float = 0.0

    def graph_attributes(self) -> AttrMap:
        return {
            "simulator_id": self.simulator_id,
            "x": self.x,
            "y": self.y,
            "description": self.description,
            "is_terminal": self.is_terminal,
            "dwell_time": self.dwell_time,
            "x_scale": self.x_scale,
            "y_scale": self.y_scale,
        }

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **overrides: Any) -> TrainNode:
        return record_from_dict(cls, data, **overrides)


@dataclass(frozen=True, slots=True)
class TrainLink:
    """A link of a train network.

    Attributes:
        simulator_id: Position of the link in load order
        user_id: Identifier used in the network files and path results
        from_node_id: User id of the start node
        to_node_id: User id of the end node
        length: Link length, used as the edge weight
        max_speed: Maximum speed on the link
        signal_id: Signal number
        signals_at_nodes: Raw signal placement text
        grade: Directional grade
        curvature: Curvature
        num_directions: 1 for one-way links, 2 for bidirectional links
        speed_variation_factor: Speed variation
        has_catenary: Whether the link is electrified
        region: Region tag
        length_scale: Scale applied to length
        speed_scale: Scale applied to max_speed
    """

    simulator_id: int
    user_id: int
    from_node_id: int
    to_node_id: int
    length: float
    max_speed: float
    signal_id: int = 0
    signals_at_nodes: str = ""
    grade: float = 0.0
    curvature: float = 0.0
    num_directions: int = 1
    speed_variation_factor: float = 0.0
    has_catenary: bool = False
    region: str = "ND Region"
    length_scale: float = 1.0
    speed_scale: float = 1.0

    @property
    def is_bidirectional(self) -> bool:
        return self.num_directions == 2

    def graph_attributes(self) -> AttrMap:
        return {
            "simulator_id": self.simulator_id,
            "user_id": self.user_id,
            "max_speed": self.max_speed,
            "signal_id": self.signal_id,
            "signals_at_nodes": self.signals_at_nodes,
            "grade": self.grade,
            "curvature": self.curvature,
            "speed_variation_factor": self.speed_variation_factor,
            "has_catenary": self.has_catenary,
            "region": self.region,
            "length_scale": self.length_scale,
            "speed_scale": self.speed_scale,
        }

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **overrides: Any) -> TrainLink:
        return record_from_dict(cls, data, **overrides)
