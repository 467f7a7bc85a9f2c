"""Road network records, as described by the road node and link files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .attributes import AttrMap
from .fields import record_from_dict, record_to_dict


@dataclass(frozen=True, slots=True)
class RoadNode:
    """A node of a road network."""

    node_id: int
    x: float
    y: float
    node_type: int = 0
    macro_zone_cluster: int = 0
    information_availability: int = 0
    description: str = ""
    x_scale: float = 1.0
    y_scale: float = 1.0

    def graph_attributes(self) -> AttrMap:
        return {"x": self.x, "y": self.y, "type": self.node_type}

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **overrides: Any) -> RoadNode:
        return record_from_dict(cls, data, **overrides)


@dataclass(frozen=True, slots=True)
class RoadLink:
    """A directed link of a road network.

    The traffic-flow fields (saturation_flow, speed_at_capacity,
    jam_density and their scales) are kept for the external traffic
    simulator. Routing reads length, free_speed, lanes and
    saturation_flow.
    """

    link_id: int
    upstream_node_id: int
    downstream_node_id: int
    length: float
    free_speed: float
    saturation_flow: float = 1800.0
    lanes: float = 1.0
    speed_coeff_variation: float = 0.0
    speed_at_capacity: float = 0.0
    jam_density: float = 0.0
    turn_prohibition: int = 0
    prohibition_start: int = 0
    prohibition_end: int = 0
    opposing_link_1: int = 0
    opposing_link_2: int = 0
    traffic_signal: int = 0
    phase_1: int = 0
    phase_2: int = 0
    vehicle_class_prohibition: int = 0
    surveillance_level: int = 0
    description: str = ""
    length_scale: float = 1.0
    speed_scale: float = 1.0
    saturation_flow_scale: float = 1.0
    speed_at_capacity_scale: float = 1.0
    jam_density_scale: float = 1.0

    def graph_attributes(self) -> AttrMap:
        return {
            "link_id": self.link_id,
            "free_speed": self.free_speed,
            "lanes": self.lanes,
            "saturation_flow": self.saturation_flow,
        }

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **overrides: Any) -> RoadLink:
        return record_from_dict(cls, data, **overrides)
