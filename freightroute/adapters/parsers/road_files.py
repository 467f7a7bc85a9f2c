"""Readers for the whitespace-separated road nodes and links files.

Line 1 is a header, line 2 carries the node count and scale factors,
records start on line 3. Rows whose numeric fields do not parse are
skipped; trailing tokens form the description.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...config import ParserConfig, get_config
from ...domain.errors import NetworkFileError
from .text_lines import read_clean_lines

logger = logging.getLogger(__name__)

RoadRecord = Dict[str, Any]

NODE_FIELDS = (
    ("node_id", int),
    ("x", float),
    ("y", float),
    ("node_type", int),
    ("macro_zone_cluster", int),
    ("information_availability", int),
)

LINK_FIELDS = (
    ("link_id", int),
    ("upstream_node_id", int),
    ("downstream_node_id", int),
    ("length", float),
    ("free_speed", float),
    ("saturation_flow", float),
    ("lanes", float),
    ("speed_coeff_variation", float),
    ("speed_at_capacity", float),
    ("jam_density", float),
    ("turn_prohibition", int),
    ("prohibition_start", int),
    ("prohibition_end", int),
    ("opposing_link_1", int),
    ("opposing_link_2", int),
    ("traffic_signal", int),
    ("phase_1", int),
    ("phase_2", int),
    ("vehicle_class_prohibition", int),
    ("surveillance_level", int),
)

LINK_SCALES = (
    "length_scale",
    "speed_scale",
    "saturation_flow_scale",
    "speed_at_capacity_scale",
    "jam_density_scale",
)


def _read_scales(
    lines: List[str], path: Path, names: tuple, what: str
) -> Dict[str, float]:
    if len(lines) < 2:
        raise NetworkFileError(
            f"Bad {what} file structure: missing scale line",
            file_path=str(path),
            line_number=2,
        )
    tokens = lines[1].split()
    if len(tokens) < len(names) + 1:
        raise NetworkFileError(
            f"Bad {what} file structure: invalid scale information",
            file_path=str(path),
            line_number=2,
        )
    try:
        return {name: float(token) for name, token in zip(names, tokens[1:])}
    except ValueError as e:
        raise NetworkFileError(
            f"Invalid scale value in {what} file",
            file_path=str(path),
            line_number=2,
            cause=e,
        )


def _parse_row(tokens: List[str], fields: tuple) -> Optional[RoadRecord]:
    if len(tokens) < len(fields):
        return None
    try:
        record = {name: convert(token) for (name, convert), token in zip(fields, tokens)}
    except ValueError:
        return None
    record["description"] = " ".join(tokens[len(fields):])
    return record


def _read_records(
    path: Union[str, Path],
    config: Optional[ParserConfig],
    fields: tuple,
    scale_names: tuple,
    what: str,
) -> List[RoadRecord]:
    config = config or get_config().parser
    path = Path(path)
    lines = read_clean_lines(path, config.encoding, what)
    scales = _read_scales(lines, path, scale_names, what)

    records: List[RoadRecord] = []
    skipped = 0
    for line in lines[2:]:
        record = _parse_row(line.split(), fields)
        if record is None:
            skipped += 1
            continue
        record.update(scales)
        records.append(record)

    if skipped:
        logger.warning(
            "Skipped malformed rows",
            extra={"file_path": str(path), "skipped": skipped},
        )
    logger.debug(
        "Read road records",
        extra={"file_path": str(path), "kind": what, "rows": len(records)},
    )
    return records


def read_road_nodes_file(
    path: Union[str, Path], config: Optional[ParserConfig] = None
) -> List[RoadRecord]:
    """Read a road nodes file.

    Returns:
        Records keyed by the RoadNode field names.

    Raises:
        NetworkFileError: If the file is missing, empty or has an invalid
            scale line.
    """
    return _read_records(path, config, NODE_FIELDS, ("x_scale", "y_scale"), "nodes")


def read_road_links_file(
    path: Union[str, Path], config: Optional[ParserConfig] = None
) -> List[RoadRecord]:
    """Read a road links file.

    Returns:
        Records keyed by the RoadLink field names.

    Raises:
        NetworkFileError: If the file is missing, empty or has an invalid
            scale line.
    """
    return _read_records(path, config, LINK_FIELDS, LINK_SCALES, "links")
