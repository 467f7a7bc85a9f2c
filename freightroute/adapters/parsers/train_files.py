"""Readers for the tab-separated train nodes and links files.

Both files start with a scale line ``N<TAB>scale1<TAB>scale2``. Files
exported with a title line carry the scale line second instead; a first
line made of exactly three numbers is taken as the scale line.

The readers return one dict of text values per row, keyed by the
TrainNode / TrainLink field names. Rows that are too short or whose
numeric columns do not parse are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ...config import ParserConfig, get_config
from ...domain.errors import NetworkFileError
from .text_lines import all_numbers, columns_parse, read_clean_lines

logger = logging.getLogger(__name__)

TrainRecord = Dict[str, str]

NODE_MIN_TOKENS = 5
LINK_MIN_TOKENS = 11

NODE_INT_COLUMNS = (0,)
NODE_FLOAT_COLUMNS = (1, 2, 4)
LINK_INT_COLUMNS = (0, 1, 2, 5, 8)
LINK_FLOAT_COLUMNS = (3, 4, 6, 7, 9)


def _split(line: str) -> List[str]:
    return [token.strip() for token in line.split("\t")]


def _scale_header(lines: List[str], path: Path, what: str) -> Tuple[str, str, int]:
    """Locate the scale line.

    Returns:
        The two scale tokens and the index of the first record line.
    """
    first = _split(lines[0])
    if len(first) == 3 and all_numbers(first):
        return first[1], first[2], 1

    if len(lines) < 2:
        raise NetworkFileError(
            f"Bad {what} file structure: missing scale line",
            file_path=str(path),
            line_number=2,
        )
    scales = _split(lines[1])
    if len(scales) < 3 or not all_numbers(scales[1:3]):
        raise NetworkFileError(
            f"Bad {what} file structure: invalid scale information",
            file_path=str(path),
            line_number=2,
        )
    return scales[1], scales[2], 2


def read_train_nodes_file(
    path: Union[str, Path], config: Optional[ParserConfig] = None
) -> List[TrainRecord]:
    """Read a train nodes file.

    Args:
        path: Nodes file.
        config: Parser settings, defaults to get_config().parser.

    Returns:
        Records with keys user_id, x, y, is_terminal, dwell_time,
        description, x_scale, y_scale.

    Raises:
        NetworkFileError: If the file is missing, empty or has no valid
            scale line.
    """
    config = config or get_config().parser
    path = Path(path)
    lines = read_clean_lines(path, config.encoding, "nodes")
    x_scale, y_scale, first_row = _scale_header(lines, path, "nodes")

    records: List[TrainRecord] = []
    skipped = 0
    for values in (_split(line) for line in lines[first_row:]):
        if len(values) < NODE_MIN_TOKENS or not columns_parse(
            values, NODE_INT_COLUMNS, NODE_FLOAT_COLUMNS
        ):
            skipped += 1
            continue
        description = values[5] if len(values) > 5 and values[5] else config.missing_description
        records.append(
            {
                "user_id": values[0],
                "x": values[1],
                "y": values[2],
                "is_terminal": values[3],
                "dwell_time": values[4],
                "description": description,
                "x_scale": x_scale,
                "y_scale": y_scale,
            }
        )

    if skipped:
        logger.warning(
            "Skipped malformed node rows",
            extra={"file_path": str(path), "skipped": skipped},
        )
    logger.debug("Read train nodes", extra={"file_path": str(path), "rows": len(records)})
    return records


def read_train_links_file(
    path: Union[str, Path], config: Optional[ParserConfig] = None
) -> List[TrainRecord]:
    """Read a train links file.

    Args:
        path: Links file.
        config: Parser settings, defaults to get_config().parser.

    Returns:
        Records with keys user_id, from_node_id, to_node_id, length,
        max_speed, signal_id, grade, curvature, num_directions,
        speed_variation_factor, has_catenary, signals_at_nodes, region,
        length_scale, speed_scale.

    Raises:
        NetworkFileError: If the file is missing, empty or has no valid
            scale line.
    """
    config = config or get_config().parser
    path = Path(path)
    lines = read_clean_lines(path, config.encoding, "links")
    length_scale, speed_scale, first_row = _scale_header(lines, path, "links")

    records: List[TrainRecord] = []
    skipped = 0
    for values in (_split(line) for line in lines[first_row:]):
        if len(values) < LINK_MIN_TOKENS or not columns_parse(
            values, LINK_INT_COLUMNS, LINK_FLOAT_COLUMNS
        ):
            skipped += 1
            continue
        records.append(
            {
                "user_id": values[0],
                "from_node_id": values[1],
                "to_node_id": values[2],
                "length": values[3],
                "max_speed": values[4],
                "signal_id": values[5],
                "grade": values[6],
                "curvature": values[7],
                "num_directions": values[8],
                "speed_variation_factor": values[9],
                "has_catenary": values[10],
                "signals_at_nodes": values[11] if len(values) > 11 else "",
                "region": values[12] if len(values) > 12 and values[12] else config.default_region,
                "length_scale": length_scale,
                "speed_scale": speed_scale,
            }
        )

    if skipped:
        logger.warning(
            "Skipped malformed link rows",
            extra={"file_path": str(path), "skipped": skipped},
        )
    logger.debug("Read train links", extra={"file_path": str(path), "rows": len(records)})
    return records
