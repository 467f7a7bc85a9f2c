"""Reader for the fixed-layout road simulation config file.

Layout, one entry per line:

1. title
2. ``simTime outputFreq10 outputFreq12_14 routingOption pauseFlag``
3. input folder (``.`` when blank)
4. output folder (``.`` when blank)
5-9. input file names, see INPUT_FILE_KEYS
10-24. output file names, see OUTPUT_FILE_KEYS
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...config import ParserConfig, get_config
from ...domain.errors import NetworkFileError
from .text_lines import clean_line

logger = logging.getLogger(__name__)

INPUT_FILE_KEYS = (
    "node_coordinates",
    "link_structure",
    "signal_timing",
    "traffic_demands",
    "incident_descriptions",
)

OUTPUT_FILE_KEYS = (
    "standard_output",
    "link_flow_microscopic",
    "link_flow_minimum_tree",
    "minimum_path_tree_routing",
    "trip_based_vehicle_probe",
    "second_by_second_vehicle_probe",
    "link_travel_time",
    "minimum_path_tree_output_1",
    "minimum_path_tree_output_2",
    "vehicle_departures",
    "individual_vehicle_path",
    "emission_concentration",
    "summary_output",
    "link_flow_mesoscopic",
    "time_space_output",
)

FIRST_INPUT_LINE = 4
FIRST_OUTPUT_LINE = FIRST_INPUT_LINE + len(INPUT_FILE_KEYS)


def _read_positional_lines(path: Path, encoding: str) -> List[str]:
    try:
        with path.open(encoding=encoding) as f:
            lines = [clean_line(line) for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise NetworkFileError(
            "Cannot read configuration file", file_path=str(path), cause=e
        )
    while lines and not lines[-1]:
        lines.pop()
    return lines


def read_simulation_config_file(
    path: Union[str, Path], config: Optional[ParserConfig] = None
) -> Dict[str, Any]:
    """Read a road simulation config file.

    Args:
        path: Config file.
        config: Parser settings, defaults to get_config().parser.

    Returns:
        ``{"title", "sim_time", "output_freq_10", "output_freq_12_14",
        "routing_option", "pause_flag", "input_folder", "output_folder",
        "input_files", "output_files"}``. Output file lines missing from
        the end of the file map to empty names.

    Raises:
        NetworkFileError: If the file is missing, empty, shorter than the
            input file section, or its parameter line is invalid.
    """
    config = config or get_config().parser
    path = Path(path)
    lines = _read_positional_lines(path, config.encoding)

    if not lines:
        raise NetworkFileError("Configuration file is empty", file_path=str(path))
    if len(lines) < FIRST_OUTPUT_LINE:
        raise NetworkFileError(
            "Configuration file is truncated before the input file names",
            file_path=str(path),
            line_number=len(lines),
        )

    params = lines[1].split()
    if len(params) < 5:
        raise NetworkFileError(
            "Invalid simulation parameters", file_path=str(path), line_number=2
        )
    try:
        sim_time = float(params[0])
        output_freq_10, output_freq_12_14, routing_option, pause_flag = (
            int(value) for value in params[1:5]
        )
    except ValueError as e:
        raise NetworkFileError(
            "Invalid simulation parameters",
            file_path=str(path),
            line_number=2,
            cause=e,
        )

    output_lines = lines[FIRST_OUTPUT_LINE:]
    result = {
        "title": lines[0],
        "sim_time": sim_time,
        "output_freq_10": output_freq_10,
        "output_freq_12_14": output_freq_12_14,
        "routing_option": routing_option,
        "pause_flag": pause_flag,
        "input_folder": lines[2] or ".",
        "output_folder": lines[3] or ".",
        "input_files": {
            key: lines[FIRST_INPUT_LINE + i] for i, key in enumerate(INPUT_FILE_KEYS)
        },
        "output_files": {
            key: output_lines[i] if i < len(output_lines) else ""
            for i, key in enumerate(OUTPUT_FILE_KEYS)
        },
    }
    logger.debug(
        "Read simulation config",
        extra={"file_path": str(path), "title": result["title"]},
    )
    return result
