"""Road simulation configuration and the road network it owns."""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..adapters.parsers.config_file import read_simulation_config_file
from ..config import ParserConfig
from ..domain.errors import ConfigurationError
from .road_network import RoadNetwork


@dataclass
class RoadSimulationConfig:
    """Settings of one road traffic simulation plus its network.

    File names are resolved relative to ``config_dir`` and the input or
    output folder. The config owns ``network``: closing the config closes
    the network.

    Attributes:
        config_dir: Directory holding the config file
        title: Simulation title
        sim_time: Simulated duration
        output_freq_10: Output frequency for files 10
        output_freq_12_14: Output frequency for files 12 to 14
        routing_option: Routing option code
        pause_flag: Pause flag
        input_folder: Input folder relative to config_dir
        output_folder: Output folder relative to config_dir
        input_files: Input file names by key
        output_files: Output file names by key
        network: The road network
    """

    config_dir: Path = field(default_factory=Path.cwd)
    title: str = ""
    sim_time: float = 0.0
    output_freq_10: int = 0
    output_freq_12_14: int = 0
    routing_option: int = 0
    pause_flag: int = 0
    input_folder: str = "."
    output_folder: str = "."
    input_files: Dict[str, str] = field(default_factory=dict)
    output_files: Dict[str, str] = field(default_factory=dict)
    network: RoadNetwork = field(default_factory=RoadNetwork)

    _variables: Dict[str, Any] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.config_dir = Path(self.config_dir)
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        load_network: bool = True,
        config: Optional[ParserConfig] = None,
    ) -> RoadSimulationConfig:
        """Read a config file and, optionally, its road network.

        The network is read from the ``node_coordinates`` and
        ``link_structure`` input files.

        Raises:
            NetworkFileError: If the config or a network file cannot be used.
        """
        path = Path(path)
        data = read_simulation_config_file(path, config)
        sim_config = cls(
            config_dir=path.resolve().parent,
            title=data["title"],
            sim_time=data["sim_time"],
            output_freq_10=data["output_freq_10"],
            output_freq_12_14=data["output_freq_12_14"],
            routing_option=data["routing_option"],
            pause_flag=data["pause_flag"],
            input_folder=data["input_folder"],
            output_folder=data["output_folder"],
            input_files=data["input_files"],
            output_files=data["output_files"],
            network=RoadNetwork(data["title"]),
        )
        if load_network:
            sim_config.network.load_from_files(
                sim_config.input_file_path("node_coordinates"),
                sim_config.input_file_path("link_structure"),
                config,
            )
        return sim_config

    def input_file_path(self, key: str) -> Path:
        """Full path of an input file.

        Raises:
            ConfigurationError: If the key is unknown.
        """
        with self._lock:
            if key not in self.input_files:
                raise ConfigurationError(
                    f"Unknown input file key: {key}", setting_name=key
                )
            return self.config_dir / self.input_folder / self.input_files[key]

    def output_file_path(self, key: str) -> Path:
        """Full path of an output file.

        Raises:
            ConfigurationError: If the key is unknown.
        """
        with self._lock:
            if key not in self.output_files:
                raise ConfigurationError(
                    f"Unknown output file key: {key}", setting_name=key
                )
            return self.config_dir / self.output_folder / self.output_files[key]

    def set_network_name(self, name: str) -> None:
        self.network.set_network_name(name)

    @property
    def network_name(self) -> str:
        return self.network.network_name

    def set_variable(self, key: str, value: Any) -> None:
        with self._lock:
            self._variables[key] = copy.deepcopy(value)

    def variable(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return copy.deepcopy(self._variables.get(key, default))

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "config_dir": str(self.config_dir),
                "title": self.title,
                "sim_time": self.sim_time,
                "output_freq_10": self.output_freq_10,
                "output_freq_12_14": self.output_freq_12_14,
                "routing_option": self.routing_option,
                "pause_flag": self.pause_flag,
                "input_folder": self.input_folder,
                "output_folder": self.output_folder,
                "input_files": dict(self.input_files),
                "output_files": dict(self.output_files),
                "variables": copy.deepcopy(self._variables),
                "network": self.network.to_document(),
            }

    def close(self) -> None:
        """Release the owned network."""
        self.network.close()
        self._logger.debug("Simulation config closed", extra={"title": self.title})
