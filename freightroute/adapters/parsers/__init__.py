"""Readers for the vendor network and configuration files."""

from .config_file import INPUT_FILE_KEYS, OUTPUT_FILE_KEYS, read_simulation_config_file
from .road_files import read_road_links_file, read_road_nodes_file
from .train_files import read_train_links_file, read_train_nodes_file

__all__ = [
    "INPUT_FILE_KEYS",
    "OUTPUT_FILE_KEYS",
    "read_simulation_config_file",
    "read_road_nodes_file",
    "read_road_links_file",
    "read_train_nodes_file",
    "read_train_links_file",
]
