"""Shared fixtures: isolated configuration and small network files."""

from pathlib import Path

import pytest

from freightroute.config import reset_config
from freightroute.registry import reset_registry


TRAIN_NODES = (
    "4\t1.0\t1.0\n"
    "1\t0\t0\t1\t30\tYard\n"
    "2\t10\t0\t0\t0\n"
    "3\t20\t0\t0\t0\tJunction\n"
    "4\t30\t0\t1\t60\tPort\n"
)

# 1 -> 2 -> 4 is 20 long at 10 (time 2), 1 -> 3 -> 4 is 30 long at 30 (time 1)
TRAIN_LINKS = (
    "4\t1.0\t1.0\n"
    "10\t1\t2\t10\t10\t0\t0\t0\t1\t0\t0\n"
    "11\t2\t4\t10\t10\t0\t0\t0\t1\t0\t0\n"
    "12\t1\t3\t15\t30\t0\t0\t0\t2\t0\t1\t\tNorth\n"
    "13\t3\t4\t15\t30\t0\t0\t0\t1\t0\t1\n"
)

ROAD_NODES = (
    "Road nodes\n"
    "4 1.0 1.0\n"
    "1 0 0 0 0 0 Depot\n"
    "2 100 0 0 0 0\n"
    "3 0 100 0 0 0\n"
    "4 100 100 0 0 0 Warehouse gate\n"
)

# Links: id up down length free_speed sat_flow lanes + 13 more ints/floats
ROAD_LINKS = (
    "Road links\n"
    "4 1.0 1.0 1.0 1.0 1.0\n"
    "101 1 2 100 50 1800 1 0 0 0 0 0 0 0 0 0 0 0 0 0\n"
    "102 2 4 100 50 1800 1 0 0 0 0 0 0 0 0 0 0 0 0 0\n"
    "103 1 3 120 80 1800 2 0 0 0 0 0 0 0 0 0 0 0 0 0 Side road\n"
    "104 3 4 120 80 1800 2 0 0 0 0 0 0 0 0 0 0 0 0 0\n"
)


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    """Fresh configuration and registry for every test."""
    for name in ("FRT_ROUTING_BPR_ALPHA", "FRT_ROUTING_BPR_BETA", "FRT_PARSER_ENCODING"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    reset_registry()
    yield
    reset_registry()
    reset_config()


def write_file(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def train_files(tmp_path):
    """(nodes_file, links_file) of a four-node train network."""
    return (
        write_file(tmp_path, "train_nodes.dat", TRAIN_NODES),
        write_file(tmp_path, "train_links.dat", TRAIN_LINKS),
    )


@pytest.fixture
def road_files(tmp_path):
    """(nodes_file, links_file) of a four-node road network."""
    return (
        write_file(tmp_path, "road_nodes.dat", ROAD_NODES),
        write_file(tmp_path, "road_links.dat", ROAD_LINKS),
    )


@pytest.fixture
def road_config_file(tmp_path):
    """Simulation config file whose input folder holds the road network."""
    inputs = tmp_path / "inputs"
    inputs.mkdir()
    write_file(inputs, "nodes.dat", ROAD_NODES)
    write_file(inputs, "links.dat", ROAD_LINKS)
    lines = [
        "Harbour test",
        "3600 10 15 1 0",
        "inputs",
        "",
        "nodes.dat",
        "links.dat",
        "signals.dat",
        "demand.dat",
        "incidents.dat",
        "standard.out",
        "flow_micro.out",
    ]
    return write_file(tmp_path, "sim.cfg", "\n".join(lines) + "\n\n")
