"""Tests for the network and configuration file readers."""

import pytest

from freightroute.adapters.parsers import (
    INPUT_FILE_KEYS,
    OUTPUT_FILE_KEYS,
    read_road_links_file,
    read_road_nodes_file,
    read_simulation_config_file,
    read_train_links_file,
    read_train_nodes_file,
)
from freightroute.adapters.parsers.text_lines import clean_line
from freightroute.config import ParserConfig
from freightroute.domain.errors import NetworkFileError


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_clean_line_strips_control_characters_but_keeps_tabs():
    assert clean_line("1\t2\x00\x1f\x7f\t3\r\n") == "1\t2\t3"


class TestTrainFiles:
    def test_nodes_with_scale_line_first(self, train_files):
        nodes_file, _ = train_files

        records = read_train_nodes_file(nodes_file)

        assert [record["user_id"] for record in records] == ["1", "2", "3", "4"]
        assert records[0]["description"] == "Yard"
        assert records[0]["is_terminal"] == "1"
        assert records[1]["description"] == "ND"

    def test_nodes_with_title_line_first(self, tmp_path):
        path = write(tmp_path, "nodes.dat", "Train nodes\n2\t2.5\t0.5\n1\t0\t0\t0\t0\n")

        records = read_train_nodes_file(path)

        assert len(records) == 1
        assert records[0]["x_scale"] == "2.5"
        assert records[0]["y_scale"] == "0.5"

    def test_invalid_scale_line_raises(self, tmp_path):
        path = write(tmp_path, "nodes.dat", "Train nodes\nscales\tx\ty\n1\t0\t0\t0\t0\n")

        with pytest.raises(NetworkFileError) as exc_info:
            read_train_nodes_file(path)
        assert exc_info.value.line_number == 2

    def test_malformed_rows_are_skipped(self, tmp_path):
        content = (
            "3\t1\t1\n"
            "1\t0\t0\t0\t0\n"
            "2\t0\t0\n"
            "x\t0\t0\t0\t0\n"
            "4\t1\t1\t0\t0\n"
        )
        path = write(tmp_path, "nodes.dat", content)

        records = read_train_nodes_file(path)

        assert [record["user_id"] for record in records] == ["1", "4"]

    def test_links_fill_defaults(self, train_files):
        _, links_file = train_files

        records = read_train_links_file(links_file)

        assert len(records) == 4
        assert records[0]["region"] == "ND Region"
        assert records[0]["signals_at_nodes"] == ""
        assert records[2]["region"] == "North"
        assert records[2]["num_directions"] == "2"
        assert records[2]["length_scale"] == "1.0"

    def test_default_region_comes_from_config(self, train_files):
        _, links_file = train_files

        records = read_train_links_file(links_file, ParserConfig(default_region="Unknown"))

        assert records[0]["region"] == "Unknown"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(NetworkFileError):
            read_train_links_file(tmp_path / "absent.dat")

    def test_blank_file_raises(self, tmp_path):
        path = write(tmp_path, "links.dat", "\n  \n\x00\n")

        with pytest.raises(NetworkFileError):
            read_train_links_file(path)


class TestRoadFiles:
    def test_nodes(self, road_files):
        nodes_file, _ = road_files

        records = read_road_nodes_file(nodes_file)

        assert len(records) == 4
        assert records[0]["node_id"] == 1
        assert records[0]["description"] == "Depot"
        assert records[3]["description"] == "Warehouse gate"
        assert records[1]["x"] == 100.0
        assert records[1]["x_scale"] == 1.0

    def test_links(self, road_files):
        _, links_file = road_files

        records = read_road_links_file(links_file)

        assert [record["link_id"] for record in records] == [101, 102, 103, 104]
        assert records[2]["lanes"] == 2.0
        assert records[2]["description"] == "Side road"
        assert records[0]["jam_density_scale"] == 1.0

    def test_short_rows_are_skipped(self, tmp_path):
        content = "Nodes\n2 1 1\n1 0 0 0 0 0\n2 0 0\n3 0.5 0 1 x 0\n"
        path = write(tmp_path, "nodes.dat", content)

        records = read_road_nodes_file(path)

        assert [record["node_id"] for record in records] == [1]

    def test_missing_scales_raise(self, tmp_path):
        path = write(tmp_path, "links.dat", "Links\n4 1.0\n")

        with pytest.raises(NetworkFileError):
            read_road_links_file(path)


class TestSimulationConfigFile:
    def test_reads_positional_layout(self, road_config_file):
        data = read_simulation_config_file(road_config_file)

        assert data["title"] == "Harbour test"
        assert data["sim_time"] == 3600.0
        assert data["output_freq_10"] == 10
        assert data["output_freq_12_14"] == 15
        assert data["routing_option"] == 1
        assert data["pause_flag"] == 0
        assert data["input_folder"] == "inputs"
        assert data["output_folder"] == "."
        assert data["input_files"]["node_coordinates"] == "nodes.dat"
        assert data["input_files"]["incident_descriptions"] == "incidents.dat"
        assert set(data["input_files"]) == set(INPUT_FILE_KEYS)

    def test_missing_output_lines_map_to_empty_names(self, road_config_file):
        data = read_simulation_config_file(road_config_file)

        assert data["output_files"]["standard_output"] == "standard.out"
        assert data["output_files"]["link_flow_microscopic"] == "flow_micro.out"
        assert data["output_files"]["time_space_output"] == ""
        assert set(data["output_files"]) == set(OUTPUT_FILE_KEYS)

    def test_truncated_file_raises(self, tmp_path):
        path = write(tmp_path, "sim.cfg", "Title\n3600 1 1 0 0\n.\n.\nnodes.dat\n")

        with pytest.raises(NetworkFileError):
            read_simulation_config_file(path)

    def test_invalid_parameters_raise(self, tmp_path):
        lines = ["Title", "soon 1 1 0 0", ".", "."] + ["f.dat"] * 5
        path = write(tmp_path, "sim.cfg", "\n".join(lines))

        with pytest.raises(NetworkFileError) as exc_info:
            read_simulation_config_file(path)
        assert exc_info.value.line_number == 2

    def test_empty_file_raises(self, tmp_path):
        path = write(tmp_path, "sim.cfg", "\n\n")

        with pytest.raises(NetworkFileError):
            read_simulation_config_file(path)
