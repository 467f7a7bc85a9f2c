import math
import threading

import pytest

from freightroute.domain.errors import InvalidArgumentError, NetworkIntegrityError
from freightroute.domain.models import NetworkEvent
from freightroute.domain.train import TrainLink, TrainNode
from freightroute.networks import TrainNetwork


def node(user_id, simulator_id=0):
    return TrainNode(simulator_id=simulator_id, user_id=user_id, x=0.0, y=0.0)


def link(user_id, from_id, to_id, length, max_speed=10.0, num_directions=1):
    return TrainLink(
        simulator_id=0,
        user_id=user_id,
        from_node_id=from_id,
        to_node_id=to_id,
        length=length,
        max_speed=max_speed,
        num_directions=num_directions,
    )


def diamond_network():
    network = TrainNetwork("diamond")
    network.load(
        [node(1), node(2), node(3), node(4)],
        [
            link(12, 1, 2, 5),
            link(24, 2, 4, 5),
            link(13, 1, 3, 3),
            link(34, 3, 4, 1),
        ],
    )
    return network


def test_shortest_path_by_distance():
    result = diamond_network().shortest_path(1, 4)

    assert result.node_ids == (1, 3, 4)
    assert result.link_ids == (13, 34)
    assert result.total_length == 4.0
    assert result.min_travel_time == pytest.approx(0.4)
    assert result.criterion == "distance"


def test_shortest_path_by_time():
    result = diamond_network().shortest_path(1, 4, "time")

    assert result.node_ids == (1, 3, 4)
    assert result.min_travel_time == pytest.approx(0.4)
    assert result.criterion == "time"


def test_unreachable_destination_gives_empty_result():
    network = TrainNetwork()
    network.load([node(1), node(2), node(3)], [link(1, 1, 2, 1)])

    result = network.shortest_path(1, 3)

    assert result.is_empty
    assert math.isinf(result.total_length)
    assert math.isinf(result.min_travel_time)
    assert network.shortest_path(1, 99).is_empty


def test_bidirectional_link_is_routable_both_ways():
    network = TrainNetwork()
    network.load([node(7), node(9)], [link(79, 7, 9, 42, num_directions=2)])

    result = network.shortest_path(9, 7)

    assert result.node_ids == (9, 7)
    assert result.link_ids == (79,)
    assert result.total_length == 42.0


def test_zero_speed_link_gives_infinite_travel_time():
    network = TrainNetwork()
    network.load([node(1), node(2)], [link(1, 1, 2, 10, max_speed=0.0)])

    result = network.shortest_path(1, 2)

    assert result.total_length == 10.0
    assert math.isinf(result.min_travel_time)


def test_unknown_criterion_is_rejected():
    with pytest.raises(InvalidArgumentError):
        diamond_network().shortest_path(1, 4, "cheapest")


def test_link_to_unknown_node_is_rejected():
    network = diamond_network()

    with pytest.raises(NetworkIntegrityError) as exc_info:
        network.load([node(1)], [link(5, 1, 8, 2)])
    assert exc_info.value.link_id == 5
    # Previous contents are kept
    assert network.shortest_path(1, 4).node_ids == (1, 3, 4)


def test_load_from_files(train_files):
    nodes_file, links_file = train_files

    network = TrainNetwork.from_files(nodes_file, links_file, name="harbour")

    assert network.network_name == "harbour"
    assert len(network.nodes()) == 4
    assert network.node_by_id(1).description == "Yard"
    assert network.node_by_id(1).is_terminal
    assert network.node_by_id(4).dwell_time == 60.0
    assert network.node_by_id(3).simulator_id == 2
    assert network.link_by_id(12).region == "North"
    assert network.link_by_id(12).has_catenary
    assert network.link_by_id(99) is None


def test_routes_loaded_from_files(train_files):
    network = TrainNetwork.from_files(*train_files)

    by_distance = network.shortest_path(1, 4, "distance")
    by_time = network.shortest_path(1, 4, "time")

    assert by_distance.link_ids == (10, 11)
    assert by_distance.min_travel_time == pytest.approx(2.0)
    assert by_time.node_ids == (1, 3, 4)
    assert by_time.total_length == 30.0
    assert by_time.min_travel_time == pytest.approx(1.0)
    # Link 12 is bidirectional
    assert network.shortest_path(3, 1).link_ids == (12,)


def test_start_and_end_nodes():
    network = diamond_network()

    assert [n.user_id for n in network.start_nodes()] == [1]
    assert [n.user_id for n in network.end_nodes()] == [4]


def test_load_emits_each_network_event_once():
    network = TrainNetwork()
    events = []
    network.subscribe(lambda event, *payload: events.append(event))

    network.load([node(1), node(2)], [link(1, 1, 2, 1)])

    assert sorted(events, key=lambda e: e.value) == [
        NetworkEvent.NETWORK_CHANGED,
        NetworkEvent.NODES_CHANGED,
        NetworkEvent.LINKS_CHANGED,
    ]


def test_update_link_replaces_edges():
    network = diamond_network()

    network.update_link(link(13, 1, 3, 30))

    assert network.graph.edge_weight(1, 3) == 30.0
    assert network.shortest_path(1, 4).node_ids == (1, 2, 4)


def test_update_link_turned_one_way_drops_reverse_edge():
    network = TrainNetwork()
    network.load([node(1), node(2)], [link(1, 1, 2, 4, num_directions=2)])

    network.update_link(link(1, 1, 2, 4, num_directions=1))

    assert network.graph.has_edge(1, 2)
    assert not network.graph.has_edge(2, 1)
    assert network.shortest_path(2, 1).is_empty


def test_update_link_accepts_dict_with_simulator_id():
    network = diamond_network()

    stored = network.update_link(
        {"simulator_id": 4, "user_id": 41, "from_node_id": 4, "to_node_id": 1,
         "length": "2.5", "max_speed": "5"}
    )

    assert stored.length == 2.5
    assert network.link_by_id(41) == stored
    assert network.shortest_path(4, 1).link_ids == (41,)


def test_update_link_without_simulator_id_is_rejected():
    with pytest.raises(InvalidArgumentError):
        diamond_network().update_link({"user_id": 41, "from_node_id": 4})


def test_update_link_to_unknown_node_is_rejected():
    with pytest.raises(NetworkIntegrityError):
        diamond_network().update_link(link(50, 1, 77, 2))


def test_update_node_refreshes_graph_attributes():
    network = diamond_network()
    events = []
    network.subscribe(lambda event, *payload: events.append(event))

    network.update_node(TrainNode(simulator_id=0, user_id=2, x=5.0, y=6.0, description="Depot"))

    assert network.node_by_id(2).description == "Depot"
    assert network.graph.node_attributes(2)["x"] == 5.0
    assert NetworkEvent.NODES_CHANGED in events
    assert NetworkEvent.NETWORK_CHANGED in events


def test_document_round_trip():
    network = diamond_network()
    doc = network.to_document()

    copy = TrainNetwork()
    copy.from_document(doc)

    assert copy.to_document() == doc
    assert copy.shortest_path(1, 4).link_ids == (13, 34)


def test_malformed_document_is_rejected():
    with pytest.raises(InvalidArgumentError):
        TrainNetwork().from_document({"nodes": []})


def test_variables_are_copied():
    network = TrainNetwork()
    payload = {"operators": ["A"]}
    network.set_variable("meta", payload)
    payload["operators"].append("B")

    assert network.variable("meta") == {"operators": ["A"]}
    assert network.variable("absent", 3) == 3
    assert network.variables() == {"meta": {"operators": ["A"]}}


def test_close_releases_records_and_allows_reload():
    network = diamond_network()

    network.close()
    network.close()

    assert network.closed
    assert network.nodes() == []
    assert network.shortest_path(1, 4).is_empty

    network.load([node(1), node(2)], [link(1, 1, 2, 1)])
    assert not network.closed
    assert network.shortest_path(1, 2).node_ids == (1, 2)


def test_replacing_link_keeps_edge_shared_with_bidirectional_link():
    network = TrainNetwork()
    network.load(
        [node(1), node(2), node(3)],
        [link(1, 1, 2, 4, num_directions=2), link(2, 2, 1, 6)],
    )

    network.update_link(link(2, 2, 3, 6))

    assert network.graph.has_edge(2, 1)
    assert network.graph.edge_weight(2, 1) == 4.0
    assert network.graph.has_edge(2, 3)
    assert network.shortest_path(2, 1).link_ids == (1,)


def test_graph_observer_can_query_network_during_changes():
    network = TrainNetwork()
    seen = []

    def observer(event, *payload):
        seen.append((event, len(network.nodes())))

    network.graph.subscribe(observer)

    def mutate():
        network.load([node(1), node(2)], [link(1, 1, 2, 4)])
        network.update_link(link(2, 2, 1, 4))
        network.update_node(node(3))
        network.close()

    worker = threading.Thread(target=mutate, daemon=True)
    worker.start()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert seen
    assert seen[-1][1] == 0
