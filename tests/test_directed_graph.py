import json
import math

import pytest

from freightroute.domain.errors import InvalidArgumentError
from freightroute.domain.models import GraphEvent
from freightroute.graph.directed_graph import DirectedGraph


def record_events(graph):
    events = []
    graph.subscribe(lambda event, *payload: events.append((event, payload)))
    return events


def test_add_edge_creates_missing_endpoints():
    graph = DirectedGraph()
    graph.add_edge("A", "B", 3.0)

    assert graph.has_node("A")
    assert graph.has_node("B")
    assert graph.node_attributes("A") == {}
    assert graph.edge_weight("A", "B") == 3.0


def test_remove_edge_keeps_endpoints():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 5.0, {"max_speed": 10.0})
    graph.remove_edge(1, 2)

    assert not graph.has_edge(1, 2)
    assert graph.has_node(1) and graph.has_node(2)


def test_remove_node_removes_incident_edges():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 1.0)
    graph.add_edge(2, 3, 1.0)
    graph.add_edge(3, 2, 1.0)

    graph.remove_node(2)

    assert not graph.has_node(2)
    for other in (1, 3):
        assert not graph.has_edge(2, other)
        assert not graph.has_edge(other, 2)
    assert graph.edge_count == 0
    assert graph.out_degree(1) == 0


def test_absent_edge_weight_is_infinite():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 0.0)

    assert graph.edge_weight(1, 2) == 0.0
    assert math.isinf(graph.edge_weight(2, 1))
    assert math.isinf(graph.edge_weight(7, 8))


@pytest.mark.parametrize("weight", [-1.0, math.nan, math.inf, "ten", True])
def test_invalid_weights_are_rejected(weight):
    graph = DirectedGraph()

    with pytest.raises(InvalidArgumentError):
        graph.add_edge(1, 2, weight)
    assert graph.node_count == 0


def test_set_edge_weight_rejects_negative_weight():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 4.0)

    with pytest.raises(InvalidArgumentError):
        graph.set_edge_weight(1, 2, -2.0)
    assert graph.edge_weight(1, 2) == 4.0


def test_unsupported_attribute_value_is_rejected():
    graph = DirectedGraph()

    with pytest.raises(InvalidArgumentError):
        graph.add_node(1, {"when": object()})


def test_attributes_are_copied_in_and_out():
    graph = DirectedGraph()
    attrs = {"tags": ["a", "b"], "meta": {"depth": 2}}
    graph.add_node(1, attrs)

    attrs["tags"].append("c")
    returned = graph.node_attributes(1)
    returned["meta"]["depth"] = 99

    assert graph.node_attributes(1) == {"tags": ["a", "b"], "meta": {"depth": 2}}


def test_set_edge_attributes_adds_missing_edge_with_unit_weight():
    graph = DirectedGraph()
    graph.set_edge_attributes("X", "Y", {"lanes": 2})

    assert graph.edge_weight("X", "Y") == 1.0
    assert graph.edge_attributes("X", "Y") == {"lanes": 2}


def test_set_edge_weight_keeps_attributes():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 1.0, {"max_speed": 20.0})
    graph.set_edge_weight(1, 2, 8.0)

    assert graph.edge_weight(1, 2) == 8.0
    assert graph.edge_attributes(1, 2) == {"max_speed": 20.0}


def test_queries_on_neighbors():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 2.0)
    graph.add_edge(1, 3, 3.0)
    graph.add_edge(3, 1, 4.0)

    assert graph.outgoing(1) == [(2, 2.0), (3, 3.0)]
    assert graph.incoming(1) == [(3, 4.0)]
    assert graph.in_degree(2) == 1
    assert graph.nodes() == [1, 2, 3]
    assert sorted(graph.edges()) == [(1, 2, 2.0), (1, 3, 3.0), (3, 1, 4.0)]
    assert len(graph) == 3
    assert 3 in graph
    assert 9 not in graph


def test_add_edge_emits_element_events_then_graph_changed():
    graph = DirectedGraph()
    events = record_events(graph)

    graph.add_edge(1, 2, 1.0)

    assert events == [
        (GraphEvent.NODE_ADDED, (1,)),
        (GraphEvent.NODE_ADDED, (2,)),
        (GraphEvent.EDGE_ADDED, (1, 2)),
        (GraphEvent.GRAPH_CHANGED, ()),
    ]


def test_replacing_edge_emits_edge_modified():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 1.0)
    events = record_events(graph)

    graph.add_edge(1, 2, 2.0)

    assert events == [(GraphEvent.EDGE_MODIFIED, (1, 2)), (GraphEvent.GRAPH_CHANGED, ())]


def test_remove_node_emits_edge_removals_before_node_removal():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 1.0)
    graph.add_edge(3, 1, 1.0)
    events = record_events(graph)

    graph.remove_node(1)

    kinds = [event for event, _ in events]
    assert kinds == [
        GraphEvent.EDGE_REMOVED,
        GraphEvent.EDGE_REMOVED,
        GraphEvent.NODE_REMOVED,
        GraphEvent.GRAPH_CHANGED,
    ]


def test_removing_absent_elements_is_silent():
    graph = DirectedGraph()
    events = record_events(graph)

    graph.remove_node(1)
    graph.remove_edge(1, 2)

    assert events == []


def test_callback_may_call_back_into_the_graph():
    graph = DirectedGraph()
    seen = []

    def on_change(event, *payload):
        if event is GraphEvent.GRAPH_CHANGED:
            seen.append(graph.edge_count)
            if graph.edge_count == 1:
                graph.add_edge(2, 3, 1.0)

    graph.subscribe(on_change)
    graph.add_edge(1, 2, 1.0)

    assert seen == [1, 2]
    assert graph.has_edge(2, 3)


def test_unsubscribe_stops_delivery():
    graph = DirectedGraph()
    events = []
    unsubscribe = graph.subscribe(lambda event, *payload: events.append(event))

    graph.add_node(1)
    unsubscribe()
    graph.add_node(2)

    assert events == [GraphEvent.NODE_ADDED, GraphEvent.GRAPH_CHANGED]


def test_rebuild_emits_single_graph_changed():
    graph = DirectedGraph()
    graph.add_edge("old", "gone", 1.0)
    events = record_events(graph)

    graph.rebuild([("A", {"x": 1}), ("B", None)], [("A", "B", 2.0, None), ("B", "C", 1.0, None)])

    assert events == [(GraphEvent.GRAPH_CHANGED, ())]
    assert graph.nodes() == ["A", "B", "C"]
    assert not graph.has_node("old")


def test_rebuild_with_invalid_edge_leaves_graph_untouched():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 1.0)

    with pytest.raises(InvalidArgumentError):
        graph.rebuild([(5, None)], [(5, 6, -1.0, None)])
    assert graph.nodes() == [1, 2]


def test_clear_emits_single_graph_changed():
    graph = DirectedGraph()
    graph.add_edge(1, 2, 1.0)
    events = record_events(graph)

    graph.clear()

    assert events == [(GraphEvent.GRAPH_CHANGED, ())]
    assert graph.node_count == 0


def test_document_round_trip_is_observationally_equal():
    graph = DirectedGraph(node_type=int)
    graph.add_node(1, {"name": "Yard", "terminal": True})
    graph.add_edge(1, 2, 10.5, {"max_speed": 40.0, "tracks": [1, 2]})
    graph.add_edge(2, 1, 3, {"region": "North"})

    # Through JSON, as a document would travel in practice
    doc = json.loads(json.dumps(graph.to_document()))
    restored = DirectedGraph(node_type=int)
    events = record_events(restored)
    restored.from_document(doc)

    assert events == [(GraphEvent.GRAPH_CHANGED, ())]
    assert restored.nodes() == graph.nodes()
    assert sorted(restored.edges()) == sorted(graph.edges())
    assert restored.node_attributes(1) == {"name": "Yard", "terminal": True}
    assert restored.edge_attributes(1, 2) == {"max_speed": 40.0, "tracks": [1, 2]}
    assert restored.edge_attributes(2, 1) == {"region": "North"}


def test_malformed_document_is_rejected():
    graph = DirectedGraph()
    graph.add_node("keep")

    with pytest.raises(InvalidArgumentError):
        graph.from_document({"nodes": [{"attributes": {}}]})
    with pytest.raises(InvalidArgumentError):
        graph.from_document(["not", "a", "mapping"])
    assert graph.nodes() == ["keep"]
