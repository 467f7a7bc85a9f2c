import logging

from freightroute.config import (
    AppConfig,
    ObservabilityConfig,
    RoutingConfig,
    configure_logging,
    get_config,
    reset_config,
)
from freightroute.graph.transport_graph import TransportGraph


def test_defaults():
    config = AppConfig()

    assert config.routing.bpr_alpha == 0.15
    assert config.routing.bpr_beta == 4.0
    assert config.routing.default_saturation_flow == 1800.0
    assert config.parser.encoding == "utf-8"
    assert config.parser.default_region == "ND Region"
    assert config.observability.level == "INFO"


def test_get_config_is_cached():
    assert get_config() is get_config()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FRT_ROUTING_BPR_ALPHA", "0.5")
    monkeypatch.setenv("FRT_PARSER_ENCODING", "latin-1")
    reset_config()

    config = get_config()

    assert config.routing.bpr_alpha == 0.5
    assert config.parser.encoding == "latin-1"


def test_graph_picks_up_configured_coefficients(monkeypatch):
    monkeypatch.setenv("FRT_ROUTING_BPR_ALPHA", "1.0")
    monkeypatch.setenv("FRT_ROUTING_BPR_BETA", "1.0")
    reset_config()

    graph = TransportGraph()
    graph.add_edge(1, 2, 10, {"lanes": 1, "saturation_flow": 10.0})
    graph.add_traffic(1, 2, 5)

    assert graph.congestion(1, 2) == 1.5


def test_explicit_config_wins_over_environment(monkeypatch):
    monkeypatch.setenv("FRT_ROUTING_BPR_ALPHA", "9")
    reset_config()

    assert TransportGraph(config=RoutingConfig(bpr_alpha=0.15)).config.bpr_alpha == 0.15


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        configure_logging(ObservabilityConfig(level="debug"))
        assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)
