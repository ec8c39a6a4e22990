"""Basic sanity checks for the mock factory simulator."""

from prodexporter.mock.fake_frm_server import render_payload
from prodexporter.mock.generator import DEFAULT_ITEMS, FactorySimulator
from prodexporter.collector.payload_decoder import decode_production_details


def test_snapshot_returns_valid_data():
    sim = FactorySimulator(seed=42)
    details = sim.snapshot()

    assert [d.item_name for d in details] == list(DEFAULT_ITEMS)
    for d in details:
        assert 0 <= d.current_production <= d.production_capacity
        assert 0 <= d.production_percent <= 100
        assert 0 <= d.consumption_percent <= 100
        assert d.current_consumption <= d.consumption_capacity


def test_deterministic_with_same_seed():
    sim_a = FactorySimulator(seed=99)
    sim_b = FactorySimulator(seed=99)
    assert sim_a.snapshot() == sim_b.snapshot()


def test_custom_items():
    sim = FactorySimulator(items={"Water": (120.0, 0.0)})
    (d,) = sim.snapshot()
    assert d.item_name == "Water"
    assert d.current_consumption == 0.0
    assert d.consumption_percent == 0.0


def test_rendered_payload_decodes():
    sim = FactorySimulator(seed=7)
    details = sim.snapshot()
    assert decode_production_details(render_payload(details)) == details


def test_render_empty_payload():
    assert render_payload([]) == "[]"


def test_servers_get_their_own_simulator():
    from prodexporter.mock.fake_frm_server import _StatsHandler, make_server

    assert _StatsHandler.simulator is None
    a = make_server(port=0, seed=1)
    b = make_server(port=0, seed=1)
    try:
        assert a.RequestHandlerClass.simulator is not b.RequestHandlerClass.simulator
    finally:
        a.server_close()
        b.server_close()
