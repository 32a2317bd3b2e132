from datetime import datetime

from models.metrics import NetworkInterface, ServerMetrics
from models.server import Server, UserServer
from services.metrics_formatter import (
    FORMATTERS,
    format_all,
    format_disk,
    format_metric,
    format_network,
    format_servers_list,
)

from tests.conftest import SAMPLE_METRICS


def sample() -> ServerMetrics:
    return ServerMetrics.from_dict(SAMPLE_METRICS, server_key="srv_12313")


def test_every_kind_renders_and_handles_missing_snapshot():
    metrics = sample()
    for kind, formatter in FORMATTERS.items():
        assert formatter(metrics)
        assert formatter(None).startswith("❌")


def test_network_lists_top_five_by_traffic():
    metrics = ServerMetrics()
    metrics.network_details.interfaces = [
        NetworkInterface(name=f"if{i}", rx_mbps=i, tx_mbps=0) for i in range(8)
    ]
    text = format_network(metrics)

    assert "if7" in text and "if3" in text
    assert "if2" not in text
    assert text.index("if7") < text.index("if6")


def test_disk_without_details_is_unavailable():
    assert format_disk(ServerMetrics()).startswith("❌")


def test_all_summary_uses_first_disk():
    text = format_all(sample())
    assert "CPU: 37.5%" in text
    assert "Disk /: 40%" in text
    assert "3 days" in text


def test_format_metric_prefixes_label():
    assert format_metric("cpu", sample(), "web (srv_12313)").startswith("📡 web (srv_12313)")


def test_servers_list():
    servers = [
        UserServer(1, Server("srv_b", "Backend"), added_at=datetime(2024, 5, 2, 10, 30)),
        UserServer(1, Server("srv_a"), added_at=datetime(2024, 5, 1, 9, 0)),
    ]
    text = format_servers_list(servers)

    assert "Your servers (2)" in text
    assert "1. Backend (srv_b)" in text
    assert "2. srv_a" in text
    assert "02.05.2024 10:30" in text
    assert "/add" in format_servers_list([])
