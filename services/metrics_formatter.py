"""
services/metrics_formatter.py
-----------------------------
Plain-text renderers for metrics snapshots and server lists.
Each metric renderer takes a ServerMetrics (or None) and returns a message.
"""

from typing import Callable, Optional

from models.metrics import ServerMetrics
from models.server import UserServer

TOP_INTERFACES = 5


def format_cpu(m: Optional[ServerMetrics]) -> str:
    if m is None:
        return "❌ CPU metrics unavailable"
    load = m.cpu_usage.load_average
    return (
        f"🖥️ CPU usage: {m.cpu:.1f}%\n"
        f"- User: {m.cpu_usage.usage_user:.1f}%\n"
        f"- System: {m.cpu_usage.usage_system:.1f}%\n"
        f"- Idle: {m.cpu_usage.usage_idle:.1f}%\n"
        f"- Load average: {load.load_1min:.2f}, {load.load_5min:.2f}, {load.load_15min:.2f}\n"
        f"- Cores: {m.cpu_usage.cores} @ {m.cpu_usage.frequency:.1f} MHz"
    )


def format_memory(m: Optional[ServerMetrics]) -> str:
    if m is None:
        return "❌ Memory metrics unavailable"
    mem = m.memory_details
    return (
        f"💾 Memory: {m.memory:.1f}% used\n"
        f"- Total: {mem.total_gb:.2f} GB\n"
        f"- Used: {mem.used_gb:.2f} GB\n"
        f"- Available: {mem.available_gb:.2f} GB\n"
        f"- Free: {mem.free_gb:.2f} GB"
    )


def format_disk(m: Optional[ServerMetrics]) -> str:
    if m is None or not m.disk_details:
        return "❌ Disk metrics unavailable"
    lines = ["💿 Disk space:"]
    for disk in m.disk_details:
        lines.append(disk.path or "?")
        lines.append(f"- Filesystem: {disk.filesystem or 'unknown'}")
        lines.append(f"- Total: {int(disk.total_gb)} GB")
        lines.append(f"- Used: {int(disk.used_gb)} GB ({disk.used_percent:.0f}%)")
        lines.append(f"- Free: {int(disk.free_gb)} GB")
    return "\n".join(lines)


def format_temperature(m: Optional[ServerMetrics]) -> str:
    if m is None:
        return "❌ Temperature metrics unavailable"
    t = m.temperature_details
    return (
        "🌡️ Temperature:\n"
        f"- CPU: {t.cpu_temperature:.1f}°C\n"
        f"- GPU: {t.gpu_temperature:.1f}°C\n"
        f"- System: {t.system_temperature:.1f}°C\n"
        f"- Highest: {t.highest_temperature:.1f}°C"
    )


def format_network(m: Optional[ServerMetrics]) -> str:
    if m is None:
        return "❌ Network metrics unavailable"
    net = m.network_details
    lines = [
        "🌐 Network:",
        f"- Receive: {net.total_rx_mbps:.2f} Mbps",
        f"- Transmit: {net.total_tx_mbps:.2f} Mbps",
    ]
    busiest = sorted(net.interfaces, key=lambda i: i.traffic, reverse=True)[:TOP_INTERFACES]
    if busiest:
        lines.append("- Interfaces:")
        for iface in busiest:
            lines.append(f"  - {iface.name} ({iface.status}): ↑{iface.tx_mbps:.2f} ↓{iface.rx_mbps:.2f} Mbps")
    return "\n".join(lines)


def format_system(m: Optional[ServerMetrics]) -> str:
    if m is None:
        return "❌ System information unavailable"
    s = m.system_details
    return (
        "🖥️ System:\n"
        f"- Hostname: {s.hostname or 'unknown'}\n"
        f"- OS: {s.os or 'unknown'}\n"
        f"- Kernel: {s.kernel or 'unknown'}\n"
        f"- Architecture: {s.architecture or 'unknown'}\n"
        f"- Uptime: {s.uptime_human or 'unknown'}\n"
        f"- Processes: {s.processes_total} ({s.processes_running} running)"
    )


def format_all(m: Optional[ServerMetrics]) -> str:
    if m is None:
        return "❌ Metrics unavailable"
    lines = [
        "📊 Metrics summary:",
        "",
        f"🖥️ CPU: {m.cpu:.1f}% (load {m.cpu_usage.load_average.load_1min:.2f})",
        f"💾 Memory: {m.memory:.1f}% ({m.memory_details.used_gb:.1f}/{m.memory_details.total_gb:.1f} GB)",
    ]
    if m.disk_details:
        disk = m.disk_details[0]
        lines.append(
            f"💿 Disk {disk.path}: {disk.used_percent:.0f}% ({int(disk.used_gb)}/{int(disk.total_gb)} GB)"
        )
    lines.append(
        f"🌐 Network: ↑{m.network_details.total_tx_mbps:.2f} ↓{m.network_details.total_rx_mbps:.2f} Mbps"
    )
    lines.append(f"🌡️ Temperature: {m.temperature_details.cpu_temperature:.1f}°C (CPU)")
    lines.append(f"⏰ Uptime: {m.system_details.uptime_human or 'unknown'}")
    return "\n".join(lines)


FORMATTERS: dict[str, Callable[[Optional[ServerMetrics]], str]] = {
    "cpu": format_cpu,
    "memory": format_memory,
    "disk": format_disk,
    "temp": format_temperature,
    "network": format_network,
    "system": format_system,
    "all": format_all,
}


def format_metric(kind: str, metrics: Optional[ServerMetrics], server_label: str = "") -> str:
    """Render one metric kind, prefixed with the server label when given."""
    body = FORMATTERS[kind](metrics)
    return f"📡 {server_label}\n\n{body}" if server_label else body


def format_servers_list(servers: list[UserServer]) -> str:
    if not servers:
        return (
            "You have no servers yet.\n\n"
            "Use /add <server_key> to add one."
        )
    lines = [f"🖥️ Your servers ({len(servers)}):", ""]
    for i, server in enumerate(servers, 1):
        lines.append(f"{i}. {server.label()}")
        added = server.added_at.strftime("%d.%m.%Y %H:%M") if server.added_at else "-"
        lines.append(f"   Added: {added} | Role: {server.role}")
    return "\n".join(lines)
