"""
models/metrics.py
-----------------
Snapshot of a server's performance metrics as returned by
``GET /servers/by-key/{key}/metrics``.

The monitoring API omits sections it could not collect, so every field has
a neutral default and `from_dict` tolerates missing or null values.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


def _num(data: dict, key: str, default: float = 0.0) -> float:
    value = data.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _int(data: dict, key: str) -> int:
    return int(_num(data, key))


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


@dataclass
class LoadAverage:
    load_1min: float = 0.0
    load_5min: float = 0.0
    load_15min: float = 0.0


@dataclass
class CPUUsage:
    usage_total: float = 0.0
    usage_user: float = 0.0
    usage_system: float = 0.0
    usage_idle: float = 0.0
    load_average: LoadAverage = field(default_factory=LoadAverage)
    cores: int = 0
    frequency: float = 0.0


@dataclass
class MemoryDetails:
    total_gb: float = 0.0
    used_gb: float = 0.0
    available_gb: float = 0.0
    free_gb: float = 0.0
    used_percent: float = 0.0


@dataclass
class DiskDetails:
    path: str = ""
    filesystem: str = ""
    total_gb: float = 0.0
    used_gb: float = 0.0
    free_gb: float = 0.0
    used_percent: float = 0.0


@dataclass
class NetworkInterface:
    name: str = ""
    rx_mbps: float = 0.0
    tx_mbps: float = 0.0
    status: str = "up"

    @property
    def traffic(self) -> float:
        return self.rx_mbps + self.tx_mbps


@dataclass
class NetworkDetails:
    interfaces: list[NetworkInterface] = field(default_factory=list)
    total_rx_mbps: float = 0.0
    total_tx_mbps: float = 0.0


@dataclass
class TemperatureDetails:
    cpu_temperature: float = 0.0
    gpu_temperature: float = 0.0
    system_temperature: float = 0.0
    highest_temperature: float = 0.0
    temperature_unit: str = "celsius"


@dataclass
class SystemDetails:
    hostname: str = ""
    os: str = ""
    kernel: str = ""
    architecture: str = ""
    uptime_seconds: int = 0
    uptime_human: str = ""
    processes_total: int = 0
    processes_running: int = 0
    processes_sleeping: int = 0


@dataclass
class ServerMetrics:
    """One metrics snapshot for a single server."""
    cpu: float = 0.0
    cpu_usage: CPUUsage = field(default_factory=CPUUsage)
    memory: float = 0.0
    memory_details: MemoryDetails = field(default_factory=MemoryDetails)
    disk: float = 0.0
    disk_details: list[DiskDetails] = field(default_factory=list)
    network: float = 0.0
    network_details: NetworkDetails = field(default_factory=NetworkDetails)
    temperature_details: TemperatureDetails = field(default_factory=TemperatureDetails)
    system_details: SystemDetails = field(default_factory=SystemDetails)
    server_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], server_key: Optional[str] = None) -> "ServerMetrics":
        """
        Build a snapshot from the decoded ``metrics`` object of the API response.

        Raises:
            TypeError: If ``data`` is not a JSON object.
        """
        if not isinstance(data, dict):
            raise TypeError(f"metrics payload must be an object, got {type(data).__name__}")

        cpu = _section(data, "cpu_usage")
        load = _section(cpu, "load_average")
        mem = _section(data, "memory_details")
        net = _section(data, "network_details")
        temp = _section(data, "temperature_details")
        sysd = _section(data, "system_details")

        disks = [
            DiskDetails(
                path=_str(d, "path"),
                filesystem=_str(d, "filesystem"),
                total_gb=_num(d, "total_gb"),
                used_gb=_num(d, "used_gb"),
                free_gb=_num(d, "free_gb"),
                used_percent=_num(d, "used_percent"),
            )
            for d in (data.get("disk_details") or [])
            if isinstance(d, dict)
        ]
        interfaces = [
            NetworkInterface(
                name=_str(i, "name"),
                rx_mbps=_num(i, "rx_mbps"),
                tx_mbps=_num(i, "tx_mbps"),
                status=_str(i, "status") or "up",
            )
            for i in (net.get("interfaces") or [])
            if isinstance(i, dict)
        ]

        return cls(
            cpu=_num(data, "cpu"),
            cpu_usage=CPUUsage(
                usage_total=_num(cpu, "usage_total"),
                usage_user=_num(cpu, "usage_user"),
                usage_system=_num(cpu, "usage_system"),
                usage_idle=_num(cpu, "usage_idle"),
                load_average=LoadAverage(
                    load_1min=_num(load, "load_1min"),
                    load_5min=_num(load, "load_5min"),
                    load_15min=_num(load, "load_15min"),
                ),
                cores=_int(cpu, "cores"),
                frequency=_num(cpu, "frequency"),
            ),
            memory=_num(data, "memory"),
            memory_details=MemoryDetails(
                total_gb=_num(mem, "total_gb"),
                used_gb=_num(mem, "used_gb"),
                available_gb=_num(mem, "available_gb"),
                free_gb=_num(mem, "free_gb"),
                used_percent=_num(mem, "used_percent"),
            ),
            disk=_num(data, "disk"),
            disk_details=disks,
            network=_num(data, "network"),
            network_details=NetworkDetails(
                interfaces=interfaces,
                total_rx_mbps=_num(net, "total_rx_mbps"),
                total_tx_mbps=_num(net, "total_tx_mbps"),
            ),
            temperature_details=TemperatureDetails(
                cpu_temperature=_num(temp, "cpu_temperature"),
                gpu_temperature=_num(temp, "gpu_temperature"),
                system_temperature=_num(temp, "system_temperature"),
                highest_temperature=_num(temp, "highest_temperature"),
                temperature_unit=_str(temp, "temperature_unit") or "celsius",
            ),
            system_details=SystemDetails(
                hostname=_str(sysd, "hostname"),
                os=_str(sysd, "os"),
                kernel=_str(sysd, "kernel"),
                architecture=_str(sysd, "architecture"),
                uptime_seconds=_int(sysd, "uptime_seconds"),
                uptime_human=_str(sysd, "uptime_human"),
                processes_total=_int(sysd, "processes_total"),
                processes_running=_int(sysd, "processes_running"),
                processes_sleeping=_int(sysd, "processes_sleeping"),
            ),
            server_key=server_key,
        )
