"""Health data models for a running beacon node.

Provides the BeaconHealth dataclass hierarchy returned by the snapshot
collector, plus the structured error raised when an observation fails.
Every value here is built fresh per observation and never mutated; the
serving layer turns a snapshot into its wire shape with ``to_dict()``.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass
class HealthCapabilityError(Exception):
    """Structured error for health observation failures."""

    code: str
    message: str
    details: dict[str, Any] | None = None
    retryable: bool = False

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details or {},
            "retryable": self.retryable,
        }


@dataclass(frozen=True)
class DBPaths:
    """Paths to the two core node databases."""

    chain_db: Path
    freezer_db: Path


@dataclass(frozen=True)
class MountInfo:
    """Disk usage of the mount point that holds a given path."""

    avail: int
    total: int
    used: int
    used_pct: float
    mounted_on: Path

    @classmethod
    def from_usage(cls, mounted_on: Path | str, total: int, avail: int) -> "MountInfo":
        """Build a MountInfo from raw byte counts.

        ``used`` saturates at zero when ``avail`` exceeds ``total`` (the two
        figures are sampled separately and may skew under disk activity).
        """
        total = int(total)
        avail = int(avail)
        used = max(0, total - avail)
        used_pct = (used / total) * 100.0 if total > 0 else 0.0

        return cls(
            avail=avail,
            total=total,
            used=used,
            used_pct=math.floor(used_pct * 100.0 + 0.5) / 100.0,
            mounted_on=Path(mounted_on),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "avail": self.avail,
            "total": self.total,
            "used": self.used,
            "used_pct": self.used_pct,
            "mounted_on": str(self.mounted_on),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MountInfo":
        return cls(
            avail=int(data["avail"]),
            total=int(data["total"]),
            used=int(data["used"]),
            used_pct=float(data["used_pct"]),
            mounted_on=Path(data["mounted_on"]),
        )


@dataclass(frozen=True)
class Network:
    """Cumulative network counters summed across all interfaces."""

    rx_bytes: int
    rx_errors: int
    rx_packets: int
    tx_bytes: int
    tx_errors: int
    tx_packets: int

    def to_dict(self) -> dict[str, int]:
        return {
            "rx_bytes": self.rx_bytes,
            "rx_errors": self.rx_errors,
            "rx_packets": self.rx_packets,
            "tx_bytes": self.tx_bytes,
            "tx_errors": self.tx_errors,
            "tx_packets": self.tx_packets,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Network":
        return cls(**{name: int(data[name]) for name in NETWORK_FIELDS})


NETWORK_FIELDS = (
    "rx_bytes",
    "rx_errors",
    "rx_packets",
    "tx_bytes",
    "tx_errors",
    "tx_packets",
)


@dataclass(frozen=True)
class CommonHealth:
    """Process and system resource usage."""

    pid: int
    pid_mem_resident_set_size: int  # bytes
    pid_mem_virtual_memory_size: int  # bytes
    sys_virt_mem_total: int
    sys_virt_mem_available: int  # available for new processes
    sys_virt_mem_used: int
    sys_virt_mem_free: int
    sys_virt_mem_percent: float
    sys_loadavg_1: float
    sys_loadavg_5: float
    sys_loadavg_15: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "pid_mem_resident_set_size": self.pid_mem_resident_set_size,
            "pid_mem_virtual_memory_size": self.pid_mem_virtual_memory_size,
            "sys_virt_mem_total": self.sys_virt_mem_total,
            "sys_virt_mem_available": self.sys_virt_mem_available,
            "sys_virt_mem_used": self.sys_virt_mem_used,
            "sys_virt_mem_free": self.sys_virt_mem_free,
            "sys_virt_mem_percent": self.sys_virt_mem_percent,
            "sys_loadavg_1": self.sys_loadavg_1,
            "sys_loadavg_5": self.sys_loadavg_5,
            "sys_loadavg_15": self.sys_loadavg_15,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommonHealth":
        return cls(
            pid=int(data["pid"]),
            pid_mem_resident_set_size=int(data["pid_mem_resident_set_size"]),
            pid_mem_virtual_memory_size=int(data["pid_mem_virtual_memory_size"]),
            sys_virt_mem_total=int(data["sys_virt_mem_total"]),
            sys_virt_mem_available=int(data["sys_virt_mem_available"]),
            sys_virt_mem_used=int(data["sys_virt_mem_used"]),
            sys_virt_mem_free=int(data["sys_virt_mem_free"]),
            sys_virt_mem_percent=float(data["sys_virt_mem_percent"]),
            sys_loadavg_1=float(data["sys_loadavg_1"]),
            sys_loadavg_5=float(data["sys_loadavg_5"]),
            sys_loadavg_15=float(data["sys_loadavg_15"]),
        )


@dataclass(frozen=True)
class BeaconHealth:
    """Complete health snapshot of a beacon node at a point in time."""

    common: CommonHealth
    network: Network  # Totals across all network interfaces
    chain_database: Optional[MountInfo]  # None if no mount holds the path
    freezer_database: Optional[MountInfo]

    def to_dict(self) -> dict[str, Any]:
        """Return the flattened wire shape (common fields at the top level)."""
        data = self.common.to_dict()
        data["network"] = self.network.to_dict()
        data["chain_database"] = _mount_to_dict(self.chain_database)
        data["freezer_database"] = _mount_to_dict(self.freezer_database)
        return data

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BeaconHealth":
        return cls(
            common=CommonHealth.from_dict(data),
            network=Network.from_dict(data["network"]),
            chain_database=_mount_from_dict(data.get("chain_database")),
            freezer_database=_mount_from_dict(data.get("freezer_database")),
        )


def _mount_to_dict(mount: Optional[MountInfo]) -> Optional[dict[str, Any]]:
    return mount.to_dict() if mount is not None else None


def _mount_from_dict(data: Optional[dict[str, Any]]) -> Optional[MountInfo]:
    return MountInfo.from_dict(data) if data is not None else None
