"""OS query collaborators used by the snapshot collector.

Each capability is a small Protocol so tests can hand the collector
deterministic fakes. The ``Psutil*`` classes are the real implementations
and are what ``HealthProviders.system()`` wires together.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Protocol

import psutil
import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProcessMemory:
    rss: int
    vms: int


@dataclass(frozen=True)
class SystemMemory:
    total: int
    available: int
    used: int
    free: int
    percent: float


@dataclass(frozen=True)
class MountEntry:
    """One row of the mount table with its capacity in bytes."""

    mounted_on: str
    total: int
    avail: int


@dataclass(frozen=True)
class InterfaceCounters:
    """Cumulative counters for a single network interface."""

    bytes_recv: int = 0
    bytes_sent: int = 0
    packets_recv: int = 0
    packets_sent: int = 0
    errin: int = 0
    errout: int = 0


class ProcessStatsProvider(Protocol):
    def pid(self) -> int: ...

    def memory(self) -> ProcessMemory: ...


class MemoryStatsProvider(Protocol):
    def virtual_memory(self) -> SystemMemory: ...


class LoadAverageProvider(Protocol):
    def load_average(self) -> tuple[float, float, float]: ...


class MountTableProvider(Protocol):
    def mounts(self) -> list[MountEntry]: ...


class NetworkInterfaceProvider(Protocol):
    def interfaces(self) -> dict[str, InterfaceCounters]: ...


# ---------------------------------------------------------------------------
# psutil-backed implementations
# ---------------------------------------------------------------------------


class PsutilProcessStats:
    """Stats for the current process.

    A fresh ``psutil.Process`` is looked up on every call so concurrent
    observations never share a handle.
    """

    def _process(self) -> psutil.Process:
        return psutil.Process(os.getpid())

    def pid(self) -> int:
        return self._process().pid

    def memory(self) -> ProcessMemory:
        info = self._process().memory_info()
        return ProcessMemory(rss=int(info.rss), vms=int(info.vms))


class PsutilMemoryStats:
    def virtual_memory(self) -> SystemMemory:
        vm = psutil.virtual_memory()
        return SystemMemory(
            total=int(vm.total),
            available=int(vm.available),
            used=int(vm.used),
            free=int(vm.free),
            percent=float(vm.percent),
        )


class PsutilLoadAverage:
    def load_average(self) -> tuple[float, float, float]:
        one, five, fifteen = psutil.getloadavg()
        return float(one), float(five), float(fifteen)


class PsutilMountTable:
    """Mount table with disk usage for every readable mount point."""

    def mounts(self) -> list[MountEntry]:
        rows: list[MountEntry] = []
        for part in psutil.disk_partitions(all=True):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as exc:
                # Pseudo filesystems and mounts we lack permission for.
                logger.debug(
                    "mount_usage_unreadable",
                    mounted_on=part.mountpoint,
                    error=str(exc),
                )
                continue
            rows.append(
                MountEntry(
                    mounted_on=str(part.mountpoint),
                    total=int(usage.total),
                    avail=int(usage.free),
                )
            )
        return rows


class PsutilNetworkInterfaces:
    def interfaces(self) -> dict[str, InterfaceCounters]:
        counters = psutil.net_io_counters(pernic=True) or {}
        return {
            name: InterfaceCounters(
                bytes_recv=int(nic.bytes_recv),
                bytes_sent=int(nic.bytes_sent),
                packets_recv=int(nic.packets_recv),
                packets_sent=int(nic.packets_sent),
                errin=int(nic.errin),
                errout=int(nic.errout),
            )
            for name, nic in counters.items()
        }


@dataclass(frozen=True)
class HealthProviders:
    """Bundle of every OS collaborator the collector needs."""

    process: ProcessStatsProvider
    memory: MemoryStatsProvider
    load: LoadAverageProvider
    mounts: MountTableProvider
    network: NetworkInterfaceProvider

    @classmethod
    def system(cls) -> "HealthProviders":
        """Return providers that query the host through psutil."""
        return cls(
            process=PsutilProcessStats(),
            memory=PsutilMemoryStats(),
            load=PsutilLoadAverage(),
            mounts=PsutilMountTable(),
            network=PsutilNetworkInterfaces(),
        )
