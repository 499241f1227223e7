"""On-demand health snapshot collection for a beacon node.

Every call queries the OS afresh and assembles a new BeaconHealth value.

Design principles:
- Stateless: nothing is cached between calls, so concurrent callers are safe
- All-or-nothing: any failed query fails the whole observation; the only
  optional parts are the per-database mount infos
- Injectable: every OS query goes through HealthProviders
"""

import asyncio
import sys
import time
from typing import Callable, Optional, TypeVar

import structlog

from ..capabilities.observe import (
    BeaconHealth,
    CommonHealth,
    DBPaths,
    HealthCapabilityError,
    MountInfo,
    Network,
)
from .mounts import mount_info_for_path
from .providers import HealthProviders, NetworkInterfaceProvider

logger = structlog.get_logger(__name__)

SUPPORTED_PLATFORMS = ("linux", "darwin")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Top-level snapshot assembly
# ---------------------------------------------------------------------------


def observe_beacon_health(
    db_paths: DBPaths,
    providers: Optional[HealthProviders] = None,
    platform: Optional[str] = None,
) -> BeaconHealth:
    """Assemble a full BeaconHealth snapshot.

    Args:
        db_paths: Chain and freezer database paths to report disk usage for.
        providers: OS collaborators (default: psutil-backed).
        platform: Platform name to check support for (default: sys.platform).

    Returns:
        Fresh BeaconHealth with current process, system and disk state.

    Raises:
        HealthCapabilityError: On an unsupported platform or if any OS query
            fails. A database path with no enclosing mount is not an error.
    """
    start_ns = time.perf_counter_ns()
    providers = providers or HealthProviders.system()

    common = observe_common(providers, platform=platform)
    network = observe_network(providers.network)
    chain_database = mount_info_for_path(db_paths.chain_db, providers.mounts)
    freezer_database = mount_info_for_path(db_paths.freezer_db, providers.mounts)

    health = BeaconHealth(
        common=common,
        network=network,
        chain_database=chain_database,
        freezer_database=freezer_database,
    )

    logger.debug(
        "beacon_health_observed",
        duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 1),
        chain_mount=_mounted_on(chain_database),
        freezer_mount=_mounted_on(freezer_database),
    )
    return health


async def observe_beacon_health_async(
    db_paths: DBPaths,
    providers: Optional[HealthProviders] = None,
    platform: Optional[str] = None,
) -> BeaconHealth:
    """Run observe_beacon_health in a worker thread.

    The OS queries block; async serving layers should await this instead
    of calling the synchronous version on the event loop.
    """
    return await asyncio.to_thread(observe_beacon_health, db_paths, providers, platform)


# ---------------------------------------------------------------------------
# Individual collection functions
# ---------------------------------------------------------------------------


def check_platform_supported(platform: Optional[str] = None) -> None:
    """Raise if health observation is unavailable on this platform."""
    platform = platform if platform is not None else sys.platform
    if not platform.startswith(SUPPORTED_PLATFORMS):
        logger.warning("health_platform_unsupported", platform=platform)
        raise HealthCapabilityError(
            code="unsupported_platform",
            message="Health is only available on Linux and MacOS",
            details={"platform": platform},
        )


def observe_common(
    providers: Optional[HealthProviders] = None,
    platform: Optional[str] = None,
) -> CommonHealth:
    """Collect process memory, system memory and load average.

    Raises:
        HealthCapabilityError: With a code naming the query that failed.
    """
    check_platform_supported(platform)
    providers = providers or HealthProviders.system()

    pid = _query("process_lookup_failed", "Unable to get current process", providers.process.pid)
    process_mem = _query(
        "process_memory_failed", "Unable to get process memory info", providers.process.memory
    )
    vm = _query("system_memory_failed", "Unable to get virtual memory", providers.memory.virtual_memory)
    load_1, load_5, load_15 = _query(
        "loadavg_failed", "Unable to get loadavg", providers.load.load_average
    )

    return CommonHealth(
        pid=pid,
        pid_mem_resident_set_size=process_mem.rss,
        pid_mem_virtual_memory_size=process_mem.vms,
        sys_virt_mem_total=vm.total,
        sys_virt_mem_available=vm.available,
        sys_virt_mem_used=vm.used,
        sys_virt_mem_free=vm.free,
        sys_virt_mem_percent=vm.percent,
        sys_loadavg_1=load_1,
        sys_loadavg_5=load_5,
        sys_loadavg_15=load_15,
    )


def observe_network(provider: NetworkInterfaceProvider) -> Network:
    """Sum the cumulative counters of every network interface.

    No deltas are tracked; an interface that disappears between two calls
    simply drops out of the totals.
    """
    interfaces = _query(
        "network_enumeration_failed", "Unable to enumerate network interfaces", provider.interfaces
    )

    rx_bytes = rx_errors = rx_packets = 0
    tx_bytes = tx_errors = tx_packets = 0
    for counters in interfaces.values():
        rx_bytes += counters.bytes_recv
        rx_errors += counters.errin
        rx_packets += counters.packets_recv
        tx_bytes += counters.bytes_sent
        tx_errors += counters.errout
        tx_packets += counters.packets_sent

    return Network(
        rx_bytes=rx_bytes,
        rx_errors=rx_errors,
        rx_packets=rx_packets,
        tx_bytes=tx_bytes,
        tx_errors=tx_errors,
        tx_packets=tx_packets,
    )


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _query(code: str, message: str, fn: Callable[[], T]) -> T:
    """Call one OS query, turning any failure into a HealthCapabilityError."""
    try:
        return fn()
    except HealthCapabilityError:
        raise
    except Exception as exc:
        logger.error("health_query_failed", code=code, error=str(exc))
        raise HealthCapabilityError(
            code=code,
            message=f"{message}: {exc}",
            details={"error": str(exc)},
        ) from exc


def _mounted_on(info: Optional[MountInfo]) -> Optional[str]:
    return str(info.mounted_on) if info is not None else None
