"""Point-in-time health metrics for a running beacon node.

Usage:
    from beacon_health import DBPaths, observe_beacon_health

    health = observe_beacon_health(DBPaths(chain_db=..., freezer_db=...))
    payload = health.to_dict()
"""

from .capabilities.observe import (
    BeaconHealth,
    CommonHealth,
    DBPaths,
    HealthCapabilityError,
    MountInfo,
    Network,
)
from .observability.snapshot_collector import (
    observe_beacon_health,
    observe_beacon_health_async,
    observe_common,
)

__all__ = [
    "BeaconHealth",
    "CommonHealth",
    "DBPaths",
    "HealthCapabilityError",
    "MountInfo",
    "Network",
    "observe_beacon_health",
    "observe_beacon_health_async",
    "observe_common",
]
