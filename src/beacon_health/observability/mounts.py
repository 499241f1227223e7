"""Closest-mount resolution for database paths."""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Iterable, Optional

import structlog

from ..capabilities.observe import HealthCapabilityError, MountInfo
from .providers import MountEntry, MountTableProvider

logger = structlog.get_logger(__name__)


def _is_under(path: PurePath, mount: PurePath) -> bool:
    """Component-wise prefix test (``/home/pa`` does not hold ``/home/paul``)."""
    return path.parts[: len(mount.parts)] == mount.parts


def resolve_mount(path: Path | str, mounts: Iterable[MountEntry]) -> Optional[MountInfo]:
    """Return usage for the deepest mount point holding ``path``.

    For mounts ``["/", "/home", "/home/paul"]`` the path
    ``/home/paul/file`` resolves to ``/home/paul``, not ``/home`` or ``/``.
    Ties keep the first mount in table order.

    Args:
        path: Any filesystem path; it does not need to exist.
        mounts: Mount table rows, in the order the OS reported them.

    Returns:
        MountInfo for the closest mount, or None when no mount is a prefix.
    """
    target = PurePath(path)

    best: Optional[MountEntry] = None
    best_depth = 0
    for entry in mounts:
        mount_path = PurePath(entry.mounted_on)
        if not _is_under(target, mount_path):
            continue
        depth = len(mount_path.parts)
        if depth > best_depth:
            best, best_depth = entry, depth

    if best is None:
        return None

    return MountInfo.from_usage(best.mounted_on, best.total, best.avail)


def mount_info_for_path(path: Path | str, provider: MountTableProvider) -> Optional[MountInfo]:
    """Enumerate the mount table and resolve ``path`` against it.

    Raises:
        HealthCapabilityError: If the mount table cannot be enumerated.
    """
    try:
        mounts = provider.mounts()
    except Exception as exc:
        logger.error("health_query_failed", code="mount_enumeration_failed", error=str(exc))
        raise HealthCapabilityError(
            code="mount_enumeration_failed",
            message=f"Unable to enumerate mounts: {exc}",
            details={"path": str(path), "error": str(exc)},
        ) from exc

    info = resolve_mount(path, mounts)
    if info is None:
        logger.debug("mount_not_found", path=str(path), mount_count=len(mounts))
    else:
        logger.debug(
            "mount_resolved",
            path=str(path),
            mounted_on=str(info.mounted_on),
            used_pct=info.used_pct,
        )
    return info
