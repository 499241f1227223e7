"""Integration tests: observe the real host through psutil."""

import json
import os
import sys
from pathlib import Path

import pytest

from beacon_health import DBPaths, HealthCapabilityError, observe_beacon_health, observe_common
from beacon_health.observability.mounts import mount_info_for_path
from beacon_health.observability.providers import PsutilMountTable

pytestmark = pytest.mark.skipif(
    not sys.platform.startswith(("linux", "darwin")),
    reason="health observation is only available on Linux and MacOS",
)


def test_observe_common_reports_this_process():
    common = observe_common()
    assert common.pid == os.getpid()
    assert common.pid_mem_resident_set_size > 0
    assert common.pid_mem_virtual_memory_size >= common.pid_mem_resident_set_size
    assert common.sys_virt_mem_total > 0
    assert 0.0 <= common.sys_virt_mem_percent <= 100.0
    assert common.sys_loadavg_1 >= 0.0


def test_observe_beacon_health_for_tmp_paths(tmp_path):
    chain = tmp_path / "chain_db"
    freezer = tmp_path / "freezer_db"
    chain.mkdir()
    freezer.mkdir()

    health = observe_beacon_health(DBPaths(chain_db=chain, freezer_db=freezer))

    assert health.chain_database is not None
    assert health.chain_database.mounted_on == health.freezer_database.mounted_on
    assert health.chain_database.total == health.freezer_database.total
    assert chain.parts[: len(health.chain_database.mounted_on.parts)] == health.chain_database.mounted_on.parts
    assert 0.0 <= health.chain_database.used_pct <= 100.0
    assert health.network.rx_bytes >= 0

    payload = json.loads(health.to_json())
    assert payload["pid"] == os.getpid()
    assert set(payload["network"]) == {
        "rx_bytes", "rx_errors", "rx_packets", "tx_bytes", "tx_errors", "tx_packets",
    }


def test_root_path_resolves_to_a_mount():
    info = mount_info_for_path(Path("/"), PsutilMountTable())
    if info is None:
        pytest.skip("root filesystem not listed by this host")
    assert info.mounted_on == Path("/")


def test_unsupported_platform_flag():
    with pytest.raises(HealthCapabilityError) as exc_info:
        observe_beacon_health(
            DBPaths(chain_db=Path("/tmp/chain"), freezer_db=Path("/tmp/freezer")),
            platform="win32",
        )
    assert exc_info.value.code == "unsupported_platform"
