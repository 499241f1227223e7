"""Observability subsystem for beacon-health.

providers: OS query collaborators (psutil-backed by default)
mounts: closest-mount resolution for database paths
snapshot_collector: on-demand BeaconHealth assembly
"""
