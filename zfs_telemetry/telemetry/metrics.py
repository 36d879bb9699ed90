"""
Prometheus exposition of ZFS snapshots.

Each snapshot is rendered into its own CollectorRegistry, so series from an
earlier collection (a pool that was exported, a service that went away)
never linger.
"""

import logging

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from zfs_telemetry.telemetry.schemas import HEALTH_STATES, DataSource, ZFSSnapshot

logger = logging.getLogger(__name__)

NAMESPACE = "zfs"

POOL_LABELS = ["pool"]
DATASET_LABELS = ["dataset", "type", "pool"]


def _flag(value: bool) -> float:
    return 1.0 if value else 0.0


def render_snapshot(snapshot: ZFSSnapshot) -> CollectorRegistry:
    """
    Build a registry holding the gauges for one snapshot.

    When the snapshot is down only zfs_up and the scrape duration are set.
    Sources that failed are left out entirely rather than reported as zero.
    """
    registry = CollectorRegistry()

    def gauge(name, doc, labels=()):
        return Gauge(name, doc, list(labels), namespace=NAMESPACE, registry=registry)

    gauge("up", "Whether ZFS commands succeeded.").set(_flag(snapshot.up))
    gauge("scrape_duration_seconds", "Time taken to collect all metrics.").set(
        snapshot.collection_duration_seconds
    )

    if not snapshot.up:
        return registry

    size = gauge("pool_size_bytes", "Total pool size in bytes.", POOL_LABELS)
    allocated = gauge("pool_allocated_bytes", "Allocated space in bytes.", POOL_LABELS)
    free = gauge("pool_free_bytes", "Free space in bytes.", POOL_LABELS)
    fragmentation = gauge(
        "pool_fragmentation_ratio",
        "Pool fragmentation as a ratio (0-1), NaN if unavailable.",
        POOL_LABELS,
    )
    dedup = gauge("pool_dedup_ratio", "Deduplication ratio.", POOL_LABELS)
    readonly = gauge("pool_readonly", "1 if pool is read-only, 0 otherwise.", POOL_LABELS)
    health = gauge(
        "pool_health",
        "1 if pool is in the labeled state, 0 otherwise.",
        ["pool", "state"],
    )

    for pool in snapshot.pools:
        size.labels(pool.name).set(pool.size)
        allocated.labels(pool.name).set(pool.allocated)
        free.labels(pool.name).set(pool.free)
        fragmentation.labels(pool.name).set(pool.fragmentation)
        dedup.labels(pool.name).set(pool.dedup_ratio)
        readonly.labels(pool.name).set(_flag(pool.read_only))
        for state in HEALTH_STATES:
            health.labels(pool.name, state.value.lower()).set(_flag(pool.health == state))

    if snapshot.source_ok(DataSource.SCANS):
        scrub = gauge(
            "pool_scrub_active", "1 if a scrub is in progress, 0 otherwise.", POOL_LABELS
        )
        resilver = gauge(
            "pool_resilver_active",
            "1 if a resilver (rebuild) is in progress, 0 otherwise.",
            POOL_LABELS,
        )
        progress = gauge(
            "pool_scan_progress_ratio",
            "0-1 progress of active scan, 0 if no scan active.",
            POOL_LABELS,
        )
        for scan in snapshot.scans:
            scrub.labels(scan.pool).set(_flag(scan.scrub_active))
            resilver.labels(scan.pool).set(_flag(scan.resilver_active))
            progress.labels(scan.pool).set(scan.progress)

    if snapshot.source_ok(DataSource.DATASETS):
        used = gauge("dataset_used_bytes", "Space consumed by dataset.", DATASET_LABELS)
        available = gauge(
            "dataset_available_bytes", "Space available to dataset.", DATASET_LABELS
        )
        referenced = gauge(
            "dataset_referenced_bytes", "Space referenced by dataset.", DATASET_LABELS
        )
        share_nfs = gauge(
            "dataset_share_nfs", "1 if NFS sharing is enabled, 0 otherwise.", DATASET_LABELS
        )
        share_smb = gauge(
            "dataset_share_smb", "1 if SMB sharing is enabled, 0 otherwise.", DATASET_LABELS
        )
        for ds in snapshot.datasets:
            labels = (ds.name, ds.kind, ds.pool)
            used.labels(*labels).set(ds.used)
            available.labels(*labels).set(ds.available)
            referenced.labels(*labels).set(ds.referenced)
            share_nfs.labels(*labels).set(_flag(ds.share_nfs))
            share_smb.labels(*labels).set(_flag(ds.share_smb))

    if snapshot.source_ok(DataSource.SERVICES):
        service_up = gauge(
            "service_up", "1 if systemd unit is active, 0 otherwise.", ["service"]
        )
        for svc in snapshot.services:
            service_up.labels(svc.name).set(_flag(svc.active))

    return registry


def generate_metrics(snapshot: ZFSSnapshot) -> bytes:
    """Render a snapshot in the Prometheus text exposition format."""
    return generate_latest(render_snapshot(snapshot))
