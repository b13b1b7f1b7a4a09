from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Iterator

import psutil

from drinfo.core.aggregator import DEFAULT_MAX_DRIVES, DriveAggregator
from drinfo.core.classifier import classify, is_cloud_fstype
from drinfo.core.metrics import build_drive_info, mount_time, stats_from_statvfs
from drinfo.models.common import CollectorResult
from drinfo.models.drives import DriveInfo, DriveScanData, DriveType, MountRecord
from drinfo.services.cloud_scanner import CloudScanner
from drinfo.services.device_resolver import DeviceResolver
from drinfo.services.health_checker import HealthChecker

logger = logging.getLogger(__name__)


class MountSourceError(RuntimeError):
    """The mount table could not be read at all."""


def iter_mounts() -> Iterator[MountRecord]:
    try:
        partitions = psutil.disk_partitions(all=True)
    except (OSError, psutil.Error) as e:
        raise MountSourceError(f"Error opening mount table: {e}") from e

    for p in partitions:
        yield MountRecord(
            device=str(p.device),
            mountpoint=str(p.mountpoint),
            fstype=str(p.fstype),
            opts=str(p.opts),
        )


class DriveCollector:
    def __init__(
        self,
        max_drives: int = DEFAULT_MAX_DRIVES,
        warn_percent: float = 90.0,
        scan_gvfs: bool = True,
        resolver: DeviceResolver | None = None,
        health: HealthChecker | None = None,
        cloud: CloudScanner | None = None,
    ) -> None:
        self.max_drives = int(max_drives)
        self.warn_percent = float(warn_percent)
        self.scan_gvfs = bool(scan_gvfs)
        self.resolver = resolver or DeviceResolver()
        self.health = health or HealthChecker()
        self.cloud = cloud or CloudScanner()

    def collect(self) -> CollectorResult[DriveScanData]:
        ts = datetime.now()
        warnings: list[str] = []
        notes: list[str] = []

        agg = DriveAggregator(self.max_drives)
        skipped = 0

        for record in iter_mounts():
            if agg.has(record.mountpoint):
                continue
            reportable, drive_type = classify(record)
            if not reportable or drive_type is None:
                logger.debug("skip %s on %s (%s)", record.device, record.mountpoint, record.fstype)
                continue
            if agg.full:
                agg.reject(record.mountpoint)
                continue

            cloud = is_cloud_fstype(record.fstype)
            info = self._measure(record, drive_type, is_cloud=cloud, cloud_service="rclone" if cloud else None)
            if info is None:
                skipped += 1
                notes.append(f"statvfs failed: {record.mountpoint}")
                continue
            self._enrich(info)
            agg.add(info)

        if self.scan_gvfs:
            skipped += self._collect_gvfs(agg, notes)

        if agg.dropped:
            notes.append(f"{agg.dropped} drive(s) over the limit of {self.max_drives} not shown")

        drives = agg.sorted()
        for d in drives:
            if d.usage_percent >= self.warn_percent:
                warnings.append(
                    f"Disk usage high: {d.mountpoint} {d.usage_percent:.1f}% (>= {self.warn_percent:.0f}%)"
                )

        status = "OK" if not warnings else "WARN"
        data = DriveScanData(drives=drives, skipped=skipped, dropped_over_limit=agg.dropped)
        return CollectorResult(
            ts=ts,
            status=status,
            warning_count=len(warnings),
            warnings=warnings,
            notes=notes,
            data=data,
        )

    def _measure(
        self,
        record: MountRecord,
        drive_type: DriveType,
        *,
        is_cloud: bool = False,
        cloud_service: str | None = None,
    ) -> DriveInfo | None:
        try:
            st = os.statvfs(record.mountpoint)
        except OSError as e:
            logger.debug("statvfs %s failed: %s", record.mountpoint, e)
            return None

        return build_drive_info(
            record,
            stats_from_statvfs(st),
            drive_type,
            is_cloud=is_cloud,
            cloud_service=cloud_service,
            mount_time=mount_time(record.mountpoint),
        )

    def _enrich(self, info: DriveInfo) -> None:
        info.uuid, info.label = self.resolver.uuid_and_label(info.device)
        if info.drive_type is DriveType.LOCAL and not info.is_cloud:
            info.health = self.health.query(info.device)

    def _collect_gvfs(self, agg: DriveAggregator, notes: list[str]) -> int:
        skipped = 0
        for mount in self.cloud.scan():
            if agg.has(mount.mountpoint):
                continue
            if agg.full:
                agg.reject(mount.mountpoint)
                continue
            record = CloudScanner.as_record(mount)
            info = self._measure(
                record,
                DriveType.NETWORK,
                is_cloud=mount.is_cloud,
                cloud_service=mount.service if mount.is_cloud else None,
            )
            if info is None:
                skipped += 1
                notes.append(f"statvfs failed: {mount.mountpoint}")
                continue
            agg.add(info)
        return skipped
