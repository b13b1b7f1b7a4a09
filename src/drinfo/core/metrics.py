from __future__ import annotations

import os
from datetime import datetime

from drinfo.models.drives import DriveInfo, DriveType, FsStats, MountRecord

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(n: int) -> str:
    size = float(n)
    unit_index = 0
    while size >= 1024.0 and unit_index < len(_UNITS) - 1:
        size /= 1024.0
        unit_index += 1
    if unit_index == 0:
        return f"{size:.0f} {_UNITS[unit_index]}"
    return f"{size:.2f} {_UNITS[unit_index]}"


def usage_percent(total: int, available: int) -> float:
    if total <= 0:
        return 0.0
    used = max(0, total - available)
    return min(100.0, used / total * 100.0)


def stats_from_statvfs(st: os.statvfs_result) -> FsStats:
    return FsStats(
        block_count=int(st.f_blocks),
        block_size=int(st.f_frsize),
        available_blocks=int(st.f_bavail),
        total_inodes=int(st.f_files),
        available_inodes=int(st.f_favail),
    )


def build_drive_info(
    record: MountRecord,
    stats: FsStats,
    drive_type: DriveType,
    *,
    is_cloud: bool = False,
    cloud_service: str | None = None,
    mount_time: datetime | None = None,
) -> DriveInfo:
    total = stats.block_count * stats.block_size
    available = stats.available_blocks * stats.block_size
    used = max(0, total - available)

    total_inodes = stats.total_inodes
    used_inodes = max(0, total_inodes - stats.available_inodes)

    return DriveInfo(
        mountpoint=record.mountpoint,
        fstype=record.fstype,
        device=record.device,
        opts=record.opts,
        total_bytes=total,
        used_bytes=used,
        available_bytes=available,
        usage_percent=usage_percent(total, available),
        total_inodes=total_inodes,
        used_inodes=used_inodes,
        inode_usage_percent=usage_percent(total_inodes, stats.available_inodes),
        drive_type=drive_type,
        is_cloud=is_cloud,
        cloud_service=cloud_service,
        mount_time=mount_time,
    )


def mount_time(mountpoint: str) -> datetime | None:
    try:
        return datetime.fromtimestamp(os.stat(mountpoint).st_ctime)
    except OSError:
        return None
