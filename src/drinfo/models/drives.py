from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

PLACEHOLDER = "-"
NO_HEALTH_DATA = "No data"


class DriveType(str, Enum):
    LOCAL = "Local Drive"
    NETWORK = "Network Drive"
    OTHER = "Other Drive"


@dataclass(frozen=True)
class MountRecord:
    device: str
    mountpoint: str
    fstype: str
    opts: str


@dataclass(frozen=True)
class FsStats:
    block_count: int
    block_size: int
    available_blocks: int
    total_inodes: int
    available_inodes: int


@dataclass
class DriveInfo:
    """One reportable mount. Only the enrichment fields change after creation."""

    mountpoint: str
    fstype: str
    device: str
    opts: str
    total_bytes: int
    used_bytes: int
    available_bytes: int
    usage_percent: float
    total_inodes: int
    used_inodes: int
    inode_usage_percent: float
    drive_type: DriveType
    is_cloud: bool = False
    cloud_service: str | None = None
    uuid: str | None = None
    label: str | None = None
    health: str | None = None
    mount_time: datetime | None = None

    @property
    def type_label(self) -> str:
        if self.is_cloud:
            if self.cloud_service:
                return f"Cloud Drive ({self.cloud_service})"
            return "Cloud Drive"
        return self.drive_type.value


@dataclass(frozen=True)
class CloudMount:
    mountpoint: str
    scheme: str
    service: str
    is_cloud: bool


@dataclass(frozen=True)
class DriveScanData:
    drives: list[DriveInfo]
    skipped: int = 0
    dropped_over_limit: int = 0
