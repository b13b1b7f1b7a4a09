from __future__ import annotations

import logging

from drinfo.models.drives import DriveInfo

logger = logging.getLogger(__name__)

DEFAULT_MAX_DRIVES = 100


class DriveAggregator:
    """Bounded, de-duplicated collection of drives.

    Records past ``max_drives`` are dropped without error. A mount point is
    only ever collected once; the first record wins.
    """

    def __init__(self, max_drives: int = DEFAULT_MAX_DRIVES) -> None:
        self.max_drives = int(max_drives)
        self._drives: list[DriveInfo] = []
        self._seen: set[str] = set()
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._drives)

    def has(self, mountpoint: str) -> bool:
        return mountpoint in self._seen

    @property
    def full(self) -> bool:
        return len(self._drives) >= self.max_drives

    def reject(self, mountpoint: str) -> None:
        """Count a record that arrived after the ceiling was reached."""
        self.dropped += 1
        logger.debug("drive limit %d reached, dropping %s", self.max_drives, mountpoint)

    def add(self, info: DriveInfo) -> bool:
        if info.mountpoint in self._seen:
            logger.debug("duplicate mount point ignored: %s", info.mountpoint)
            return False
        if self.full:
            self.reject(info.mountpoint)
            return False
        self._seen.add(info.mountpoint)
        self._drives.append(info)
        return True

    def sorted(self) -> list[DriveInfo]:
        # list.sort is stable: equal totals keep discovery order.
        return sorted(self._drives, key=lambda d: d.total_bytes, reverse=True)
