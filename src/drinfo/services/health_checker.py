from __future__ import annotations

import logging
import os
import re
import subprocess
from typing import Callable

logger = logging.getLogger(__name__)

_HEALTH_RE = re.compile(
    r"(?:overall-health self-assessment test result|SMART Health Status):\s*(\S+)"
)
_PARTITION_RES = (
    re.compile(r"^(/dev/(?:nvme\d+n\d+|mmcblk\d+))p\d+$"),
    re.compile(r"^(/dev/(?:sd|hd|vd|xvd)[a-z]+)\d+$"),
)


def whole_disk(device: str) -> str:
    """/dev/sda1 -> /dev/sda, /dev/nvme0n1p2 -> /dev/nvme0n1."""
    for rx in _PARTITION_RES:
        m = rx.match(device)
        if m:
            return m.group(1)
    return device


def parse_smart_health(output: str) -> str | None:
    m = _HEALTH_RE.search(output)
    if not m:
        return None
    return m.group(1).strip()


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class HealthChecker:
    """SMART overall health via ``smartctl -H``.

    Only queried with an effective uid of 0. The command runs once per disk
    and has no timeout; a slow drive just delays the report.
    """

    def __init__(
        self,
        enabled: bool = True,
        command: str = "smartctl",
        is_privileged: Callable[[], bool] = _is_root,
    ) -> None:
        self.enabled = bool(enabled)
        self.command = command
        self._is_privileged = is_privileged
        self._cache: dict[str, str | None] = {}

    @property
    def active(self) -> bool:
        return self.enabled and self._is_privileged()

    def query(self, device: str) -> str | None:
        if not self.active:
            return None
        disk = whole_disk(device)
        if disk in self._cache:
            return self._cache[disk]

        try:
            proc = subprocess.run(
                [self.command, "-H", disk],
                capture_output=True,
                text=True,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("%s failed for %s: %s", self.command, disk, e)
            self._cache[disk] = None
            return None

        status = parse_smart_health(proc.stdout or "")
        if status is None:
            logger.debug("no SMART health in %s output for %s (rc=%s)", self.command, disk, proc.returncode)
        self._cache[disk] = status
        return status
