from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DISK_BY_UUID = Path("/dev/disk/by-uuid")
DISK_BY_LABEL = Path("/dev/disk/by-label")

# udev escapes unsafe characters in link names, e.g. "My\x20Disk".
_UDEV_ESCAPE = re.compile(r"(?:\\x[0-9a-fA-F]{2})+")


def decode_udev_name(name: str) -> str:
    # Consecutive escapes are the bytes of one UTF-8 sequence.
    return _UDEV_ESCAPE.sub(
        lambda m: bytes.fromhex(m.group(0).replace("\\x", "")).decode("utf-8", errors="replace"),
        name,
    )


class DeviceResolver:
    def __init__(
        self,
        by_uuid: Path = DISK_BY_UUID,
        by_label: Path = DISK_BY_LABEL,
        blkid: str | None = "blkid",
    ) -> None:
        self.by_uuid = Path(by_uuid)
        self.by_label = Path(by_label)
        self.blkid = blkid

    def uuid_and_label(self, device: str) -> tuple[str | None, str | None]:
        if not os.path.exists(device):
            return None, None

        target = os.path.realpath(device)
        uuid = self._lookup(self.by_uuid, target)
        label = self._lookup(self.by_label, target)
        if uuid is None and label is None and self.blkid:
            uuid, label = self._blkid(device)
        return uuid, label

    def _lookup(self, directory: Path, target: str) -> str | None:
        try:
            entries = sorted(directory.iterdir())
        except OSError:
            return None

        for link in entries:
            try:
                resolved = os.path.realpath(link)
            except OSError:
                continue
            if resolved == target:
                return decode_udev_name(link.name)
        return None

    def _blkid(self, device: str) -> tuple[str | None, str | None]:
        try:
            out = subprocess.check_output(
                [self.blkid, "-o", "export", device],
                text=True,
                stderr=subprocess.DEVNULL,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("blkid failed for %s: %s", device, e)
            return None, None

        fields: dict[str, str] = {}
        for line in out.splitlines():
            key, sep, value = line.partition("=")
            if sep:
                fields[key.strip()] = value.strip()
        return fields.get("UUID") or None, fields.get("LABEL") or None
