from __future__ import annotations

import logging
import os
from pathlib import Path

from drinfo.models.drives import CloudMount, MountRecord

logger = logging.getLogger(__name__)

GVFS_FSTYPE = "fuse.gvfsd-fuse"

# scheme -> (display name, cloud-backed)
GVFS_SERVICES: dict[str, tuple[str, bool]] = {
    "google-drive": ("Google Drive", True),
    "onedrive": ("OneDrive", True),
    "nextcloud": ("Nextcloud", True),
    "dav": ("WebDAV", True),
    "davs": ("WebDAV", True),
    "sftp": ("SFTP", False),
    "ftp": ("FTP", False),
    "smb-share": ("SMB Share", False),
    "afp-volume": ("AFP Volume", False),
    "mtp": ("MTP Device", False),
}


def default_gvfs_root() -> Path:
    runtime = os.environ.get("XDG_RUNTIME_DIR")
    if runtime:
        return Path(runtime) / "gvfs"
    uid = os.getuid() if hasattr(os, "getuid") else 0
    return Path("/run/user") / str(uid) / "gvfs"


def parse_gvfs_name(name: str) -> tuple[str, str, bool]:
    """``google-drive:host=gmail.com,user=jo`` -> (scheme, display name, cloud)."""
    scheme = name.split(":", 1)[0]
    service, cloud = GVFS_SERVICES.get(scheme, (scheme, False))
    if ":" in name:
        params = dict(
            part.split("=", 1) for part in name.split(":", 1)[1].split(",") if "=" in part
        )
        host = params.get("host")
        if host and not cloud:
            service = f"{service} {host}"
    return scheme, service, cloud


class CloudScanner:
    """Directory scan of GVFS user-session mounts.

    GVFS mounts share a single fuse entry in the mount table, so each
    service shows up here as a sub-directory instead.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = Path(root) if root is not None else default_gvfs_root()

    def scan(self) -> list[CloudMount]:
        try:
            entries = sorted(p for p in self.root.iterdir() if p.is_dir())
        except OSError as e:
            logger.debug("no gvfs mounts under %s: %s", self.root, e)
            return []

        mounts: list[CloudMount] = []
        for p in entries:
            scheme, service, cloud = parse_gvfs_name(p.name)
            mounts.append(CloudMount(mountpoint=str(p), scheme=scheme, service=service, is_cloud=cloud))
        return mounts

    @staticmethod
    def as_record(mount: CloudMount) -> MountRecord:
        return MountRecord(device=f"gvfsd-fuse:{mount.scheme}", mountpoint=mount.mountpoint, fstype=GVFS_FSTYPE, opts="")
