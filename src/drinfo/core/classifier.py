from __future__ import annotations

from drinfo.models.drives import DriveType, MountRecord

# Pseudo/virtual filesystems never reported. GVFS user mounts are picked up
# by the directory scan instead of the mount table.
SKIP_FS_TYPES: frozenset[str] = frozenset(
    {
        "proc",
        "sysfs",
        "devpts",
        "tmpfs",
        "devtmpfs",
        "securityfs",
        "cgroup",
        "cgroup2",
        "pstore",
        "efivarfs",
        "autofs",
        "debugfs",
        "tracefs",
        "configfs",
        "fusectl",
        "binfmt_misc",
        "mqueue",
        "hugetlbfs",
        "bpf",
        "nsfs",
        "rpc_pipefs",
        "ramfs",
        "fuse.portal",
        "fuse.gvfsd-fuse",
    }
)

PHYSICAL_DEVICE_PREFIXES: tuple[str, ...] = (
    "/dev/sd",
    "/dev/nvme",
    "/dev/hd",
    "/dev/vd",
    "/dev/xvd",
    "/dev/mmcblk",
    "/dev/mapper/",
)

NETWORK_FS_TYPES: frozenset[str] = frozenset(
    {
        "nfs",
        "nfs4",
        "cifs",
        "smb",
        "smbfs",
        "smb3",
        "sshfs",
        "fuse.sshfs",
        "fuse.rclone",
    }
)

CLOUD_FS_TYPES: frozenset[str] = frozenset({"fuse.rclone", "rclone"})

TEMP_MOUNT_PREFIX = "/tmp/"
APPIMAGE_MARKER = "/.mount_"


def is_physical_device(device: str) -> bool:
    return device.startswith(PHYSICAL_DEVICE_PREFIXES)


def is_network_device(device: str) -> bool:
    # //server/share, \\server\share, host:/export
    return device.startswith("//") or device.startswith("\\\\") or ":" in device


def is_network_fstype(fstype: str) -> bool:
    return fstype in NETWORK_FS_TYPES or fstype.startswith("fuse.")


def is_cloud_fstype(fstype: str) -> bool:
    return fstype in CLOUD_FS_TYPES


def is_transient_mount(record: MountRecord) -> bool:
    """AppImage loop mounts and anything living under /tmp."""
    if record.device.endswith(".AppImage"):
        return True
    if APPIMAGE_MARKER in record.device or APPIMAGE_MARKER in record.mountpoint:
        return True
    return record.device.startswith(TEMP_MOUNT_PREFIX) or record.mountpoint.startswith(TEMP_MOUNT_PREFIX)


def classify(record: MountRecord) -> tuple[bool, DriveType | None]:
    """Decide whether a mount is reportable and which drive type it gets.

    The checks run in a fixed order: physical device first, then network
    filesystem or network device, otherwise Other. A record that looks both
    physical and networked is therefore Local.
    """
    if record.fstype in SKIP_FS_TYPES:
        return False, None
    if is_transient_mount(record):
        return False, None

    physical = is_physical_device(record.device)
    network_fs = is_network_fstype(record.fstype)
    network_dev = is_network_device(record.device)
    if not (physical or network_fs or network_dev):
        return False, None

    if physical:
        return True, DriveType.LOCAL
    if network_fs or network_dev:
        return True, DriveType.NETWORK
    return True, DriveType.OTHER
