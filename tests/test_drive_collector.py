from __future__ import annotations

from types import SimpleNamespace

import psutil
import pytest

from drinfo.collectors import drive_collector
from drinfo.collectors.drive_collector import DriveCollector, MountSourceError
from drinfo.models.drives import CloudMount, DriveType

GB = 1024**3

PARTITIONS = [
    SimpleNamespace(device="proc", mountpoint="/proc", fstype="proc", opts="rw"),
    SimpleNamespace(device="/dev/sda1", mountpoint="/", fstype="ext4", opts="rw,relatime"),
    SimpleNamespace(device="/dev/sda1", mountpoint="/", fstype="ext4", opts="rw,relatime"),
    SimpleNamespace(device="/dev/nvme0n1p1", mountpoint="/data", fstype="xfs", opts="rw"),
    SimpleNamespace(device="nas:/export", mountpoint="/mnt/nas", fstype="nfs4", opts="rw"),
    SimpleNamespace(device="gdrive:", mountpoint="/mnt/gdrive", fstype="fuse.rclone", opts="rw"),
    SimpleNamespace(device="/dev/sdb1", mountpoint="/mnt/broken", fstype="ext4", opts="rw"),
    SimpleNamespace(device="/tmp/.mount_AppXYZ", mountpoint="/tmp/.mount_AppXYZ", fstype="fuse.App", opts="ro"),
]

SIZES_GB = {
    "/": (100, 40),
    "/data": (500, 100),
    "/mnt/nas": (2000, 100),
    "/mnt/gdrive": (15, 10),
    "/run/user/1000/gvfs/google-drive:host=x": (30, 20),
}


def fake_statvfs(path):
    if path not in SIZES_GB:
        raise OSError(5, "Input/output error", path)
    total, avail = SIZES_GB[path]
    return SimpleNamespace(f_blocks=total * GB // 4096, f_frsize=4096, f_bavail=avail * GB // 4096, f_files=1000, f_favail=250)


class StubResolver:
    def uuid_and_label(self, device):
        if device == "/dev/sda1":
            return "1234-ABCD", "root"
        return None, None


class StubHealth:
    def __init__(self):
        self.queried: list[str] = []

    def query(self, device):
        self.queried.append(device)
        return "PASSED"


class StubCloud:
    def __init__(self, mounts=None):
        self.mounts = mounts or []

    def scan(self):
        return list(self.mounts)


@pytest.fixture
def mounts(monkeypatch):
    monkeypatch.setattr(drive_collector.psutil, "disk_partitions", lambda all=True: list(PARTITIONS))
    monkeypatch.setattr(drive_collector.os, "statvfs", fake_statvfs)


def make_collector(**kw):
    kw.setdefault("resolver", StubResolver())
    kw.setdefault("health", StubHealth())
    kw.setdefault("cloud", StubCloud())
    return DriveCollector(**kw)


def test_collect_classifies_and_sorts(mounts):
    res = make_collector().collect()
    drives = res.data.drives
    assert [d.mountpoint for d in drives] == ["/mnt/nas", "/data", "/", "/mnt/gdrive"]

    by_mp = {d.mountpoint: d for d in drives}
    assert by_mp["/"].drive_type is DriveType.LOCAL
    assert by_mp["/"].uuid == "1234-ABCD"
    assert by_mp["/"].label == "root"
    assert by_mp["/"].usage_percent == pytest.approx(60.0)
    assert by_mp["/"].inode_usage_percent == pytest.approx(75.0)
    assert by_mp["/mnt/nas"].drive_type is DriveType.NETWORK
    assert by_mp["/mnt/gdrive"].is_cloud
    assert by_mp["/mnt/gdrive"].type_label == "Cloud Drive (rclone)"


def test_statvfs_failure_skips_one_drive(mounts):
    res = make_collector().collect()
    assert "/mnt/broken" not in [d.mountpoint for d in res.data.drives]
    assert res.data.skipped == 1
    assert any("/mnt/broken" in n for n in res.notes)


def test_health_only_for_local_drives(mounts):
    health = StubHealth()
    res = make_collector(health=health).collect()
    assert sorted(health.queried) == ["/dev/nvme0n1p1", "/dev/sda1"]
    by_mp = {d.mountpoint: d for d in res.data.drives}
    assert by_mp["/"].health == "PASSED"
    assert by_mp["/mnt/nas"].health is None


def test_usage_warning(mounts):
    res = make_collector(warn_percent=90).collect()
    assert res.status == "WARN"
    assert res.warning_count == 1
    assert "/mnt/nas" in res.warnings[0]


def test_max_drives_ceiling(mounts):
    res = make_collector(max_drives=2).collect()
    assert [d.mountpoint for d in res.data.drives] == ["/data", "/"]
    # /mnt/nas, /mnt/gdrive and /mnt/broken arrive after the ceiling
    assert res.data.dropped_over_limit == 3
    assert res.data.skipped == 0


class CountingResolver(StubResolver):
    def __init__(self):
        self.calls: list[str] = []

    def uuid_and_label(self, device):
        self.calls.append(device)
        return super().uuid_and_label(device)


def test_no_lookups_past_ceiling(monkeypatch):
    disks = [
        SimpleNamespace(device=f"/dev/sd{c}1", mountpoint=f"/mnt/{c}", fstype="ext4", opts="rw")
        for c in "abcdef"
    ]
    measured: list[str] = []

    def statvfs(path):
        measured.append(path)
        return SimpleNamespace(f_blocks=100, f_frsize=4096, f_bavail=50, f_files=10, f_favail=5)

    monkeypatch.setattr(drive_collector.psutil, "disk_partitions", lambda all=True: list(disks))
    monkeypatch.setattr(drive_collector.os, "statvfs", statvfs)

    resolver, health = CountingResolver(), StubHealth()
    cloud = StubCloud([CloudMount("/run/user/1000/gvfs/onedrive:host=x", "onedrive", "OneDrive", True)])
    res = make_collector(max_drives=2, resolver=resolver, health=health, cloud=cloud).collect()

    assert len(res.data.drives) == 2
    assert res.data.dropped_over_limit == 5
    assert measured == ["/mnt/a", "/mnt/b"]
    assert resolver.calls == ["/dev/sda1", "/dev/sdb1"]
    assert health.queried == ["/dev/sda1", "/dev/sdb1"]


def test_gvfs_mounts_added(mounts):
    cloud = StubCloud(
        [
            CloudMount(mountpoint="/run/user/1000/gvfs/google-drive:host=x", scheme="google-drive", service="Google Drive", is_cloud=True),
            CloudMount(mountpoint="/run/user/1000/gvfs/sftp:host=y", scheme="sftp", service="SFTP y", is_cloud=False),
        ]
    )
    res = make_collector(cloud=cloud).collect()
    gd = [d for d in res.data.drives if d.is_cloud and d.cloud_service == "Google Drive"]
    assert len(gd) == 1
    assert gd[0].drive_type is DriveType.NETWORK
    assert gd[0].type_label == "Cloud Drive (Google Drive)"
    assert res.data.skipped == 2


def test_gvfs_scan_disabled(mounts):
    cloud = StubCloud([CloudMount("/run/user/1000/gvfs/google-drive:host=x", "google-drive", "Google Drive", True)])
    res = make_collector(cloud=cloud, scan_gvfs=False).collect()
    assert all(d.cloud_service != "Google Drive" for d in res.data.drives)


def test_mount_source_unavailable(monkeypatch):
    def boom(all=True):
        raise OSError(2, "No such file or directory", "/proc/self/mounts")

    monkeypatch.setattr(drive_collector.psutil, "disk_partitions", boom)
    with pytest.raises(MountSourceError):
        make_collector().collect()


def test_psutil_error_is_fatal_too(monkeypatch):
    def boom(all=True):
        raise psutil.Error("mount table gone")

    monkeypatch.setattr(drive_collector.psutil, "disk_partitions", boom)
    with pytest.raises(MountSourceError):
        make_collector().collect()
