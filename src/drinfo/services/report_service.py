from __future__ import annotations

import logging
import shutil
import sys
from typing import TextIO

from drinfo.core.bar import BarGeometry, BarRenderer, max_visible_line_length, pad_visible
from drinfo.core.metrics import format_bytes
from drinfo.models.common import CollectorResult
from drinfo.models.drives import NO_HEALTH_DATA, PLACEHOLDER, DriveInfo, DriveScanData, DriveType

logger = logging.getLogger(__name__)

BOLD_YELLOW = "\033[1;33m"
DIM = "\033[2m"
RESET = "\033[0m"

LABEL_WIDTH = 15


def terminal_width(fallback: int = 80) -> int:
    return shutil.get_terminal_size(fallback=(fallback, 24)).columns


def _field(label: str, value: object) -> str:
    text = PLACEHOLDER if value is None or value == "" else str(value)
    return f"{label + ':':<{LABEL_WIDTH}}{text}"


class ReportService:
    def __init__(
        self,
        geometry: BarGeometry,
        show_frame: bool = True,
        show_health: bool = False,
    ) -> None:
        self.geometry = geometry
        self.renderer = BarRenderer(geometry)
        self.show_frame = show_frame
        self.show_health = show_health

    def drive_lines(self, index: int, d: DriveInfo) -> list[str]:
        lines = [
            f"{BOLD_YELLOW}Drive {index}{RESET} {DIM}{d.type_label}{RESET}",
            _field("Mount point", d.mountpoint),
            _field("Filesystem", d.fstype),
            _field("Device", d.device),
            _field("UUID", d.uuid),
            _field("Label", d.label),
            _field("Options", d.opts),
            _field("Mounted", f"{d.mount_time:%Y-%m-%d %H:%M:%S}" if d.mount_time else "unknown"),
            _field("Total size", format_bytes(d.total_bytes)),
            _field("Used", format_bytes(d.used_bytes)),
            _field("Available", format_bytes(d.available_bytes)),
            _field("Usage", f"{d.usage_percent:.1f}%"),
            _field("Inodes", self._inodes(d)),
        ]
        if self.show_health and d.drive_type is DriveType.LOCAL and not d.is_cloud:
            lines.append(_field("Health", d.health or NO_HEALTH_DATA))
        lines.append(self.renderer.render_line(d.usage_percent))
        return lines

    def render_drive(self, index: int, d: DriveInfo) -> str:
        lines = self.drive_lines(index, d)
        if not self.show_frame:
            return "\n".join(f"  {line}" for line in lines)

        width = max(self.geometry.content_width, max_visible_line_length(lines))
        out = ["╭" + "─" * (width + 2) + "╮"]
        out.extend(f"│ {pad_visible(line, width)} │" for line in lines)
        out.append("╰" + "─" * (width + 2) + "╯")
        return "\n".join(out)

    def write(self, result: CollectorResult[DriveScanData], out: TextIO | None = None) -> int:
        out = out or sys.stdout
        out.write("\n")

        printed = 0
        for d in result.data.drives:
            try:
                block = self.render_drive(printed + 1, d)
            except MemoryError:
                logger.warning("could not render usage bar for %s, skipping", d.mountpoint)
                continue
            out.write(block + "\n\n")
            printed += 1

        if printed == 0:
            out.write("No drives found.\n")
        else:
            out.write(f"A total of {printed} drives found.\n")

        for w in result.warnings:
            out.write(f"{BOLD_YELLOW}!{RESET} {w}\n")
        for n in result.notes:
            logger.info(n)
        return printed

    @staticmethod
    def _inodes(d: DriveInfo) -> str:
        if d.total_inodes <= 0:
            return PLACEHOLDER
        return f"{d.used_inodes:,} / {d.total_inodes:,} ({d.inode_usage_percent:.1f}%)"
