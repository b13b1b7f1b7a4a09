from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from drinfo.collectors.drive_collector import DriveCollector, MountSourceError
from drinfo.core.bar import BarGeometry
from drinfo.services.config_service import ConfigPaths, ConfigService
from drinfo.services.health_checker import HealthChecker
from drinfo.services.report_service import ReportService, terminal_width

__version__ = "1.0.0"


def setup_logging(debug: bool = False) -> logging.Logger:
    logger = logging.getLogger("drinfo")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    return logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="drinfo",
        description="Show mounted local, network and cloud drives with usage bars.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"drinfo {__version__}")
    parser.add_argument("-d", "--debug", action="store_true", help="log debug details to stderr")
    parser.add_argument("-c", "--config", type=Path, help="config file (default: ~/.config/drinfo/config.json)")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    log = setup_logging(args.debug)

    config = ConfigService(ConfigPaths(path=args.config) if args.config else None)
    settings = config.settings()
    log.debug("settings: %s", settings)

    health = HealthChecker(enabled=settings.check_health)
    collector = DriveCollector(
        max_drives=settings.max_drives,
        warn_percent=settings.warn_percent,
        scan_gvfs=settings.scan_gvfs,
        health=health,
    )
    try:
        result = collector.collect()
    except MountSourceError as e:
        print(str(e), file=sys.stderr)
        return 1

    geometry = BarGeometry.for_terminal(
        terminal_width(),
        min_box=settings.min_box_width,
        max_box=settings.max_box_width,
    )
    reporter = ReportService(geometry, show_frame=settings.show_frame, show_health=health.active)
    reporter.write(result)
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
