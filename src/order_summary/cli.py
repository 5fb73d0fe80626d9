"""Command-line entry point.

Examples:
  # Live report from the portal (HR_BASE / HR_USER / HR_PASS set)
  order-summary --start 2025-03-26T07:00:00 --end 2025-03-26T11:00:00

  # Summarize an export already on disk
  order-summary --start 2025-03-26T07:00 --end 2025-03-26T11:00 \
      --file downloads/order-details-2025-03-26.xlsx

  # Wait up to HR_EXPORT_WAIT seconds for a browser download to land
  order-summary --start ... --end ... --folder ~/Downloads --json

Exit codes:
  0 success, 1 fallback data returned, 2 configuration error,
  3 another fetch in progress, 130 interrupted.
"""

from __future__ import annotations

import argparse
import dataclasses
import glob
import json
import logging
import sys
from pathlib import Path

from order_summary.config import ReportConfig
from order_summary.exceptions import BusyError, ConfigError
from order_summary.formatters.console import format_summary_for_console
from order_summary.service import ReportService
from order_summary.source.base import ReportSource, TimeRange
from order_summary.source.folder import DownloadFolderSource
from order_summary.source.portal import PortalReportSource

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Args:
    start: str
    end: str
    file: Path | None
    folder: Path | None
    store: str | None
    as_json: bool
    offline: bool
    verbose: bool


def parse_args(argv: list[str] | None = None) -> Args:
    p = argparse.ArgumentParser(description="POS order summary by time of day")
    p.add_argument("--start", required=True, help="Start timestamp, e.g. 2025-03-26T07:00:00")
    p.add_argument("--end", required=True, help="End timestamp, e.g. 2025-03-26T11:00:00")
    g = p.add_mutually_exclusive_group()
    g.add_argument("--file", type=Path, help="Summarize this order-details workbook")
    g.add_argument("--folder", type=Path, help="Wait for an export in this folder")
    p.add_argument("--store", default=None, help="Store name (default: HR_STORE or Piqua)")
    p.add_argument("--json", dest="as_json", action="store_true", help="Print the flat JSON map")
    p.add_argument("--offline", action="store_true", help="Never contact the portal")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)
    return Args(
        start=args.start,
        end=args.end,
        file=args.file,
        folder=args.folder,
        store=args.store,
        as_json=args.as_json,
        offline=args.offline,
        verbose=args.verbose,
    )


def build_source(args: Args, config: ReportConfig) -> ReportSource:
    """Pick the report source implied by the arguments."""
    if args.file is not None:
        return DownloadFolderSource(
            args.file.parent,
            wait_seconds=0,
            accept_existing=True,
            pattern=glob.escape(args.file.name),
        )
    if args.folder is not None:
        return DownloadFolderSource(args.folder.expanduser(), wait_seconds=config.export_wait)
    return PortalReportSource(config)


def main(argv: list[str] | None = None) -> int:
    """Run one summary request and print it.

    Returns:
        Process exit code (see module docstring).
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        window = TimeRange.parse(args.start, args.end).window()
        config = ReportConfig.from_env(store=args.store, offline=args.offline or None)
        with ReportService(build_source(args, config), config) as service:
            response = service.generate_summary(args.start, args.end)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 2
    except BusyError as e:
        logger.error("%s", e)
        return 3
    except ValueError as e:
        logger.error("Invalid request: %s", e)
        return 2
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    if args.as_json:
        print(json.dumps(response.to_dict(), indent=2))
    else:
        print(format_summary_for_console(response, window=window, store=config.store))
    return 1 if response.is_fallback else 0


if __name__ == "__main__":
    sys.exit(main())
