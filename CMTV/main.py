#!/usr/bin/env python3
"""
CMTV - Main Entry Point
Run the CMTrace log viewer terminal UI
"""
import argparse
import logging
import sys
from typing import List, Optional

from CMTV.log_setup import LOG_DIR, configure_logging
from CMTV.logmerge.file_poller import POLL_INTERVAL


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmtv",
        description="View CMTrace and plain text log files, merged by time and kept up to date.",
    )
    parser.add_argument("files", nargs="*", help="log files to open as one merged document")
    parser.add_argument("--interval", type=float, default=POLL_INTERVAL,
                        help="seconds between two checks for file changes (default: %(default)s)")
    parser.add_argument("--log-dir", default=LOG_DIR,
                        help="directory for the application's own log (default: %(default)s)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="application log level (default: %(default)s)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.interval <= 0:
        print("--interval must be positive", file=sys.stderr)
        return 2

    configure_logging(args.log_dir, getattr(logging, args.log_level))

    # Imported late so --help works without loading textual
    from CMTV.UI import run_app

    try:
        run_app(args.files, poll_interval=args.interval)
    except KeyboardInterrupt:
        print("\nCMTV terminated by user")
    except Exception as e:
        print(f"\nError running CMTV: {e}", file=sys.stderr)
        logging.getLogger(__name__).error(f"Fatal error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
