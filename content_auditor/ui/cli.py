"""Command-line interface and main entry point."""

from __future__ import annotations
from typing import List, Optional
import argparse
import json
import sys

from content_auditor.core.config import Cfg
from content_auditor.core.constants import APP_NAME, VERSION
from content_auditor.core.logging import LOG
from content_auditor.core.options import ValidationOptions
from content_auditor.exceptions import AuditError, OptionError, PackageError, ReportError
from content_auditor.processor.tabulator import Tabulator

EPILOG = """\
Validation options (-v+KEY enables, -v-KEY disables, -v+all enables every option):
{options}

Severity:
  Severe     Functional or scoring failure
  Degraded   A feature partially fails
  Tolerable  Invisible to the end user
  Benign     No runtime effect; development-time signal only
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-auditor",
        description=f"{APP_NAME} v{VERSION}",
        epilog=EPILOG.format(options=ValidationOptions.describe()),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("path", help="Package (.zip or directory), or a folder of packages with -s / -a")
    parser.add_argument("--version", action="version", version=VERSION)
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-s", "--each", action="store_true",
                      help="Tabulate each package under PATH into its own reports")
    mode.add_argument("-a", "--aggregate", action="store_true",
                      help="Tabulate all packages under PATH into one Aggregate report set")

    parser.add_argument("-v", "--validate", action="append", default=[], metavar="+KEY|-KEY",
                        help="Enable (+) or disable (-) a validation option; repeatable")
    parser.add_argument("--no-dedupe", action="store_true",
                        help="Report every occurrence instead of once per item and message")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command-line arguments (None = sys.argv)

    Returns:
        Exit code (0 = success, 1 = package or report failure, 2 = usage)
    """
    ok, err_list = Cfg.check()
    if not ok:
        for err in err_list:
            print(f"ERROR: {err}", file=sys.stderr)
        return 1

    parser = build_parser()
    args = parser.parse_args(argv)
    LOG.set_verbose(args.verbose)

    try:
        options = ValidationOptions().apply(args.validate)
    except OptionError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    tab = Tabulator(options, dedupe=not args.no_dedupe)
    try:
        if args.aggregate:
            mode, errors = "aggregate", tab.tabulate_aggregate(args.path)
        elif args.each:
            mode, errors = "each", tab.tabulate_each(args.path)
        else:
            mode, errors = "one", tab.tabulate_one(args.path)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except (PackageError, ReportError) as exc:
        LOG.e(f"Fatal error: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except AuditError as exc:
        LOG.e(f"Fatal error: {exc}", exc=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    result = {"mode": mode, "path": args.path, "errors": errors, "options": options.enabled_keys()}
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
