"""Command-line entry point: route one API path and print the JSON response.

Usage:
  python -m bizdays /api/business-days/victoria --date 2025-09-05
  python -m bizdays /api/public-holidays/new-south-wales/2025
  python -m bizdays /api/epa-vic/elwood
"""

from __future__ import annotations

import argparse
import sys

from bizdays.router import Request, build_router, today_in_timezone
from bizdays.settings import is_known_timezone, load_settings


def _timezone_arg(value: str) -> str:
    if not is_known_timezone(value):
        raise argparse.ArgumentTypeError(f"unknown timezone: {value!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bizdays", description="Query the holiday, business-day, and facility feeds.")
    parser.add_argument("path", help="API path, optionally with a query string")
    parser.add_argument("--date", help="Reference date (YYYY-MM-DD) for business-day routes")
    parser.add_argument("--timezone", type=_timezone_arg, help="Civil timezone used when no date is given")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    timezone = args.timezone or load_settings().timezone

    parsed = Request.from_url(args.path)
    query = dict(parsed.query)
    if args.date:
        query["date"] = args.date
    request = Request(method=parsed.method, path=parsed.path, query=query)

    response = build_router(today=lambda: today_in_timezone(timezone)).handle(request)
    stream = sys.stdout if response.ok else sys.stderr
    print(response.text(), file=stream)
    return 0 if response.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
