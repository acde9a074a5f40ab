from __future__ import annotations

import argparse
from typing import Sequence

from worldtick.content.io import load_content_dir
from worldtick.content.lint import lint_world_content
from worldtick.sim.state import DEFAULT_BANDS


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worldtick-lint",
        description="Validate world simulation content for common authoring mistakes.",
    )
    parser.add_argument("content_dir", help="Directory holding regions.json, events.json and schedules.json")
    parser.add_argument(
        "--bands",
        default=",".join(DEFAULT_BANDS),
        help="Comma-separated list of valid bands",
    )
    parser.add_argument("--strict", action="store_true", help="Treat warnings as errors")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    bands = tuple(band.strip() for band in args.bands.split(",") if band.strip())

    try:
        content = load_content_dir(args.content_dir)
    except Exception as exc:
        print(f"error: {exc}")
        return 1

    report = lint_world_content(content.regions, content.events, content.schedules, bands=bands)
    for message in report.errors:
        print(f"error {message}")
    for message in report.warnings:
        print(f"warning {message}")
    stats = " ".join(f"{key}={report.stats[key]}" for key in sorted(report.stats))
    print(f"stats {stats} errors={len(report.errors)} warnings={len(report.warnings)}")

    if report.errors or (args.strict and report.warnings):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
