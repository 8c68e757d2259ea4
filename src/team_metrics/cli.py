from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from . import __version__
from .cancel import CancelToken, cancel_on_interrupt
from .config import load_env_file, load_settings, parse_modes
from .pipeline import run
from .reports import build_reports


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="team-metrics",
        description="Count per-user activity on GitHub, JIRA, Confluence and Slack and print bar charts.",
    )
    parser.add_argument("--mode", type=str, default="", help="Comma-separated providers to run (overrides MODE).")
    parser.add_argument("--env-file", type=Path, default=Path(".env"), help="Environment file loaded before reading variables.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)

    load_env_file(args.env_file)
    settings = load_settings(os.environ)

    try:
        modes = parse_modes(str(args.mode or "") or settings.mode)
        with cancel_on_interrupt(CancelToken()) as cancel:
            run(modes, sys.stdout.buffer, providers=build_reports(settings), cancel=cancel)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
