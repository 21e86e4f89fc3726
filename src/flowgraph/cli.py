"""Command-line interface for flowgraph."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from flowgraph.extractors.typescript import ParserUnavailableError
from flowgraph.pipeline import MODES, AnalysisLimitError, run

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="flowgraph",
        description="Static dependency graphs of TypeScript source: declarations, inheritance and calls.",
    )
    parser.add_argument(
        "source_file",
        type=Path,
        help="Path to the TypeScript file to analyze",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=MODES,
        default="graph",
        help="'graph' for the structural graph, 'handler' for handler dependencies (default: graph)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output JSON file path (default: <source>.flow.json; '-' for stdout)",
    )
    parser.add_argument(
        "--tsx",
        action="store_true",
        default=None,
        help="Parse with the TSX grammar (default: by file suffix)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("flowgraph").setLevel(logging.DEBUG)

    to_stdout = args.output is not None and str(args.output) == "-"
    output = None if to_stdout else (
        args.output or args.source_file.with_suffix(".flow.json")
    )

    try:
        text = run(args.source_file, mode=args.mode, output=output, tsx=args.tsx)
    except (
        OSError, UnicodeDecodeError, ParserUnavailableError, AnalysisLimitError
    ) as e:
        logger.error("%s", e)
        sys.exit(1)

    if to_stdout:
        print(text)


if __name__ == "__main__":
    main()
