import argparse
from typing import List, Optional

import bittensor as bt

from urbanlayout.constants import DEFAULT_SEED
from urbanlayout.core.filters import COVERAGE_SELECTORS

OUTPUT_FORMATS = ("json", "msgpack")


def add_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--city.path",
        type=str,
        help="Path to the city descriptor JSON",
        default=None,
    )

    parser.add_argument(
        "--city.seed",
        type=int,
        help="Seed for the layout RNG; the same seed reproduces the same city",
        default=DEFAULT_SEED,
    )

    parser.add_argument(
        "--city.output",
        type=str,
        help="Where to write the generated layout (stdout when omitted)",
        default=None,
    )

    parser.add_argument(
        "--city.format",
        type=str,
        choices=OUTPUT_FORMATS,
        help="Output encoding",
        default="json",
    )

    parser.add_argument(
        "--generator.coverage_strategy",
        type=str,
        choices=sorted(COVERAGE_SELECTORS),
        help="How candidates are picked once the coverage cap applies",
        default="shuffled",
    )

    parser.add_argument(
        "--generator.no_trees",
        action="store_true",
        help="Skip park and street tree placement",
        default=False,
    )


def read_config(args: Optional[List[str]] = None) -> bt.config:
    parser = argparse.ArgumentParser(description="Procedural city block layout")
    bt.logging.add_args(parser)
    add_args(parser)
    return bt.config(parser, args=args)
