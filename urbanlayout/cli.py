"""
Command-line entry point: read a city descriptor, write the generated layout.

    python -m urbanlayout.cli --city.path city.json --city.seed 7 \
        --city.output layout.json --logging.debug
"""

import json
import sys
from pathlib import Path

import bittensor as bt

from urbanlayout.config import read_config
from urbanlayout.core.city_generator import generate_city
from urbanlayout.core.filters import COVERAGE_SELECTORS, FilterPipeline
from urbanlayout.protocol import CityDescriptor, CityLayout
from urbanlayout.utils.hash import sha256sum
from urbanlayout.utils.logging import ColoredLogger


def write_layout(layout: CityLayout, output, fmt: str) -> None:
    if fmt == "msgpack":
        blob = layout.pack()
        if output is None:
            sys.stdout.buffer.write(blob)
        else:
            Path(output).write_bytes(blob)
        return

    text = json.dumps(layout.to_dict(), indent=2)
    if output is None:
        print(text)
    else:
        Path(output).write_text(text, encoding="utf-8")


def main(args=None) -> int:
    config = read_config(args)
    bt.logging(config=config)

    if not config.city.path:
        ColoredLogger.error("--city.path is required")
        return 2

    path = Path(config.city.path)
    try:
        ColoredLogger.info(f"Loading {path} (sha256={sha256sum(path)[:16]}...)")
        city = CityDescriptor.load(path)
        pipeline = FilterPipeline(
            coverage=COVERAGE_SELECTORS[config.generator.coverage_strategy]()
        )
        layout = generate_city(
            city,
            seed=config.city.seed,
            pipeline=pipeline,
            with_trees=not config.generator.no_trees,
        )
        write_layout(layout, config.city.output, config.city.format)
    except (OSError, ValueError) as e:
        ColoredLogger.error(f"Layout generation failed: {e}")
        return 1

    if config.city.output:
        ColoredLogger.success(f"Wrote {config.city.format} layout to {config.city.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
