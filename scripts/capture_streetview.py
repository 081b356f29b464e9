#!/usr/bin/env python3
"""
Capture Street View images for a random sample of coordinates.

Reads candidate coordinates from a map file, visits them in random order,
and saves JPEGs until --count images exist or the candidates run out.

Examples:
    python scripts/capture_streetview.py --map map.json --count 5
    python scripts/capture_streetview.py --mode browser --size 1280x720 --name paris
"""

import argparse
import logging
import os
import random
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from config import (
    CAPTURE_MODES,
    DEFAULT_COUNT,
    DEFAULT_FIT,
    DEFAULT_FOV,
    DEFAULT_HEADING,
    DEFAULT_MAP_FILE,
    DEFAULT_MODE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PITCH,
    DEFAULT_RADIUS,
    DEFAULT_SCALE,
    DEFAULT_SIZE,
    DEFAULT_SOURCE,
    FIT_MODES,
    LOG_DATE_FORMAT,
    LOG_FORMAT,
)
from panocapture.capture import CaptureDefaults, make_attempt, make_strategy
from panocapture.coordinates import load_coordinates
from panocapture.errors import ConfigurationError, PanoCaptureError
from panocapture.output import ImageDirectorySink, log_summary, save_manifest
from panocapture.sampler import run_sampler

logger = logging.getLogger("capture_streetview")


def parse_scale(value: str) -> Optional[float]:
    """'auto' lets the size decide; anything else must be a number."""
    if value.lower() == "auto":
        return None
    try:
        return float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid scale: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sample Street View imagery for a list of coordinates")
    parser.add_argument("--map", type=Path, default=DEFAULT_MAP_FILE,
                        help="JSON or CSV file of candidate coordinates (default: ./map.json)")
    parser.add_argument("--count", type=int, default=DEFAULT_COUNT,
                        help=f"Number of images to produce (default: {DEFAULT_COUNT})")
    parser.add_argument("--size", default=DEFAULT_SIZE,
                        help=f"Output size WIDTHxHEIGHT (default: {DEFAULT_SIZE})")
    parser.add_argument("--scale", type=parse_scale, default=DEFAULT_SCALE,
                        help="Static API scale: 1, 2, or 'auto' (default: 2)")
    parser.add_argument("--heading", type=float, default=DEFAULT_HEADING)
    parser.add_argument("--pitch", type=float, default=DEFAULT_PITCH)
    parser.add_argument("--fov", type=float, default=DEFAULT_FOV)
    parser.add_argument("--radius", type=int, default=DEFAULT_RADIUS,
                        help=f"Panorama search radius in meters (default: {DEFAULT_RADIUS})")
    parser.add_argument("--source", default=DEFAULT_SOURCE,
                        help=f"Panorama source: default or outdoor (default: {DEFAULT_SOURCE})")
    parser.add_argument("--fit", choices=FIT_MODES, default=DEFAULT_FIT,
                        help=f"How to reach the exact output size (default: {DEFAULT_FIT})")
    parser.add_argument("--mode", choices=CAPTURE_MODES, default=DEFAULT_MODE,
                        help="api: Street View Static API, browser: headless Chromium screenshot")
    parser.add_argument("--out", type=Path, default=DEFAULT_OUTPUT_DIR,
                        help="Output directory (default: ./screenshots)")
    parser.add_argument("--name", default=None,
                        help="File name prefix; files become <name>_1.jpg, <name>_2.jpg, ...")
    parser.add_argument("--key", default=None, help="Google Maps API key (overrides env)")
    parser.add_argument("--env", type=Path, default=None,
                        help="Extra .env file to load, overriding existing variables")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the sampling order (default: random)")
    parser.add_argument("--no-cache", action="store_true",
                        help="Always query Street View metadata instead of using .cache/")
    parser.add_argument("--clear-cache", action="store_true",
                        help="Delete cached Street View metadata before sampling")
    parser.add_argument("--manifest", type=Path, default=None,
                        help="Write a CSV/JSON manifest of saved images to this path stem")
    parser.add_argument("--verbose", action="store_true", help="Log skipped candidates and request details")
    return parser


def resolve_api_key(args: argparse.Namespace) -> str:
    if args.env:
        load_dotenv(args.env.resolve(), override=True)
    key = args.key or os.getenv("GOOGLE_MAPS_API_KEY", "")
    if not key:
        raise ConfigurationError("Missing API key. Provide --key or set GOOGLE_MAPS_API_KEY env var.")
    return key


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    try:
        api_key = resolve_api_key(args)
        candidates = load_coordinates(args.map.resolve())
        count = max(1, args.count)

        defaults = CaptureDefaults(
            size=args.size,
            scale=args.scale,
            heading=args.heading,
            pitch=args.pitch,
            fov=args.fov,
            radius=args.radius,
            source=args.source,
            fit=args.fit,
            mode=args.mode,
        )
        options = {}
        if args.mode == "api":
            from panocapture.streetview_api import default_metadata_cache
            metadata_cache = default_metadata_cache()
            if args.clear_cache:
                metadata_cache.clear()
            if not args.no_cache:
                options["metadata_cache"] = metadata_cache
        strategy = make_strategy(args.mode, api_key, **options)

        logger.info(f"Sampling {count} of {len(candidates)} candidates via {args.mode}")
        result = run_sampler(
            candidates,
            count,
            make_attempt(strategy, defaults),
            ImageDirectorySink(args.out.resolve()),
            name_prefix=args.name,
            rng=random.Random(args.seed),
        )

        if args.manifest:
            save_manifest(result, defaults, args.manifest)
        log_summary(result, args.mode)

        result.raise_for_shortfall()
    except PanoCaptureError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"Could not write output: {e}")
        return 1

    for path in result.outputs:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
