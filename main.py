#!/usr/bin/env python3
"""
Photo Softener CLI
Removes the near-white background of a photo, blurs the result and saves
it as a transparent PNG under the output directory.
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from models.pipeline_config import PipelineConfig
from models.errors import InvalidParameter
from pipeline.softener import soften
from services.image_service import ImageService

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.INFO,  # Set to INFO to reduce noise, or DEBUG for full detail
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="softener",
        description="Remove a white background and smooth the image with a Gaussian blur.",
    )
    parser.add_argument("input", help="input image (any format OpenCV can decode)")
    parser.add_argument("output", help="output file name, numbered and written as PNG")
    # unset options fall back to the environment (see .env.example)
    parser.add_argument("--threshold", type=int, default=None,
                        help="luminance cutoff 0-255 (default: $BG_THRESHOLD or 150)")
    parser.add_argument("--sigma", type=float, default=None,
                        help="Gaussian sigma > 0 (default: $BLUR_SIGMA or 1)")
    parser.add_argument("--output-dir", default=None,
                        help="directory for results (default: $OUTPUT_DIR_PATH or saved)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    _configure_logging()
    args = build_parser().parse_args(argv)

    try:
        config = PipelineConfig.from_env()
        threshold = config.threshold if args.threshold is None else args.threshold
        sigma = config.sigma if args.sigma is None else args.sigma
        output_dir = config.output_dir if args.output_dir is None else args.output_dir

        image_service = ImageService(load_timeout=config.load_timeout)
        input_image = image_service.load(args.input)

        # Measure execution time
        start_time = time.perf_counter()

        smoothed_image = soften(input_image, threshold=threshold, sigma=sigma)
        saved_image = image_service.save_as(smoothed_image, args.output, output_dir)

        elapsed = time.perf_counter() - start_time
    except InvalidParameter as e:
        logger.error(f"Invalid parameter: {e}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Conversion failed: {e}")
        return 1

    print(f"Background removed and smoothed, saved to {saved_image.path}")
    print(f"Execution time: {elapsed:.6f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
