#!/usr/bin/env python3
"""
Listing image processor CLI

Reads local photos -> square-crops and re-encodes -> writes SEO-named outputs
Supports multiple concurrency strategies: serial, multithread, asyncio
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .core import ProcessingConfig, get_logger
from .core.factories import ProcessingPipelineFactory
from .core.logging_config import set_debug_logging
from .core.usage import JsonFileUsageCounter
from .processors import PROCESSORS
from .processors.common import run_processing


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the listing image processor.

    Returns:
        An `argparse.Namespace` object containing the parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Listing image processor with multiple concurrency strategies"
    )
    add_process_arguments(parser)
    return parser.parse_args(argv)


def add_process_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by this script and the ``process`` subcommand."""
    parser.add_argument("paths", nargs="+", type=Path, help="Image files or directories")
    parser.add_argument(
        "--keyword", default="", help="Product keyword used in output names"
    )
    parser.add_argument(
        "--square", action="store_true", help="Center-crop every image to a square"
    )
    parser.add_argument(
        "--auto-keyword",
        action="store_true",
        help="Derive keywords from file names (and pixels, with a visual model)",
    )
    parser.add_argument("--output-dir", type=Path, default=None, help="Write outputs here")
    parser.add_argument("--archive", type=Path, default=None, help="Write a zip archive")
    parser.add_argument(
        "--processor",
        type=str,
        default="serial",
        choices=list(PROCESSORS),
        help="Processing strategy to use (default: serial)",
    )
    parser.add_argument(
        "--concurrency", type=int, default=4, help="Workers for concurrent strategies"
    )
    parser.add_argument(
        "--counter-file", type=Path, default=None, help="JSON file for the lifetime count"
    )
    parser.add_argument(
        "--visual-model", type=Path, default=None, help="ONNX image classifier"
    )
    parser.add_argument(
        "--visual-labels", type=Path, default=None, help="Labels for --visual-model"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the listing image processing script.

    Parses arguments, builds the configuration, selects the processing
    strategy and runs it. Exits non-zero when no image was produced.
    """
    try:
        logger = get_logger("processor")
        logger.info("Starting listing image processor")
        args: argparse.Namespace = parse_args(argv)

        config = ProcessingConfig(
            keyword=args.keyword,
            force_square=args.square,
            auto_keyword=args.auto_keyword,
            concurrency=args.concurrency,
            debug=args.debug,
        )

        if config.debug:
            set_debug_logging(logger)

        if args.output_dir is None and args.archive is None:
            args.output_dir = Path("listing-images-output")

        classifier = None
        if config.auto_keyword and args.visual_model is not None:
            from .classification import OnnxVisualRecognizer

            recognizer = OnnxVisualRecognizer(
                args.visual_model,
                args.visual_labels or args.visual_model.with_suffix(".txt"),
            )
            classifier = ProcessingPipelineFactory.create_classifier(config, recognizer)

        processor_name, _ = PROCESSORS[args.processor]
        process_batch_fn = ProcessingPipelineFactory.get_process_batch(
            args.processor, config.concurrency
        )
        counter = JsonFileUsageCounter(args.counter_file) if args.counter_file else None

        report = run_processing(
            config,
            processor_name,
            process_batch_fn,
            args.paths,
            output_dir=args.output_dir,
            archive_path=args.archive,
            usage_counter=counter,
            classifier=classifier,
        )
        if report.message != "completed":
            sys.exit(1)

    except KeyboardInterrupt:
        logger = get_logger("processor")
        logger.warning("Processing interrupted by user.")
    except ValidationError as e:
        logger = get_logger("processor")
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)
    except Exception as e:
        logger = get_logger("processor")
        logger.error(f"Processing failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
