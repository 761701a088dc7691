"""Main module for the listing images CLI."""

import sys
import argparse
from typing import List, Optional

from .process_images import add_process_arguments
from .process_images import main as process_images_main

VERSION = "0.1.0"


def build_process_argv(args: argparse.Namespace) -> List[str]:
    """Rebuild the ``process-images`` command line from parsed subcommand args."""
    argv = [str(path) for path in args.paths]
    if args.keyword:
        argv.extend(["--keyword", args.keyword])
    if args.square:
        argv.append("--square")
    if args.auto_keyword:
        argv.append("--auto-keyword")
    if args.output_dir:
        argv.extend(["--output-dir", str(args.output_dir)])
    if args.archive:
        argv.extend(["--archive", str(args.archive)])
    if args.processor != "serial":
        argv.extend(["--processor", args.processor])
    if args.concurrency != 4:
        argv.extend(["--concurrency", str(args.concurrency)])
    if args.counter_file:
        argv.extend(["--counter-file", str(args.counter_file)])
    if args.visual_model:
        argv.extend(["--visual-model", str(args.visual_model)])
    if args.visual_labels:
        argv.extend(["--visual-labels", str(args.visual_labels)])
    if args.debug:
        argv.append("--debug")
    return argv


def classify_command(paths: List[str]) -> None:
    """Print the keyword tokens and extracted keyword for each file name."""
    from .classification import KeywordClassifier, extract_keyword

    classifier = KeywordClassifier()
    for path in paths:
        result = classifier.classify(path.replace("\\", "/").rsplit("/", 1)[-1])
        print(f"{path}: {extract_keyword(result)}")
        print(f"  tokens: {', '.join(result.tokens)}")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the unified command-line interface (CLI).

    Sets up the ``process``, ``classify`` and ``version`` commands. For
    ``process`` the arguments are rebuilt and handed to the
    ``process_images`` entry point so that script stays usable on its own.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="listing-images",
        description="Listing Images - SEO names and size-bounded product photos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Rename and recompress a folder of photos
  listing-images process photos/ --keyword "summer silk dress" --output-dir out/

  # Square crop, derive keywords from file names, bundle into a zip
  listing-images process a.jpg b.png --square --auto-keyword --archive out.zip

  # Show what keyword a file name would produce
  listing-images classify "IMG_2024_red-silk-dress.jpg"

  # Show version
  listing-images version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    process_parser: argparse.ArgumentParser = subparsers.add_parser(
        "process", help="Process local product photos"
    )
    add_process_arguments(process_parser)

    classify_parser = subparsers.add_parser(
        "classify", help="Derive keywords from file names"
    )
    classify_parser.add_argument("paths", nargs="+", help="File names to classify")

    subparsers.add_parser("version", help="Show version information")

    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "process":
        process_images_main(build_process_argv(args))

    elif args.command == "classify":
        classify_command(args.paths)

    elif args.command == "version":
        print("Listing Images CLI")
        print(f"Version {VERSION}")
        print("SEO file names and size-bounded product photos")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
