"""Common functions shared across all processor implementations."""

import mimetypes
import time
from pathlib import Path
from typing import Iterable, List, Optional

from ..core.error_handling import with_error_handling
from ..core.exceptions import (
    ConfigurationError,
    ListingImagesError,
    batch_error_handler,
)
from ..core.export import build_archive, default_archive_name, write_outputs
from ..core.logging_config import get_logger
from ..core.models import (
    BatchReport,
    FailureKind,
    InputImage,
    ProcessingConfig,
    SourceFile,
    TransformFailure,
)
from ..core.protocols import (
    CancellationToken,
    ItemOutcome,
    ProcessBatchFunction,
    ProcessItemFunction,
    UsageCounter,
)

# Camera-native types are not in every platform's mimetypes table.
mimetypes.add_type("image/heic", ".heic")
mimetypes.add_type("image/heif", ".heif")
mimetypes.add_type("image/webp", ".webp")


def is_cancelled(cancel_token: Optional[CancellationToken]) -> bool:
    return cancel_token is not None and cancel_token.cancelled


def process_single_image(
    image: InputImage, process_item: ProcessItemFunction
) -> Optional[ItemOutcome]:
    """
    Run one item, turning any escaped exception into a failure record.

    A single bad image must never take the rest of the batch down.
    """
    logger = get_logger("processor")
    try:
        return process_item(image)
    except Exception as e:
        logger.error(f"[{image.filename}] Processing failed: {e}", exc_info=True)
        return TransformFailure(
            image_id=image.id,
            filename=image.filename,
            kind=FailureKind.UNEXPECTED,
            message=str(e),
        )


def _expand_paths(paths: Iterable[Path]) -> List[Path]:
    expanded: List[Path] = []
    for path in paths:
        if path.is_dir():
            expanded.extend(sorted(p for p in path.iterdir() if p.is_file()))
        else:
            expanded.append(path)
    return expanded


@with_error_handling
def load_source_files(paths: Iterable[Path]) -> List[SourceFile]:
    """
    Read local files into SourceFile records, in the order given.

    Directories contribute their files (not recursively), sorted by name.
    The content type is guessed from the extension; unknown types are
    passed through empty so intake can reject them.
    """
    logger = get_logger("processor")
    sources = []
    for path in _expand_paths(Path(p) for p in paths):
        if not path.is_file():
            raise ConfigurationError(f"Input file not found: {path}")
        content_type, _ = mimetypes.guess_type(path.name)
        sources.append(
            SourceFile(
                filename=path.name,
                data=path.read_bytes(),
                content_type=content_type or "",
                last_modified=path.stat().st_mtime,
            )
        )
        logger.debug(f"Loaded {path} ({content_type or 'unknown type'})")
    return sources


def log_configuration(config: ProcessingConfig, processor_name: str):
    """Log processing configuration."""
    logger = get_logger("processor")
    logger.info("=" * 80)
    logger.info(f"{processor_name.upper()} LISTING IMAGE PROCESSOR")
    logger.info("=" * 80)

    logger.info("CONFIGURATION:")
    logger.info(f"  Keyword:       {config.keyword or '(none)'}")
    logger.info(f"  Auto keyword:  {'Enabled' if config.auto_keyword else 'Disabled'}")
    logger.info(f"  Square crop:   {'Enabled' if config.force_square else 'Disabled'}")
    logger.info(f"  Max files:     {config.max_files}")
    logger.info("")

    logger.info("QUALITY STEPS:")
    for step in config.quality_steps:
        limit = f"<= {step.max_bytes // 1024} KiB" if step.max_bytes else "final"
        logger.info(f"  quality {step.quality:.2f} ({limit})")
    logger.info("=" * 80)


def log_final_statistics(
    total_time: float, total_items: int, processed_count: int, error_count: int
):
    """Log final processing statistics."""
    logger = get_logger("processor")
    overall_rate = total_items / total_time if total_time > 0 else 0

    logger.info("=" * 80)
    logger.info("PROCESSING COMPLETED")
    logger.info("=" * 80)
    logger.info(f"Total execution time: {total_time:.1f}s")
    logger.info(f"Overall processing rate: {overall_rate:.1f} items/sec")
    logger.info(f"Successfully processed: {processed_count}")
    logger.info(f"Errors encountered: {error_count}")
    logger.info("=" * 80)


def log_results(report: BatchReport):
    """Log one line per output with its size delta."""
    logger = get_logger("processor")
    for result in report.results:
        logger.info(
            f"  {result.original_name} -> {result.output_name}: "
            f"{result.original_size_kb} KB -> {result.size_kb} KB "
            f"(-{result.saved_percent}%)"
        )
    for failure in report.failures:
        logger.warning(f"  {failure.filename}: {failure.kind.value} ({failure.message})")


def run_processing(
    config: ProcessingConfig,
    processor_name: str,
    process_batch_fn: ProcessBatchFunction,
    paths: Iterable[Path],
    output_dir: Optional[Path] = None,
    archive_path: Optional[Path] = None,
    usage_counter: Optional[UsageCounter] = None,
    classifier=None,
) -> BatchReport:
    """
    Process local image files end to end.

    Loads the files, runs the batch with the selected strategy, writes the
    outputs and/or a zip archive, and adds the completed count to the
    usage counter.
    """
    from ..core.factories import ProcessingPipelineFactory

    logger = get_logger("processor")
    log_configuration(config, processor_name)
    start_time = time.time()

    try:
        with batch_error_handler():
            sources = load_source_files(paths)
            if not sources:
                raise ConfigurationError("No input files given")

            orchestrator = ProcessingPipelineFactory.create_orchestrator(
                config, process_batch=process_batch_fn, classifier=classifier
            )
            intake = orchestrator.add_files(sources)
            for name in intake.unsupported:
                logger.warning(f"Skipped unsupported file: {name}")
            for name in intake.over_capacity:
                logger.warning(f"Skipped (batch full): {name}")
            if not intake.accepted:
                raise ConfigurationError("No supported images to process")

            logger.info(f"Processing {len(intake.accepted)} images using {processor_name}...")
            report = orchestrator.process_all()
            log_results(report)

            if output_dir is not None:
                written = write_outputs(report.results, Path(output_dir))
                logger.info(f"Wrote {len(written)} file(s) to {output_dir}")
            if archive_path is not None and report.results:
                target = Path(archive_path)
                if target.is_dir():
                    target = target / default_archive_name()
                target.write_bytes(build_archive(report.results))
                logger.info(f"Wrote archive {target}")

            if usage_counter is not None and report.completed_count:
                total = usage_counter.increment(report.completed_count)
                logger.info(f"Lifetime images processed: {total}")

        log_final_statistics(
            time.time() - start_time,
            len(intake.accepted),
            report.completed_count,
            report.failed_count,
        )
        return report

    except ConfigurationError as ce:
        logger.warning(f"Configuration error: {ce}. Processing halted.")
        raise
    except ListingImagesError as app_err:
        logger.error(
            f"Critical application error in {processor_name} processing: {app_err}",
            exc_info=True,
        )
        raise
