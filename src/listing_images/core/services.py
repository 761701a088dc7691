"""Service implementations: the per-image transform and the batch orchestrator."""

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from PIL import Image

from . import export
from .error_handling import BatchOperationContextManager
from .exceptions import (
    BatchCapacityReached,
    DecodeError,
    EmptyKeywordError,
    EncodeError,
    UnsupportedInputTypeError,
)
from .export import ExportHandle
from .image_utils import (
    ACCEPTED_CONTENT_TYPES,
    crop_to_square,
    decode_image,
    encode_image,
    is_quality_adjustable,
    preferred_content_type,
    saved_percent,
    size_in_kb,
)
from .models import (
    BatchReport,
    FailureKind,
    InputImage,
    IntakeReport,
    ItemStatus,
    ProcessedImage,
    ProcessingConfig,
    SourceFile,
    TransformFailure,
)
from .naming import build_output_name, extension_for, source_extension_for
from .observability import LogContext, MetricsCollector, StructuredLogger
from .protocols import (
    CancellationToken,
    ItemOutcome,
    LoggerProtocol,
    ProcessBatchFunction,
    ProgressCallback,
    TransformService,
)

# Progress milestones reported by the transform.
PROGRESS_DECODED = 30
PROGRESS_CROPPED = 50
PROGRESS_ENCODED = 80
PROGRESS_DONE = 100


@dataclass
class ProcessingContext:
    """Context for a single image transform."""

    correlation_id: str
    start_time: float = field(default_factory=time.time)
    log_context: LogContext = field(default_factory=LogContext)


class ImageTransformService(TransformService):
    """Decode, optionally square-crop, and adaptively re-encode one image."""

    def __init__(
        self,
        config: ProcessingConfig,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._config = config
        self._logger = logger or StructuredLogger("listing_images.transform")

    def _encode(self, surface: "Image.Image", content_type: str) -> Tuple[bytes, Optional[float]]:
        """Walk the quality steps for lossy targets; PNG encodes once."""
        if not is_quality_adjustable(content_type):
            return encode_image(surface, content_type), None

        data = b""
        quality = None
        for step in self._config.quality_steps:
            quality = step.quality
            data = encode_image(surface, content_type, step.quality)
            if step.max_bytes is None or len(data) <= step.max_bytes:
                break
        return data, quality

    def transform(
        self,
        image: InputImage,
        keyword: str,
        force_square: Optional[bool] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ItemOutcome:
        """
        Transform a single image into its listing output.

        Args:
            image: Accepted input image
            keyword: Effective keyword for the output name
            force_square: Square-crop override; falls back to the image's
                own override, then the batch setting
            progress: Optional callback receiving 0-100 milestones

        Returns:
            ProcessedImage on success, TransformFailure otherwise
        """
        context = ProcessingContext(
            correlation_id=f"img_{image.id}",
            log_context=LogContext(
                operation="transform",
                component="image_transform_service",
            ).with_metadata(filename=image.filename, sequence_index=image.sequence_index),
        )
        report = progress or (lambda _: None)

        try:
            if not keyword or not keyword.strip():
                raise EmptyKeywordError(f"No keyword for {image.filename}")

            source = decode_image(image.data)
            report(PROGRESS_DECODED)
            self._logger.debug(
                f"Decoded {source.width}x{source.height}", context.log_context
            )

            if force_square is None:
                force_square = image.force_square
            if force_square is None:
                force_square = self._config.force_square
            surface = crop_to_square(source) if force_square else source.copy()
            report(PROGRESS_CROPPED)

            target_type = preferred_content_type(image.content_type)
            data, quality = self._encode(surface, target_type)
            report(PROGRESS_ENCODED)

        except EmptyKeywordError as e:
            return self._failure(image, FailureKind.EMPTY_KEYWORD, e, context)
        except DecodeError as e:
            return self._failure(image, FailureKind.DECODE_ERROR, e, context)
        except EncodeError as e:
            return self._failure(image, FailureKind.ENCODE_ERROR, e, context)

        used_original = len(data) > image.size_bytes
        if used_original:
            # Never emit something larger than what was uploaded.
            data = image.data
            content_type = image.content_type
            extension = source_extension_for(content_type)
            width, height = source.width, source.height
            quality = None
        else:
            content_type = target_type
            extension = extension_for(target_type)
            width, height = surface.width, surface.height

        output_name = build_output_name(keyword, image.sequence_index, extension)
        result = ProcessedImage(
            id=image.id,
            original_name=image.filename,
            output_name=output_name,
            content_type=content_type,
            data=data,
            size_bytes=len(data),
            original_size_bytes=image.size_bytes,
            size_kb=size_in_kb(len(data)),
            original_size_kb=size_in_kb(image.size_bytes),
            saved_percent=saved_percent(image.size_bytes, len(data)),
            width=width,
            height=height,
            used_original=used_original,
            quality=quality,
            export_handle=ExportHandle(data, output_name),
        )
        report(PROGRESS_DONE)

        self._logger.info(
            f"Transformed {image.filename} -> {output_name}",
            context.log_context,
            size_kb=result.size_kb,
            saved_percent=result.saved_percent,
            used_original=used_original,
            processing_time_ms=(time.time() - context.start_time) * 1000,
        )
        return result

    def _failure(
        self,
        image: InputImage,
        kind: FailureKind,
        error: Exception,
        context: ProcessingContext,
    ) -> TransformFailure:
        self._logger.error(
            "Image transform failed",
            context.log_context.with_metadata(error=str(error), kind=kind.value),
        )
        return TransformFailure(
            image_id=image.id,
            filename=image.filename,
            kind=kind,
            message=str(error),
        )


class BatchOrchestrator:
    """
    Owns the batch: intake, per-image state, results and exports.

    Items are processed through an interchangeable ``process_batch``
    strategy. At most one transform per image id runs at a time; a
    second request for an image already in flight is skipped, except for
    keyword edits, which run the image again afterwards.
    """

    def __init__(
        self,
        config: ProcessingConfig,
        transform_service: Optional[TransformService] = None,
        process_batch: Optional[ProcessBatchFunction] = None,
        classifier: Optional[Any] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        if process_batch is None:
            from ..processors.serial import process_batch as serial_process_batch

            process_batch = serial_process_batch

        self.config = config
        self._logger = logger or StructuredLogger("listing_images.orchestrator")
        self._transform = transform_service or ImageTransformService(config, self._logger)
        self._process_batch = process_batch
        self._classifier = classifier
        self._metrics = metrics_collector

        self._lock = threading.RLock()
        self._items: Dict[str, InputImage] = {}
        self._results: Dict[str, ProcessedImage] = {}
        self._failures: Dict[str, TransformFailure] = {}
        self._in_flight: Set[str] = set()
        self._rerun_requested: Set[str] = set()
        self._next_index = 1
        self._log_context = LogContext(component="batch_orchestrator")

    # Intake

    def add_file(self, source: SourceFile) -> InputImage:
        """
        Accept a single file into the batch.

        Raises:
            UnsupportedInputTypeError: If the content type is not accepted
            BatchCapacityReached: If the batch is already full
        """
        if source.content_type not in ACCEPTED_CONTENT_TYPES:
            raise UnsupportedInputTypeError(
                f"{source.filename}: unsupported type {source.content_type or 'unknown'}"
            )
        with self._lock:
            if len(self._items) >= self.config.max_files:
                raise BatchCapacityReached(
                    f"{source.filename}: batch is limited to {self.config.max_files} images"
                )
            image = InputImage.from_source(source, self._next_index)
            self._next_index += 1
            self._items[image.id] = image
            return image

    def add_files(self, files: Iterable[SourceFile]) -> IntakeReport:
        """Accept a submission, truncating at capacity and rejecting unsupported types."""
        report = IntakeReport()
        context = self._log_context.with_operation("add_files")
        with self._lock:
            for source in files:
                try:
                    report.accepted.append(self.add_file(source))
                except UnsupportedInputTypeError:
                    report.unsupported.append(source.filename)
                except BatchCapacityReached:
                    report.over_capacity.append(source.filename)

            if report.accepted:
                self._reset_results()
            report.unsupported_type = bool(report.unsupported)
            report.capacity_reached = len(self._items) >= self.config.max_files

        if report.unsupported_type:
            self._logger.warning(
                "Unsupported file types skipped",
                context,
                files=", ".join(report.unsupported),
            )
        if report.capacity_reached:
            self._logger.warning(
                f"Batch is full ({self.config.max_files} images)",
                context,
                truncated=len(report.over_capacity),
            )
        self._logger.info(
            f"Accepted {len(report.accepted)} image(s)", context, total=len(self._items)
        )
        return report

    def _reset_results(self) -> None:
        for result in self._results.values():
            result.release()
        self._results.clear()
        self._failures.clear()
        for image in self._items.values():
            if image.id not in self._in_flight:
                image.status = ItemStatus.PENDING
                image.progress = 0
                image.error = ""
                image.failure_kind = None

    # Keyword resolution

    def resolve_keyword(self, image: InputImage) -> str:
        """Per-image override, then the classifier (if enabled), then the batch keyword."""
        if image.keyword and image.keyword.strip():
            return image.keyword
        if self.config.auto_keyword and self._classifier is not None:
            keyword = self._classifier.keyword_for(image.filename, image.data)
            if keyword:
                return keyword
        return self.config.keyword

    # Processing

    def _set_progress(self, image: InputImage, value: int) -> None:
        with self._lock:
            image.progress = max(image.progress, value)

    def process_item(self, image: InputImage) -> Optional[ItemOutcome]:
        """Transform one image and record its outcome; None if skipped."""
        return self._run(image, rerun_if_busy=False)

    def _start(self, image: InputImage) -> None:
        self._in_flight.add(image.id)
        image.status = ItemStatus.PROCESSING
        image.progress = 0
        image.error = ""
        image.failure_kind = None

    def _run(self, image: InputImage, rerun_if_busy: bool) -> Optional[ItemOutcome]:
        """
        Run the transform for one image, one run per image id at a time.

        A request for an image already in flight is skipped; with
        ``rerun_if_busy`` it is remembered instead and the image runs once
        more when the current transform has been recorded.
        """
        context = self._log_context.with_operation("process_item")
        with self._lock:
            if image.id not in self._items:
                return None
            if image.id in self._in_flight:
                if rerun_if_busy:
                    self._rerun_requested.add(image.id)
                    self._logger.debug(f"{image.filename} queued to run again", context)
                else:
                    self._logger.warning(f"{image.filename} is already being processed", context)
                return None
            self._start(image)

        try:
            while True:
                outcome = self._transform_and_record(image)
                with self._lock:
                    if image.id not in self._rerun_requested:
                        return outcome
                    self._rerun_requested.discard(image.id)
                    if image.id not in self._items:
                        return outcome
                    self._start(image)
        finally:
            with self._lock:
                self._in_flight.discard(image.id)
                self._rerun_requested.discard(image.id)

    def _transform_and_record(self, image: InputImage) -> ItemOutcome:
        start_time = time.time()
        try:
            keyword = self.resolve_keyword(image)
            outcome = self._transform.transform(
                image,
                keyword,
                force_square=image.force_square,
                progress=lambda value: self._set_progress(image, value),
            )
        except Exception as e:
            self._logger.error(
                f"Unexpected error processing {image.filename}: {e}",
                self._log_context.with_operation("process_item"),
            )
            outcome = TransformFailure(
                image_id=image.id,
                filename=image.filename,
                kind=FailureKind.UNEXPECTED,
                message=str(e),
            )

        self._record(image, outcome)
        if self._metrics is not None:
            failed = isinstance(outcome, TransformFailure)
            self._metrics.record(
                "transform",
                start_time,
                success=not failed,
                error_message=outcome.message if failed else None,
                image_id=image.id,
                bytes_saved=0 if failed else outcome.original_size_bytes - outcome.size_bytes,
            )
        return outcome

    def _record(self, image: InputImage, outcome: ItemOutcome) -> None:
        with self._lock:
            if image.id not in self._items:
                # Removed while in flight.
                if isinstance(outcome, ProcessedImage):
                    outcome.release()
                return

            previous = self._results.pop(image.id, None)
            if previous is not None:
                previous.release()
            self._failures.pop(image.id, None)

            if isinstance(outcome, ProcessedImage):
                self._results[image.id] = outcome
                image.status = ItemStatus.DONE
                image.progress = PROGRESS_DONE
            else:
                self._failures[image.id] = outcome
                image.status = ItemStatus.FAILED
                image.error = outcome.message
                image.failure_kind = outcome.kind

    def process_all(self, cancel_token: Optional[CancellationToken] = None) -> BatchReport:
        """
        Process every image in insertion order.

        Items not started before cancellation stay pending and are listed
        in ``BatchReport.skipped``.
        """
        start_time = time.time()
        context = self._log_context.with_operation("process_all")
        with self._lock:
            batch = list(self._items.values())
            # Outcomes of earlier runs must not count towards this report.
            self._reset_results()

        self._logger.info(f"Processing {len(batch)} image(s)", context)
        with BatchOperationContextManager("Listing image batch") as batch_op:
            outcomes = self._process_batch(batch, self.process_item, cancel_token)
            for outcome in outcomes:
                if isinstance(outcome, TransformFailure):
                    batch_op.add_failure(outcome)

        with self._lock:
            report = BatchReport(
                results=self.results,
                failures=self.failures,
                skipped=[
                    image.filename
                    for image in batch
                    if image.id in self._items and image.status == ItemStatus.PENDING
                ],
                cancelled=bool(cancel_token and cancel_token.cancelled),
                processing_time=time.time() - start_time,
                metrics=self._metrics.get_summary("transform") if self._metrics else {},
            )

        self._logger.info(
            f"Batch {report.message}",
            context,
            completed=report.completed_count,
            failed=report.failed_count,
            skipped=len(report.skipped),
        )
        return report

    def reprocess(self, image_id: str) -> Optional[ItemOutcome]:
        """Re-run the transform for one image."""
        return self.process_item(self.get(image_id))

    def update_keyword(
        self,
        image_id: str,
        keyword: Optional[str],
        force_square: Optional[bool] = None,
    ) -> Optional[ItemOutcome]:
        """Set (or clear, with None/blank) a per-image keyword and reprocess.

        If the image is being transformed right now, it runs once more
        after that transform finishes and None is returned.
        """
        image = self.get(image_id)
        with self._lock:
            image.keyword = keyword if keyword and keyword.strip() else None
            if force_square is not None:
                image.force_square = force_square
        return self._run(image, rerun_if_busy=True)

    # Removal

    def remove(self, image_id: str) -> bool:
        """Drop one image and release its export handle."""
        with self._lock:
            image = self._items.pop(image_id, None)
            if image is None:
                return False
            result = self._results.pop(image_id, None)
            if result is not None:
                result.release()
            self._failures.pop(image_id, None)
        self._logger.debug(f"Removed {image.filename}", self._log_context)
        return True

    def clear(self) -> None:
        """Empty the batch, releasing every export handle."""
        with self._lock:
            for result in self._results.values():
                result.release()
            self._results.clear()
            self._failures.clear()
            self._items.clear()
            self._next_index = 1
        self._logger.debug("Batch cleared", self._log_context)

    # Accessors and exports

    def get(self, image_id: str) -> InputImage:
        with self._lock:
            try:
                return self._items[image_id]
            except KeyError:
                raise KeyError(f"Unknown image id: {image_id}") from None

    @property
    def items(self) -> List[InputImage]:
        with self._lock:
            return list(self._items.values())

    @property
    def results(self) -> List[ProcessedImage]:
        """Completed results in input order."""
        with self._lock:
            return [self._results[i] for i in self._items if i in self._results]

    @property
    def failures(self) -> List[TransformFailure]:
        with self._lock:
            return [self._failures[i] for i in self._items if i in self._failures]

    def export_single(self, image_id: str) -> Tuple[str, bytes]:
        """``(output_name, bytes)`` for one completed image."""
        with self._lock:
            result = self._results.get(image_id)
        if result is None:
            raise KeyError(f"No completed result for image id: {image_id}")
        return result.output_name, result.data

    def archive_entries(self) -> List[Tuple[str, bytes]]:
        return export.archive_entries(self.results)

    def build_archive(self) -> bytes:
        return export.build_archive(self.results)
