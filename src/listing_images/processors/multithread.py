"""Multithreaded processor implementation - uses thread pool for parallelism."""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..core.models import FailureKind, InputImage, TransformFailure
from ..core.protocols import CancellationToken, ItemOutcome, ProcessItemFunction
from .common import is_cancelled, process_single_image

MAX_WORKERS = 4


def _run(
    image: InputImage,
    process_item: ProcessItemFunction,
    cancel_token: Optional[CancellationToken],
) -> Optional[ItemOutcome]:
    if is_cancelled(cancel_token):
        return None
    return process_single_image(image, process_item)


def process_batch(
    batch: List[InputImage],
    process_item: ProcessItemFunction,
    cancel_token: Optional[CancellationToken] = None,
    max_workers: int = MAX_WORKERS,
) -> List[Optional[ItemOutcome]]:
    """
    Process a batch of images using a thread pool.

    Pillow releases the GIL while decoding and encoding, so threads give
    real parallelism here. Results are returned in input order regardless
    of completion order.

    Args:
        batch: Images to process
        process_item: Callable transforming one image and recording it
        cancel_token: Optional cooperative cancellation flag
        max_workers: Upper bound on worker threads

    Returns:
        Outcomes in input order; None for items skipped after cancellation
    """
    if not batch:
        return []

    workers = max(1, min(max_workers, len(batch)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(_run, image, process_item, cancel_token) for image in batch
        ]

        results: List[Optional[ItemOutcome]] = []
        for image, future in zip(batch, futures):
            try:
                results.append(future.result())
            except Exception as e:
                results.append(
                    TransformFailure(
                        image_id=image.id,
                        filename=image.filename,
                        kind=FailureKind.UNEXPECTED,
                        message=str(e),
                    )
                )

    return results
