"""AsyncIO processor implementation - cooperative scheduling over worker threads."""

import asyncio
from typing import List, Optional

from ..core.logging_config import get_logger
from ..core.models import FailureKind, InputImage, TransformFailure
from ..core.protocols import CancellationToken, ItemOutcome, ProcessItemFunction
from .common import is_cancelled, process_single_image

MAX_CONCURRENCY = 4


async def process_single_image_async(
    image: InputImage,
    process_item: ProcessItemFunction,
    semaphore: asyncio.Semaphore,
    cancel_token: Optional[CancellationToken] = None,
) -> Optional[ItemOutcome]:
    """Process a single image without blocking the event loop."""
    async with semaphore:
        if is_cancelled(cancel_token):
            return None
        logger = get_logger("asyncio-processor")
        logger.debug(f"[{image.filename}] Dispatching to worker thread")
        return await asyncio.to_thread(process_single_image, image, process_item)


async def process_batch_async(
    batch: List[InputImage],
    process_item: ProcessItemFunction,
    cancel_token: Optional[CancellationToken] = None,
    max_concurrency: int = MAX_CONCURRENCY,
) -> List[Optional[ItemOutcome]]:
    """Process a batch of images concurrently, bounded by a semaphore."""
    semaphore = asyncio.Semaphore(max_concurrency)
    tasks = [
        process_single_image_async(image, process_item, semaphore, cancel_token)
        for image in batch
    ]

    results = await asyncio.gather(*tasks, return_exceptions=True)

    # Convert exceptions to failure records
    processed_results: List[Optional[ItemOutcome]] = []
    for image, result in zip(batch, results):
        if isinstance(result, Exception):
            processed_results.append(
                TransformFailure(
                    image_id=image.id,
                    filename=image.filename,
                    kind=FailureKind.UNEXPECTED,
                    message=str(result),
                )
            )
        else:
            processed_results.append(result)

    return processed_results


def process_batch(
    batch: List[InputImage],
    process_item: ProcessItemFunction,
    cancel_token: Optional[CancellationToken] = None,
    max_concurrency: int = MAX_CONCURRENCY,
) -> List[Optional[ItemOutcome]]:
    """
    Process a batch of images using asyncio.

    This is the synchronous wrapper that runs the async function.

    Args:
        batch: Images to process
        process_item: Callable transforming one image and recording it
        cancel_token: Optional cooperative cancellation flag
        max_concurrency: Upper bound on images in flight

    Returns:
        Outcomes in input order; None for items skipped after cancellation
    """
    return asyncio.run(
        process_batch_async(batch, process_item, cancel_token, max_concurrency)
    )
