"""Serial processor implementation - processes images one by one."""

from typing import List, Optional

from ..core.models import InputImage
from ..core.protocols import CancellationToken, ItemOutcome, ProcessItemFunction
from .common import is_cancelled, process_single_image


def process_batch(
    batch: List[InputImage],
    process_item: ProcessItemFunction,
    cancel_token: Optional[CancellationToken] = None,
) -> List[Optional[ItemOutcome]]:
    """
    Processes a batch of images serially, one by one, in the current thread.

    The cancellation token is checked before each item; once it is set the
    remaining items are left untouched.

    Args:
        batch: Images to process, in input order.
        process_item: Callable transforming one image and recording it.
        cancel_token: Optional cooperative cancellation flag.

    Returns:
        One outcome per started image, in input order.
    """
    results = []

    for image in batch:
        if is_cancelled(cancel_token):
            break
        results.append(process_single_image(image, process_item))

    return results
