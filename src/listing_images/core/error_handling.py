# src/listing_images/core/error_handling.py

import functools
import logging
from collections import Counter

from PIL import Image, UnidentifiedImageError as PILUnidentifiedImageError

from .exceptions import DecodeError, EncodeError, ListingImagesError
from .models import TransformFailure


def with_error_handling(func):
    """
    A decorator to wrap functions with standardized error handling.

    Errors already expressed in the pipeline's own hierarchy pass through.
    Pillow identification failures become DecodeError; any other failure
    inside an ``encode*`` function becomes EncodeError.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except ListingImagesError as e:
            logger.error(f"Error in '{func.__name__}': {e}")
            raise
        except Exception as e:
            logger.error(
                f"Error in '{func.__name__}': {e}",
                exc_info=True
            )
            if isinstance(e, (PILUnidentifiedImageError, Image.DecompressionBombError)):
                raise DecodeError(f"Failed to identify image in {func.__name__}: {e}") from e
            if func.__name__.startswith('encode'):
                raise EncodeError(f"Image encoding error in {func.__name__}: {e}") from e
            raise
    return wrapper


class BatchOperationContextManager:
    """
    Context manager around one batch run that summarizes per-image failures.

    Failures are reported from inside the block with ``add_failure`` (or
    ``add_error`` for anything that is not a TransformFailure) and logged
    together on exit, grouped by failure kind.
    """
    def __init__(self, operation_name="Batch Operation"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        elif self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} failure(s): "
                f"{self._kind_summary()}."
            )
            for i, detail in enumerate(self.errors):
                self.logger.error(
                    f"  Failure {i+1}/{len(self.errors)} for '{detail['item']}' "
                    f"[{detail['kind']}]: {detail['error']}"
                )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")

        # Never suppress exceptions raised inside the block.
        return False

    def _kind_summary(self) -> str:
        counts = Counter(detail["kind"] for detail in self.errors)
        return ", ".join(f"{kind}={count}" for kind, count in sorted(counts.items()))

    def add_failure(self, failure: TransformFailure) -> None:
        """Record a per-image TransformFailure."""
        self.add_error(failure.message, failure.filename or failure.image_id, failure.kind.value)

    def add_error(self, error_message, item_identifier="Unknown item", kind="unexpected"):
        """
        Report an error for a specific item from inside the 'with' block.

        Args:
            error_message: The error message or exception.
            item_identifier: A string identifying the item that failed (e.g., file name).
            kind: Failure kind used to group the summary.
        """
        self.errors.append({"item": item_identifier, "kind": kind, "error": str(error_message)})
        self.logger.debug(f"Failure added for '{item_identifier}' in {self.operation_name}: {error_message}")
