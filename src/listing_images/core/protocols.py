"""Protocol definitions for dependency injection and testability."""

import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple, Union

from .models import InputImage, ProcessedImage, TransformFailure

ItemOutcome = Union[ProcessedImage, TransformFailure]
ProgressCallback = Callable[[int], None]


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log error message."""
        ...


class VisualRecognizer(Protocol):
    """Optional local image-classification capability.

    Implementations raise ``VisualRecognitionUnavailable`` when they cannot
    run (missing runtime, missing model).
    """

    def recognize(self, image: Any) -> Sequence[Tuple[str, float]]:
        """Return ``(label, confidence)`` predictions for a decoded image."""
        ...


class UsageCounter(Protocol):
    """External store for the lifetime processed-image count."""

    def increment(self, by: int = 1) -> int:
        """Add ``by`` to the counter and return the new total."""
        ...

    @property
    def value(self) -> int:
        """Current total."""
        ...


class CancellationToken:
    """Cooperative cancellation flag checked between items."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class TransformService(ABC):
    """Abstract per-image transform."""

    @abstractmethod
    def transform(
        self,
        image: InputImage,
        keyword: str,
        force_square: Optional[bool] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ItemOutcome:
        """Transform a single image."""
        ...


# Returns None when the item was skipped (removed, or already in flight).
ProcessItemFunction = Callable[[InputImage], Optional[ItemOutcome]]
ProcessBatchFunction = Callable[
    [List[InputImage], ProcessItemFunction, Optional[CancellationToken]],
    List[Optional[ItemOutcome]],
]
