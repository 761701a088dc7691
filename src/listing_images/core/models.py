"""Shared data models for the listing images pipeline."""

import time
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

KIB = 1024

DEFAULT_TOKEN = "product"

# Tokens that describe a listing without naming the product.
GENERIC_TOKENS = frozenset(
    {DEFAULT_TOKEN, "all-season", "mini", "small", "medium", "large", "xlarge"}
)


class QualityStep(BaseModel):
    """One rung of the adaptive quality policy.

    The encoder stops at the first step whose output is no larger than
    ``max_bytes``; ``None`` accepts any size.
    """

    model_config = ConfigDict(frozen=True)

    quality: float = Field(gt=0, le=1)
    max_bytes: Optional[int] = Field(default=None, gt=0)


def default_quality_steps() -> List[QualityStep]:
    return [
        QualityStep(quality=0.78, max_bytes=200 * KIB),
        QualityStep(quality=0.60),
    ]


class ProcessingConfig(BaseModel):
    """Configuration for a batch."""

    keyword: str = ""
    force_square: bool = False
    auto_keyword: bool = False
    max_files: int = Field(default=10, ge=1)
    quality_steps: List[QualityStep] = Field(default_factory=default_quality_steps)
    visual_confidence_threshold: float = Field(default=0.30, ge=0, le=1)
    max_visual_tokens: int = Field(default=4, ge=0)
    concurrency: int = Field(default=4, ge=1)
    debug: bool = False

    @field_validator("quality_steps")
    @classmethod
    def _at_least_one_step(cls, value: List[QualityStep]) -> List[QualityStep]:
        if not value:
            raise ValueError("quality_steps must contain at least one step")
        return value


class ItemStatus(str, Enum):
    """Per-image processing state."""

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a single image was skipped."""

    DECODE_ERROR = "decode_error"
    ENCODE_ERROR = "encode_error"
    EMPTY_KEYWORD = "empty_keyword"
    UNEXPECTED = "unexpected"


class SourceFile(BaseModel):
    """A file offered to the batch, before acceptance."""

    filename: str
    data: bytes
    content_type: str
    last_modified: Optional[float] = None


class InputImage(BaseModel):
    """An image accepted into the batch."""

    id: str
    filename: str
    content_type: str
    data: bytes
    sequence_index: int = Field(ge=1)
    keyword: Optional[str] = None
    force_square: Optional[bool] = None
    status: ItemStatus = ItemStatus.PENDING
    progress: int = 0
    error: str = ""
    failure_kind: Optional[FailureKind] = None

    @classmethod
    def from_source(cls, source: SourceFile, sequence_index: int) -> "InputImage":
        """Accept a source file, deriving an id that survives duplicate names."""
        timestamp = int((source.last_modified or time.time()) * 1000)
        salt = uuid.uuid4().hex[:8]
        return cls(
            id=f"{source.filename}-{len(source.data)}-{timestamp}-{salt}",
            filename=source.filename,
            content_type=source.content_type,
            data=source.data,
            sequence_index=sequence_index,
        )

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class ProcessedImage(BaseModel):
    """Result of successfully transforming a single image."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    original_name: str
    output_name: str
    content_type: str
    data: bytes
    size_bytes: int
    original_size_bytes: int
    size_kb: float
    original_size_kb: float
    saved_percent: float = Field(ge=0)
    width: int
    height: int
    used_original: bool = False
    quality: Optional[float] = None
    export_handle: Optional[Any] = Field(default=None, exclude=True, repr=False)

    def release(self) -> None:
        """Release the transient export handle, if any."""
        if self.export_handle is not None:
            self.export_handle.release()


class TransformFailure(BaseModel):
    """A per-image failure; never aborts the batch."""

    image_id: str
    filename: str = ""
    kind: FailureKind
    message: str = ""


class ClassificationResult(BaseModel):
    """Ranked keyword tokens derived for one image."""

    tokens: List[str] = Field(min_length=1)
    visual_tokens: List[str] = Field(default_factory=list)
    filename_tokens: List[str] = Field(default_factory=list)
    cleaned_name: str = ""

    @property
    def primary(self) -> str:
        """First non-generic token, or the first token if all are generic."""
        for token in self.tokens:
            if token not in GENERIC_TOKENS:
                return token
        return self.tokens[0] if self.tokens else DEFAULT_TOKEN


class IntakeReport(BaseModel):
    """Outcome of one submission to the batch."""

    accepted: List[InputImage] = Field(default_factory=list)
    unsupported: List[str] = Field(default_factory=list)
    over_capacity: List[str] = Field(default_factory=list)
    unsupported_type: bool = False
    capacity_reached: bool = False


class BatchReport(BaseModel):
    """Summary of one batch run."""

    results: List[ProcessedImage] = Field(default_factory=list)
    failures: List[TransformFailure] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    cancelled: bool = False
    processing_time: float = 0.0
    metrics: Dict[str, Any] = Field(default_factory=dict)

    @property
    def completed_count(self) -> int:
        return len(self.results)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def message(self) -> str:
        return "completed" if self.results else "failed"
