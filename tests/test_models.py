"""Tests for the pydantic data models."""

import pytest
from pydantic import ValidationError

from listing_images.core.models import (
    BatchReport,
    ClassificationResult,
    FailureKind,
    InputImage,
    ItemStatus,
    ProcessedImage,
    ProcessingConfig,
    QualityStep,
    SourceFile,
    TransformFailure,
)


class TestProcessingConfig:
    """Tests for ProcessingConfig."""

    def test_defaults(self):
        config = ProcessingConfig()
        assert config.keyword == ""
        assert config.force_square is False
        assert config.auto_keyword is False
        assert config.max_files == 10
        assert config.visual_confidence_threshold == 0.30
        assert config.max_visual_tokens == 4
        assert [(s.quality, s.max_bytes) for s in config.quality_steps] == [
            (0.78, 200 * 1024),
            (0.60, None),
        ]

    def test_quality_steps_are_independent_per_config(self):
        first = ProcessingConfig()
        second = ProcessingConfig()
        first.quality_steps.append(QualityStep(quality=0.5))
        assert len(second.quality_steps) == 2

    def test_empty_quality_steps_rejected(self):
        with pytest.raises(ValidationError):
            ProcessingConfig(quality_steps=[])

    @pytest.mark.parametrize("quality", [0, -0.1, 1.5])
    def test_quality_step_bounds(self, quality):
        with pytest.raises(ValidationError):
            QualityStep(quality=quality)

    def test_max_files_must_be_positive(self):
        with pytest.raises(ValidationError):
            ProcessingConfig(max_files=0)


class TestInputImage:
    """Tests for InputImage."""

    def test_from_source(self):
        source = SourceFile(
            filename="a.jpg", data=b"1234", content_type="image/jpeg", last_modified=1.5
        )
        image = InputImage.from_source(source, 3)

        assert image.filename == "a.jpg"
        assert image.sequence_index == 3
        assert image.status == ItemStatus.PENDING
        assert image.size_bytes == 4
        assert image.id.startswith("a.jpg-4-1500-")

    def test_duplicate_sources_get_distinct_ids(self):
        source = SourceFile(filename="a.jpg", data=b"x", content_type="image/jpeg")
        ids = {InputImage.from_source(source, i).id for i in range(1, 6)}
        assert len(ids) == 5

    def test_sequence_index_is_one_based(self):
        source = SourceFile(filename="a.jpg", data=b"x", content_type="image/jpeg")
        with pytest.raises(ValidationError):
            InputImage.from_source(source, 0)


class TestClassificationResult:
    """Tests for ClassificationResult."""

    def test_primary_skips_generic_tokens(self):
        result = ClassificationResult(tokens=["mini", "all-season", "dress", "red"])
        assert result.primary == "dress"

    def test_primary_falls_back_to_first_token(self):
        result = ClassificationResult(tokens=["small", "large"])
        assert result.primary == "small"

    def test_tokens_never_empty(self):
        with pytest.raises(ValidationError):
            ClassificationResult(tokens=[])


class TestBatchReport:
    """Tests for BatchReport."""

    def _result(self) -> ProcessedImage:
        return ProcessedImage(
            id="x",
            original_name="x.jpg",
            output_name="dress-01.jpg",
            content_type="image/jpeg",
            data=b"abc",
            size_bytes=3,
            original_size_bytes=6,
            size_kb=0.0,
            original_size_kb=0.0,
            saved_percent=0.0,
            width=1,
            height=1,
        )

    def test_message_completed_when_any_success(self):
        failure = TransformFailure(image_id="y", kind=FailureKind.DECODE_ERROR)
        report = BatchReport(results=[self._result()], failures=[failure])
        assert report.message == "completed"
        assert report.completed_count == 1
        assert report.failed_count == 1

    def test_message_failed_when_nothing_succeeded(self):
        failure = TransformFailure(image_id="y", kind=FailureKind.DECODE_ERROR)
        assert BatchReport(failures=[failure]).message == "failed"
        assert BatchReport().message == "failed"

    def test_export_handle_not_serialized(self):
        result = self._result()
        result.export_handle = object()
        assert "export_handle" not in result.model_dump()
