# tests/core/test_error_handling.py

import logging
from unittest import mock

import pytest
from PIL import Image, UnidentifiedImageError as PILUnidentifiedImageError

from listing_images.core.exceptions import (
    ConfigurationError,
    DecodeError,
    EncodeError,
)
from listing_images.core.models import FailureKind, TransformFailure
from listing_images.core.error_handling import (
    with_error_handling,
    BatchOperationContextManager,
)


# --- Tests for @with_error_handling decorator ---

@pytest.fixture
def mock_logger():
    """Fixture to mock the logger used by the decorator and context manager."""
    with mock.patch('logging.getLogger') as mock_get_logger:
        mock_log_instance = mock.Mock()
        mock_get_logger.return_value = mock_log_instance
        yield mock_log_instance


def test_with_error_handling_returns_value(mock_logger):
    """Successful calls pass their value through without logging."""
    @with_error_handling
    def func_ok():
        return 42

    assert func_ok() == 42
    mock_logger.error.assert_not_called()


def test_with_error_handling_logs_error(mock_logger):
    """Test that @with_error_handling logs the error with a traceback."""
    @with_error_handling
    def func_raising_error():
        raise ValueError("Original error")

    with pytest.raises(ValueError):
        func_raising_error()

    mock_logger.error.assert_called_once()
    args, kwargs = mock_logger.error.call_args
    assert kwargs.get('exc_info') is True


def test_with_error_handling_wraps_pil_error(mock_logger):
    """Pillow identification failures become DecodeError."""
    @with_error_handling
    def func_raising_pil_error():
        raise PILUnidentifiedImageError("Cannot identify image file")

    with pytest.raises(DecodeError) as excinfo:
        func_raising_pil_error()

    assert "Failed to identify image" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, PILUnidentifiedImageError)


def test_with_error_handling_wraps_decompression_bomb(mock_logger):
    """Oversized images are reported as decode failures."""
    @with_error_handling
    def func_raising_bomb():
        raise Image.DecompressionBombError("too many pixels")

    with pytest.raises(DecodeError):
        func_raising_bomb()


def test_with_error_handling_encode_functions_raise_encode_error(mock_logger):
    """Any failure inside an encode* function becomes EncodeError."""
    @with_error_handling
    def encode_something():
        raise OSError("encoder exploded")

    with pytest.raises(EncodeError) as excinfo:
        encode_something()

    assert "Image encoding error" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_with_error_handling_passes_own_errors_through(mock_logger):
    """Errors already in the pipeline hierarchy are logged and re-raised as is."""
    @with_error_handling
    def encode_with_config_problem():
        raise ConfigurationError("bad setting")

    with pytest.raises(ConfigurationError):
        encode_with_config_problem()

    mock_logger.error.assert_called_once()
    args, kwargs = mock_logger.error.call_args
    assert 'exc_info' not in kwargs


def test_with_error_handling_reraises_unmapped_exception(mock_logger):
    """Test that unmapped exceptions are re-raised by default."""
    class CustomNonMappedError(Exception):
        pass

    @with_error_handling
    def func_raising_unmapped_error():
        raise CustomNonMappedError("This one is not mapped.")

    with pytest.raises(CustomNonMappedError):
        func_raising_unmapped_error()

    args, kwargs = mock_logger.error.call_args
    assert "This one is not mapped." in args[0]


def test_with_error_handling_preserves_metadata():
    """functools.wraps keeps the wrapped function's name and docstring."""
    @with_error_handling
    def documented():
        """Docstring."""

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Docstring."


# --- Tests for BatchOperationContextManager ---

def test_batch_context_manager_success(mock_logger):
    """A clean block logs start and success."""
    with BatchOperationContextManager("Test batch") as batch:
        pass

    assert batch.errors == []
    mock_logger.info.assert_any_call("Starting Test batch.")
    mock_logger.info.assert_any_call("Test batch completed successfully.")


def test_batch_context_manager_collects_errors(mock_logger):
    """Per-item errors are collected and summarized by kind on exit."""
    with BatchOperationContextManager("Test batch") as batch:
        batch.add_failure(
            TransformFailure(
                image_id="a-1", filename="a.jpg", kind=FailureKind.DECODE_ERROR, message="decode failed"
            )
        )
        batch.add_error(ValueError("bad"), item_identifier="b.jpg")

    assert batch.errors == [
        {"item": "a.jpg", "kind": "decode_error", "error": "decode failed"},
        {"item": "b.jpg", "kind": "unexpected", "error": "bad"},
    ]
    mock_logger.warning.assert_called_once_with(
        "Test batch completed with 2 failure(s): decode_error=1, unexpected=1."
    )
    assert mock_logger.error.call_count == 2


def test_batch_context_manager_failure_without_filename(mock_logger):
    """Failures without a file name are identified by image id."""
    with BatchOperationContextManager("Test batch") as batch:
        batch.add_failure(TransformFailure(image_id="x-1", kind=FailureKind.EMPTY_KEYWORD))

    assert batch.errors[0]["item"] == "x-1"


def test_batch_context_manager_does_not_suppress(mock_logger):
    """Exceptions raised inside the block propagate."""
    with pytest.raises(RuntimeError):
        with BatchOperationContextManager("Test batch"):
            raise RuntimeError("unexpected")

    mock_logger.error.assert_called_once()


def test_batch_context_manager_default_logger_name():
    """The manager logs under its own module path."""
    manager = BatchOperationContextManager()
    assert isinstance(manager.logger, logging.Logger)
    assert manager.logger.name.endswith("BatchOperationContextManager")
