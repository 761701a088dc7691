"""Factory classes for creating configured service instances."""

import functools
import logging
from typing import Any, Optional

from .exceptions import ConfigurationError
from .logging_config import setup_logger
from .models import ProcessingConfig
from .observability import LogContext, MetricsCollector, format_message
from .protocols import LoggerProtocol, ProcessBatchFunction, VisualRecognizer
from .services import BatchOrchestrator, ImageTransformService


class LoggerAdapter:
    """Adapter to make standard logger compatible with LoggerProtocol."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        """Log debug message."""
        self._logger.debug(format_message(message, context, **kwargs))

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        """Log info message."""
        self._logger.info(format_message(message, context, **kwargs))

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        """Log warning message."""
        self._logger.warning(format_message(message, context, **kwargs))

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        """Log error message."""
        self._logger.error(format_message(message, context, **kwargs))


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[str] = None) -> LoggerProtocol:
        """Create a logger configured like the rest of the pipeline."""
        return LoggerAdapter(setup_logger(name, level))


class ProcessingPipelineFactory:
    """Factory for creating the complete processing pipeline."""

    @staticmethod
    def get_process_batch(name: str, concurrency: int = 4) -> ProcessBatchFunction:
        """Look up a concurrency strategy by name."""
        from ..processors import PROCESSORS

        try:
            _, process_batch = PROCESSORS[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown processor '{name}'. Choose from: {', '.join(PROCESSORS)}"
            ) from None

        if name == "multithread":
            return functools.partial(process_batch, max_workers=concurrency)
        if name == "asyncio":
            return functools.partial(process_batch, max_concurrency=concurrency)
        return process_batch

    @staticmethod
    def create_classifier(
        config: ProcessingConfig,
        recognizer: Optional[VisualRecognizer] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> Any:
        """Create a keyword classifier honoring the visual thresholds in config."""
        from ..classification import KeywordClassifier

        return KeywordClassifier(
            recognizer=recognizer,
            confidence_threshold=config.visual_confidence_threshold,
            max_visual_tokens=config.max_visual_tokens,
            logger=logger,
        )

    @staticmethod
    def create_orchestrator(
        config: ProcessingConfig,
        process_batch: Optional[ProcessBatchFunction] = None,
        classifier: Optional[Any] = None,
        logger: Optional[LoggerProtocol] = None,
        enable_metrics: bool = True,
    ) -> BatchOrchestrator:
        """Create a fully configured batch orchestrator."""

        # Create default dependencies if not provided
        if logger is None:
            logger = LoggerFactory.create_logger(
                "listing-images", "DEBUG" if config.debug else None
            )
        if process_batch is None:
            process_batch = ProcessingPipelineFactory.get_process_batch(
                "serial", config.concurrency
            )
        if classifier is None and config.auto_keyword:
            classifier = ProcessingPipelineFactory.create_classifier(config, logger=logger)

        return BatchOrchestrator(
            config=config,
            transform_service=ImageTransformService(config, logger),
            process_batch=process_batch,
            classifier=classifier,
            logger=logger,
            metrics_collector=MetricsCollector() if enable_metrics else None,
        )
