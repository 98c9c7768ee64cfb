"""Project-wide custom exceptions."""

from __future__ import annotations


class FinIngestError(Exception):
    """Base exception for the statement ingestion suite."""


class ConfigurationError(FinIngestError):
    """Raised when configuration loading or validation fails."""


class ExtractionError(FinIngestError):
    """Raised when a statement cannot be decoded at all."""


class UnsupportedFormatError(ExtractionError):
    """Raised when a statement's declared format is not supported."""


class ClassificationError(FinIngestError):
    """Raised when labeled classification input cannot be evaluated."""
