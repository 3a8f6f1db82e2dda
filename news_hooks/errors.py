"""
Exceptions raised by the News Hooks pipeline.

ConfigError, StorageUnavailableError and ClassifierUnavailableError end a run
as FAILED. StructuredOutputError and DegenerateOutputError are recovered by
the classifier as zero results.
"""


class NewsHooksError(Exception):
    """Base class for pipeline errors."""


class ConfigError(NewsHooksError):
    """Missing credential or unusable configuration."""


class StorageUnavailableError(NewsHooksError):
    """The database cannot be reached."""


class ClassifierUnavailableError(NewsHooksError):
    """The LLM endpoint failed to answer."""


class StructuredOutputError(NewsHooksError, ValueError):
    """No JSON object could be extracted from model output."""


class DegenerateOutputError(NewsHooksError):
    """Model output contains placeholder content instead of real articles."""
