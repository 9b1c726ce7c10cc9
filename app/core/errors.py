# File: app/core/errors.py

# Local read/write failures are reported with the builtin OSError (IOError).


class PipelineError(Exception):
    """Base class for every error raised by the pipeline itself."""


class FormatError(PipelineError):
    """Malformed or unexpected audio framing."""


class PublishError(PipelineError):
    """Destination store unreachable or write rejected."""

    def __init__(self, blob_name: str, message: str):
        super().__init__(f"Failed to publish {blob_name}: {message}")
        self.blob_name = blob_name


class RecognitionError(PipelineError):
    """Transport or protocol failure talking to the recognition service."""


class PersistenceError(PipelineError):
    """Document store unreachable or write rejected."""


class ConfigurationError(PipelineError):
    """Missing or invalid required setting. Fatal at startup."""
