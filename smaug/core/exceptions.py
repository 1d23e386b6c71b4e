"""Custom exceptions for the Smaug bookmark archiver.

This module defines the exception hierarchy used throughout the archiver.
Everything that can go wrong while handling a single bookmark inherits from
ProcessorError, so the batch loop can log it and move on to the next one.
Only ConfigurationError is fatal, and it is raised before processing starts.
"""


class ProcessorError(Exception):
    """Base class for per-bookmark errors.

    None of these stop a batch run. The ``retryable`` flag tells the caller
    whether running the same bookmark again could plausibly succeed.
    """

    retryable: bool = False

    def __init__(self, message: str, *, retryable: bool | None = None):
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class ReasoningTimeoutError(ProcessorError):
    """The reasoning provider did not answer within the timeout.

    Recovered by falling back to locally generated metadata.
    """

    retryable: bool = True


class TransportError(ProcessorError):
    """The reasoning call failed at the transport or HTTP status level."""

    retryable: bool = True


class ParseError(ProcessorError):
    """Content could not be parsed into the expected structure.

    Raised for reasoning output that is not a JSON object and for bookmark
    exports that are not valid JSON.
    """

    retryable: bool = False


class ValidationError(ParseError):
    """Parsed reasoning output is missing a field or has the wrong type.

    Attributes:
        field: Name of the first offending field (title, summary, category, tags).
    """

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f'Missing or invalid "{field}" field')


class InvalidSlugError(ProcessorError):
    """The slug computed for a bookmark is empty or not a string."""


class InvalidPathError(ProcessorError):
    """The knowledge file path computed for a bookmark is malformed."""


class ProcessingError(ProcessorError):
    """Any other failure while handling one bookmark.

    Attributes:
        bookmark_id: ID of the bookmark that failed.
    """

    def __init__(self, message: str, *, bookmark_id: str | None = None):
        super().__init__(message)
        self.bookmark_id = bookmark_id


class ConfigurationError(Exception):
    """Invalid or missing configuration.

    This is NOT a ProcessorError - configuration problems are fatal at
    startup and must be fixed before the archiver runs.
    """

    pass
