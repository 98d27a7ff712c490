class SchedulerError(Exception):
    """Base class for errors raised by the habit scheduler."""


class ValidationError(SchedulerError):
    """Malformed input: empty title, bad weekday, unparsable date or id."""


class NotFound(SchedulerError):
    """A referenced habit does not exist."""


class StorageError(SchedulerError):
    """The storage engine failed; the operation may be retried."""
