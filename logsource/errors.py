"""Exception types raised by logsource."""


class LogSourceError(Exception):
    """Base class for all logsource errors."""


class MalformedCheckpointError(LogSourceError):
    """
    A persisted checkpoint could not be decoded.
    
    Raised for empty content, a missing or unreadable version header, or a
    body that is not a valid position map. Recovery does not fall back to
    re-deriving starting positions; an operator has to repair or remove
    the checkpoint.
    """


class UnsupportedCheckpointVersionError(MalformedCheckpointError):
    """A checkpoint was written by a newer format version than this reader supports."""
    
    def __init__(self, version: int, max_supported_version: int):
        self.version = version
        self.max_supported_version = max_supported_version
        super().__init__(
            f"UnsupportedLogVersion: maximum supported log version is "
            f"v{max_supported_version}, but encountered v{version}. The log file "
            f"was produced by a newer version of logsource and cannot be read "
            f"by this version. Please upgrade."
        )


class UnsupportedLocalityStrategyError(LogSourceError, ValueError):
    """The configured locality strategy is not one the assignor knows."""


class IllegalStateError(LogSourceError, RuntimeError):
    """Internal state between the propose and materialize phases is inconsistent."""


class SourceStoppedError(LogSourceError, RuntimeError):
    """A phase was invoked on a source that has already been stopped."""
