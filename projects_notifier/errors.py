"""
Error taxonomy for the projects notifier.

- ConfigError: malformed monitor file or unknown source identifier. Fatal.
- FetchError / ParseError: one source failed. The source is disabled until
  its configuration changes; other sources keep running.
- DeliveryError: a notification could not be delivered. Logged only.
- ControlChannelError: the command mailbox could not be polled. Logged,
  polled again on the next interval.
"""


class ProjectsNotifierError(Exception):
    """Base exception for the projects notifier."""


class ConfigError(ProjectsNotifierError):
    """Raised when the monitor configuration cannot be used."""


class SourceError(ProjectsNotifierError):
    """Base class for failures isolated to a single source."""

    kind = "Source"

    def __init__(self, message: str, identifier: str = "", endpoint: str = ""):
        super().__init__(message)
        self.identifier = identifier
        self.endpoint = endpoint


class FetchError(SourceError):
    """Raised when a source document cannot be retrieved."""

    kind = "Network"


class ParseError(SourceError):
    """Raised when a fetched document no longer has the expected shape."""

    kind = "Parse"

    def __init__(
        self,
        message: str,
        identifier: str = "",
        endpoint: str = "",
        document: str | None = None,
    ):
        super().__init__(message, identifier=identifier, endpoint=endpoint)
        self.document = document


class DeliveryError(ProjectsNotifierError):
    """Raised by a notification sink when delivery fails."""


class ControlChannelError(ProjectsNotifierError):
    """Raised when the command channel cannot be polled."""
