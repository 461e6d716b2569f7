from __future__ import annotations

from gmail_cleaner.models import CleanupMode


class CleanerError(Exception):
    """Base class for every error that aborts a cleanup run."""


class ValidationError(CleanerError, ValueError):
    """Bad flag value or flag combination, raised before any network I/O."""


class ConfigError(CleanerError):
    """Missing configuration directory or OAuth client credentials."""


class OverCapError(CleanerError):
    def __init__(self, estimate: int, cap: int):
        self.estimate = estimate
        self.cap = cap
        super().__init__(
            f"too many results! estimated result count {estimate} is above cap {cap}"
        )


class SearchError(CleanerError):
    pass


class FetchError(CleanerError):
    def __init__(self, thread_id: str, cause: BaseException):
        self.thread_id = thread_id
        super().__init__(f"unable to fetch thread {thread_id}: {cause}")


class ActionError(CleanerError):
    """A trash/delete call failed; `acted` is how many threads were done before it."""

    def __init__(
        self,
        *,
        thread_id: str,
        subject: str,
        acted: int,
        mode: CleanupMode,
        cause: BaseException,
    ):
        self.thread_id = thread_id
        self.subject = subject
        self.acted = acted
        self.mode = mode
        verb = "trash" if mode == CleanupMode.TRASH else "delete"
        super().__init__(f'unable to {verb} thread "{subject}": {cause}')
