"""Custom exceptions for Kotlin Explorer."""


class ExplorerError(Exception):
    """Base exception for all explorer errors."""


class InvalidToolPathsError(ExplorerError):
    """Raised when a build is requested with missing or invalid tool locations."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Invalid tool configuration, missing: {', '.join(missing) or 'unknown'}")


class WorkspaceError(ExplorerError):
    """Raised when the scratch directory cannot be listed, cleaned or written."""


class BuildInProgressError(ExplorerError):
    """Raised when a build is started while another one is still running."""
