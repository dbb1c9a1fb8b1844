"""Error hierarchy for workspace preparation.

Every failure raised out of the stage and release pipelines is a
WorkspaceError. Collaborator failures are wrapped in CollaboratorError,
tagged with the name of the step that failed and chained to the original
exception.
"""

from typing import Optional


class WorkspaceError(Exception):
    """Base class for workspace preparation failures."""

    pass


class ConfigurationError(WorkspaceError):
    """Raised when required configuration (e.g. an env variable) is missing."""

    def __init__(self, message: str, env_key: Optional[str] = None):
        self.env_key = env_key
        super().__init__(message)


class CollaboratorError(WorkspaceError):
    """Raised when a collaborator call fails during a pipeline step.

    Attributes:
        step: Name of the pipeline step that failed (e.g. "clone").
        cause: The original exception raised by the collaborator.
    """

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"{step}: {cause}")


class WorkspaceEnvironmentError(WorkspaceError):
    """Raised when the ephemeral download directory cannot be created or removed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)
