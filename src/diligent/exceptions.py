"""Exception hierarchy for diligent."""


class DiligentError(Exception):
    """Base class for all diligent errors."""


class CompileError(DiligentError):
    """Project source could not be parsed or evaluated."""


class ProjectValidationError(DiligentError):
    """A compiled project record violates the project schema."""


class HelperRegistrationError(ProjectValidationError):
    """A resource helper could not be registered."""


class ProjectNotFoundError(DiligentError):
    """No project file exists for a name or path."""


class TagSpecError(DiligentError, ValueError):
    """A raw tag value is not a valid tag specification."""


class TagResolutionError(DiligentError):
    """A tag specification could not be mapped onto a live tag."""

    def __init__(self, message: str):
        if not message.lower().startswith("tag resolution failed"):
            message = f"Tag resolution failed: {message}"
        super().__init__(message)


class InvalidPidError(DiligentError, TypeError):
    """A value given as a process id is not an integer."""


class HostUnavailableError(DiligentError):
    """The session host cannot be reached."""


class HostCommandError(DiligentError):
    """A command sent to the session host failed."""


class ProjectSelectionError(DiligentError):
    """Neither or both of a project name and a file path were given."""
