"""Process exit codes for workon commands."""

from diligent.exceptions import ProjectNotFoundError

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_NOT_FOUND = 2


def exit_code_for(error: BaseException) -> int:
    """Not-found errors exit with 2; everything else with 1."""
    if isinstance(error, ProjectNotFoundError):
        return EXIT_NOT_FOUND
    return EXIT_FAILURE
