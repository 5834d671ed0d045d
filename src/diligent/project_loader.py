"""Locate and compile a project by name or by file path."""

from pathlib import Path
from typing import Optional

from diligent.dsl import load_project_file, resolve_project_path
from diligent.exceptions import ProjectNotFoundError, ProjectSelectionError
from diligent.project import Project


def check_selection(project_name: Optional[str], file_path: Optional[str]) -> None:
    """
    Exactly one of project_name and file_path must be given.

    Raises:
        ProjectSelectionError: Neither or both were given
    """
    has_name = bool(project_name)
    has_file = bool(file_path)
    if not has_name and not has_file:
        raise ProjectSelectionError("Must provide either project name or --file option")
    if has_name and has_file:
        raise ProjectSelectionError("Cannot use both project name and --file option")


def project_path(
    project_name: Optional[str] = None,
    file_path: Optional[str] = None,
    projects_dir: Optional[Path] = None,
) -> Path:
    """
    Resolve the project file for a name or explicit path.

    Raises:
        ProjectSelectionError: Neither or both of name and file given
        ProjectNotFoundError: No such project or file
    """
    check_selection(project_name, file_path)
    if file_path:
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise ProjectNotFoundError(f"File not found: {path}")
        return path
    return resolve_project_path(project_name, projects_dir)


def load_project(
    project_name: Optional[str] = None,
    file_path: Optional[str] = None,
    projects_dir: Optional[Path] = None,
) -> Project:
    """
    Load a project from <projects_dir>/<name>.dsl or from an explicit file.

    Raises:
        ProjectSelectionError, ProjectNotFoundError: See project_path()
        CompileError, ProjectValidationError: The project file is invalid
    """
    return load_project_file(project_path(project_name, file_path, projects_dir))
