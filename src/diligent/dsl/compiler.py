"""Compile project files into immutable Project models.

Pipeline: restricted evaluation -> schema validation -> helper create().
Any failure raises; a partially built project is never returned.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from diligent import tag_spec
from diligent.exceptions import CompileError, ProjectNotFoundError
from diligent.project import Hooks, Project

from .evaluator import Evaluator
from .helpers import HelperRegistry, default_registry, type_name
from .validator import validate_project

logger = logging.getLogger(__name__)

PROJECT_SUFFIX = ".dsl"


def evaluate_source(
    source: Union[bytes, str],
    origin: str = "<project>",
    registry: Optional[HelperRegistry] = None,
) -> Any:
    """
    Run project source in the restricted evaluator and return the raw record.

    Raises:
        CompileError: Undecodable source, syntax error, disallowed construct or runtime error
    """
    registry = registry or default_registry()
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CompileError(f"syntax error: {origin}: source is not valid UTF-8 ({e})")

    return Evaluator(registry.factories(), origin).evaluate(source)


def build_project(raw: Mapping[str, Any], registry: HelperRegistry) -> Project:
    """Turn a validated raw record into a Project."""
    resources = {
        name: registry.create_resource(spec)
        for name, spec in raw["resources"].items()
    }

    hooks = None
    if raw.get("hooks") is not None:
        hooks = Hooks(start=raw["hooks"].get("start"), stop=raw["hooks"].get("stop"))

    layouts = {
        layout_name: {res: tag_spec.parse(raw_tag) for res, raw_tag in mapping.items()}
        for layout_name, mapping in (raw.get("layouts") or {}).items()
    }

    return Project(name=raw["name"], resources=resources, hooks=hooks, layouts=layouts)


def compile_project(
    source: Union[bytes, str],
    origin: str = "<project>",
    registry: Optional[HelperRegistry] = None,
) -> Project:
    """
    Compile project source into a Project.

    Args:
        source: Project file contents
        origin: Name used in error messages (usually the file path)
        registry: Helper registry (defaults to the built-in helpers)

    Returns:
        Immutable Project

    Raises:
        CompileError: Source could not be evaluated or did not return a table
        ProjectValidationError: The returned table violates the project schema
    """
    registry = registry or default_registry()
    raw = evaluate_source(source, origin, registry)

    if not isinstance(raw, Mapping):
        raise CompileError(f"project file must return a table, got {type_name(raw)}")

    validate_project(raw, registry)
    project = build_project(raw, registry)
    logger.debug("compiled project %r from %s (%d resources)", project.name, origin, len(project.resources))
    return project


def load_project_file(path: Union[str, Path], registry: Optional[HelperRegistry] = None) -> Project:
    """
    Read and compile a project file.

    Raises:
        ProjectNotFoundError: The file does not exist
        CompileError, ProjectValidationError: See compile_project()
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ProjectNotFoundError(f"File not found: {file_path}")

    try:
        source = file_path.read_bytes()
    except OSError as e:
        raise CompileError(f"cannot read {file_path}: {e}")

    return compile_project(source, str(file_path), registry)


def resolve_project_path(name: str, projects_dir: Optional[Path] = None) -> Path:
    """
    Map a project name to <projects_dir>/<name>.dsl.

    Raises:
        ProjectNotFoundError: Invalid name or no such file
    """
    if projects_dir is None:
        from diligent.config import get_projects_dir
        projects_dir = get_projects_dir()

    if not name or "/" in name or name.startswith("."):
        raise ProjectNotFoundError(f"Project not found: {name}")

    path = Path(projects_dir) / f"{name}{PROJECT_SUFFIX}"
    if not path.is_file():
        raise ProjectNotFoundError(f"Project not found: {name} (looked for {path})")
    return path
