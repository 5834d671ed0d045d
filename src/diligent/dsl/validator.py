"""Schema validation for evaluated project records.

Checks the top-level shape (name, resources, hooks, layouts) and delegates
each resource to the helper registered for its type.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from diligent import tag_spec
from diligent.exceptions import ProjectValidationError

from .helpers import HelperRegistry, default_registry, type_name

VALID_HOOKS = ("start", "stop")


def validate_hooks(hooks: Any) -> None:
    if not isinstance(hooks, Mapping):
        raise ProjectValidationError(f"hooks must be a table, got {type_name(hooks)}")

    for hook_name in hooks:
        if hook_name not in VALID_HOOKS:
            raise ProjectValidationError(
                f"unknown hook type: {hook_name} (valid: {', '.join(VALID_HOOKS)})"
            )

    for hook_name in VALID_HOOKS:
        if hook_name not in hooks:
            continue
        command = hooks[hook_name]
        if not isinstance(command, str):
            raise ProjectValidationError(f"hooks.{hook_name} must be a string")
        if not command.strip():
            raise ProjectValidationError(f"hooks.{hook_name} cannot be empty")


def validate_layouts(layouts: Any) -> None:
    """
    Layouts map a layout name to {resource name: tag value}.

    Raises:
        ProjectValidationError: On the first schema violation
    """
    if not isinstance(layouts, Mapping):
        raise ProjectValidationError(f"layouts must be a table, got {type_name(layouts)}")
    if not layouts:
        raise ProjectValidationError("at least one layout is required if layouts table is present")

    for layout_name, mapping in layouts.items():
        if not isinstance(layout_name, str) or not layout_name:
            raise ProjectValidationError("layout names must be non-empty strings")
        if not isinstance(mapping, Mapping):
            raise ProjectValidationError(f"layout '{layout_name}' must be a table")
        for resource_name, raw_tag in mapping.items():
            ok, error = tag_spec.validate(raw_tag)
            if not ok:
                raise ProjectValidationError(
                    f"layout '{layout_name}': resource '{resource_name}': "
                    f"invalid tag specification: {error}"
                )


def validate_project(raw: Any, registry: Optional[HelperRegistry] = None) -> None:
    """
    Validate an evaluated project record.

    Args:
        raw: Value returned by the project file
        registry: Helper registry (defaults to the built-in helpers)

    Raises:
        ProjectValidationError: On the first schema violation
    """
    registry = registry or default_registry()

    if not isinstance(raw, Mapping):
        raise ProjectValidationError(f"project must be a table, got {type_name(raw)}")

    name = raw.get("name")
    if name is None:
        raise ProjectValidationError("name field is required")
    if not isinstance(name, str):
        raise ProjectValidationError("name must be a string")
    if not name.strip():
        raise ProjectValidationError("name cannot be empty")

    resources = raw.get("resources")
    if resources is None:
        raise ProjectValidationError("resources field is required")
    if not isinstance(resources, Mapping):
        raise ProjectValidationError("resources must be a table")
    if not resources:
        raise ProjectValidationError("at least one resource is required")

    for resource_name in sorted(resources, key=str):
        if not isinstance(resource_name, str) or not resource_name:
            raise ProjectValidationError(f"resource names must be non-empty strings, got {resource_name!r}")
        ok, error = registry.validate_resource(resources[resource_name])
        if not ok:
            raise ProjectValidationError(f"resource '{resource_name}': {error}")

    if raw.get("hooks") is not None:
        validate_hooks(raw["hooks"])

    if raw.get("layouts") is not None:
        validate_layouts(raw["layouts"])


@dataclass
class ResourceSummary:
    name: str
    type: Optional[str]
    valid: bool
    error: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "valid": self.valid,
            "error": self.error,
            "description": self.description,
        }


@dataclass
class ValidationSummary:
    """Per-resource validation report used by `workon validate`."""

    project_name: Optional[str]
    resources: List[ResourceSummary] = field(default_factory=list)
    has_hooks: bool = False
    has_layouts: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def resource_count(self) -> int:
        return len(self.resources)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "resource_count": self.resource_count,
            "resources": [r.to_dict() for r in self.resources],
            "has_hooks": self.has_hooks,
            "has_layouts": self.has_layouts,
            "valid": self.valid,
            "errors": list(self.errors),
        }


def validation_summary(raw: Any, registry: Optional[HelperRegistry] = None) -> ValidationSummary:
    """
    Validate a project record and collect every problem instead of stopping at the first.
    """
    registry = registry or default_registry()

    if not isinstance(raw, Mapping):
        return ValidationSummary(
            project_name=None,
            errors=[f"project must be a table, got {type_name(raw)}"],
        )

    name = raw.get("name")
    summary = ValidationSummary(
        project_name=name if isinstance(name, str) else None,
        has_hooks=raw.get("hooks") is not None,
        has_layouts=raw.get("layouts") is not None,
    )

    resources = raw.get("resources")
    if isinstance(resources, Mapping):
        for resource_name in sorted(resources, key=str):
            spec = resources[resource_name]
            ok, error = registry.validate_resource(spec)
            summary.resources.append(ResourceSummary(
                name=str(resource_name),
                type=spec.get("type") if isinstance(spec, Mapping) else None,
                valid=ok,
                error=error,
                description=registry.describe_resource(spec) if ok else None,
            ))
            if not ok:
                summary.errors.append(f"resource '{resource_name}': {error}")

    try:
        validate_project(raw, registry)
    except ProjectValidationError as e:
        message = str(e)
        if message not in summary.errors:
            summary.errors.insert(0, message)

    return summary
