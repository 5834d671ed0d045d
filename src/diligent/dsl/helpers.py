"""Resource helpers: one per resource type a project file can declare.

Each helper supplies a schema plus create/validate/describe operations and is
exposed to project files as a factory function of the same name. Adding a
resource type means writing a helper and registering it; the compiler and
validator do not change.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from diligent import tag_spec
from diligent.exceptions import HelperRegistrationError, ProjectValidationError
from diligent.project import ResourceSpec

HELPER_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")


def type_name(value: Any) -> str:
    """Name a value's type in project-file vocabulary."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "table"
    if isinstance(value, (list, tuple)):
        return "list"
    return type(value).__name__


@dataclass(frozen=True)
class HelperSchema:
    required: Tuple[str, ...]
    optional: Tuple[str, ...]
    types: Dict[str, Tuple[str, ...]]
    defaults: Dict[str, Any] = field(default_factory=dict)

    @property
    def fields(self) -> Tuple[str, ...]:
        return self.required + self.optional


class ResourceHelper(ABC):
    """Interface every resource helper implements."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Resource type name, also the factory name in project files."""
        pass

    @property
    @abstractmethod
    def schema(self) -> HelperSchema:
        pass

    @abstractmethod
    def create(self, spec: Mapping[str, Any]) -> ResourceSpec:
        """Build a ResourceSpec from an already validated raw record."""
        pass

    @abstractmethod
    def validate(self, spec: Any) -> Tuple[bool, Optional[str]]:
        pass

    @abstractmethod
    def describe(self, spec: Mapping[str, Any]) -> str:
        pass

    def factory(self, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        """
        Project-file entry point: ``app(cmd="x")`` or ``app({"cmd": "x"})``.

        Returns the raw record tagged with this helper's type; validation happens later.
        """
        if len(args) > 1:
            raise TypeError(f"{self.name}() takes at most one positional argument")
        record: Dict[str, Any] = {}
        if args:
            if not isinstance(args[0], Mapping):
                raise TypeError(f"{self.name}() expects a table, got {type_name(args[0])}")
            record.update(args[0])
        record.update(kwargs)
        record["type"] = self.name
        return record

    def check_types(self, spec: Mapping[str, Any]) -> Optional[str]:
        """Check required fields and declared field types. Returns an error or None."""
        for name in self.schema.required:
            if spec.get(name) is None:
                return f"{name} field is required"

        for name, value in spec.items():
            expected = self.schema.types.get(name)
            if expected is None or value is None:
                continue
            actual = type_name(value)
            if actual not in expected:
                return f"{name} must be {' or '.join(expected)}, got {actual}"
        return None


class AppHelper(ResourceHelper):
    """Generic application resource: a command line launched on a tag."""

    _schema = HelperSchema(
        required=("cmd",),
        optional=("dir", "tag", "reuse"),
        types={
            "cmd": ("string",),
            "dir": ("string",),
            "tag": ("number", "string"),
            "reuse": ("boolean",),
        },
        defaults={"tag": 0, "reuse": False},
    )

    @property
    def name(self) -> str:
        return "app"

    @property
    def schema(self) -> HelperSchema:
        return self._schema

    def validate(self, spec: Any) -> Tuple[bool, Optional[str]]:
        if spec is None:
            return False, "app spec is required"
        if not isinstance(spec, Mapping):
            return False, "app spec must be a table"

        error = self.check_types(spec)
        if error:
            return False, error

        if not spec["cmd"].strip():
            return False, "cmd cannot be empty"

        if spec.get("tag") is not None:
            ok, tag_error = tag_spec.validate(spec["tag"])
            if not ok:
                return False, f"invalid tag specification: {tag_error}"

        return True, None

    def create(self, spec: Mapping[str, Any]) -> ResourceSpec:
        defaults = self.schema.defaults
        raw_tag = spec.get("tag")
        return ResourceSpec(
            type=self.name,
            cmd=spec["cmd"],
            dir=spec.get("dir"),
            tag=tag_spec.parse(defaults["tag"] if raw_tag is None else raw_tag),
            reuse=bool(spec.get("reuse") or defaults["reuse"]),
        )

    def describe(self, spec: Mapping[str, Any]) -> str:
        if not isinstance(spec, Mapping) or not spec.get("cmd"):
            return "invalid app spec"

        parts = [f"app: {spec['cmd']}"]
        if spec.get("dir"):
            parts.append(f"dir: {spec['dir']}")
        if spec.get("tag") is not None:
            ok, _ = tag_spec.validate(spec["tag"])
            if ok:
                parts.append(f"tag: {tag_spec.describe(tag_spec.parse(spec['tag']))}")
        if spec.get("reuse"):
            parts.append("reuse: true")
        return ", ".join(parts)


class HelperRegistry:
    """Name-keyed set of resource helpers."""

    def __init__(self) -> None:
        self._helpers: Dict[str, ResourceHelper] = {}

    def register(self, helper: ResourceHelper) -> None:
        """
        Add a helper.

        Raises:
            HelperRegistrationError: Not a helper, bad name, or name already taken
        """
        if not isinstance(helper, ResourceHelper):
            raise HelperRegistrationError(
                f"helper must be a ResourceHelper, got {type(helper).__name__}"
            )
        name = helper.name
        if not isinstance(name, str) or not HELPER_NAME_PATTERN.fullmatch(name):
            raise HelperRegistrationError(f"invalid helper name: {name!r}")
        if name in self._helpers:
            raise HelperRegistrationError(f"helper '{name}' is already registered")
        self._helpers[name] = helper

    def get(self, name: str) -> Optional[ResourceHelper]:
        return self._helpers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def names(self) -> List[str]:
        return sorted(self._helpers)

    def factories(self) -> Dict[str, Callable[..., Dict[str, Any]]]:
        return {name: helper.factory for name, helper in self._helpers.items()}

    def validate_resource(self, spec: Any) -> Tuple[bool, Optional[str]]:
        if not isinstance(spec, Mapping):
            return False, f"resource must be a table, got {type_name(spec)}"
        resource_type = spec.get("type")
        if resource_type is None:
            return False, "resource type is required"
        helper = self._helpers.get(resource_type) if isinstance(resource_type, str) else None
        if helper is None:
            return False, f"unknown resource type: {resource_type}"
        return helper.validate(spec)

    def create_resource(self, spec: Mapping[str, Any]) -> ResourceSpec:
        ok, error = self.validate_resource(spec)
        if not ok:
            raise ProjectValidationError(error)
        return self._helpers[spec["type"]].create(spec)

    def describe_resource(self, spec: Any) -> str:
        if isinstance(spec, Mapping):
            resource_type = spec.get("type")
            helper = self._helpers.get(resource_type) if isinstance(resource_type, str) else None
            if helper is not None:
                return helper.describe(spec)
        return "invalid resource"


def default_registry() -> HelperRegistry:
    """Fresh registry with the built-in helpers."""
    registry = HelperRegistry()
    registry.register(AppHelper())
    return registry
