"""Compiled project model.

Projects are only built by the compiler and are read-only afterwards: the
dataclasses are frozen and every mapping is wrapped in a MappingProxyType.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from diligent.tag_spec import DEFAULT_TAG, TagSpec, describe


@dataclass(frozen=True)
class ResourceSpec:
    type: str
    cmd: str
    dir: Optional[str] = None
    tag: TagSpec = DEFAULT_TAG
    reuse: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "cmd": self.cmd,
            "dir": self.dir,
            "tag": self.tag.raw,
            "tag_description": describe(self.tag),
            "reuse": self.reuse,
        }


@dataclass(frozen=True)
class Hooks:
    start: Optional[str] = None
    stop: Optional[str] = None


def _frozen(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Project:
    name: str
    resources: Mapping[str, ResourceSpec] = field(default_factory=dict)
    hooks: Optional[Hooks] = None
    layouts: Mapping[str, Mapping[str, TagSpec]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "resources", _frozen(self.resources))
        object.__setattr__(
            self,
            "layouts",
            MappingProxyType({name: _frozen(tags) for name, tags in (self.layouts or {}).items()}),
        )

    @property
    def resource_names(self):
        return sorted(self.resources)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "resources": {name: self.resources[name].to_dict() for name in self.resource_names},
        }
        if self.hooks is not None:
            data["hooks"] = {k: v for k, v in (("start", self.hooks.start), ("stop", self.hooks.stop)) if v}
        if self.layouts:
            data["layouts"] = {
                name: {res: spec.raw for res, spec in tags.items()}
                for name, tags in self.layouts.items()
            }
        return data
