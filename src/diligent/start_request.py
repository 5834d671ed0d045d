"""Project -> ordered start request."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from diligent.project import Project
from diligent.tag_spec import TagSpec


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    command: str
    tag_spec: TagSpec
    working_dir: Optional[str] = None
    reuse: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "command": self.command,
            "tag_spec": self.tag_spec.raw,
            "working_dir": self.working_dir,
            "reuse": self.reuse,
        }


@dataclass(frozen=True)
class StartRequest:
    project_name: str
    resources: List[ResourceDescriptor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "resources": [r.to_dict() for r in self.resources],
        }


def build_start_request(project: Project) -> StartRequest:
    """
    Project the compiled model into descriptors sorted by resource name.

    Only 'app' resources are launchable; other types are skipped.
    """
    descriptors = [
        ResourceDescriptor(
            name=name,
            command=spec.cmd,
            tag_spec=spec.tag,
            working_dir=spec.dir,
            reuse=spec.reuse,
        )
        for name, spec in sorted(project.resources.items())
        if spec.type == "app"
    ]
    return StartRequest(project_name=project.name, resources=descriptors)
