"""Batch responses for `workon start`.

One tagged union with three shapes, chosen when the response is built:

- SuccessResponse: every resource spawned
- SimpleErrorResponse: the batch could not start at all
- EnhancedErrorResponse: some or all resources failed; carries per-resource errors
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from diligent.error_reporting import ErrorReport

PHASE_TAG_RESOLUTION = "tag_resolution"
PHASE_SPAWNING = "spawning"

_PHASE_ORDER = (PHASE_TAG_RESOLUTION, PHASE_SPAWNING)


@dataclass(frozen=True)
class SpawnedResource:
    name: str
    pid: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "pid": self.pid}


@dataclass(frozen=True)
class ResourceError:
    """A failed resource, tagged with the pipeline phase it failed in."""

    phase: str
    resource_id: str
    message: str
    report: Optional[ErrorReport] = None

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"message": self.message}
        if self.report is not None:
            error.update({
                "error_type": self.report.error_type.value,
                "user_message": self.report.user_message,
                "suggestions": list(self.report.suggestions),
            })
        return {"phase": self.phase, "resource_id": self.resource_id, "error": error}

    def format(self) -> str:
        if self.report is None:
            return f"  ✗ {self.resource_id}: {self.message}"
        lines = [f"  ✗ {self.resource_id}: {self.report.user_message}"]
        if self.report.original_message and self.report.original_message not in self.report.user_message:
            lines.append(f"    Details: {self.report.original_message}")
        if self.report.suggestions:
            lines.append("    Suggestions:")
            lines.extend(f"      • {s}" for s in self.report.suggestions)
        return "\n".join(lines)


def _format_spawned(resources: List[SpawnedResource]) -> List[str]:
    return [f"  ✓ {r.name} (PID: {r.pid})" for r in resources]


@dataclass(frozen=True)
class SuccessResponse:
    project_name: str
    spawned_resources: List[SpawnedResource] = field(default_factory=list)

    status = "success"
    is_success = True

    @property
    def total_spawned(self) -> int:
        return len(self.spawned_resources)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "project_name": self.project_name,
            "total_spawned": self.total_spawned,
            "spawned_resources": [r.to_dict() for r in self.spawned_resources],
        }

    def format(self) -> str:
        lines = [
            f"✓ Started {self.project_name} successfully",
            f"  Spawned {self.total_spawned} resources",
        ]
        lines.extend(_format_spawned(self.spawned_resources))
        return "\n".join(lines)


@dataclass(frozen=True)
class SimpleErrorResponse:
    project_name: str
    error: str
    failed_resource: Optional[str] = None

    status = "error"
    is_success = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "project_name": self.project_name,
            "error": self.error,
            "failed_resource": self.failed_resource,
        }

    def format(self) -> str:
        lines = [f"✗ Failed to start project: {self.project_name or 'unknown project'}"]
        lines.append(f"  Error: {self.error}")
        if self.failed_resource:
            lines.append(f"  Failed resource: {self.failed_resource}")
        return "\n".join(lines)


@dataclass(frozen=True)
class EnhancedErrorResponse:
    project_name: str
    errors: List[ResourceError]
    spawned_resources: List[SpawnedResource] = field(default_factory=list)

    status = "error"
    is_success = False

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def success_count(self) -> int:
        return len(self.spawned_resources)

    @property
    def total_attempted(self) -> int:
        return self.error_count + self.success_count

    @property
    def error_type(self) -> str:
        return "PARTIAL_FAILURE" if self.spawned_resources else "COMPLETE_FAILURE"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status,
            "project_name": self.project_name,
            "error_type": self.error_type,
            "errors": [e.to_dict() for e in self.errors],
            "metadata": {
                "total_attempted": self.total_attempted,
                "success_count": self.success_count,
                "error_count": self.error_count,
            },
        }
        if self.spawned_resources:
            data["partial_success"] = {
                "spawned_resources": [r.to_dict() for r in self.spawned_resources],
                "total_spawned": self.success_count,
            }
        return data

    def format(self) -> str:
        header = f"✗ Failed to start project: {self.project_name} ({self.error_count} errors"
        if self.success_count:
            header += f", {self.success_count} success"
        sections = [header + ")"]

        phases = sorted(
            {e.phase for e in self.errors},
            key=lambda p: (_PHASE_ORDER.index(p) if p in _PHASE_ORDER else len(_PHASE_ORDER), p),
        )
        for phase in phases:
            lines = [f"{phase.replace('_', ' ').upper()} ERRORS:"]
            lines.extend(e.format() for e in self.errors if e.phase == phase)
            sections.append("\n".join(lines))

        if self.spawned_resources:
            sections.append("\n".join(["PARTIAL SUCCESS:"] + _format_spawned(self.spawned_resources)))

        return "\n\n".join(sections)


BatchResponse = Union[SuccessResponse, SimpleErrorResponse, EnhancedErrorResponse]


def build_response(
    project_name: str,
    spawned: List[SpawnedResource],
    errors: List[ResourceError],
) -> BatchResponse:
    """Success when nothing failed, otherwise an enhanced error response."""
    if not errors:
        return SuccessResponse(project_name, list(spawned))
    return EnhancedErrorResponse(project_name, list(errors), list(spawned))
