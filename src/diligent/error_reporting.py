"""Spawn error classification and batch reporting.

Host error text is mapped onto a closed ErrorType taxonomy, each type carries
a fixed list of suggestions, and a batch of spawn outcomes can be summarized
into counts, per-type tallies and recommendations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple

if TYPE_CHECKING:
    from diligent.spawn.spawner import SpawnOutcome


class ErrorType(Enum):
    """Closed taxonomy of spawn failures."""

    COMMAND_NOT_FOUND = "COMMAND_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_COMMAND = "INVALID_COMMAND"
    TIMEOUT = "TIMEOUT"
    DEPENDENCY_FAILED = "DEPENDENCY_FAILED"
    TAG_RESOLUTION_FAILED = "TAG_RESOLUTION_FAILED"
    UNKNOWN = "UNKNOWN"


# (error type, substrings, user message) checked in order; first match wins
_CLASSIFICATION_RULES: Tuple[Tuple[ErrorType, Tuple[str, ...], str], ...] = (
    (ErrorType.COMMAND_NOT_FOUND, ("no such file or directory",),
     "Command not found in PATH"),
    (ErrorType.PERMISSION_DENIED, ("permission denied",),
     "Insufficient permissions to execute"),
    (ErrorType.INVALID_COMMAND, ("no command to execute",),
     "Empty or invalid command"),
    (ErrorType.TIMEOUT, ("timeout",),
     "Operation timed out"),
    (ErrorType.TAG_RESOLUTION_FAILED, ("tag resolution failed",),
     "Could not resolve tag specification"),
)

_GENERIC_SUGGESTIONS = [
    "Check application logs for more details",
    "Try spawning the application manually",
    "Report this issue if problem persists",
]


def classify_error(message: Any) -> Tuple[ErrorType, str]:
    """
    Classify host error text.

    Args:
        message: Error text from the host (non-strings classify as UNKNOWN)

    Returns:
        (error type, short user-facing message)
    """
    if not isinstance(message, str):
        return ErrorType.UNKNOWN, "No error message provided"

    lowered = message.lower()
    if not lowered.strip():
        return ErrorType.INVALID_COMMAND, "Empty or invalid command"

    for error_type, patterns, user_message in _CLASSIFICATION_RULES:
        if any(pattern in lowered for pattern in patterns):
            return error_type, user_message

    return ErrorType.UNKNOWN, f"Unclassified error: {message}"


def get_error_suggestions(error_type: ErrorType, app_name: str = "") -> List[str]:
    if error_type is ErrorType.COMMAND_NOT_FOUND:
        return [
            f"Check if '{app_name}' is installed",
            "Verify the command name is spelled correctly",
            "Add the application's directory to your PATH",
        ]
    if error_type is ErrorType.PERMISSION_DENIED:
        return [
            "Check file permissions for the executable",
            "Ensure you have execute permissions",
            "Try running with appropriate privileges",
        ]
    if error_type is ErrorType.INVALID_COMMAND:
        return [
            "Provide a valid command to execute",
            "Check command syntax",
            "Ensure command is not empty",
        ]
    if error_type is ErrorType.TIMEOUT:
        return [
            "Increase timeout value for slow-starting applications",
            "Check if application started but didn't create a window",
            "Try spawning manually to test behavior",
        ]
    if error_type is ErrorType.TAG_RESOLUTION_FAILED:
        return [
            'Check tag specification format (0, +N, N, or "name")',
            "Ensure target tag exists or can be created",
            "Verify screen has available tag slots",
        ]
    if error_type is ErrorType.DEPENDENCY_FAILED:
        return [
            "Check that the resources this application depends on started",
            "Start the dependency manually and retry",
        ]
    return list(_GENERIC_SUGGESTIONS)


def _raw_tag(tag_spec: Any) -> Any:
    return getattr(tag_spec, "raw", tag_spec)


@dataclass
class ErrorReport:
    """A classified spawn failure."""

    timestamp: str
    app_name: str
    tag_spec: Any
    error_type: ErrorType
    original_message: str
    user_message: str
    context: Dict[str, Any] = field(default_factory=dict)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "app_name": self.app_name,
            "tag_spec": _raw_tag(self.tag_spec),
            "error_type": self.error_type.value,
            "original_message": self.original_message,
            "user_message": self.user_message,
            "context": self.context,
            "suggestions": list(self.suggestions),
        }


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def create_error_report(
    app_name: str,
    tag_spec: Any,
    message: Any,
    context: Optional[Dict[str, Any]] = None,
) -> ErrorReport:
    error_type, user_message = classify_error(message)
    return ErrorReport(
        timestamp=_now(),
        app_name=app_name,
        tag_spec=tag_spec,
        error_type=error_type,
        original_message=message if isinstance(message, str) else "",
        user_message=user_message,
        context=dict(context or {}),
        suggestions=get_error_suggestions(error_type, app_name),
    )


@dataclass(frozen=True)
class BatchSummary:
    """Derived view over a list of spawn outcomes."""

    timestamp: str
    total_attempts: int
    successful: int
    failed: int
    error_types: Dict[ErrorType, int]
    recommendations: List[str]

    @property
    def success_rate(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.successful / self.total_attempts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "total_attempts": self.total_attempts,
            "successful": self.successful,
            "failed": self.failed,
            "error_types": {t.value: count for t, count in self.error_types.items()},
            "recommendations": list(self.recommendations),
            "success_rate": self.success_rate,
        }


def summarize(outcomes: Iterable["SpawnOutcome"]) -> BatchSummary:
    """
    Summarize a batch of spawn outcomes.

    Failures without an error report are counted as UNKNOWN.
    """
    outcomes = list(outcomes)
    error_types: Dict[ErrorType, int] = {}
    successful = 0

    for outcome in outcomes:
        if outcome.success:
            successful += 1
            continue
        report = outcome.error_report
        error_type = report.error_type if report is not None else ErrorType.UNKNOWN
        error_types[error_type] = error_types.get(error_type, 0) + 1

    failed = len(outcomes) - successful

    recommendations = []
    if error_types.get(ErrorType.COMMAND_NOT_FOUND):
        recommendations.append("Some applications may not be installed")
    if error_types.get(ErrorType.PERMISSION_DENIED):
        recommendations.append("Permission issues detected - check file permissions")
    if error_types.get(ErrorType.TIMEOUT):
        recommendations.append(
            "Some windows did not appear in time - consider a longer wait timeout"
        )
    if failed > successful:
        recommendations.append("Consider reviewing project configuration")

    return BatchSummary(
        timestamp=_now(),
        total_attempts=len(outcomes),
        successful=successful,
        failed=failed,
        error_types=error_types,
        recommendations=recommendations,
    )


def format_error_for_user(report: ErrorReport) -> str:
    lines = [
        f"✗ Failed to spawn {report.app_name}",
        f"  Error: {report.user_message}",
    ]
    if report.original_message and report.original_message not in report.user_message:
        lines.append(f"  Details: {report.original_message}")
    if report.suggestions:
        lines.append("  Suggestions:")
        lines.extend(f"    • {suggestion}" for suggestion in report.suggestions)
    return "\n".join(lines)
