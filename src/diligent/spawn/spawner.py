"""Spawn one application on a resolved tag."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from diligent.error_reporting import ErrorReport, create_error_report
from diligent.exceptions import TagResolutionError, TagSpecError
from diligent.hosts.base import Host, Tag
from diligent.tag_resolver import current_session, resolve
from diligent.tag_spec import parse

from .configuration import PropertyBuilder
from .environment import build_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpawnOutcome:
    success: bool
    message: str
    pid: Optional[int] = None
    notification_id: Optional[str] = None
    tag: Optional[Tag] = None
    error_report: Optional[ErrorReport] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "pid": self.pid,
            "notification_id": self.notification_id,
        }
        if self.tag is not None:
            data["tag"] = {"name": self.tag.name, "index": self.tag.index}
        if self.error_report is not None:
            data["error_report"] = self.error_report.to_dict()
        return data


def app_name(command: str) -> str:
    """First word of a command line."""
    words = command.split()
    return words[0] if words else command


class Spawner:
    """Launches commands through a host and reports the outcome without raising."""

    def __init__(self, host: Host):
        self.host = host
        self.properties = PropertyBuilder(host)

    def _failure(self, app: str, tag_spec: Any, message: str, **context: Any) -> SpawnOutcome:
        report = create_error_report(app_name(app), tag_spec, message, context)
        logger.debug("spawn of %r failed: %s", app, message)
        return SpawnOutcome(success=False, message=message, error_report=report)

    def spawn(
        self,
        app: str,
        resolved_tag: Any,
        config: Optional[Mapping[str, Any]] = None,
    ) -> SpawnOutcome:
        """
        Spawn `app` on an already resolved tag.

        Args:
            app: Command line
            resolved_tag: Tag returned by the resolver
            config: env_vars, working_dir, floating, placement, width, height

        Returns:
            SpawnOutcome; failures carry a classified ErrorReport
        """
        config = config or {}

        if not isinstance(resolved_tag, Tag) or not isinstance(resolved_tag.index, int):
            return self._failure(
                app,
                config.get("tag_spec"),
                f"Tag resolution failed: expected a resolved tag, got {resolved_tag!r}",
            )

        command = build_command(app, config.get("env_vars"), config.get("working_dir"))
        properties = self.properties.build(resolved_tag, config)

        try:
            result = self.host.spawn(command, properties)
        except Exception as e:
            return self._failure(app, config.get("tag_spec"), str(e), command=command)

        if isinstance(result, str):
            return self._failure(app, config.get("tag_spec"), result, command=command)

        pid, notification_id = result
        if not isinstance(pid, int):
            return self._failure(app, config.get("tag_spec"), f"host returned invalid pid {pid!r}")

        return SpawnOutcome(
            success=True,
            message=f"SUCCESS: Spawned {app} (PID: {pid}, Tag: {resolved_tag.name}[{resolved_tag.index}])",
            pid=pid,
            notification_id=notification_id,
            tag=resolved_tag,
        )

    def spawn_with_tag_spec(
        self,
        app: str,
        raw_tag: Any,
        config: Optional[Mapping[str, Any]] = None,
    ) -> SpawnOutcome:
        """Parse and resolve `raw_tag` against the current session, then spawn."""
        try:
            spec = parse(raw_tag)
            tag = resolve(spec, current_session(self.host), self.host)
        except TagSpecError as e:
            return self._failure(app, raw_tag, f"Tag resolution failed: {e}")
        except TagResolutionError as e:
            return self._failure(app, raw_tag, str(e))

        return self.spawn(app, tag, {**(config or {}), "tag_spec": raw_tag})
