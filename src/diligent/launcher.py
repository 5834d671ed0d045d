"""Launch pipeline: resolve -> spawn -> wait-and-tag, one resource at a time.

A failing resource never stops the batch. Every resource ends up as a
LaunchRecord, and the records are folded into a BatchSummary and a
BatchResponse at the end.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from diligent.clients import (
    ClientProperties,
    ClientTracker,
    WaitCoordinator,
    ownership_env,
    ownership_properties,
    resource_id,
)
from diligent.error_reporting import BatchSummary, create_error_report, summarize
from diligent.exceptions import TagResolutionError
from diligent.hosts.base import Host, SessionContext, Tag
from diligent.logging import DiligentLogger
from diligent.response import (
    PHASE_SPAWNING,
    PHASE_TAG_RESOLUTION,
    BatchResponse,
    ResourceError,
    SimpleErrorResponse,
    SpawnedResource,
    build_response,
)
from diligent.spawn import SpawnOutcome, Spawner, app_name
from diligent.start_request import ResourceDescriptor, StartRequest
from diligent.tag_resolver import current_session, resolve
from diligent.tag_spec import describe

logger = logging.getLogger(__name__)

COMMAND_NAME = "start"


@dataclass(frozen=True)
class LaunchConfig:
    wait_for_clients: bool = True
    wait_timeout: float = 5.0
    poll_interval: float = 0.5


@dataclass
class LaunchRecord:
    """What happened to one resource."""

    name: str
    command: str
    outcome: SpawnOutcome
    phase: Optional[str] = None
    tag: Optional[Tag] = None
    tagged: bool = False
    reused: bool = False
    wait_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome.success

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "command": self.command,
            "success": self.success,
            "pid": self.outcome.pid,
            "message": self.outcome.message,
            "tagged": self.tagged,
            "reused": self.reused,
        }
        if self.tag is not None:
            data["tag"] = {"name": self.tag.name, "index": self.tag.index}
        if self.phase is not None:
            data["phase"] = self.phase
        if self.wait_message is not None:
            data["wait_message"] = self.wait_message
        return data


@dataclass
class LaunchResult:
    project_name: str
    records: List[LaunchRecord]
    summary: BatchSummary
    response: BatchResponse

    @property
    def success(self) -> bool:
        return self.response.is_success

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.response.to_dict(),
            "resources": [r.to_dict() for r in self.records],
            "summary": self.summary.to_dict(),
        }


class Launcher:
    """Runs a StartRequest against a host."""

    def __init__(
        self,
        host: Host,
        config: Optional[LaunchConfig] = None,
        event_log: Optional[DiligentLogger] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], float] = time.time,
    ):
        self.host = host
        self.config = config or LaunchConfig()
        self.event_log = event_log
        self.now = now
        self.clock = clock

        self.tracker = ClientTracker(host)
        self.properties = ClientProperties(host, self.tracker)
        self.spawner = Spawner(host)
        self.waiter = WaitCoordinator(
            self.tracker,
            self.properties,
            timeout=self.config.wait_timeout,
            poll_interval=self.config.poll_interval,
            clock=clock,
            sleep=sleep,
        )

    def _event(self, method: str, *args: Any) -> None:
        if self.event_log is not None:
            try:
                getattr(self.event_log, method)(COMMAND_NAME, *args)
            except OSError as e:
                logger.warning("could not write event log: %s", e)

    def launch(self, request: StartRequest) -> LaunchResult:
        """
        Launch every resource in request order.

        Returns:
            LaunchResult; a simple error response if the session could not be read,
            otherwise a success or enhanced error response
        """
        started = self.clock()
        start_time = int(self.now())
        project = request.project_name

        self._event("log_command_start", {
            "project": project,
            "host": self.host.name,
            "resources": [r.name for r in request.resources],
        })

        try:
            context = current_session(self.host)
        except TagResolutionError as e:
            failed = request.resources[0].name if request.resources else None
            self._event("log_error", "Cannot start project", {"project": project, "reason": str(e)})
            return LaunchResult(
                project_name=project,
                records=[],
                summary=summarize([]),
                response=SimpleErrorResponse(project, str(e), failed),
            )

        records = [
            self._launch_resource(project, descriptor, context, start_time)
            for descriptor in request.resources
        ]

        spawned = [
            SpawnedResource(r.name, r.outcome.pid)
            for r in records if r.success and r.outcome.pid is not None
        ]
        errors = [
            ResourceError(
                phase=r.phase or PHASE_SPAWNING,
                resource_id=r.name,
                message=r.outcome.message,
                report=r.outcome.error_report,
            )
            for r in records if not r.success
        ]

        summary = summarize(r.outcome for r in records)
        response = build_response(project, spawned, errors)

        duration_ms = int((self.clock() - started) * 1000)
        self._event("log_command_complete", duration_ms, {
            "project": project,
            "successful": summary.successful,
            "failed": summary.failed,
        })

        return LaunchResult(project, records, summary, response)

    def _launch_resource(
        self,
        project: str,
        descriptor: ResourceDescriptor,
        context: SessionContext,
        start_time: int,
    ) -> LaunchRecord:
        name = descriptor.name

        try:
            tag = resolve(descriptor.tag_spec, context, self.host)
        except TagResolutionError as e:
            report = create_error_report(
                app_name(descriptor.command), descriptor.tag_spec, str(e), {"resource": name}
            )
            self._event("log_error", f"Tag resolution failed for {name}", {
                "project": project, "resource": name, "reason": str(e),
            })
            return LaunchRecord(
                name=name,
                command=descriptor.command,
                outcome=SpawnOutcome(success=False, message=str(e), error_report=report),
                phase=PHASE_TAG_RESOLUTION,
            )

        if descriptor.reuse:
            existing = self.tracker.find_by_property("diligent_resource_id", resource_id(project, name))
            if existing and existing[0].pid is not None:
                pid = existing[0].pid
                logger.debug("reusing %s (pid %s)", name, pid)
                return LaunchRecord(
                    name=name,
                    command=descriptor.command,
                    outcome=SpawnOutcome(
                        success=True,
                        message=f"REUSED: {name} already running (PID: {pid})",
                        pid=pid,
                        tag=tag,
                    ),
                    tag=tag,
                    tagged=True,
                    reused=True,
                )

        outcome = self.spawner.spawn(descriptor.command, tag, {
            "env_vars": ownership_env(project, name, tag, start_time),
            "working_dir": descriptor.working_dir,
            "tag_spec": descriptor.tag_spec,
        })

        if not outcome.success:
            self._event("log_error", f"Failed to spawn {name}", {
                "project": project, "resource": name, "reason": outcome.message,
            })
            return LaunchRecord(
                name=name,
                command=descriptor.command,
                outcome=outcome,
                phase=PHASE_SPAWNING,
                tag=tag,
            )

        self._event("log_event", f"Spawned {name} on {describe(descriptor.tag_spec)}", {
            "project": project, "resource": name, "pid": outcome.pid, "tag": tag.name,
        })

        record = LaunchRecord(name=name, command=descriptor.command, outcome=outcome, tag=tag)
        if not self.config.wait_for_clients:
            return record

        wait = self.waiter.wait_and_tag(
            outcome.pid, ownership_properties(project, name, tag, start_time)
        )
        record.tagged = wait.all_set
        if not record.tagged:
            record.wait_message = wait.message
            logger.warning("%s: %s", name, wait.message)
            self._event("log_warning", wait.message, {"project": project, "resource": name})
        return record
