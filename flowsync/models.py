"""Data model shared by the convergence controller and its clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TargetState(str, Enum):
    """Desired transmission state for remote connections."""

    ENABLE = "enable"
    DISABLE = "disable"

    @property
    def transmitting(self) -> bool:
        return self is TargetState.ENABLE

    @property
    def flag_text(self) -> str:
        """The flag as the remote system serializes it (``"true"``/``"false"``)."""
        return "true" if self.transmitting else "false"

    def opposite(self) -> "TargetState":
        return TargetState.DISABLE if self is TargetState.ENABLE else TargetState.ENABLE


class ConvergenceOutcome(str, Enum):
    CONVERGED = "converged"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


class SyncStatus(str, Enum):
    ALL_CONVERGED = "all_converged"
    PARTIAL = "partial"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProcessGroup:
    """Snapshot of a process group as last reported by the remote system."""
    id: str
    name: str = ""
    child_ids: tuple[str, ...] = ()
    active_remote_port_count: int = 0
    inactive_remote_port_count: int = 0

    def needs_visit(self, target: TargetState) -> bool:
        """Whether this group still holds remote ports in the state opposite *target*."""
        if target is TargetState.DISABLE:
            return self.active_remote_port_count > 0
        return self.inactive_remote_port_count > 0


@dataclass(frozen=True)
class RemoteConnection:
    """Snapshot of a remote connection (remote process group)."""
    id: str
    group_id: str
    name: str = ""
    transmitting: bool = False
    revision: int = 0


@dataclass
class ConvergenceResult:
    """Outcome of driving one remote connection toward a target state."""
    connection_id: str
    outcome: ConvergenceOutcome
    observed: bool | None = None
    polls: int = 0
    changed: bool = False
    error: str = ""

    @property
    def converged(self) -> bool:
        return self.outcome is ConvergenceOutcome.CONVERGED

    def to_dict(self) -> dict[str, Any]:
        return {
            "connection_id": self.connection_id,
            "outcome": self.outcome.value,
            "observed": self.observed,
            "polls": self.polls,
            "changed": self.changed,
            "error": self.error,
        }


@dataclass
class GroupReport:
    """Per-group slice of a :class:`SyncReport`."""
    group_id: str
    name: str = ""
    results: list[ConvergenceResult] = field(default_factory=list)
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error and all(r.converged for r in self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "name": self.name,
            "error": self.error,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class SyncReport:
    """Verdict of one sync run.

    ``groups`` is in visiting order: descendants appear before the ancestors
    whose connections were transitioned after them.
    """
    root_group_id: str
    target: TargetState
    status: SyncStatus = SyncStatus.ALL_CONVERGED
    groups: list[GroupReport] = field(default_factory=list)

    @property
    def results(self) -> list[ConvergenceResult]:
        return [r for g in self.groups for r in g.results]

    @property
    def converged(self) -> list[ConvergenceResult]:
        return [r for r in self.results if r.converged]

    @property
    def failed(self) -> list[ConvergenceResult]:
        return [r for r in self.results if not r.converged]

    def group(self, group_id: str) -> GroupReport | None:
        for report in self.groups:
            if report.group_id == group_id:
                return report
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_group_id": self.root_group_id,
            "target": self.target.value,
            "status": self.status.value,
            "groups": [g.to_dict() for g in self.groups],
        }
