from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class StagingStatus(str, Enum):
    """Lifecycle of a staging record."""

    PENDING = "pending"
    PROCESSING = "processing"
    SPLITTING = "splitting"
    DONE = "done"
    ERROR = "error"


class LogStatus(str, Enum):
    """Status of a single stage log entry."""

    STARTED = "started"
    PROGRESS = "progress"
    SUCCESS = "success"
    ERROR = "error"


# Pipeline transitions only. The operator retry (error -> pending) is not one of them.
ALLOWED_TRANSITIONS: dict[StagingStatus, frozenset[StagingStatus]] = {
    StagingStatus.PENDING: frozenset({StagingStatus.PROCESSING}),
    StagingStatus.PROCESSING: frozenset({StagingStatus.SPLITTING, StagingStatus.ERROR}),
    StagingStatus.SPLITTING: frozenset({StagingStatus.DONE, StagingStatus.ERROR}),
    StagingStatus.DONE: frozenset(),
    StagingStatus.ERROR: frozenset(),
}

IN_FLIGHT_STATUSES = (StagingStatus.PROCESSING, StagingStatus.SPLITTING)


def can_transition(current: StagingStatus, target: StagingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class StageLogEntry:
    """One append-only entry of a staging record's stage log."""

    step: str
    status: LogStatus
    details: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "status": self.status.value,
            "at": self.at.isoformat(),
            "details": self.details,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "StageLogEntry":
        return cls(
            step=raw["step"],
            status=LogStatus(raw["status"]),
            details=raw.get("details") or "",
            data=raw.get("data") or {},
            at=datetime.fromisoformat(raw["at"]),
        )


STEP_DETECTION = "boundary-detection"
STEP_SPLIT = "split"
STEP_SEGMENT = "segment"
STEP_RETRY = "retry"
STEP_WORKER = "worker"
