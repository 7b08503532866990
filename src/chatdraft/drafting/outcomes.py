"""Coordinator outcomes.

Exactly one outcome is produced per coordinator invocation. ``to_payload``
renders the wire contract consumed by the extension:

    {"action": "DRAFT", "draft": ...}
    {"action": "WAITING"}
    {"action": "NEEDS_USER", "question": ...}
    {"action": "ERROR", "error": ...}

``stage`` records where the pipeline stopped; it is for logs, metrics and
tests and never leaves the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union


class Stage(str, Enum):
    SENSITIVE_REQUEST = "sensitive_request"
    BUSY = "busy"
    THROTTLED = "throttled"
    CACHE_HIT = "cache_hit"
    UNCHANGED = "unchanged"
    TURN_GATE = "turn_gate"
    CLIENT_REJECTED = "client_rejected"
    PROVIDER_DISABLED = "provider_disabled"
    MODEL_ERROR = "model_error"
    MODEL_WAITING = "model_waiting"
    DUPLICATE_QUESTION = "duplicate_question"
    STUCK_LOOP = "stuck_loop"
    GENERATED = "generated"


class ErrorKind(str, Enum):
    CLIENT_REJECTION = "client_rejection"
    UPSTREAM = "upstream"
    PROVIDER_DISABLED = "provider_disabled"


@dataclass(frozen=True)
class Draft:
    action: ClassVar[str] = "DRAFT"

    text: str
    stage: Stage = Stage.GENERATED

    def to_payload(self) -> dict[str, Any]:
        return {"action": self.action, "draft": self.text}


@dataclass(frozen=True)
class Waiting:
    action: ClassVar[str] = "WAITING"

    stage: Stage = Stage.TURN_GATE

    def to_payload(self) -> dict[str, Any]:
        return {"action": self.action}


@dataclass(frozen=True)
class NeedsUser:
    action: ClassVar[str] = "NEEDS_USER"

    reason: str
    stage: Stage = Stage.SENSITIVE_REQUEST

    def to_payload(self) -> dict[str, Any]:
        return {"action": self.action, "question": self.reason}


@dataclass(frozen=True)
class Error:
    action: ClassVar[str] = "ERROR"

    detail: str
    kind: ErrorKind = ErrorKind.UPSTREAM
    stage: Stage = Stage.MODEL_ERROR

    @property
    def status_code(self) -> int:
        if self.kind is ErrorKind.CLIENT_REJECTION:
            return 400
        return 500

    def to_payload(self) -> dict[str, Any]:
        return {"action": self.action, "error": self.detail}


Outcome = Union[Draft, Waiting, NeedsUser, Error]
