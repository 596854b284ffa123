"""
Execution Models — Per-worker outcomes of one orchestrated invocation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Why a worker call did not succeed."""

    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    INVOCATION_ERROR = "invocation-error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WorkerOutcome:
    """
    Settled result of one worker call.

    Attributes:
        worker_id: Worker that was invoked
        success: Whether the call produced content
        content: Response content (success only)
        error_kind: Failure category (failure only)
        error_message: Failure detail (failure only)
        latency_ms: Wall-clock or adapter-reported latency
        tokens_used: Tokens reported by the adapter
        cost_estimate: tokens_used / 1000 * cost_per_k_tokens
    """

    worker_id: str
    success: bool
    content: str | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    latency_ms: float = 0.0
    tokens_used: int = 0
    cost_estimate: float = 0.0

    @classmethod
    def succeeded(
        cls,
        worker_id: str,
        content: str,
        latency_ms: float,
        tokens_used: int = 0,
        cost_estimate: float = 0.0,
    ) -> WorkerOutcome:
        return cls(
            worker_id=worker_id,
            success=True,
            content=content,
            latency_ms=latency_ms,
            tokens_used=tokens_used,
            cost_estimate=cost_estimate,
        )

    @classmethod
    def failed(
        cls,
        worker_id: str,
        error_kind: ErrorKind,
        error_message: str = "",
        latency_ms: float = 0.0,
    ) -> WorkerOutcome:
        return cls(
            worker_id=worker_id,
            success=False,
            error_kind=error_kind,
            error_message=error_message,
            latency_ms=latency_ms,
        )

    @property
    def cancelled(self) -> bool:
        return self.error_kind is ErrorKind.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "success": self.success,
            "content": self.content,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error_message": self.error_message,
            "latency_ms": self.latency_ms,
            "tokens_used": self.tokens_used,
            "cost_estimate": self.cost_estimate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkerOutcome:
        error_kind = data.get("error_kind")
        return cls(
            worker_id=data["worker_id"],
            success=data["success"],
            content=data.get("content"),
            error_kind=ErrorKind(error_kind) if error_kind else None,
            error_message=data.get("error_message"),
            latency_ms=data.get("latency_ms", 0.0),
            tokens_used=data.get("tokens_used", 0),
            cost_estimate=data.get("cost_estimate", 0.0),
        )
