"""
Cancellation — Cooperative cancellation token for in-flight worker calls.
"""

from __future__ import annotations

import asyncio


class CancellationToken:
    """
    One-shot cancellation signal shared by every call of an execution.

    Setting the token does not interrupt anything by itself; the executor
    watches it and settles every still-running call as cancelled.

    Usage:
        token = CancellationToken()
        task = asyncio.create_task(orchestrator.execute_task(text, cancel_token=token))
        token.cancel("user aborted")
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str = ""

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def __repr__(self) -> str:
        state = f"cancelled: {self.reason}" if self.is_cancelled else "active"
        return f"CancellationToken({state})"
