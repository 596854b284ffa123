"""
Timeout Management — Per-call timeout enforcement for worker invocations.

Each worker call gets its own deadline so a hung worker cannot starve the
settle-all join.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from conductor.shared.errors import WorkerTimeoutError

logger = logging.getLogger("conductor.execution.timeout")

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 30_000


def ms_to_seconds(timeout_ms: float) -> float:
    return timeout_ms / 1000.0


class TimeoutManager:
    """
    Timeout enforcement for worker calls.

    Usage:
        response = await TimeoutManager.execute_with_timeout(
            adapter.invoke(worker_id, request, 30.0),
            timeout=30.0,
            worker_id=worker_id,
        )
    """

    @classmethod
    async def execute_with_timeout(
        cls,
        coro: Awaitable[T],
        timeout: float | None = None,
        worker_id: str = "",
    ) -> T:
        """
        Execute coroutine with timeout.

        Args:
            coro: Async coroutine to execute
            timeout: Timeout in seconds (default: 30s)
            worker_id: Worker being invoked, for error reporting

        Returns:
            Result of coroutine execution

        Raises:
            WorkerTimeoutError: If execution exceeds timeout
        """
        if timeout is None:
            timeout = ms_to_seconds(DEFAULT_TIMEOUT_MS)

        logger.debug(f"Executing {worker_id or 'call'} with timeout: {timeout}s")

        try:
            return await asyncio.wait_for(coro, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Worker {worker_id} exceeded timeout of {timeout}s")
            raise WorkerTimeoutError(worker_id, timeout) from e

