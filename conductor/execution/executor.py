"""
Orchestration Executor — Concurrent settle-all dispatch to selected workers.

Every selected worker is invoked concurrently through the WorkerAdapter,
each call under its own timeout. One worker failing, timing out or hanging
never affects its siblings: every call settles into exactly one
WorkerOutcome, returned in selection order. The executor never retries;
retries are new routing decisions made by the orchestrator.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from conductor.shared.errors import WorkerTimeoutError, WorkerUnavailableError

from .cancellation import CancellationToken
from .models import ErrorKind, WorkerOutcome
from .timeout import DEFAULT_TIMEOUT_MS, TimeoutManager, ms_to_seconds

if TYPE_CHECKING:
    from conductor.registry.models import Worker
    from conductor.scheduler.policy_engine import RoutingDecision

    from .adapter import WorkerAdapter, WorkerRequest

logger = logging.getLogger("conductor.execution")


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000


class ExecutionHandle:
    """
    In-flight fan-out for one routing decision.

    wait() joins every call. snapshot() can be taken at any time, including
    after the caller was cancelled: calls that have not settled are reported
    as cancelled.
    """

    def __init__(
        self,
        workers: tuple[Worker, ...],
        calls: dict[str, asyncio.Task[WorkerOutcome]],
        token: CancellationToken,
    ) -> None:
        self.workers = workers
        self.token = token
        self._calls = calls
        self._started = time.monotonic()

    async def wait(self) -> list[WorkerOutcome]:
        """
        Settle all calls.

        If the awaiting task is cancelled, every unsettled call is cancelled
        and the CancelledError propagates; snapshot() still reports them.
        """
        try:
            await asyncio.gather(*self._calls.values())
        except asyncio.CancelledError:
            self.cancel("caller cancelled")
            raise
        return self.snapshot()

    def cancel(self, reason: str = "cancelled") -> None:
        self.token.cancel(reason)
        for call in self._calls.values():
            if not call.done():
                call.cancel()

    def snapshot(self) -> list[WorkerOutcome]:
        outcomes: list[WorkerOutcome] = []
        for worker in self.workers:
            call = self._calls[worker.id]
            if call.done() and not call.cancelled():
                outcomes.append(call.result())
            else:
                outcomes.append(
                    WorkerOutcome.failed(
                        worker.id,
                        ErrorKind.CANCELLED,
                        self.token.reason or "cancelled",
                        latency_ms=_elapsed_ms(self._started),
                    )
                )
        return outcomes

    @property
    def done(self) -> bool:
        return all(call.done() for call in self._calls.values())


class OrchestrationExecutor:
    """
    Settle-all executor.

    Usage:
        executor = OrchestrationExecutor(adapter)
        outcomes = await executor.execute(request, decision, per_call_timeout_ms=30000)
    """

    def __init__(
        self,
        adapter: WorkerAdapter,
        timeout_manager: TimeoutManager | None = None,
    ) -> None:
        self.adapter = adapter
        self.timeout_manager = timeout_manager or TimeoutManager()

    # ========================================================================
    # Main Execution API
    # ========================================================================

    async def execute(
        self,
        request: WorkerRequest,
        decision: RoutingDecision,
        per_call_timeout_ms: float = DEFAULT_TIMEOUT_MS,
        cancel_token: CancellationToken | None = None,
    ) -> list[WorkerOutcome]:
        """
        Invoke every selected worker and settle all calls.

        Returns:
            One WorkerOutcome per selected worker, in selection order
        """
        handle = self.start(request, decision, per_call_timeout_ms, cancel_token)
        return await handle.wait()

    def start(
        self,
        request: WorkerRequest,
        decision: RoutingDecision,
        per_call_timeout_ms: float = DEFAULT_TIMEOUT_MS,
        cancel_token: CancellationToken | None = None,
    ) -> ExecutionHandle:
        """Schedule every call and return a handle without awaiting."""
        token = cancel_token or CancellationToken()
        timeout = ms_to_seconds(per_call_timeout_ms)
        workers = decision.selected_workers

        logger.info(
            f"Dispatching {request.execution_id or 'request'} to "
            f"{len(workers)} workers (timeout={timeout}s)"
        )

        calls = {
            worker.id: asyncio.ensure_future(self._invoke(worker, request, timeout, token))
            for worker in workers
        }
        return ExecutionHandle(workers, calls, token)

    # ========================================================================
    # Single Call
    # ========================================================================

    async def _invoke(
        self,
        worker: Worker,
        request: WorkerRequest,
        timeout: float,
        token: CancellationToken,
    ) -> WorkerOutcome:
        started = time.monotonic()
        if token.is_cancelled:
            return WorkerOutcome.failed(worker.id, ErrorKind.CANCELLED, token.reason)

        call = asyncio.ensure_future(
            self.timeout_manager.execute_with_timeout(
                self.adapter.invoke(worker.id, request, timeout),
                timeout=timeout,
                worker_id=worker.id,
            )
        )
        watcher = asyncio.ensure_future(token.wait())

        try:
            await asyncio.wait({call, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            watcher.cancel()
            if not call.done():
                call.cancel()

        if not call.done() or call.cancelled():
            # Let the adapter observe its cancellation before settling
            await asyncio.gather(call, return_exceptions=True)
            logger.info(f"Worker {worker.id} cancelled: {token.reason}")
            return WorkerOutcome.failed(
                worker.id, ErrorKind.CANCELLED, token.reason, latency_ms=_elapsed_ms(started)
            )

        try:
            response = call.result()
            latency_ms = response.latency_ms or _elapsed_ms(started)
            cost = response.tokens_used / 1000 * worker.cost_per_k_tokens
            outcome = WorkerOutcome.succeeded(
                worker.id,
                response.content,
                latency_ms=latency_ms,
                tokens_used=response.tokens_used,
                cost_estimate=cost,
            )
        except WorkerTimeoutError as e:
            return self._failure(worker, ErrorKind.TIMEOUT, e, started)
        except WorkerUnavailableError as e:
            return self._failure(worker, ErrorKind.UNAVAILABLE, e, started)
        except Exception as e:
            # Adapter errors and malformed responses alike
            return self._failure(worker, ErrorKind.INVOCATION_ERROR, e, started)

        logger.info(
            f"Worker {worker.id} succeeded "
            f"(latency={latency_ms:.0f}ms, tokens={response.tokens_used})"
        )
        return outcome

    @staticmethod
    def _failure(
        worker: Worker, kind: ErrorKind, error: Exception, started: float
    ) -> WorkerOutcome:
        logger.warning(f"Worker {worker.id} failed ({kind.value}): {error}")
        return WorkerOutcome.failed(
            worker.id, kind, str(error), latency_ms=_elapsed_ms(started)
        )
