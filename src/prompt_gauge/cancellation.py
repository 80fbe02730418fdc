"""
Cooperative cancellation

One CancellationToken is shared by every item coroutine of a run. Awaiting
through guard() races the awaited call against the token, so firing the token
aborts every outstanding model or capture call at once.
"""

import asyncio
from typing import Awaitable, TypeVar

from prompt_gauge.errors import EvaluationCancelled

T = TypeVar("T")


class CancellationToken:
    """Shared, one-shot cancellation signal"""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise EvaluationCancelled("Evaluation was cancelled")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable` unless the token fires first

        Raises:
            EvaluationCancelled: If the token fired before or while awaiting;
                the underlying call is cancelled
        """
        call = asyncio.ensure_future(awaitable)
        if self._event.is_set():
            call.cancel()
            await asyncio.gather(call, return_exceptions=True)
            raise EvaluationCancelled("Evaluation was cancelled")

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            # The caller itself was cancelled; the call must not outlive it
            call.cancel()
            raise
        finally:
            waiter.cancel()

        if call.done():
            return call.result()

        call.cancel()
        await asyncio.gather(call, return_exceptions=True)
        raise EvaluationCancelled("Evaluation was cancelled")

    async def sleep(self, seconds: float) -> None:
        """asyncio.sleep that ends early with EvaluationCancelled"""
        await self.guard(asyncio.sleep(seconds))
