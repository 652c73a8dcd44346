"""Expansion state for the tree view and debounced recomputation."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("lineage.expansion")


class ExpansionState:
    """Which nodes show their children and which show their spouse.

    The owner is the only writer. Layout computations receive frozen
    snapshots so their view stays stable while the state keeps changing.
    """

    def __init__(self, expanded: set[str] | None = None, spouse_visible: set[str] | None = None):
        self._expanded: set[str] = set(expanded or ())
        self._spouse_visible: set[str] = set(spouse_visible or ())

    def toggle_expanded(self, person_id: str) -> bool:
        """Flip a node's expansion and return the new state."""
        if person_id in self._expanded:
            self._expanded.discard(person_id)
            return False
        self._expanded.add(person_id)
        return True

    def toggle_spouse(self, person_id: str) -> bool:
        if person_id in self._spouse_visible:
            self._spouse_visible.discard(person_id)
            return False
        self._spouse_visible.add(person_id)
        return True

    def collapse_all(self) -> None:
        self._expanded.clear()
        self._spouse_visible.clear()

    def snapshot(self) -> tuple[frozenset[str], frozenset[str]]:
        """(expanded, spouse_visible) as immutable copies."""
        return frozenset(self._expanded), frozenset(self._spouse_visible)


class DebouncedRunner:
    """Run a computation after a quiet period; the most recent request wins.

    Each submit cancels the pending one. A computation that is already
    running in its worker thread cannot be interrupted, so its result is
    simply discarded if a newer request arrived meanwhile.

    Meant for long-lived clients that redraw on every toggle. The HTTP
    service does not use it: there each GET /layout computes synchronously
    from the current expansion snapshot.

    Args:
        delay_seconds: Quiet period before starting a computation
        on_result: Called with the result of the latest computation only
    """

    def __init__(self, delay_seconds: float = 0.3, on_result: Callable[[Any], None] | None = None):
        self._delay = delay_seconds
        self._on_result = on_result
        self._generation = 0
        self._pending: asyncio.Task | None = None
        self.latest_result: Any = None

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> asyncio.Task:
        """Schedule fn(*args, **kwargs); must be called from a running event loop."""
        self._generation += 1
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            logger.debug("Cancelled pending computation, newer request arrived")
        self._pending = asyncio.get_running_loop().create_task(
            self._run(self._generation, fn, args, kwargs)
        )
        return self._pending

    async def _run(self, generation: int, fn, args, kwargs) -> Any:
        await asyncio.sleep(self._delay)
        result = await asyncio.to_thread(fn, *args, **kwargs)
        if generation != self._generation:
            logger.debug(f"Dropping result of superseded computation #{generation}")
            return None
        self.latest_result = result
        if self._on_result is not None:
            self._on_result(result)
        return result

    async def wait(self) -> Any:
        """Wait for the most recent submission and return its result."""
        if self._pending is None:
            return None
        try:
            return await self._pending
        except asyncio.CancelledError:
            return None
