"""
Run coroutines from synchronous callers.

Streamlit executes each session's script in its own thread, while the
async Firestore client must stay on the loop that created it. The runner
owns one loop on a daemon thread and every caller submits work to it.
"""

import asyncio
import threading
from typing import Any, Coroutine, Optional


class AsyncRunner:
    """A single event loop running on a background thread."""

    def __init__(self, name: str = "finsight-async"):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, name=name, daemon=True)
        self._thread.start()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._loop.is_closed()

    def run(self, coro: Coroutine[Any, Any, Any], timeout: Optional[float] = None) -> Any:
        """Block the calling thread until ``coro`` finishes on the runner's loop."""
        if not self.is_running:
            coro.close()
            raise RuntimeError("AsyncRunner has been stopped")
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(timeout)

    def stop(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()
