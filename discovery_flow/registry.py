"""Process-wide cache of live conversational runners, keyed by session id."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Runner(Protocol):
    """Anything that can take one user message and return one reply."""

    async def ask(self, message: str) -> str: ...


class RunnerRegistry:
    """Keep one runner per discovery session so its memory survives requests.

    Entries are never expired unless ``max_size`` is set, in which case the
    least recently used runner is dropped once the cap is exceeded.
    """

    def __init__(self, max_size: int = 0) -> None:
        self._runners: "OrderedDict[str, Runner]" = OrderedDict()
        self._lock = threading.Lock()
        self._max_size = max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._runners)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._runners

    def get(self, session_id: str) -> Optional[Runner]:
        with self._lock:
            runner = self._runners.get(session_id)
            if runner is not None:
                self._runners.move_to_end(session_id)
            return runner

    def set(self, session_id: str, runner: Runner) -> None:
        with self._lock:
            self._runners[session_id] = runner
            self._runners.move_to_end(session_id)
            self._evict_locked()

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._runners.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._runners.clear()

    def get_or_create(self, session_id: str, factory: Callable[[], Runner]) -> tuple[Runner, bool]:
        """Return the cached runner, building and registering it when absent.

        The lookup and insert happen under one lock, so concurrent first
        messages for the same session share a single runner. The second
        element of the result is ``True`` when *factory* was called.
        """

        with self._lock:
            runner = self._runners.get(session_id)
            if runner is not None:
                self._runners.move_to_end(session_id)
                return runner, False
            runner = factory()
            self._runners[session_id] = runner
            self._evict_locked()
            logger.info("Registered runner for session %s", session_id)
            return runner, True

    def _evict_locked(self) -> None:
        if self._max_size <= 0:
            return
        while len(self._runners) > self._max_size:
            evicted, _ = self._runners.popitem(last=False)
            logger.info("Evicted idle runner for session %s", evicted)
