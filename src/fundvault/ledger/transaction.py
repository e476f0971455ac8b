"""
Operation scope.

Every public fund operation runs under a re-entrancy guard and inside an
atomic scope: participants are snapshotted on entry and restored, in
reverse order, if the operation raises. This covers authorization
nonces as well, so a payload whose operation reverted can be submitted
again.
"""

import threading
from contextlib import contextmanager
from typing import Any, Generator, List, Protocol, Sequence, Tuple

from fundvault.core import get_logger
from fundvault.core.exceptions import ReentrantCall

logger = get_logger(__name__)


class Snapshottable(Protocol):
    """State holder that can be captured and restored."""

    def snapshot(self) -> Any:
        ...

    def restore(self, snapshot: Any) -> None:
        ...


class OperationGuard:
    """
    Non-reentrant guard for state-changing operations.

    Other threads wait for the running operation to finish; a nested
    call from the same thread (e.g. a router calling back into the fund)
    raises ``ReentrantCall``.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._depth = 0
        self._current: str | None = None

    @property
    def active(self) -> bool:
        return self._depth > 0

    @contextmanager
    def enter(self, operation: str) -> Generator[None, None, None]:
        with self._lock:
            if self._depth:
                raise ReentrantCall(
                    details={"operation": operation, "running": self._current}
                )
            self._depth += 1
            self._current = operation
            try:
                yield
            finally:
                self._depth -= 1
                self._current = None


class AtomicScope:
    """All-or-nothing scope over a fixed set of participants."""

    def __init__(self, participants: Sequence[Snapshottable]):
        self._participants = list(participants)

    @contextmanager
    def run(self, operation: str) -> Generator[None, None, None]:
        snapshots: List[Tuple[Snapshottable, Any]] = [
            (participant, participant.snapshot()) for participant in self._participants
        ]
        try:
            yield
        except BaseException:
            for participant, snapshot in reversed(snapshots):
                participant.restore(snapshot)
            logger.debug(f"Operation {operation} rolled back")
            raise
