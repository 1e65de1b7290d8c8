"""Signal-driven cancellation of a running batch."""
from __future__ import annotations

import os
import signal
import subprocess
from types import FrameType
from typing import Callable, Dict, Optional, Sequence, Union

from corpusrun.utils.logging import get_logger

from .errors import BatchInterrupted

log = get_logger(__name__)

# Seconds between SIGTERM and SIGKILL when tearing down a process group.
KILL_GRACE_S = 2.0

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)

_Handler = Union[Callable[[int, Optional[FrameType]], object], int, None]


def _signal_group(pgid: int, signum: int) -> bool:
    try:
        os.killpg(pgid, signum)
    except ProcessLookupError:
        return False
    return True


def terminate_process_group(proc: subprocess.Popen, *, grace: float = KILL_GRACE_S) -> None:
    """Terminate ``proc`` and every process in its group, then reap it.

    ``proc`` must have been started as a group leader (``start_new_session``).
    """

    pgid = proc.pid
    _signal_group(pgid, signal.SIGTERM)
    try:
        proc.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        log.warning("Process group %d ignored SIGTERM; sending SIGKILL", pgid)
    # Descendants may outlive the leader, so the group is always swept.
    _signal_group(pgid, signal.SIGKILL)
    proc.wait()


class CancelToken:
    """Cancellation state shared by the interrupt handler and the runner.

    The runner attaches its in-flight child; ``cancel`` sends SIGTERM to that
    child's process group right away so the blocking wait returns promptly.
    """

    def __init__(self) -> None:
        self._signum: Optional[int] = None
        self._active: Optional[subprocess.Popen] = None

    @property
    def cancelled(self) -> bool:
        return self._signum is not None

    @property
    def signum(self) -> Optional[int]:
        return self._signum

    def cancel(self, signum: int = signal.SIGTERM) -> None:
        if self._signum is None:
            self._signum = int(signum)
        active = self._active
        if active is not None and active.poll() is None:
            _signal_group(active.pid, signal.SIGTERM)

    def attach(self, proc: subprocess.Popen) -> None:
        self._active = proc

    def detach(self) -> None:
        self._active = None

    def raise_if_cancelled(self) -> None:
        if self._signum is not None:
            raise BatchInterrupted(self._signum)


class InterruptHandler:
    """Installs signal handlers that cancel ``token`` for the duration of a batch."""

    def __init__(self, token: CancelToken, signals: Sequence[int] = DEFAULT_SIGNALS) -> None:
        self._token = token
        self._signals = tuple(signals)
        self._previous: Dict[int, _Handler] = {}

    def install(self) -> None:
        if self._previous:
            return
        for signum in self._signals:
            self._previous[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle)

    def uninstall(self) -> None:
        for signum, previous in self._previous.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()

    def _handle(self, signum: int, frame: Optional[FrameType]) -> None:
        # No logging here: the handler may run while the logging lock is held.
        self._token.cancel(signum)

    def __enter__(self) -> "InterruptHandler":
        self.install()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.uninstall()
