"""Invocation runner: one child process per test case under a time budget."""
from __future__ import annotations

import os
import subprocess
import time
from pathlib import Path
from typing import Mapping, Optional, Sequence

from corpusrun.utils.logging import get_logger

from .errors import BatchInterrupted, LaunchError
from .interrupts import KILL_GRACE_S, CancelToken, terminate_process_group
from .models import InvocationResult, TestCase

log = get_logger(__name__)

DEFAULT_FLAGS = ("--headless",)
DEFAULT_TIMEOUT_S = 120.0
POLL_INTERVAL_S = 0.1


class InvocationRunner:
    """Spawns ``<command> <input-path> <flags>`` and waits for it.

    The child leads its own process group, so a timeout or an interrupt can
    terminate it together with anything it spawned.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        flags: Sequence[str] = DEFAULT_FLAGS,
        timeout: float = DEFAULT_TIMEOUT_S,
        capture_output: bool = False,
        workdir: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        token: Optional[CancelToken] = None,
        poll_interval: float = POLL_INTERVAL_S,
        kill_grace: float = KILL_GRACE_S,
    ) -> None:
        if not command:
            raise ValueError("command cannot be empty")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._command = tuple(str(part) for part in command)
        self._flags = tuple(str(flag) for flag in flags)
        self._timeout = float(timeout)
        self._capture_output = capture_output
        self._workdir = workdir
        self._env = dict(env or {})
        self._token = token or CancelToken()
        self._poll_interval = poll_interval
        self._kill_grace = kill_grace

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def token(self) -> CancelToken:
        return self._token

    def argv(self, case: TestCase) -> tuple[str, ...]:
        return self._command + (str(case.path),) + self._flags

    def run(self, case: TestCase) -> InvocationResult:
        argv = self.argv(case)
        proc = self._spawn(argv)
        self._token.attach(proc)
        start = time.perf_counter()
        try:
            return self._wait(proc, start)
        finally:
            self._token.detach()

    def _spawn(self, argv: Sequence[str]) -> subprocess.Popen:
        env = None
        if self._env:
            env = os.environ.copy()
            env.update(self._env)
        log.debug("Launching %s", " ".join(argv))
        try:
            return subprocess.Popen(
                list(argv),
                cwd=str(self._workdir) if self._workdir else None,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE if self._capture_output else subprocess.DEVNULL,
                stderr=subprocess.STDOUT if self._capture_output else subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=True,
            )
        except OSError as exc:
            raise LaunchError(argv, exc.strerror or str(exc)) from exc

    def _wait(self, proc: subprocess.Popen, start: float) -> InvocationResult:
        deadline = start + self._timeout
        chunks: list[str] = []
        while True:
            if self._token.cancelled:
                self._abort(proc, chunks)
            remaining = deadline - time.perf_counter()
            if remaining <= 0:
                return self._expire(proc, chunks, start)
            try:
                stdout, _ = proc.communicate(timeout=min(self._poll_interval, remaining))
            except subprocess.TimeoutExpired:
                if proc.poll() is None:
                    continue
                # Exited, but a descendant still holds the output pipe open.
                self._reap(proc, chunks)
                break
            if stdout:
                chunks.append(stdout)
            # Sweep descendants the child left behind.
            terminate_process_group(proc, grace=self._kill_grace)
            break
        if self._token.cancelled:
            # The child may have died from the interrupt's SIGTERM.
            self._abort(proc, chunks)
        duration = time.perf_counter() - start
        log.debug("pid %d exited with status %s after %.2fs", proc.pid, proc.returncode, duration)
        return InvocationResult(
            exit_status=proc.returncode,
            output="".join(chunks) if self._capture_output else None,
            duration_s=duration,
        )

    def _expire(self, proc: subprocess.Popen, chunks: list[str], start: float) -> InvocationResult:
        log.warning("pid %d exceeded %.1fs budget; terminating its process group", proc.pid, self._timeout)
        self._reap(proc, chunks)
        return InvocationResult(
            exit_status=None,
            output="".join(chunks) if self._capture_output else None,
            timed_out=True,
            duration_s=time.perf_counter() - start,
        )

    def _abort(self, proc: subprocess.Popen, chunks: list[str]) -> None:
        signum = self._token.signum
        if signum is None:
            raise RuntimeError("abort requested without a cancellation signal")
        log.warning("Signal %d received; terminating pid %d and its process group", signum, proc.pid)
        self._reap(proc, chunks)
        raise BatchInterrupted(signum)

    def _reap(self, proc: subprocess.Popen, chunks: list[str]) -> None:
        terminate_process_group(proc, grace=self._kill_grace)
        if self._capture_output:
            stdout, _ = proc.communicate()
            if stdout:
                chunks.append(stdout)
