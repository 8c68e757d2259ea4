"""
Fan-out/fan-in runner.

Each provider report runs in its own thread and writes into a private
os.pipe(); a drain thread per pipe moves fixed-size chunks onto a bounded
queue; the calling thread empties the queues strictly in launch order. A slow
provider therefore holds back the output of every provider after it, but
never their fetching, and two providers' bytes never interleave.
"""
from __future__ import annotations

import functools
import os
import queue
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import BinaryIO

from .cancel import CancelToken
from .errors import Cancelled, ConfigError
from .progress import Writer, bind_progress_writer

CHUNK_SIZE = 64
QUEUE_SIZE = 2048

Report = Callable[[Writer, CancelToken], None]

_END = None


class PipeWriter:
    """Text writer over the write end of a pipe; every write is flushed."""

    def __init__(self, fd: int, cancel: CancelToken) -> None:
        self._f = os.fdopen(fd, "wb")
        self._cancel = cancel

    def write(self, s: str, /) -> int:
        self._cancel.check()
        self._f.write(s.encode("utf-8"))
        self._f.flush()
        return len(s)

    def close(self) -> None:
        try:
            self._f.close()
        except OSError:
            # The read side is already gone; nothing is buffered after flush().
            pass


class TaskGroup:
    """
    Threads sharing one cancel token. The first failure is kept and cancels
    the token; `wait` joins every thread and re-raises that failure.
    """

    def __init__(self, cancel: CancelToken) -> None:
        self.cancel = cancel
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._error: Exception | None = None

    @property
    def error(self) -> Exception | None:
        with self._lock:
            return self._error

    def go(self, name: str, fn: Callable[[], None]) -> None:
        def target() -> None:
            try:
                fn()
            except Exception as e:
                self.fail(e)

        t = threading.Thread(target=target, name=name, daemon=True)
        self._threads.append(t)
        t.start()

    def fail(self, e: Exception) -> None:
        with self._lock:
            if self._error is None:
                self._error = e
        self.cancel.cancel()

    def wait(self) -> None:
        for t in self._threads:
            t.join()
        err = self.error
        if err is not None:
            raise err


def _produce(mode: str, report: Report | None, w: PipeWriter, cancel: CancelToken) -> None:
    try:
        if report is None:
            raise ConfigError(f"unknown provider: {mode}")
        with bind_progress_writer(w):
            try:
                report(w, cancel)
            except Exception as e:
                raise RuntimeError(f"run {mode} provider: {e}") from e
    finally:
        w.close()


def _drain(mode: str, fd: int, q: "queue.Queue[bytes | None]", chunk_size: int) -> None:
    try:
        while True:
            try:
                chunk = os.read(fd, chunk_size)
            except OSError as e:
                raise RuntimeError(f"read from {mode} pipe: {e}") from e
            if not chunk:
                return
            q.put(chunk)
    finally:
        os.close(fd)
        q.put(_END)


def run(
    modes: Sequence[str],
    out: BinaryIO,
    *,
    providers: Mapping[str, Report],
    cancel: CancelToken | None = None,
    chunk_size: int = CHUNK_SIZE,
    queue_size: int = QUEUE_SIZE,
) -> None:
    if cancel is None:
        cancel = CancelToken()
    group = TaskGroup(cancel)

    read_fds: list[int] = []
    for mode in modes:
        r, w = os.pipe()
        read_fds.append(r)
        group.go(f"produce-{mode}", functools.partial(_produce, mode, providers.get(mode), PipeWriter(w, cancel), cancel))

    queues: list[queue.Queue[bytes | None]] = []
    for mode, r in zip(modes, read_fds):
        q: queue.Queue[bytes | None] = queue.Queue(maxsize=queue_size)
        queues.append(q)
        group.go(f"drain-{mode}", functools.partial(_drain, mode, r, q, chunk_size))

    # After a failed write keep emptying the queues so no drain thread stays blocked.
    write_failed = False
    for q in queues:
        while True:
            chunk = q.get()
            if chunk is _END:
                break
            if write_failed:
                continue
            try:
                out.write(chunk)
                out.flush()
            except (OSError, ValueError) as e:
                write_failed = True
                err = RuntimeError(f"write to stdout: {e}")
                err.__cause__ = e
                group.fail(err)

    group.wait()
    if cancel.cancelled:
        raise Cancelled(cancel.reason or "cancelled")
