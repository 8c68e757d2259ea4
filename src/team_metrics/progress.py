"""
Per-task progress output.

A writer is bound to the current context with `bind_progress_writer` and
looked up anywhere below it with `progress_writer`, so fetch loops can print
"...." without being handed a stream. Each thread starts with its own
context, so two producers never see each other's writer.
"""
from __future__ import annotations

import contextvars
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Protocol, TypeVar

from .cancel import CancelToken

K = TypeVar("K")
T = TypeVar("T")


class Writer(Protocol):
    def write(self, s: str, /) -> int: ...


class _Discard:
    def write(self, s: str, /) -> int:
        return len(s)


DISCARD: Writer = _Discard()

_WRITER: contextvars.ContextVar[Writer | None] = contextvars.ContextVar("team_metrics_progress", default=None)


@contextmanager
def bind_progress_writer(writer: Writer | None) -> Iterator[Writer]:
    w = writer if writer is not None else DISCARD
    reset = _WRITER.set(w)
    try:
        yield w
    finally:
        _WRITER.reset(reset)


def progress_writer() -> Writer:
    w = _WRITER.get()
    if w is None:
        return DISCARD
    return w


def emit(text: str) -> None:
    try:
        progress_writer().write(text)
    except OSError:
        # best-effort
        pass


def fetch_each(
    keys: Sequence[K],
    fetch_one: Callable[[K], list[T]],
    *,
    what: str,
    unit: str,
    describe: Callable[[K], str],
    cancel: CancelToken,
) -> list[T]:
    """
    Run one sub-request per key and concatenate the results in key order.

    Writes "Fetching <what> for <N> <unit>: ", a dot per completed
    sub-request and " - done" to the bound progress writer. The first failing
    sub-request aborts the loop.
    """
    if not keys:
        return []

    emit(f"Fetching {what} for {len(keys)} {unit}: ")

    out: list[T] = []
    for key in keys:
        try:
            cancel.check()
            items = fetch_one(key)
        except Exception as e:
            raise RuntimeError(f"get {describe(key)}: {e}") from e
        out.extend(items)
        emit(".")

    emit(" - done\n\n")
    return out
