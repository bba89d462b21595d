"""Memoized line accessors and the evaluation guard.

A line is a zero-argument method on a form decorated with ``@line``. The
first call runs the body and stores the result in a write-once ``LineCell``
owned by the instance; every later call returns the stored value without
running the body again. Discarding the instance is the only way to
invalidate a line.

While a line body runs, a thread-local stack records which (node, line)
pairs are being evaluated. Re-entering a pair already on the stack, or
nesting deeper than ``settings.max_evaluation_depth``, raises
``DependencyCycleError``.

Example:
    class Worksheet(LineOwner):
        tag = "worksheet"

        @line
        def l1(self) -> Decimal:
            return Decimal("10")

        @line
        def l2(self) -> Decimal | None:
            return None

        @line
        def l3(self) -> Decimal:
            return sum_fields([self.l1(), self.l2()])
"""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, TypeVar

import structlog

from taxgraph.core.config import settings
from taxgraph.core.exceptions import DependencyCycleError

logger = structlog.get_logger()

T = TypeVar("T")

ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class LineCell:
    """Write-once storage for one evaluated line."""

    name: str
    value: Any


class LineOwner:
    """Anything that exposes ``@line`` accessors.

    Subclasses set ``tag``; ``copy_index`` defaults to 0 for nodes that are
    never copied.
    """

    tag: str = ""
    copy_index: int = 0

    def __init__(self) -> None:
        self._cells: dict[str, LineCell] = {}

    def _store(self, name: str, value: Any) -> None:
        if name in self._cells:
            raise RuntimeError(f"Line {self.tag}.{name} has already been written")
        self._cells[name] = LineCell(name, value)

    def evaluated_lines(self) -> dict[str, Any]:
        """Values of every line evaluated so far, keyed by line name."""
        return {name: cell.value for name, cell in self._cells.items()}


# =============================================================================
# Evaluation guard
# =============================================================================

_local = threading.local()


def _active_stack() -> list[tuple[tuple[int, str], str]]:
    stack = getattr(_local, "stack", None)
    if stack is None:
        stack = _local.stack = []
    return stack


def evaluation_depth() -> int:
    """Number of line evaluations active on the current thread."""
    return len(_active_stack())


@contextmanager
def evaluating(owner: LineOwner, name: str) -> Iterator[None]:
    """Register ``owner.name`` as under evaluation for the duration of the block.

    Raises:
        DependencyCycleError: If the same line on the same instance is already
            being evaluated, or the nesting limit is reached.
    """
    stack = _active_stack()
    key = (id(owner), name)
    label = f"{owner.tag}[{owner.copy_index}].{name}"

    if any(active_key == key for active_key, _ in stack):
        path = [active_label for _, active_label in stack] + [label]
        logger.error("line_cycle_detected", line=label, path=path)
        raise DependencyCycleError(f"Line {label} depends on itself", path=path)

    if len(stack) >= settings.max_evaluation_depth:
        path = [active_label for _, active_label in stack] + [label]
        logger.error(
            "line_depth_exceeded",
            line=label,
            max_depth=settings.max_evaluation_depth,
        )
        raise DependencyCycleError(
            f"Evaluating {label} exceeded the maximum depth of "
            f"{settings.max_evaluation_depth}",
            path=path,
        )

    stack.append((key, label))
    try:
        yield
    finally:
        stack.pop()


def line(func: Callable[[Any], T]) -> Callable[[Any], T]:
    """Decorate a zero-argument method as a memoized form line."""
    name = func.__name__

    @functools.wraps(func)
    def accessor(self: LineOwner) -> T:
        cell = self._cells.get(name)
        if cell is not None:
            return cell.value
        with evaluating(self, name):
            value = func(self)
        self._store(name, value)
        return value

    accessor.is_line = True  # type: ignore[attr-defined]
    return accessor


# =============================================================================
# Summation
# =============================================================================


def sum_fields(values: Iterable[Decimal | None]) -> Decimal:
    """Sum line values, treating absent values as zero.

    Always returns a Decimal, even when every input is absent.
    """
    return sum((v for v in values if v is not None), ZERO)


def sum_optional(values: Iterable[Decimal | None]) -> Decimal | None:
    """Sum line values, keeping "not applicable" when nothing is present.

    Returns ``None`` if every input is ``None``; otherwise the sum with
    absent values counted as zero.
    """
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present, ZERO)


def positive(value: Decimal | None) -> Decimal:
    """Clamp a possibly absent amount to zero or more."""
    if value is None:
        return ZERO
    return max(ZERO, value)
