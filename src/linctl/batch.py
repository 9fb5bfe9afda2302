"""Bulk operations that tolerate per-item failure."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from linctl.constants import BATCH_MAX_WORKERS
from linctl.errors import IndexOutOfBoundsError, LinctlError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Result of one item: a written path or a failure reason."""

    index: int  # 1-based position in the original batch
    path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Ordered outcomes of a batch; kept whole even on partial failure."""

    outcomes: list[Outcome] = field(default_factory=list[Outcome])

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def successes(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[Outcome]:
        return [o for o in self.outcomes if not o.ok]


@dataclass
class Indexed(Generic[T]):
    """An item paired with its 1-based position in the full list."""

    index: int
    item: T


def enumerate_items(items: Sequence[T]) -> list[Indexed[T]]:
    return [Indexed(i, item) for i, item in enumerate(items, start=1)]


def select_by_index(items: Sequence[T], index: int | None) -> list[Indexed[T]]:
    """Pick one item by 1-based position, or all items when *index* is None.

    Raises:
        IndexOutOfBoundsError: If *index* is outside ``1..len(items)``
    """
    indexed = enumerate_items(items)
    if index is None:
        return indexed
    if not 1 <= index <= len(items):
        raise IndexOutOfBoundsError(index, len(items))
    return [indexed[index - 1]]


def run_batch(
    items: Sequence[Indexed[T]],
    operation: Callable[[Indexed[T]], Path],
    max_workers: int = BATCH_MAX_WORKERS,
) -> BatchResult:
    """Run *operation* on every item and collect per-item outcomes.

    Items are independent, so they run on a small thread pool; outcomes keep
    the input order. A failing item is recorded and never stops the batch.
    """

    def run_one(entry: Indexed[T]) -> Outcome:
        try:
            return Outcome(index=entry.index, path=operation(entry))
        except (LinctlError, OSError) as e:
            logger.debug("Batch item %d failed: %s", entry.index, e)
            return Outcome(index=entry.index, error=str(e))

    if max_workers <= 1 or len(items) <= 1:
        return BatchResult([run_one(entry) for entry in items])

    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
        return BatchResult(list(pool.map(run_one, items)))
