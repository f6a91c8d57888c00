"""Top-N ranking of scored candidates."""

from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")


def rank(
    scored: Iterable[T],
    top_n: int,
    key: Callable[[T], float] = lambda item: item.score,
) -> list[T]:
    """Sort by score descending and keep the first ``top_n``.

    Equal scores keep their input order.
    """
    if top_n <= 0:
        return []
    return sorted(scored, key=key, reverse=True)[:top_n]
