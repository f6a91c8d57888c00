"""Chunked bulk writes that report partial success."""

from collections.abc import Iterator, Sequence
from typing import TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class BatchResult(BaseModel):
    """Counts of rows written and rows lost across all chunks."""

    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    errors: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size <= 0:
        msg = f"Chunk size must be positive, got {size}"
        raise ValueError(msg)
    for start in range(0, len(items), size):
        yield items[start : start + size]
