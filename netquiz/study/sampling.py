"""
Random ordering and weighted sampling for question selection.

All functions take their input as read-only and return new sequences, so
the caller's question list is never reordered in place.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


def shuffled(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffle of a copy of ``items``."""
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


@dataclass(frozen=True)
class WeightedItem(Generic[T]):
    item: T
    weight: int


def draw_weighted(
    pool: tuple[WeightedItem[T], ...], rng: random.Random
) -> tuple[T, tuple[WeightedItem[T], ...]]:
    """
    Draw one item with probability proportional to its weight.

    Args:
        pool: Non-empty pool of positively weighted items
        rng: Random source

    Returns:
        Tuple of (drawn item, pool without it)
    """
    if not pool:
        raise ValueError("cannot draw from an empty pool")

    total = sum(entry.weight for entry in pool)
    point = rng.random() * total

    cumulative = 0
    index = len(pool) - 1  # float rounding can leave point == total
    for i, entry in enumerate(pool):
        cumulative += entry.weight
        if point < cumulative:
            index = i
            break

    return pool[index].item, pool[:index] + pool[index + 1 :]


def weighted_sample(
    items: Sequence[WeightedItem[T]], count: int, rng: random.Random | None = None
) -> list[T]:
    """
    Weighted sampling without replacement.

    Draws until ``count`` items are taken or the pool runs out. The total
    weight is recomputed after every draw.
    """
    rng = rng or random.Random()
    pool = tuple(entry for entry in items if entry.weight > 0)
    result: list[T] = []
    while len(result) < count and pool:
        item, pool = draw_weighted(pool, rng)
        result.append(item)
    return result
