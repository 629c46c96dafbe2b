"""Concrete strategies for writing reference models.

These are deliberately small: integers that shrink by binary search toward
zero, unions that shrink toward their earlier alternatives, tuples and lists
that shrink element by element. Anything that implements the ValueTree
protocol can be used alongside them.

Example:
    from lockstep.core import strategies as st

    push = st.integers(-100, 100).map(Push)
    pop = st.just(Pop())
    transitions = st.one_of((3, push), (1, pop))
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from lockstep.core.value_tree import Strategy, ValueTree, is_strategy
from lockstep.errors import TooManyRejects

T = TypeVar("T")
U = TypeVar("U")

# Draws a filter may reject before giving up
MAX_LOCAL_REJECTS = 1024


# ── Just ──────────────────────────────────────────────────────────────────


class _JustTree(Generic[T]):
    def __init__(self, value: T) -> None:
        self._value = value

    def current(self) -> T:
        return self._value

    def simplify(self) -> bool:
        return False

    def complicate(self) -> bool:
        return False


class Just(Strategy[T]):
    """Always produces the same value, which never shrinks."""

    def __init__(self, value: T) -> None:
        self.value = value

    def new_tree(self, rng: random.Random) -> ValueTree[T]:
        return _JustTree(self.value)

    def __repr__(self) -> str:
        return f"just({self.value!r})"


# ── Integers ──────────────────────────────────────────────────────────────


class BinarySearch:
    """Binary search between the generated value and the shrink target.

    Works on the distance from the target so that values on either side of
    zero shrink the same way.
    """

    def __init__(self, start: int, target: int) -> None:
        self._target = target
        self._sign = 1 if start >= target else -1
        self._lo = 0
        self._curr = abs(start - target)
        self._hi = self._curr

    def current(self) -> int:
        return self._target + self._sign * self._curr

    def simplify(self) -> bool:
        if self._hi <= self._lo:
            return False
        self._hi = self._curr
        return self._reposition()

    def complicate(self) -> bool:
        if self._hi <= self._lo:
            return False
        self._lo = self._curr + 1
        return self._reposition()

    def _reposition(self) -> bool:
        mid = self._lo + (self._hi - self._lo) // 2
        if mid == self._curr:
            return False
        self._curr = mid
        return True


class Integers(Strategy[int]):
    """Uniform integers in the inclusive range ``[min_value, max_value]``.

    Shrinks toward zero, or toward the bound closest to zero when zero is
    outside the range.
    """

    def __init__(self, min_value: int, max_value: int) -> None:
        if max_value < min_value:
            raise ValueError(f"Empty range: integers({min_value}, {max_value})")
        self.min_value = min_value
        self.max_value = max_value

    def new_tree(self, rng: random.Random) -> ValueTree[int]:
        target = min(max(0, self.min_value), self.max_value)
        return BinarySearch(rng.randint(self.min_value, self.max_value), target)

    def __repr__(self) -> str:
        return f"integers({self.min_value}, {self.max_value})"


# ── Map / Filter ──────────────────────────────────────────────────────────


class _MapTree(Generic[T, U]):
    def __init__(self, source: ValueTree[T], fn: Callable[[T], U]) -> None:
        self._source = source
        self._fn = fn

    def current(self) -> U:
        return self._fn(self._source.current())

    def simplify(self) -> bool:
        return self._source.simplify()

    def complicate(self) -> bool:
        return self._source.complicate()


class Map(Strategy[U]):
    def __init__(self, source: Strategy[T], fn: Callable[[T], U]) -> None:
        self.source = source
        self.fn = fn

    def new_tree(self, rng: random.Random) -> ValueTree[U]:
        return _MapTree(self.source.new_tree(rng), self.fn)

    def __repr__(self) -> str:
        return f"{self.source!r}.map({getattr(self.fn, '__name__', self.fn)!r})"


class _FilterTree(Generic[T]):
    def __init__(self, source: ValueTree[T], predicate: Callable[[T], bool], whence: str) -> None:
        self._source = source
        self._predicate = predicate
        self._whence = whence

    def current(self) -> T:
        return self._source.current()

    def simplify(self) -> bool:
        if self._source.simplify():
            self._ensure_acceptable()
            return True
        return False

    def complicate(self) -> bool:
        if self._source.complicate():
            self._ensure_acceptable()
            return True
        return False

    def _ensure_acceptable(self) -> None:
        rejects = 0
        while not self._predicate(self._source.current()):
            rejects += 1
            if not self._source.complicate():
                raise TooManyRejects(self._whence, rejects)


class Filter(Strategy[T]):
    """Keeps only values satisfying ``predicate``."""

    def __init__(self, source: Strategy[T], predicate: Callable[[T], bool], whence: str) -> None:
        self.source = source
        self.predicate = predicate
        self.whence = whence

    def new_tree(self, rng: random.Random) -> ValueTree[T]:
        for _ in range(MAX_LOCAL_REJECTS):
            tree = self.source.new_tree(rng)
            if self.predicate(tree.current()):
                return _FilterTree(tree, self.predicate, self.whence)
        raise TooManyRejects(self.whence, MAX_LOCAL_REJECTS)


# ── Union ─────────────────────────────────────────────────────────────────


class _UnionTree:
    """Shrinks the chosen alternative first, then falls back to earlier ones.

    Trees for alternatives other than the drawn one are created on demand
    from a seed taken at generation time, so shrinking never touches the
    caller's random source.
    """

    def __init__(
        self,
        strategies: Sequence[Strategy[Any]],
        pick: int,
        first: ValueTree[Any],
        seed: int,
    ) -> None:
        self._strategies = strategies
        self._trees: dict[int, ValueTree[Any]] = {pick: first}
        self._seed = seed
        self._pick = pick
        self._min_pick = 0
        self._prev_pick: int | None = None

    def _tree(self, ix: int) -> ValueTree[Any]:
        tree = self._trees.get(ix)
        if tree is None:
            tree = self._strategies[ix].new_tree(random.Random(self._seed + ix))
            self._trees[ix] = tree
        return tree

    def current(self) -> Any:
        return self._tree(self._pick).current()

    def simplify(self) -> bool:
        if self._tree(self._pick).simplify():
            self._prev_pick = None
            return True
        if self._pick <= self._min_pick:
            return False
        self._prev_pick = self._pick
        self._pick -= 1
        return True

    def complicate(self) -> bool:
        if self._prev_pick is not None:
            self._pick = self._min_pick = self._prev_pick
            self._prev_pick = None
            return True
        return self._tree(self._pick).complicate()


class OneOf(Strategy[Any]):
    """Weighted choice between strategies."""

    def __init__(self, options: Sequence[tuple[int, Strategy[Any]]]) -> None:
        if not options:
            raise ValueError("one_of() needs at least one alternative")
        for weight, _ in options:
            if weight <= 0:
                raise ValueError(f"Weights must be positive, got {weight}")
        self.options = list(options)

    def new_tree(self, rng: random.Random) -> ValueTree[Any]:
        strategies = [s for _, s in self.options]
        weights = [w for w, _ in self.options]
        pick = rng.choices(range(len(strategies)), weights=weights)[0]
        seed = rng.getrandbits(64)
        return _UnionTree(strategies, pick, strategies[pick].new_tree(rng), seed)

    def __repr__(self) -> str:
        return "one_of(" + ", ".join(f"({w}, {s!r})" for w, s in self.options) + ")"


# ── Tuples ────────────────────────────────────────────────────────────────


class _TupleTree:
    def __init__(self, trees: list[ValueTree[Any]]) -> None:
        self._trees = trees
        self._shrinker = 0
        self._prev_shrinker: int | None = None

    def current(self) -> tuple[Any, ...]:
        return tuple(t.current() for t in self._trees)

    def simplify(self) -> bool:
        while self._shrinker < len(self._trees):
            if self._trees[self._shrinker].simplify():
                self._prev_shrinker = self._shrinker
                return True
            self._shrinker += 1
        return False

    def complicate(self) -> bool:
        if self._prev_shrinker is None:
            return False
        if self._trees[self._prev_shrinker].complicate():
            self._shrinker = self._prev_shrinker
            return True
        self._prev_shrinker = None
        return False


class Tuples(Strategy[tuple[Any, ...]]):
    def __init__(self, strategies: Sequence[Strategy[Any]]) -> None:
        self.strategies = list(strategies)

    def new_tree(self, rng: random.Random) -> ValueTree[tuple[Any, ...]]:
        return _TupleTree([s.new_tree(rng) for s in self.strategies])


# ── Lists ─────────────────────────────────────────────────────────────────


class _ListTree:
    """Deletes elements front to back first, then shrinks the survivors."""

    def __init__(self, trees: list[ValueTree[Any]], min_size: int) -> None:
        self._trees = trees
        self._included = [True] * len(trees)
        self._min_size = min_size
        self._deleting = True
        self._ix = 0
        self._prev: tuple[bool, int] | None = None

    def current(self) -> list[Any]:
        return [t.current() for t, keep in zip(self._trees, self._included) if keep]

    def simplify(self) -> bool:
        while self._deleting:
            if self._ix >= len(self._trees):
                self._deleting = False
                self._ix = 0
                break
            ix = self._ix
            self._ix += 1
            if sum(self._included) > self._min_size:
                self._included[ix] = False
                self._prev = (True, ix)
                return True

        while self._ix < len(self._trees):
            ix = self._ix
            if self._included[ix] and self._trees[ix].simplify():
                self._prev = (False, ix)
                return True
            self._ix += 1

        return False

    def complicate(self) -> bool:
        if self._prev is None:
            return False
        deleted, ix = self._prev
        if deleted:
            self._included[ix] = True
            self._prev = None
            return True
        if self._trees[ix].complicate():
            self._ix = ix
            return True
        self._prev = None
        return False


class Lists(Strategy[list[Any]]):
    def __init__(self, element: Strategy[Any], min_size: int = 0, max_size: int = 8) -> None:
        if min_size < 0 or max_size < min_size:
            raise ValueError(f"Invalid size range [{min_size}, {max_size}]")
        self.element = element
        self.min_size = min_size
        self.max_size = max_size

    def new_tree(self, rng: random.Random) -> ValueTree[list[Any]]:
        size = rng.randint(self.min_size, self.max_size)
        return _ListTree([self.element.new_tree(rng) for _ in range(size)], self.min_size)


# ── Public constructors ───────────────────────────────────────────────────


def just(value: T) -> Strategy[T]:
    return Just(value)


def integers(min_value: int, max_value: int) -> Strategy[int]:
    return Integers(min_value, max_value)


def booleans() -> Strategy[bool]:
    """Booleans shrinking toward False."""
    return Integers(0, 1).map(bool)


def sampled_from(values: Sequence[T]) -> Strategy[T]:
    """Picks one of ``values``, shrinking toward the first."""
    values = tuple(values)
    if not values:
        raise ValueError("sampled_from() needs at least one value")
    return Integers(0, len(values) - 1).map(values.__getitem__)


def one_of(*options: Strategy[Any] | tuple[int, Strategy[Any]]) -> Strategy[Any]:
    """Choose between strategies, optionally weighted.

    Each option is either a strategy (weight 1) or a ``(weight, strategy)``
    pair. Shrinking prefers the options listed first.
    """
    weighted = [(1, o) if is_strategy(o) else o for o in options]
    return OneOf(weighted)  # type: ignore[arg-type]


def tuples(*strategies: Strategy[Any]) -> Strategy[tuple[Any, ...]]:
    return Tuples(strategies)


def lists(element: Strategy[T], min_size: int = 0, max_size: int = 8) -> Strategy[list[T]]:
    return Lists(element, min_size, max_size)


def builds(target: Callable[..., T], *args: Strategy[Any]) -> Strategy[T]:
    """Call ``target`` with values drawn from ``args``."""
    return Tuples(args).map(lambda values: target(*values))
