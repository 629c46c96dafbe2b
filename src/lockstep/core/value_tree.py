"""The Strategy / ValueTree capability.

A Strategy produces a ValueTree from a random source. A ValueTree holds one
generated value and knows how to move it toward a simpler value
(``simplify``) and how to back off when the simpler value turned out to be
too simple (``complicate``). Neither call draws any further randomness.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
U = TypeVar("U")
T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class ValueTree(Protocol[T_co]):
    """Protocol for a generated value that supports shrinking.

    The protocol is a small state machine:

    - ``current()`` returns the value as it stands.
    - ``simplify()`` tries to make ``current()`` simpler. It returns False
      when no simpler value exists, leaving ``current()`` untouched.
    - ``complicate()`` is called after a ``simplify()`` went too far. It moves
      ``current()`` somewhere between the last simplification and the value
      before it, returning False when there is nothing left to try.
    """

    def current(self) -> T_co:
        ...

    def simplify(self) -> bool:
        ...

    def complicate(self) -> bool:
        ...


class Strategy(ABC, Generic[T]):
    """Base class for value strategies.

    Subclasses implement ``new_tree``; ``map`` and ``filter`` come for free.
    """

    @abstractmethod
    def new_tree(self, rng: random.Random) -> ValueTree[T]:
        """Draw a fresh value tree using ``rng``."""
        ...

    def example(self, rng: random.Random | None = None) -> T:
        """Draw a single value, mostly useful in a REPL."""
        return self.new_tree(rng or random.Random()).current()

    def map(self, fn: Callable[[T], U]) -> Strategy[U]:
        from lockstep.core.strategies import Map

        return Map(self, fn)

    def filter(self, predicate: Callable[[T], bool], whence: str = "") -> Strategy[T]:
        from lockstep.core.strategies import Filter

        return Filter(self, predicate, whence or getattr(predicate, "__name__", "filter"))


def is_strategy(obj: Any) -> bool:
    return isinstance(obj, Strategy)
