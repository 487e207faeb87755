"""
Pattern Algebra Module

ListPattern is the datatype every part of the network works on: an ordered
list of atomic items tagged with a modality. A pattern may be marked
*finished* (closed), after which nothing more can be added to it.

Operations:
- matches:       prefix compatibility (A is a presequence of B)
- remove:        positional set-difference
- append:        concatenation (closure taken from the right operand)
- first_item:    closed singleton prefix
- is_similar_to: shared-item counting
- sort:          stable reordering, closure preserved

Items are any hashable values compared with ==.
"""

from __future__ import annotations
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Hashable, Iterable, Iterator, List, Optional

from .constants import FINISHED_MARKER


class Modality(Enum):
    """Channel that partitions pattern spaces."""
    VISUAL = "visual"
    VERBAL = "verbal"
    ACTION = "action"

    @property
    def title(self) -> str:
        return self.value.capitalize()


DEFAULT_MODALITY = Modality.VISUAL


class ListPattern:
    """
    Ordered, modality-tagged sequence of items with an optional closure flag.

    Attributes:
        modality: Modality of the pattern
        finished: True once the pattern cannot be extended
    """

    def __init__(self, modality: Modality = DEFAULT_MODALITY):
        self._items: List[Hashable] = []
        self.modality = modality
        self.finished = False

    @classmethod
    def of(cls, items: Iterable[Hashable],
           modality: Modality = DEFAULT_MODALITY,
           finished: bool = False) -> 'ListPattern':
        """Build a pattern from an iterable of items."""
        pattern = cls(modality)
        for item in items:
            pattern.add(item)
        if finished:
            pattern.set_finished()
        return pattern

    def add(self, item: Hashable) -> None:
        """Add item to the end of the pattern, unless it is finished."""
        if not self.finished:
            self._items.append(item)

    def clone(self) -> 'ListPattern':
        """Copy that can be modified without affecting this pattern."""
        result = ListPattern(self.modality)
        result._items = list(self._items)
        result.finished = self.finished
        return result

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def items(self) -> List[Hashable]:
        return list(self._items)

    def size(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def is_finished(self) -> bool:
        return self.finished

    def set_finished(self) -> None:
        self.finished = True

    def set_not_finished(self) -> None:
        self.finished = False

    def contains(self, item: Hashable) -> bool:
        return item in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Hashable:
        return self._items[index]

    def __contains__(self, item: Hashable) -> bool:
        return self.contains(item)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def __eq__(self, other: Any) -> bool:
        """Same modality, same items in order, same closure."""
        if not isinstance(other, ListPattern):
            return NotImplemented
        return (self.modality is other.modality and
                self._items == other._items and
                self.finished == other.finished)

    def matches(self, other: Any) -> bool:
        """
        Check if this pattern is a presequence of the given pattern.

        A finished pattern only matches an equal-length finished pattern;
        an open one matches any pattern at least as long that starts with
        the same items.
        """
        if not isinstance(other, ListPattern):
            return False
        if self.modality is not other.modality:
            return False

        if self.finished:
            if self.size() != other.size():
                return False
            if not other.finished:
                return False
        elif self.size() > other.size():
            return False

        return all(other._items[i] == item for i, item in enumerate(self._items))

    # -------------------------------------------------------------------------
    # Algebra
    # -------------------------------------------------------------------------

    def remove(self, other: 'ListPattern') -> 'ListPattern':
        """
        Return the part of this pattern not covered by the given pattern.

        Items are skipped while they equal the item at the same position
        in `other`; from the first mismatch (or the end of `other`) every
        remaining item is kept. The result is finished when this pattern is,
        unless the result is empty and `other` is finished too.
        """
        result = ListPattern(self.modality)

        taking_items = False
        for i, item in enumerate(self._items):
            if taking_items:
                result._items.append(item)
            elif i < other.size() and other._items[i] == item:
                continue
            else:
                taking_items = True
                result._items.append(item)

        if self.finished and not (result.is_empty() and other.finished):
            result.set_finished()
        return result

    def append(self, other: 'ListPattern') -> 'ListPattern':
        """Concatenate; the result is finished only if `other` is."""
        result = ListPattern(self.modality)
        result._items = self._items + other._items
        if other.finished:
            result.set_finished()
        return result

    def append_item(self, item: Hashable) -> 'ListPattern':
        """New open pattern with the given item added to the end."""
        result = ListPattern(self.modality)
        result._items = self._items + [item]
        return result

    def first_item(self) -> 'ListPattern':
        """Finished pattern holding only the first item (empty if none)."""
        result = ListPattern(self.modality)
        if self._items:
            result._items.append(self._items[0])
        result.set_finished()
        return result

    def is_similar_to(self, other: 'ListPattern', k: int) -> bool:
        """
        True if the two patterns share k or more items.

        Each shared item is struck from a working copy of `other`, so
        repeated items are only counted as often as they occur there.
        """
        remaining = list(other._items)
        count = 0
        for item in self._items:
            if item in remaining:
                count += 1
                remaining.remove(item)
            if count >= k:
                return True
        return False

    def sort(self,
             comparator: Optional[Callable[[Hashable, Hashable], int]] = None,
             key: Optional[Callable[[Hashable], Any]] = None) -> 'ListPattern':
        """New pattern with the items stably sorted; closure is kept."""
        if comparator is not None:
            key = cmp_to_key(comparator)
        result = ListPattern(self.modality)
        result._items = sorted(self._items, key=key)
        result.finished = self.finished
        return result

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        parts = ["<"]
        parts.extend(str(item) for item in self._items)
        if self.finished:
            parts.append(FINISHED_MARKER)
        parts.append(">")
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"ListPattern({self.modality.title}, {self})"
