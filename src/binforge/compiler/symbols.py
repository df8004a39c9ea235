"""
Label Symbol Table
==================

Append-only store of the labels defined while a script compiles.

Every statement records where its output begins (start) and how many bytes
it occupies (size) under its label. Later statements read those values
through `$label.start` and `$label.size`. Labels are never changed or
removed, and a name may be defined only once per compilation.

The reserved name `_` is the anonymous label: statements carrying it are
not recorded, so `_` may be reused freely and can never be referenced.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from binforge.errors import (
    DuplicateLabelError,
    SourceLocation,
    UnresolvedLabelError,
)


ANONYMOUS_LABEL = "_"


@dataclass(frozen=True)
class Label:
    """
    A named region of the output.

    Attributes:
        name: Label name
        start: Offset of the first byte
        size: Number of bytes occupied
        location: Statement that defined the label
    """
    name: str
    start: int
    size: int
    location: Optional[SourceLocation] = None

    @property
    def end(self) -> int:
        """Offset one past the last byte."""
        return self.start + self.size


class SymbolTable:
    """
    Mapping from label name to Label, built incrementally.

    Usage:
        symbols = SymbolTable()
        symbols.define("first", 0, 16)
        symbols.lookup("first").size   # 16
    """

    def __init__(self) -> None:
        self._labels: dict[str, Label] = {}

    def define(
        self,
        name: str,
        start: int,
        size: int,
        location: Optional[SourceLocation] = None,
    ) -> Label:
        """
        Record a new label.

        Raises:
            DuplicateLabelError: If the name is already defined
        """
        existing = self._labels.get(name)
        if existing is not None:
            raise DuplicateLabelError(
                name,
                location=location,
                original_location=existing.location,
            )

        label = Label(name, start, size, location)
        self._labels[name] = label
        return label

    def lookup(self, name: str, location: Optional[SourceLocation] = None) -> Label:
        """
        Find a label by name.

        Raises:
            UnresolvedLabelError: If no earlier statement defined it
        """
        label = self._labels.get(name)
        if label is None:
            raise UnresolvedLabelError(
                name,
                location=location,
                similar_labels=self.similar(name),
            )
        return label

    def similar(self, name: str) -> list[str]:
        """
        Find label names close to `name` for error hints.

        Uses simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []

        for candidate in self._labels:
            candidate_lower = candidate.lower()
            if (
                candidate_lower == name_lower or
                abs(len(candidate) - len(name)) <= 1 and
                _edit_distance(name_lower, candidate_lower) <= 2
            ):
                similar.append(candidate)

        return similar[:3]

    def __contains__(self, name: str) -> bool:
        return name in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[Label]:
        """Iterate labels in definition order."""
        return iter(list(self._labels.values()))


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]
