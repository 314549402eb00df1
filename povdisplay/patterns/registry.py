"""The ordered set of patterns a display can show."""

from __future__ import annotations

from typing import Iterable, Iterator

from .base import Pattern
from .image import ImagePattern
from .matrix import MatrixPattern
from .simple import RainbowPattern, ScannerPattern, SolidPattern


class PatternRegistry:
    """Patterns in a fixed order; the index is what settings refer to."""

    def __init__(self, patterns: Iterable[Pattern]) -> None:
        self._patterns: tuple[Pattern, ...] = tuple(patterns)
        keys = [p.key for p in self._patterns]
        if len(set(keys)) != len(keys):
            raise ValueError("pattern keys must be unique")

    def __len__(self) -> int:
        return len(self._patterns)

    def __getitem__(self, index: int) -> Pattern:
        return self._patterns[index]

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self._patterns]

    def index_of(self, key: str) -> int | None:
        """Index of the pattern with this key, or None if there is none."""
        return next((i for i, p in enumerate(self._patterns) if p.key == key), None)

    def image_pattern(self) -> ImagePattern:
        """The registry's image pattern."""
        for p in self._patterns:
            if isinstance(p, ImagePattern):
                return p
        raise LookupError("registry holds no image pattern")


def default_registry() -> PatternRegistry:
    """A fresh registry with every built-in pattern, in display order."""
    return PatternRegistry([
        SolidPattern(),
        RainbowPattern(),
        ScannerPattern(),
        ImagePattern(),
        MatrixPattern(),
    ])