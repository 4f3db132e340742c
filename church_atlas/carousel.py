"""Carousel cursor over a co-located group.

The cursor is an immutable value: transitions return a new cursor and the
caller keeps whichever one belongs to the popup that is open.
"""

from dataclasses import dataclass, replace
from typing import Sequence, Tuple

from church_atlas.features import Feature

STEPS = ('next', 'previous')


@dataclass(frozen=True)
class CarouselCursor:
    group: Tuple[Feature, ...]
    index: int = 0

    def __post_init__(self):
        if len(self.group) < 2:
            raise ValueError("A carousel needs at least two features")
        if not 0 <= self.index < len(self.group):
            raise ValueError(f"Carousel index {self.index} outside 0..{len(self.group) - 1}")

    @property
    def size(self) -> int:
        return len(self.group)

    @property
    def current(self) -> Feature:
        return self.group[self.index]

    @property
    def position_label(self) -> str:
        return f'{self.index + 1} of {self.size}'

    def next(self) -> 'CarouselCursor':
        return replace(self, index=(self.index + 1) % self.size)

    def previous(self) -> 'CarouselCursor':
        return replace(self, index=(self.index - 1 + self.size) % self.size)

    def step(self, direction: str) -> 'CarouselCursor':
        if direction == 'next':
            return self.next()
        if direction == 'previous':
            return self.previous()
        raise ValueError(f"Unknown carousel step: {direction!r}")


def open_carousel(group: Sequence[Feature], index: int = 0) -> CarouselCursor:
    return CarouselCursor(group=tuple(group), index=index)
