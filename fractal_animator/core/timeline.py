"""
Append-only keyframe timelines with memoized lookup.

A :class:`Timeline` is a chain of keyframes at strictly increasing integer
positions. Every keyframe after the first is linked to its predecessor by a
segment carrying the interpolation used between the two. Keyframes live in
an append-only list and refer to their predecessor by index.

Lookups between keyframes are cached. Since keyframes can only be appended
past the current end, a cached interior value never becomes stale.
"""

from dataclasses import dataclass
from typing import Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar
import logging

from .interpolation import Interpolation, Located, interpolate

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class Keyframe(Generic[T]):
    """A value anchored at a cumulative position."""
    position: int
    value: T
    predecessor: Optional[int] = None
    interpolation: Optional[Interpolation] = None


class Timeline(Generic[T]):
    """Ordered, append-only keyframe chain with position-indexed lookup."""

    def __init__(self, distance: int, value: T):
        """
        Create a timeline holding a single keyframe.

        Args:
            distance: Position of the first keyframe
            value: Value of the first keyframe
        """
        distance = int(distance)
        if distance < 0:
            raise ValueError("Keyframe positions must be non-negative")

        self._keyframes: List[Keyframe[T]] = [Keyframe(distance, value)]
        self._cache: Dict[int, T] = {}

    @classmethod
    def from_keyframes(cls, distance: int, value: T,
                       segments: Iterable[Tuple[Interpolation, int, T]] = ()) -> 'Timeline[T]':
        """
        Build a timeline from a seed keyframe and a list of segments.

        Args:
            distance: Position of the first keyframe
            value: Value of the first keyframe
            segments: ``(interpolation, length, value)`` triples appended in order
        """
        timeline = cls(distance, value)
        for interpolation, length, segment_value in segments:
            timeline.insert(interpolation, length, segment_value)
        return timeline

    def insert(self, interpolation: Interpolation, length: int, value: T) -> None:
        """
        Append a keyframe ``length`` positions after the current last one.

        Args:
            interpolation: Interpolation between the current last keyframe and the new one
            length: Distance from the current last keyframe, must be positive
            value: Value of the new keyframe
        """
        length = int(length)
        if length <= 0:
            raise ValueError(f"Segment length must be positive, got {length}")

        last_index = len(self._keyframes) - 1
        last = self._keyframes[last_index]
        self._keyframes.append(
            Keyframe(last.position + length, value, last_index, interpolation)
        )
        logger.debug(f"Appended keyframe at {last.position + length} ({interpolation})")

    @property
    def min_position(self) -> int:
        return self._keyframes[0].position

    @property
    def max_position(self) -> int:
        return self._keyframes[-1].position

    @property
    def first(self) -> T:
        return self._keyframes[0].value

    @property
    def last(self) -> T:
        return self._keyframes[-1].value

    def get(self, position: int) -> T:
        """
        Get the value at a position.

        Positions at or below the first keyframe return its value, positions
        at or above the last keyframe return the last value. Anything in
        between is interpolated and cached.

        Args:
            position: Position to look up

        Returns:
            Value at the position
        """
        if position <= self.min_position:
            return self.first
        if position >= self.max_position:
            return self.last

        if position in self._cache:
            return self._cache[position]

        value = self._interpolate_at(position)
        self._cache[position] = value
        return value

    def _interpolate_at(self, position: int) -> T:
        """Walk back from the last keyframe to the segment containing ``position``."""
        right = self._keyframes[-1]
        left = self._keyframes[right.predecessor]
        while left.position >= position:
            right = left
            left = self._keyframes[right.predecessor]

        return interpolate(
            right.interpolation,
            float(position),
            Located(left.value, float(left.position)),
            Located(right.value, float(right.position)),
        )

    def keyframes(self) -> Iterator[Tuple[int, T]]:
        """Iterate ``(position, value)`` pairs in order."""
        for keyframe in self._keyframes:
            yield keyframe.position, keyframe.value

    def cached_positions(self) -> List[int]:
        """Positions whose interpolated value is currently cached."""
        return sorted(self._cache)

    def copy(self) -> 'Timeline[T]':
        """Return a timeline with the same keyframes and an empty cache."""
        clone = type(self).__new__(type(self))
        clone._keyframes = list(self._keyframes)
        clone._cache = {}
        return clone

    def __len__(self) -> int:
        return len(self._keyframes)

    def __repr__(self) -> str:
        return (f"Timeline(keyframes={len(self._keyframes)}, "
                f"range=[{self.min_position}, {self.max_position}])")
