"""Rectangle helpers shared by the classifiers and the overlay state."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

Bounds = Tuple[float, float, float, float]


@dataclass(frozen=True, slots=True)
class Rect:
    """Screen-space rectangle in pixels (left/top inclusive, right/bottom exclusive)."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return max(0.0, self.right - self.left)

    @property
    def height(self) -> float:
        return max(0.0, self.bottom - self.top)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.right <= self.left or self.bottom <= self.top

    def inset(self, dx: float, dy: float) -> "Rect":
        """Shrink by dx/dy on each side; negative values grow the rectangle."""

        return Rect(self.left + dx, self.top + dy, self.right - dx, self.bottom - dy)

    def contains_point(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def contains(self, other: "Rect") -> bool:
        if self.is_empty or other.is_empty:
            return False
        return (
            self.left <= other.left
            and self.top <= other.top
            and self.right >= other.right
            and self.bottom >= other.bottom
        )

    def as_tuple(self) -> Bounds:
        return (self.left, self.top, self.right, self.bottom)

    @classmethod
    def from_sequence(cls, raw: Optional[Sequence[object]]) -> "Rect":
        """Build from ``[left, top, right, bottom]``; malformed input gives an empty rect."""

        if not isinstance(raw, (list, tuple)) or len(raw) != 4:
            return EMPTY_RECT
        try:
            left, top, right, bottom = (float(value) for value in raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return EMPTY_RECT
        if not all(math.isfinite(value) for value in (left, top, right, bottom)):
            return EMPTY_RECT
        return cls(left, top, right, bottom)


EMPTY_RECT = Rect(0.0, 0.0, 0.0, 0.0)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_to_bounds(rect: Rect, width: float, height: float) -> Rect:
    """Clamp ``rect`` into the ``width`` x ``height`` screen; never inverts edges."""

    left = _clamp(rect.left, 0.0, width)
    top = _clamp(rect.top, 0.0, height)
    right = _clamp(rect.right, left, width)
    bottom = _clamp(rect.bottom, top, height)
    return Rect(left, top, right, bottom)


def screen_area(width: float, height: float) -> float:
    if width <= 0 or height <= 0:
        return 0.0
    return float(width) * float(height)


def area_fraction(rect: Rect, total_area: float) -> float:
    """Return ``rect.area / total_area`` clamped to [0, 1]; zero when the total is empty."""

    if total_area <= 0:
        return 0.0
    return _clamp(rect.area / total_area, 0.0, 1.0)
