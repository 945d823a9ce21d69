"""
Flyweight (Structural) — shared color objects.

Intent:
    Share one immutable object per distinct key instead of allocating a new
    one for every caller that asks for it.

Participants:
    - Color (flyweight): intrinsic, immutable state shared by everyone.
    - ColorFlyweightCache (factory): hands out the shared Color for a name.
    - ColoredShape (client context): extrinsic state (kind, position) that
      references a shared Color.

Notes:
    - Names are case-sensitive: "Red" and "red" are different colors.
    - The cache only grows; there is no eviction.
    - The cache is a plain object passed to whoever needs it, not class state.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Color:
    """Intrinsic state shared between every shape of the same color.

    :ivar name: Case-sensitive color name.
    """
    name: str


class ColorFlyweightCache:
    """
    Creates colors lazily and returns the same instance for equal names.

    The lookup and the insert happen under one lock, so two threads asking
    for a new name at the same time still receive a single shared Color.
    """

    def __init__(self) -> None:
        self._colors: Dict[str, Color] = {}
        self._lock = threading.Lock()

    def get_or_create(self, name: str) -> Color:
        """
        Returns the shared Color for `name`, creating it on first request.

        :param name: Color name (case-sensitive).
        :return: The single Color instance stored under `name`.
        """
        with self._lock:
            color = self._colors.get(name)
            if color is None:
                color = Color(name)
                self._colors[name] = color
                logger.debug("Created color %r (cache size %d)", name, len(self._colors))
            else:
                logger.debug("Reused color %r", name)
            return color

    def names(self) -> Tuple[str, ...]:
        """
        :return: Cached names in creation order.
        """
        with self._lock:
            return tuple(self._colors)

    def __contains__(self, name: object) -> bool:
        return name in self._colors

    def __len__(self) -> int:
        return len(self._colors)


class ColoredShape:
    """
    Extrinsic state that points at a shared Color.

    :param kind: Shape kind, e.g. "circle".
    :param x: Horizontal position.
    :param y: Vertical position.
    :param color: Shared Color obtained from a ColorFlyweightCache.
    """

    def __init__(self, kind: str, x: int, y: int, color: Color) -> None:
        self.kind = kind
        self.x = x
        self.y = y
        self.color = color

    def draw(self) -> str:
        return f"{self.color.name} {self.kind} at ({self.x}, {self.y})"


__all__ = [
    "Color",
    "ColorFlyweightCache",
    "ColoredShape",
]


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    cache = ColorFlyweightCache()
    shapes = [
        ColoredShape("circle", i, i * 2, cache.get_or_create(name))
        for i, name in enumerate(["red", "blue", "red", "green", "blue"])
    ]
    for shape in shapes:
        print(shape.draw())
    print(f"{len(shapes)} shapes share {len(cache)} colors")
