"""Immutable UI tree snapshots captured from the foreground application.

Elements live in a flat arena owned by the :class:`Snapshot`; children and the
parent back-reference are plain indices into that arena so a snapshot never
holds reference cycles and can be shared freely between threads.
"""
from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Iterator, List, Mapping, Optional, Sequence, Tuple

from audiofocus_engine.geometry import Rect, screen_area


@dataclass(frozen=True, slots=True)
class Element:
    """One node of a snapshot. Identity-less; indices are only valid inside their snapshot."""

    index: int
    parent: Optional[int]
    children: Tuple[int, ...]
    bounds: Rect
    text: str = ""
    description: str = ""
    view_id: str = ""
    type_tag: str = ""
    visible: bool = True
    selected: bool = False
    checked: bool = False
    activated: bool = False
    focused: bool = False
    scrollable: bool = False

    @property
    def label(self) -> str:
        """Text when present, otherwise the accessibility description."""

        text = self.text.strip()
        if text:
            return text
        return self.description.strip()


@dataclass(frozen=True, slots=True)
class Window:
    """An on-screen window and the application that owns it."""

    owner: str
    bounds: Rect

    @property
    def area(self) -> float:
        return self.bounds.area


class Snapshot:
    """Read-only arena of :class:`Element` nodes plus the screen metrics they were captured on."""

    __slots__ = ("_elements", "_screen_width", "_screen_height", "_density")

    def __init__(
        self,
        elements: Sequence[Element] = (),
        *,
        screen_width: int = 0,
        screen_height: int = 0,
        density: float = 1.0,
    ) -> None:
        self._elements: Tuple[Element, ...] = tuple(elements)
        self._screen_width = _coerce_int(screen_width)
        self._screen_height = _coerce_int(screen_height)
        # Captures without display metrics fall back to the root's extent.
        if self._elements and (self._screen_width == 0 or self._screen_height == 0):
            root_bounds = self._elements[0].bounds
            if not self._screen_width:
                self._screen_width = _coerce_int(root_bounds.right)
            if not self._screen_height:
                self._screen_height = _coerce_int(root_bounds.bottom)
        self._density = _coerce_float(density, 1.0)

    @classmethod
    def empty(cls, *, screen_width: int = 0, screen_height: int = 0, density: float = 1.0) -> "Snapshot":
        return cls((), screen_width=screen_width, screen_height=screen_height, density=density)

    @property
    def screen_width(self) -> int:
        return self._screen_width

    @property
    def screen_height(self) -> int:
        return self._screen_height

    @property
    def screen_area(self) -> float:
        return screen_area(self._screen_width, self._screen_height)

    @property
    def density(self) -> float:
        return self._density

    @property
    def is_empty(self) -> bool:
        return not self._elements

    @property
    def root(self) -> Optional[Element]:
        return self._elements[0] if self._elements else None

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    def element(self, index: int) -> Element:
        return self._elements[index]

    def children(self, element: Element) -> List[Element]:
        return [self._elements[i] for i in element.children]

    def parent(self, element: Element) -> Optional[Element]:
        if element.parent is None:
            return None
        return self._elements[element.parent]

    def ancestors(self, element: Element, limit: int) -> Iterator[Element]:
        """Yield up to ``limit`` ancestors, nearest first."""

        current = self.parent(element)
        depth = 0
        while current is not None and depth < limit:
            yield current
            current = self.parent(current)
            depth += 1

    def walk(self) -> Iterator[Element]:
        """Breadth-first traversal starting at the root."""

        if not self._elements:
            return
        queue: Deque[int] = deque([0])
        while queue:
            element = self._elements[queue.popleft()]
            yield element
            queue.extend(element.children)

    # Construction -----------------------------------------------------------

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Snapshot":
        """Build a snapshot from a capture payload.

        Expected shape::

            {"screen": {"width": 1080, "height": 2340, "density": 2.75},
             "root": {"bounds": [l, t, r, b], "text": "...", "children": [...]}}

        Missing or malformed pieces degrade to an empty snapshot instead of raising.
        """

        screen = payload.get("screen") if isinstance(payload, Mapping) else None
        if not isinstance(screen, Mapping):
            screen = {}
        width = _coerce_int(screen.get("width"))
        height = _coerce_int(screen.get("height"))
        density = _coerce_float(screen.get("density"), 1.0)
        root = payload.get("root") if isinstance(payload, Mapping) else None
        if not isinstance(root, Mapping):
            return cls.empty(screen_width=width, screen_height=height, density=density)
        builder = _ArenaBuilder()
        builder.add(root, parent=None)
        return cls(builder.finish(), screen_width=width, screen_height=height, density=density)


class _ArenaBuilder:
    """Flattens nested node mappings breadth-first so index 0 is always the root."""

    def __init__(self) -> None:
        self._pending: List[dict] = []

    def add(self, node: Mapping[str, Any], parent: Optional[int]) -> None:
        queue: Deque[Tuple[Mapping[str, Any], Optional[int]]] = deque([(node, parent)])
        while queue:
            raw, parent_index = queue.popleft()
            index = len(self._pending)
            self._pending.append({"raw": raw, "parent": parent_index, "children": []})
            if parent_index is not None:
                self._pending[parent_index]["children"].append(index)
            children = raw.get("children")
            if isinstance(children, (list, tuple)):
                for child in children:
                    if isinstance(child, Mapping):
                        queue.append((child, index))

    def finish(self) -> List[Element]:
        elements: List[Element] = []
        for index, entry in enumerate(self._pending):
            raw = entry["raw"]
            elements.append(
                Element(
                    index=index,
                    parent=entry["parent"],
                    children=tuple(entry["children"]),
                    bounds=Rect.from_sequence(raw.get("bounds")),
                    text=_coerce_str(raw.get("text")),
                    description=_coerce_str(raw.get("description")),
                    view_id=_coerce_str(raw.get("view_id")),
                    type_tag=_coerce_str(raw.get("type")),
                    visible=bool(raw.get("visible", True)),
                    selected=bool(raw.get("selected", False)),
                    checked=bool(raw.get("checked", False)),
                    activated=bool(raw.get("activated", False)),
                    focused=bool(raw.get("focused", False)),
                    scrollable=bool(raw.get("scrollable", False)),
                )
            )
        return elements


def windows_from_sequence(raw: Any) -> List[Window]:
    """Parse ``[{"owner": ..., "bounds": [...]}, ...]``, skipping malformed entries."""

    if not isinstance(raw, (list, tuple)):
        return []
    windows: List[Window] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        owner = _coerce_str(entry.get("owner"))
        if not owner:
            continue
        windows.append(Window(owner=owner, bounds=Rect.from_sequence(entry.get("bounds"))))
    return windows


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _coerce_int(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _coerce_float(value: Any, fallback: float) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(numeric):
        return fallback
    return numeric if numeric > 0 else fallback
